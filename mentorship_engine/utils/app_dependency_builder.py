import os

from mentorship_engine.analytics.analytics_controller import AnalyticsController
from mentorship_engine.analytics.analytics_service import AnalyticsService
from mentorship_engine.authentication.authentication_service import (
    AuthenticationService,
)
from mentorship_engine.common.constants import (
    DEFAULT_MATCHING_CHUNK_SIZE,
    DEFAULT_NOTIFICATION_PUBLISH_TIMEOUT_SECONDS,
)
from mentorship_engine.common.database import Database
from mentorship_engine.common.environment_constants import (
    MATCHING_CHUNK_SIZE,
    NOTIFICATION_PUBLISH_TIMEOUT_SECONDS,
)
from mentorship_engine.common.logger import get_logger
from mentorship_engine.common.redis_client import RedisClient
from mentorship_engine.cycle.cycle_controller import CycleController
from mentorship_engine.cycle.cycle_service import CycleService
from mentorship_engine.cycle.interest_service import InterestService
from mentorship_engine.evaluation.certificate_service import CertificateService
from mentorship_engine.evaluation.evaluation_controller import EvaluationController
from mentorship_engine.evaluation.evaluation_service import EvaluationService
from mentorship_engine.matching.match_scorer import MatchScorer
from mentorship_engine.matching.matching_controller import MatchingController
from mentorship_engine.matching.matching_service import MatchingService
from mentorship_engine.mentorship.assignment_service import AssignmentService
from mentorship_engine.mentorship.match_approval_service import MatchApprovalService
from mentorship_engine.mentorship.mentorship_controller import MentorshipController
from mentorship_engine.mentorship.mentorship_lifecycle_service import (
    MentorshipLifecycleService,
)
from mentorship_engine.notification.notification_controller import (
    NotificationController,
)
from mentorship_engine.notification.notification_publisher import (
    NotificationPublisher,
)
from mentorship_engine.notification.onboarding_service import OnboardingService
from mentorship_engine.profile.profile_controller import ProfileController
from mentorship_engine.profile.profile_registry_service import ProfileRegistryService
from mentorship_engine.program.program_controller import ProgramController
from mentorship_engine.program.program_service import ProgramService
from mentorship_engine.repository.certificate_repository import CertificateRepository
from mentorship_engine.repository.cycle_repository import CycleRepository
from mentorship_engine.repository.evaluation_repository import EvaluationRepository
from mentorship_engine.repository.interest_repository import InterestRepository
from mentorship_engine.repository.match_repository import MatchRepository
from mentorship_engine.repository.mentee_profile_repository import (
    MenteeProfileRepository,
)
from mentorship_engine.repository.mentor_profile_repository import (
    MentorProfileRepository,
)
from mentorship_engine.repository.mentorship_repository import MentorshipRepository
from mentorship_engine.repository.program_repository import ProgramRepository
from mentorship_engine.repository.progress_repository import ProgressRepository
from mentorship_engine.repository.task_repository import TaskRepository
from mentorship_engine.utils.fast_app_factory import FastAppFactory


class AppDependencyBuilder:
    """
    Builds every repository, service and controller of the engine.

    This is the single place where infrastructure (logger, database, Redis
    outbox) is wired into the business services and the HTTP controllers.

    Example:
        builder = AppDependencyBuilder()
        app = builder.fast_app_factory.create_app()
    """

    def __init__(self, database: Database | None = None, redis_client=None):
        """
        Args:
            database (Database | None): Overrides the database built from
                DATABASE_URL.
            redis_client: Overrides the Redis client built from REDIS_HOST/REDIS_PORT.
        """
        self.logger = get_logger()
        self.database = database or Database()
        self.redis_client = (
            redis_client or RedisClient(logger=self.logger).get_redis_client()
        )
        chunk_size = int(os.getenv(MATCHING_CHUNK_SIZE, DEFAULT_MATCHING_CHUNK_SIZE))
        publish_timeout = float(
            os.getenv(
                NOTIFICATION_PUBLISH_TIMEOUT_SECONDS,
                DEFAULT_NOTIFICATION_PUBLISH_TIMEOUT_SECONDS,
            )
        )

        self.cycle_repository = CycleRepository()
        self.interest_repository = InterestRepository()
        self.mentor_profile_repository = MentorProfileRepository()
        self.mentee_profile_repository = MenteeProfileRepository()
        self.match_repository = MatchRepository()
        self.mentorship_repository = MentorshipRepository()
        self.program_repository = ProgramRepository()
        self.task_repository = TaskRepository()
        self.progress_repository = ProgressRepository()
        self.evaluation_repository = EvaluationRepository()
        self.certificate_repository = CertificateRepository()

        self.notification_publisher = NotificationPublisher(
            logger=self.logger,
            redis_client=self.redis_client,
            timeout_seconds=publish_timeout,
        )
        self.match_scorer = MatchScorer()

        self.program_service = ProgramService(
            logger=self.logger,
            program_repository=self.program_repository,
            task_repository=self.task_repository,
            progress_repository=self.progress_repository,
            evaluation_repository=self.evaluation_repository,
            mentorship_repository=self.mentorship_repository,
            notification_publisher=self.notification_publisher,
        )
        self.mentorship_lifecycle_service = MentorshipLifecycleService(
            logger=self.logger,
            mentorship_repository=self.mentorship_repository,
            mentee_profile_repository=self.mentee_profile_repository,
            mentor_profile_repository=self.mentor_profile_repository,
            evaluation_repository=self.evaluation_repository,
            program_service=self.program_service,
            notification_publisher=self.notification_publisher,
        )
        self.matching_service = MatchingService(
            logger=self.logger,
            cycle_repository=self.cycle_repository,
            interest_repository=self.interest_repository,
            mentor_profile_repository=self.mentor_profile_repository,
            mentee_profile_repository=self.mentee_profile_repository,
            match_repository=self.match_repository,
            match_scorer=self.match_scorer,
            mentorship_lifecycle_service=self.mentorship_lifecycle_service,
            notification_publisher=self.notification_publisher,
            chunk_size=chunk_size,
        )
        self.match_approval_service = MatchApprovalService(
            logger=self.logger,
            match_repository=self.match_repository,
            mentorship_repository=self.mentorship_repository,
            mentor_profile_repository=self.mentor_profile_repository,
            cycle_repository=self.cycle_repository,
            mentorship_lifecycle_service=self.mentorship_lifecycle_service,
            notification_publisher=self.notification_publisher,
        )
        self.assignment_service = AssignmentService(
            logger=self.logger,
            cycle_repository=self.cycle_repository,
            interest_repository=self.interest_repository,
            mentor_profile_repository=self.mentor_profile_repository,
            mentee_profile_repository=self.mentee_profile_repository,
            match_repository=self.match_repository,
            mentorship_lifecycle_service=self.mentorship_lifecycle_service,
            notification_publisher=self.notification_publisher,
        )
        self.cycle_service = CycleService(
            logger=self.logger,
            cycle_repository=self.cycle_repository,
            interest_repository=self.interest_repository,
            match_repository=self.match_repository,
            mentorship_repository=self.mentorship_repository,
            notification_publisher=self.notification_publisher,
        )
        self.interest_service = InterestService(
            logger=self.logger,
            cycle_repository=self.cycle_repository,
            interest_repository=self.interest_repository,
        )
        self.evaluation_service = EvaluationService(
            logger=self.logger,
            mentorship_repository=self.mentorship_repository,
            program_repository=self.program_repository,
            evaluation_repository=self.evaluation_repository,
        )
        self.certificate_service = CertificateService(
            logger=self.logger,
            mentorship_repository=self.mentorship_repository,
            certificate_repository=self.certificate_repository,
            notification_publisher=self.notification_publisher,
        )
        self.analytics_service = AnalyticsService(
            match_repository=self.match_repository,
            mentorship_repository=self.mentorship_repository,
            program_repository=self.program_repository,
            task_repository=self.task_repository,
            progress_repository=self.progress_repository,
        )
        self.onboarding_service = OnboardingService(
            logger=self.logger,
            cycle_repository=self.cycle_repository,
            interest_repository=self.interest_repository,
            mentor_profile_repository=self.mentor_profile_repository,
            mentee_profile_repository=self.mentee_profile_repository,
            notification_publisher=self.notification_publisher,
        )
        self.profile_registry_service = ProfileRegistryService(
            logger=self.logger,
            mentor_profile_repository=self.mentor_profile_repository,
            mentee_profile_repository=self.mentee_profile_repository,
        )

        self.cycle_controller = CycleController(
            cycle_service=self.cycle_service,
            interest_service=self.interest_service,
            database=self.database,
        )
        self.matching_controller = MatchingController(
            matching_service=self.matching_service,
            assignment_service=self.assignment_service,
            database=self.database,
        )
        self.mentorship_controller = MentorshipController(
            match_approval_service=self.match_approval_service,
            mentorship_lifecycle_service=self.mentorship_lifecycle_service,
            database=self.database,
        )
        self.program_controller = ProgramController(
            program_service=self.program_service, database=self.database
        )
        self.evaluation_controller = EvaluationController(
            evaluation_service=self.evaluation_service,
            certificate_service=self.certificate_service,
            database=self.database,
        )
        self.analytics_controller = AnalyticsController(
            analytics_service=self.analytics_service, database=self.database
        )
        self.notification_controller = NotificationController(
            onboarding_service=self.onboarding_service, database=self.database
        )
        self.profile_controller = ProfileController(
            profile_registry_service=self.profile_registry_service,
            database=self.database,
        )

        self.authentication_service = AuthenticationService(logger=self.logger)
        self.fast_app_factory = FastAppFactory(
            self.authentication_service,
            self.cycle_controller,
            self.matching_controller,
            self.mentorship_controller,
            self.program_controller,
            self.evaluation_controller,
            self.analytics_controller,
            self.notification_controller,
            self.profile_controller,
            shutdown_hooks=(self.database.close, self.redis_client.aclose),
        )
