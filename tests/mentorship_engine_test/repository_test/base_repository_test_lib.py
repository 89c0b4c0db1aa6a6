import unittest
from datetime import date
from types import SimpleNamespace

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from mentorship_engine.common.database import Database
from mentorship_engine.common.mentorship_enums import CycleStatus
from mentorship_engine.entity.cycle_entity import CycleEntity
from mentorship_engine.entity.mentee_profile_entity import MenteeProfileEntity
from mentorship_engine.entity.mentor_profile_entity import MentorProfileEntity
from mentorship_engine.evaluation.certificate_service import CertificateService
from mentorship_engine.evaluation.evaluation_service import EvaluationService
from mentorship_engine.mentorship.assignment_service import AssignmentService
from mentorship_engine.mentorship.match_approval_service import (
    MatchApprovalService,
)
from mentorship_engine.mentorship.mentorship_lifecycle_service import (
    MentorshipLifecycleService,
)
from mentorship_engine.program.program_service import ProgramService
from mentorship_engine.repository.certificate_repository import (
    CertificateRepository,
)
from mentorship_engine.repository.cycle_repository import CycleRepository
from mentorship_engine.repository.evaluation_repository import (
    EvaluationRepository,
)
from mentorship_engine.repository.interest_repository import InterestRepository
from mentorship_engine.repository.match_repository import MatchRepository
from mentorship_engine.repository.mentee_profile_repository import (
    MenteeProfileRepository,
)
from mentorship_engine.repository.mentor_profile_repository import (
    MentorProfileRepository,
)
from mentorship_engine.repository.mentorship_repository import (
    MentorshipRepository,
)
from mentorship_engine.repository.program_repository import ProgramRepository
from mentorship_engine.repository.progress_repository import ProgressRepository
from mentorship_engine.repository.task_repository import TaskRepository


class BaseRepositoryTestLib(unittest.IsolatedAsyncioTestCase):
    """
    A reusable base test class for repository and persistence-level service tests.

    Features:
      - Each test gets its own in-memory SQLite database with the full schema.
      - Services may commit freely; the database is discarded after the test.
      - Provides helpers to insert entities and build common fixtures.
    """

    async def asyncSetUp(self):
        self.db = Database(
            "sqlite+aiosqlite://",
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
        await self.db.create_schema()

        self.session_maker = async_sessionmaker(
            bind=self.db.get_engine(),
            autoflush=False,
            expire_on_commit=False,
            class_=AsyncSession,
        )
        self.session = self.session_maker()

    async def asyncTearDown(self):
        await self.session.close()
        await self.db.close()

    async def insert_entities(self, entities):
        """Insert ORM entities and commit them."""
        self.session.add_all(entities)
        await self.session.commit()

    async def create_cycle(self, status=CycleStatus.ACTIVE, max_mentorships=10, **kwargs):
        cycle = CycleEntity(
            name=kwargs.pop("name", "2026-spring"),
            start_date=date(2026, 3, 1),
            end_date=date(2026, 6, 1),
            status=status,
            max_mentorships=max_mentorships,
            **kwargs,
        )
        await self.insert_entities([cycle])
        return cycle


def make_mentor(user_id, **overrides):
    """Verified, active mentor whose profile overlaps with `make_mentee` defaults."""
    fields = dict(
        user_id=user_id,
        company="Acme Software",
        industry="technology",
        years_of_experience=10,
        themes=["technology"],
        skills=["python", "backend"],
        interests=["reading", "hiking"],
        communication_mediums=["video", "chat"],
        availability={"days": ["mon", "wed"], "timeBlocks": ["evening"]},
        max_mentees=2,
        current_mentees=0,
        total_mentees=0,
        is_verified=True,
        is_active=True,
    )
    fields.update(overrides)
    return MentorProfileEntity(**fields)


def make_mentee(user_id, **overrides):
    fields = dict(
        user_id=user_id,
        field_of_interest="backend",
        career_goals="grow into a backend technology role",
        skills=["python"],
        interests=["reading", "hiking"],
        learning_preference=["video"],
        availability={"days": ["mon", "wed"], "timeBlocks": ["evening"]},
        commitment_agreed=True,
    )
    fields.update(overrides)
    return MenteeProfileEntity(**fields)


def build_services(logger, notification_publisher):
    """Wire the persistence-backed services the way the application does."""
    mentor_repo = MentorProfileRepository()
    mentee_repo = MenteeProfileRepository()
    match_repo = MatchRepository()
    mentorship_repo = MentorshipRepository()
    program_repo = ProgramRepository()
    evaluation_repo = EvaluationRepository()
    cycle_repo = CycleRepository()

    program_service = ProgramService(
        logger=logger,
        program_repository=program_repo,
        task_repository=TaskRepository(),
        progress_repository=ProgressRepository(),
        evaluation_repository=evaluation_repo,
        mentorship_repository=mentorship_repo,
        notification_publisher=notification_publisher,
    )
    lifecycle_service = MentorshipLifecycleService(
        logger=logger,
        mentorship_repository=mentorship_repo,
        mentee_profile_repository=mentee_repo,
        mentor_profile_repository=mentor_repo,
        evaluation_repository=evaluation_repo,
        program_service=program_service,
        notification_publisher=notification_publisher,
    )
    return SimpleNamespace(
        program=program_service,
        lifecycle=lifecycle_service,
        approval=MatchApprovalService(
            logger=logger,
            match_repository=match_repo,
            mentorship_repository=mentorship_repo,
            mentor_profile_repository=mentor_repo,
            cycle_repository=cycle_repo,
            mentorship_lifecycle_service=lifecycle_service,
            notification_publisher=notification_publisher,
        ),
        assignment=AssignmentService(
            logger=logger,
            cycle_repository=cycle_repo,
            interest_repository=InterestRepository(),
            mentor_profile_repository=mentor_repo,
            mentee_profile_repository=mentee_repo,
            match_repository=match_repo,
            mentorship_lifecycle_service=lifecycle_service,
            notification_publisher=notification_publisher,
        ),
        evaluation=EvaluationService(
            logger=logger,
            mentorship_repository=mentorship_repo,
            program_repository=program_repo,
            evaluation_repository=evaluation_repo,
        ),
        certificate=CertificateService(
            logger=logger,
            mentorship_repository=mentorship_repo,
            certificate_repository=CertificateRepository(),
            notification_publisher=notification_publisher,
        ),
        cycle_repository=cycle_repo,
        mentor_profile_repository=mentor_repo,
        match_repository=match_repo,
        mentorship_repository=mentorship_repo,
    )
