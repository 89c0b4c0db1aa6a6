from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from mentorship_engine.common.mentorship_enums import MentorshipStatus
from mentorship_engine.common.mentorship_errors import (
    DuplicateError,
    NotFoundError,
    PreconditionFailedError,
)
from mentorship_engine.dto.evaluation_create_dto import EvaluationCreateDto
from mentorship_engine.dto.evaluation_dto import EvaluationDto
from mentorship_engine.entity.evaluation_entity import EvaluationEntity


class EvaluationService:
    """Collects mentor and mentee evaluations at the program checkpoints."""

    def __init__(
        self, logger, mentorship_repository, program_repository, evaluation_repository
    ):
        """
        Initializes the EvaluationService with required dependencies.

        Args:
            logger: The logger instance for logging messages.
            mentorship_repository (MentorshipRepository): Evaluated mentorships.
            program_repository (ProgramRepository): Resolves the evaluated program.
            evaluation_repository (EvaluationRepository): Evaluation persistence.
        """
        self.logger = logger
        self.mentorship_repository = mentorship_repository
        self.program_repository = program_repository
        self.evaluation_repository = evaluation_repository

    async def _get_mentorship(self, session: AsyncSession, mentorship_id: int):
        mentorship = await self.mentorship_repository.get_mentorship_by_id(
            session=session, mentorship_id=mentorship_id
        )
        if not mentorship:
            raise NotFoundError("Mentorship", mentorship_id)
        return mentorship

    async def submit_evaluation(
        self,
        session: AsyncSession,
        mentorship_id: int,
        evaluator_id: int,
        evaluation_data: EvaluationCreateDto,
    ) -> EvaluationDto:
        """
        Store one participant's evaluation of a mentorship at a checkpoint.

        Args:
            session (AsyncSession): Active database async session.
            mentorship_id (int): The evaluated mentorship.
            evaluator_id (int): The submitting user; must be its mentor or mentee.
            evaluation_data (EvaluationCreateDto): Checkpoint, ratings and feedback.

        Returns:
            EvaluationDto: The stored evaluation.

        Raises:
            NotFoundError: Unknown mentorship.
            PreconditionFailedError: The evaluator is not a participant, or the
                mentorship was cancelled.
            DuplicateError: The evaluator already submitted this checkpoint.
        """
        mentorship = await self._get_mentorship(session, mentorship_id)
        if evaluator_id not in (mentorship.mentor_id, mentorship.mentee_id):
            raise PreconditionFailedError(
                f"User {evaluator_id} is not a participant of mentorship {mentorship_id}."
            )
        if mentorship.status == MentorshipStatus.CANCELLED:
            raise PreconditionFailedError(
                f"Mentorship {mentorship_id} is cancelled; evaluations are closed."
            )

        duplicate_message = (
            f"User {evaluator_id} already submitted the {evaluation_data.type.value} "
            f"evaluation of mentorship {mentorship_id}."
        )
        if await self.evaluation_repository.get_by_evaluator(
            session=session,
            mentorship_id=mentorship_id,
            evaluation_type=evaluation_data.type,
            evaluator_id=evaluator_id,
        ):
            raise DuplicateError(duplicate_message)

        programs = await self.program_repository.get_programs_by_mentorship_ids(
            session=session, mentorship_ids=[mentorship_id]
        )
        try:
            evaluation = await self.evaluation_repository.insert_evaluation(
                session=session,
                entity=EvaluationEntity(
                    mentorship_id=mentorship_id,
                    program_id=programs[-1].program_id if programs else None,
                    evaluator_id=evaluator_id,
                    is_mentor=evaluator_id == mentorship.mentor_id,
                    **evaluation_data.model_dump(),
                ),
            )
        except IntegrityError as e:
            raise DuplicateError(duplicate_message) from e
        await session.commit()

        self.logger.info(
            "[EvaluationService] %s evaluation of mentorship %s submitted by user %s.",
            evaluation.type.value,
            mentorship_id,
            evaluator_id,
        )
        return EvaluationDto.model_validate(evaluation)

    async def list_evaluations(
        self, session: AsyncSession, mentorship_id: int
    ) -> list[EvaluationDto]:
        await self._get_mentorship(session, mentorship_id)
        evaluations = await self.evaluation_repository.get_evaluations(
            session=session, mentorship_id=mentorship_id
        )
        return [EvaluationDto.model_validate(e) for e in evaluations]
