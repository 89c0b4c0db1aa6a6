from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from mentorship_engine.common.mentorship_enums import MatchStatus
from mentorship_engine.common.mentorship_errors import (
    ConflictError,
    MentorshipEngineError,
    NotFoundError,
    PreconditionFailedError,
)
from mentorship_engine.common.state_transitions import (
    MATCH_TRANSITIONS,
    ensure_transition,
    source_statuses,
)
from mentorship_engine.dto.match_dto import ApprovalResultDto, MatchDto
from mentorship_engine.dto.notification_dto import NotificationDto
from mentorship_engine.notification import notification_messages


class MatchApprovalService:
    """
    Two-sided approval of pending matches.

    Each side's flag is written with a conditional update on a pending match.
    The pending -> approved flip requires both flags in the same statement, so
    only one request can win it, and only that request instantiates the
    mentorship.
    """

    def __init__(
        self,
        logger,
        match_repository,
        mentorship_repository,
        mentor_profile_repository,
        cycle_repository,
        mentorship_lifecycle_service,
        notification_publisher,
    ):
        """
        Initializes the MatchApprovalService with required dependencies.

        Args:
            logger: The logger instance for logging messages.
            match_repository (MatchRepository): Match persistence.
            mentorship_repository (MentorshipRepository): Looks up existing mentorships.
            mentor_profile_repository (MentorProfileRepository): Capacity counters.
            cycle_repository (CycleRepository): Cycle ceiling reservations.
            mentorship_lifecycle_service (MentorshipLifecycleService): Creates the
                mentorship of an approved match.
            notification_publisher (NotificationPublisher): Outbox for user messages.
        """
        self.logger = logger
        self.match_repository = match_repository
        self.mentorship_repository = mentorship_repository
        self.mentor_profile_repository = mentor_profile_repository
        self.cycle_repository = cycle_repository
        self.mentorship_lifecycle_service = mentorship_lifecycle_service
        self.notification_publisher = notification_publisher

    async def _get_match(self, session: AsyncSession, match_id: int, refresh=False):
        match = await self.match_repository.get_match_by_id(
            session=session, match_id=match_id, refresh=refresh
        )
        if not match:
            raise NotFoundError("Match", match_id)
        return match

    @staticmethod
    def _check_participant(match, actor_id: int) -> None:
        if actor_id not in (match.mentor_id, match.mentee_id):
            raise PreconditionFailedError(
                f"User {actor_id} is not a participant of match {match.match_id}."
            )

    async def _approve(
        self, session: AsyncSession, match_id: int, actor_id: int | None
    ) -> tuple[ApprovalResultDto, list[NotificationDto]]:
        match = await self._get_match(session, match_id)
        if actor_id is None:
            sides = [True, False]
        else:
            self._check_participant(match, actor_id)
            sides = [actor_id == match.mentor_id]

        if match.status == MatchStatus.REJECTED:
            raise PreconditionFailedError(f"Match {match_id} was rejected.")

        notifications = []
        mentorship_id = None
        if match.status == MatchStatus.PENDING:
            for is_mentor in sides:
                already = match.mentor_approved if is_mentor else match.mentee_approved
                if already:
                    continue
                if not await self.match_repository.set_approval_flag(
                    session=session, match_id=match_id, is_mentor=is_mentor
                ):
                    break

            if await self.match_repository.approve_if_both_agreed(
                session=session, match_id=match_id, matched_at=datetime.now(timezone.utc)
            ):
                match = await self._get_match(session, match_id, refresh=True)
                mentorship, notifications = (
                    await self.mentorship_lifecycle_service.instantiate_from_match(
                        session=session, match=match
                    )
                )
                mentorship_id = mentorship.mentorship_id

        match = await self._get_match(session, match_id, refresh=True)
        if match.status == MatchStatus.REJECTED:
            raise ConflictError(f"Match {match_id} was rejected concurrently.")
        if match.status == MatchStatus.APPROVED and mentorship_id is None:
            existing = await self.mentorship_repository.get_by_match_id(
                session=session, match_id=match_id
            )
            mentorship_id = existing.mentorship_id if existing else None

        return (
            ApprovalResultDto(
                match_id=match_id,
                success=True,
                status=match.status,
                mentorship_id=mentorship_id,
            ),
            notifications,
        )

    async def list_matches(
        self,
        session: AsyncSession,
        cycle_id: int | None = None,
        status: MatchStatus | None = None,
    ) -> list[MatchDto]:
        matches = await self.match_repository.get_matches(
            session=session,
            cycle_id=cycle_id,
            statuses=[status] if status else None,
        )
        return [MatchDto.model_validate(m) for m in matches]

    async def approve(
        self, session: AsyncSession, match_id: int, actor_id: int | None
    ) -> ApprovalResultDto:
        """
        Record an approval of a match.

        Args:
            session (AsyncSession): Active database async session.
            match_id (int): The match to approve.
            actor_id (int | None): The approving user; None approves on behalf of
                both sides (administrator).

        Returns:
            ApprovalResultDto: The match status after the approval and, once
                approved, the id of its mentorship. Approving a side twice is a
                no-op.

        Raises:
            NotFoundError: Unknown match.
            PreconditionFailedError: The actor is not a participant, or the match
                was rejected.
            ConflictError: A concurrent request rejected the match or created its
                mentorship.
        """
        result, notifications = await self._approve(session, match_id, actor_id)
        await session.commit()

        self.logger.info(
            "[MatchApprovalService] match %s approved by %s; status %s.",
            match_id,
            actor_id if actor_id is not None else "administrator",
            result.status.value,
        )
        await self.notification_publisher.publish(notifications)
        return result

    async def approve_many(
        self, session: AsyncSession, match_ids: list[int], actor_id: int | None = None
    ) -> list[ApprovalResultDto]:
        """
        Approve several matches, each in its own unit of work.

        A failing id is reported in its result and never aborts the batch.

        Returns:
            list[ApprovalResultDto]: One result per id, in request order.
        """
        results = []
        for match_id in match_ids:
            try:
                result, notifications = await self._approve(session, match_id, actor_id)
                await session.commit()
            except MentorshipEngineError as e:
                await session.rollback()
                self.logger.warning(
                    "[MatchApprovalService] approval of match %s failed: %s", match_id, e
                )
                results.append(
                    ApprovalResultDto(match_id=match_id, success=False, error=str(e))
                )
                continue

            await self.notification_publisher.publish(notifications)
            results.append(result)

        self.logger.info(
            "[MatchApprovalService] bulk approval: %d/%d succeeded.",
            sum(1 for r in results if r.success),
            len(results),
        )
        return results

    async def reject(
        self, session: AsyncSession, match_id: int, actor_id: int | None
    ) -> MatchDto:
        """
        Reject a pending match and give back the mentor slot and the cycle place
        it reserved.

        Args:
            session (AsyncSession): Active database async session.
            match_id (int): The match to reject.
            actor_id (int | None): The rejecting participant; None for an
                administrator.

        Raises:
            NotFoundError: Unknown match.
            PreconditionFailedError: The actor is not a participant or the match
                is no longer pending.
            ConflictError: A concurrent request changed the match first.
        """
        match = await self._get_match(session, match_id)
        if actor_id is not None:
            self._check_participant(match, actor_id)
        ensure_transition(MATCH_TRANSITIONS, match.status, MatchStatus.REJECTED, "Match")

        if not await self.match_repository.update_status(
            session=session,
            match_id=match_id,
            sources=source_statuses(MATCH_TRANSITIONS, MatchStatus.REJECTED),
            target=MatchStatus.REJECTED,
        ):
            raise ConflictError(f"Match {match_id} changed status concurrently.")

        await self.mentor_profile_repository.release_slot(
            session=session, user_id=match.mentor_id, revoke_total=True
        )
        await self.cycle_repository.release_mentorship(
            session=session, cycle_id=match.cycle_id
        )
        await session.commit()

        self.logger.info(
            "[MatchApprovalService] match %s rejected by %s.",
            match_id,
            actor_id if actor_id is not None else "administrator",
        )
        await self.notification_publisher.publish(
            notification_messages.match_rejected(match)
        )
        match = await self._get_match(session, match_id, refresh=True)
        return MatchDto.model_validate(match)
