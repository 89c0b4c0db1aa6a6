from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from mentorship_engine.common.constants import (
    DEFAULT_MATCHING_CHUNK_SIZE,
    DEFAULT_MIN_MATCH_SCORE,
    MAX_MATCH_SCORE,
)
from mentorship_engine.common.mentorship_enums import CycleStatus, MatchStatus
from mentorship_engine.common.mentorship_errors import (
    ConflictError,
    NotFoundError,
    PreconditionFailedError,
)
from mentorship_engine.dto.match_dto import (
    MatchDto,
    MatchResultDto,
    MentorSuggestionDto,
)
from mentorship_engine.dto.notification_dto import NotificationDto
from mentorship_engine.dto.profile_dto import MentorProfileDto
from mentorship_engine.entity.match_entity import MatchEntity
from mentorship_engine.matching.greedy_assigner import ScoredPair, assign_greedily
from mentorship_engine.notification import notification_messages


class MatchingService:
    """
    Automated matching of a cycle's mentor and mentee pools.

    A run scores every eligible pair, keeps those at or above the threshold,
    assigns them greedily under mentor capacity and the cycle ceiling, and
    persists the assignments in chunks. Each persisted pair reserves a place under
    the cycle ceiling and one mentor slot with compare-and-set updates in the
    same transaction as its match row, so concurrent runs can never overfill a
    mentor or the cycle.
    """

    def __init__(
        self,
        logger,
        cycle_repository,
        interest_repository,
        mentor_profile_repository,
        mentee_profile_repository,
        match_repository,
        match_scorer,
        mentorship_lifecycle_service,
        notification_publisher,
        chunk_size: int = DEFAULT_MATCHING_CHUNK_SIZE,
    ):
        """
        Initializes the MatchingService with required dependencies.

        Args:
            logger: The logger instance for logging messages.
            cycle_repository (CycleRepository): Cycle lookups.
            interest_repository (InterestRepository): Withdrawn users per cycle.
            mentor_profile_repository (MentorProfileRepository): Mentor pool and
                capacity reservations.
            mentee_profile_repository (MenteeProfileRepository): Mentee pool.
            match_repository (MatchRepository): Match persistence.
            match_scorer (MatchScorer): Pure pair scorer.
            mentorship_lifecycle_service (MentorshipLifecycleService): Instantiates
                mentorships for auto-approved matches.
            notification_publisher (NotificationPublisher): Outbox for user messages.
            chunk_size (int): Number of pairs persisted per transaction.
        """
        if chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")

        self.logger = logger
        self.cycle_repository = cycle_repository
        self.interest_repository = interest_repository
        self.mentor_profile_repository = mentor_profile_repository
        self.mentee_profile_repository = mentee_profile_repository
        self.match_repository = match_repository
        self.match_scorer = match_scorer
        self.mentorship_lifecycle_service = mentorship_lifecycle_service
        self.notification_publisher = notification_publisher
        self.chunk_size = chunk_size

    async def _get_matchable_cycle(self, session: AsyncSession, cycle_id: int):
        cycle = await self.cycle_repository.get_cycle_by_id(
            session=session, cycle_id=cycle_id
        )
        if not cycle:
            raise NotFoundError("Cycle", cycle_id)
        if cycle.status == CycleStatus.COMPLETED:
            raise PreconditionFailedError(
                f"Cycle {cycle_id} is completed; matching is closed."
            )
        return cycle

    async def _eligible_mentors(self, session: AsyncSession, excluded_user_ids: set):
        mentors = []
        for mentor in await self.mentor_profile_repository.get_available_mentors(
            session=session, excluded_user_ids=excluded_user_ids
        ):
            if not mentor.themes:
                self.logger.debug(
                    "[MatchingService] mentor %s skipped: no themes.", mentor.user_id
                )
                continue
            mentors.append(mentor)
        return mentors

    async def _build_pools(self, session: AsyncSession, cycle_id: int):
        withdrawn = await self.interest_repository.get_withdrawn_user_ids(
            session=session, cycle_id=cycle_id
        )
        matched_mentees = await self.match_repository.get_live_mentee_ids(
            session=session, cycle_id=cycle_id
        )

        mentors = await self._eligible_mentors(session, withdrawn)
        mentees = await self.mentee_profile_repository.get_committed_mentees(
            session=session, excluded_user_ids=withdrawn | matched_mentees
        )
        return mentors, mentees

    def _score_pairs(
        self, mentors, mentees, rejected_pairs: set, min_score: float
    ) -> list[ScoredPair]:
        pairs = []
        index = 0
        for mentor in mentors:
            for mentee in mentees:
                if mentor.user_id == mentee.user_id:
                    continue
                if (mentor.user_id, mentee.user_id) in rejected_pairs:
                    continue
                breakdown = self.match_scorer.score(mentor, mentee)
                if breakdown.match_score >= min_score:
                    pairs.append(
                        ScoredPair(
                            mentor_id=mentor.user_id,
                            mentee_id=mentee.user_id,
                            breakdown=breakdown,
                            insertion_index=index,
                        )
                    )
                index += 1
        return pairs

    async def _persist_pair(
        self,
        session: AsyncSession,
        cycle_id: int,
        pair: ScoredPair,
        auto_approve: bool,
    ) -> tuple[MatchResultDto | None, list[NotificationDto]]:
        existing = await self.match_repository.get_by_pair(
            session=session,
            mentor_id=pair.mentor_id,
            mentee_id=pair.mentee_id,
            cycle_id=cycle_id,
        )
        if existing:
            return MatchResultDto(match=MatchDto.model_validate(existing), is_new=False), []

        if not await self.cycle_repository.reserve_mentorship(
            session=session, cycle_id=cycle_id
        ):
            self.logger.info(
                "[MatchingService] cycle %s filled up concurrently; pair %s/%s skipped.",
                cycle_id,
                pair.mentor_id,
                pair.mentee_id,
            )
            return None, []
        if not await self.mentor_profile_repository.reserve_slot(
            session=session, user_id=pair.mentor_id
        ):
            await self.cycle_repository.release_mentorship(
                session=session, cycle_id=cycle_id
            )
            self.logger.info(
                "[MatchingService] mentor %s filled up concurrently; pair with mentee %s skipped.",
                pair.mentor_id,
                pair.mentee_id,
            )
            return None, []

        now = datetime.now(timezone.utc)
        try:
            match = await self.match_repository.insert_match(
                session=session,
                entity=MatchEntity(
                    cycle_id=cycle_id,
                    mentor_id=pair.mentor_id,
                    mentee_id=pair.mentee_id,
                    status=MatchStatus.APPROVED if auto_approve else MatchStatus.PENDING,
                    mentor_approved=auto_approve,
                    mentee_approved=auto_approve,
                    is_manual=False,
                    matched_at=now if auto_approve else None,
                    **pair.breakdown.as_columns(),
                ),
            )
        except IntegrityError as e:
            raise ConflictError(
                f"A concurrent run matched mentee {pair.mentee_id} in cycle {cycle_id}; "
                "retry the run."
            ) from e

        if auto_approve:
            _, notifications = await self.mentorship_lifecycle_service.instantiate_from_match(
                session=session, match=match, activate=True
            )
        else:
            notifications = notification_messages.match_proposed(match)

        return MatchResultDto(match=MatchDto.model_validate(match), is_new=True), notifications

    async def run_automated_matching(
        self,
        session: AsyncSession,
        cycle_id: int,
        min_score: float = DEFAULT_MIN_MATCH_SCORE,
        auto_approve: bool = False,
    ) -> list[MatchResultDto]:
        """
        Match the eligible mentors and mentees of a cycle.

        Args:
            session (AsyncSession): Active database async session.
            cycle_id (int): The cycle to match.
            min_score (float): Minimum total score, within [0, 100].
            auto_approve (bool): Approve every new match immediately and start its
                mentorship and week-1 program.

        Returns:
            list[MatchResultDto]: Created or reused matches in assignment order. An
                empty pool yields an empty list, and repeating a run over an
                unchanged pool yields no new match.

        Raises:
            ValueError: `min_score` is outside [0, 100].
            NotFoundError: Unknown cycle.
            PreconditionFailedError: The cycle is completed.
            ConflictError: A concurrent run wrote a conflicting match; chunks
                committed before the conflict are kept.
        """
        if not 0 <= min_score <= MAX_MATCH_SCORE:
            raise ValueError(f"min_score must be within [0, {MAX_MATCH_SCORE:g}].")

        await self._get_matchable_cycle(session, cycle_id)

        mentors, mentees = await self._build_pools(session, cycle_id)
        if not mentors or not mentees:
            self.logger.info(
                "[MatchingService] cycle %s: empty pool (%d mentors, %d mentees).",
                cycle_id,
                len(mentors),
                len(mentees),
            )
            return []

        rejected_pairs = await self.match_repository.get_rejected_pairs(
            session=session, cycle_id=cycle_id
        )
        candidates = self._score_pairs(mentors, mentees, rejected_pairs, min_score)

        cycle = await self.cycle_repository.get_cycle_by_id(
            session=session, cycle_id=cycle_id, refresh=True
        )
        remaining_ceiling = max(0, cycle.max_mentorships - cycle.reserved_mentorships)
        selected = assign_greedily(
            candidates,
            remaining_capacity={m.user_id: m.max_mentees - m.current_mentees for m in mentors},
            current_load={m.user_id: m.current_mentees for m in mentors},
            max_assignments=remaining_ceiling,
        )
        self.logger.info(
            "[MatchingService] cycle %s: %d mentors, %d mentees, %d candidate pairs, "
            "%d selected (ceiling %d).",
            cycle_id,
            len(mentors),
            len(mentees),
            len(candidates),
            len(selected),
            remaining_ceiling,
        )

        results = []
        for start in range(0, len(selected), self.chunk_size):
            chunk_notifications = []
            for pair in selected[start : start + self.chunk_size]:
                result, notifications = await self._persist_pair(
                    session, cycle_id, pair, auto_approve
                )
                if result is not None:
                    results.append(result)
                    chunk_notifications += notifications
            await session.commit()
            await self.notification_publisher.publish(chunk_notifications)

        self.logger.info(
            "[MatchingService] cycle %s: %d new match(es), %d reused.",
            cycle_id,
            sum(1 for r in results if r.is_new),
            sum(1 for r in results if not r.is_new),
        )
        return results

    async def suggest_mentors(
        self,
        session: AsyncSession,
        mentee_id: int,
        cycle_id: int | None = None,
        min_score: float = DEFAULT_MIN_MATCH_SCORE,
    ) -> list[MentorSuggestionDto]:
        """
        Rank the mentors that could take one mentee, best score first.

        Nothing is written: the mentee picks from the list and a match is made
        through a matching run or a manual assignment. Ties go to the less
        loaded mentor, then to the lower user id.

        Args:
            session (AsyncSession): Active database async session.
            mentee_id (int): The mentee looking for a mentor.
            cycle_id (int | None): Leave out users who withdrew from this cycle
                and mentors the mentee already rejected in it.
            min_score (float): Minimum total score, within [0, 100].

        Raises:
            ValueError: `min_score` is outside [0, 100].
            NotFoundError: Unknown mentee profile or cycle.
            PreconditionFailedError: The mentee has not agreed to the program
                commitment, or the cycle is completed.
        """
        if not 0 <= min_score <= MAX_MATCH_SCORE:
            raise ValueError(f"min_score must be within [0, {MAX_MATCH_SCORE:g}].")

        mentee = await self.mentee_profile_repository.get_by_user_id(
            session=session, user_id=mentee_id
        )
        if not mentee:
            raise NotFoundError("Mentee profile", mentee_id)
        if not mentee.commitment_agreed:
            raise PreconditionFailedError(
                f"Mentee {mentee_id} has not agreed to the program commitment."
            )

        withdrawn, rejected_pairs = set(), set()
        if cycle_id is not None:
            await self._get_matchable_cycle(session, cycle_id)
            withdrawn = await self.interest_repository.get_withdrawn_user_ids(
                session=session, cycle_id=cycle_id
            )
            if mentee_id in withdrawn:
                return []
            rejected_pairs = await self.match_repository.get_rejected_pairs(
                session=session, cycle_id=cycle_id
            )

        mentors = {
            m.user_id: m for m in await self._eligible_mentors(session, withdrawn)
        }
        pairs = self._score_pairs(mentors.values(), [mentee], rejected_pairs, min_score)
        pairs.sort(
            key=lambda p: (
                -p.breakdown.match_score,
                mentors[p.mentor_id].current_mentees,
                p.mentor_id,
            )
        )

        self.logger.info(
            "[MatchingService] %d mentor suggestion(s) for mentee %s.",
            len(pairs),
            mentee_id,
        )
        return [
            MentorSuggestionDto(
                mentor=MentorProfileDto.model_validate(mentors[p.mentor_id]),
                **p.breakdown.as_columns(),
            )
            for p in pairs
        ]
