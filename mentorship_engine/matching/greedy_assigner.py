from dataclasses import dataclass

from mentorship_engine.matching.match_scorer import ScoreBreakdown


@dataclass(frozen=True)
class ScoredPair:
    mentor_id: int
    mentee_id: int
    breakdown: ScoreBreakdown
    # Position in the mentor-major enumeration of candidate pairs; last tie-break.
    insertion_index: int


def assign_greedily(
    pairs: list[ScoredPair],
    remaining_capacity: dict[int, int],
    current_load: dict[int, int],
    max_assignments: int | None = None,
) -> list[ScoredPair]:
    """
    Pick a capacity-respecting subset of scored pairs.

    Pairs are visited by descending score, then by the mentor's current load
    (lighter first), then by insertion index. A pair is taken when its mentor
    still has free capacity, its mentee is not assigned yet, and fewer than
    `max_assignments` pairs have been taken.

    Args:
        pairs: Candidate pairs already filtered by the minimum score.
        remaining_capacity: Mentor user id -> free slots at the start of the run.
        current_load: Mentor user id -> current mentees, used for tie-breaking.
        max_assignments: Optional ceiling on the number of pairs returned.

    Returns:
        list[ScoredPair]: Selected pairs in the order they were assigned.
    """
    ordered = sorted(
        pairs,
        key=lambda pair: (
            -pair.breakdown.match_score,
            current_load.get(pair.mentor_id, 0),
            pair.insertion_index,
        ),
    )
    capacity = dict(remaining_capacity)
    assigned_mentees = set()
    selected = []

    for pair in ordered:
        if max_assignments is not None and len(selected) >= max_assignments:
            break
        if pair.mentee_id in assigned_mentees:
            continue
        if capacity.get(pair.mentor_id, 0) <= 0:
            continue
        capacity[pair.mentor_id] -= 1
        assigned_mentees.add(pair.mentee_id)
        selected.append(pair)

    return selected
