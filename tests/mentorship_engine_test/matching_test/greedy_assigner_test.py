import unittest

from mentorship_engine.matching.greedy_assigner import ScoredPair, assign_greedily
from mentorship_engine.matching.match_scorer import ScoreBreakdown


def pair(mentor_id, mentee_id, score, index):
    return ScoredPair(
        mentor_id=mentor_id,
        mentee_id=mentee_id,
        breakdown=ScoreBreakdown(0, 0, 0, 0, 0, score),
        insertion_index=index,
    )


class TestAssignGreedily(unittest.TestCase):
    def test_single_slot_goes_to_higher_score(self):
        """Test two mentees competing for one slot."""
        pairs = [pair(1, 10, 75.0, 0), pair(1, 11, 90.0, 1)]

        selected = assign_greedily(pairs, {1: 1}, {1: 0})

        self.assertEqual([(p.mentor_id, p.mentee_id) for p in selected], [(1, 11)])

    def test_mentee_assigned_once(self):
        """Test a mentee is never assigned to two mentors."""
        pairs = [pair(1, 10, 90.0, 0), pair(2, 10, 85.0, 1), pair(2, 11, 80.0, 2)]

        selected = assign_greedily(pairs, {1: 1, 2: 1}, {1: 0, 2: 0})

        self.assertEqual(
            [(p.mentor_id, p.mentee_id) for p in selected], [(1, 10), (2, 11)]
        )

    def test_tie_prefers_lighter_mentor_then_insertion_order(self):
        """Test equal scores break ties by current load, then insertion index."""
        pairs = [pair(1, 10, 80.0, 0), pair(2, 10, 80.0, 1)]

        selected = assign_greedily(pairs, {1: 2, 2: 2}, {1: 1, 2: 0})
        self.assertEqual(selected[0].mentor_id, 2)

        selected = assign_greedily(pairs, {1: 2, 2: 2}, {1: 0, 2: 0})
        self.assertEqual(selected[0].mentor_id, 1)

    def test_respects_capacity_and_ceiling(self):
        """Test mentor capacity and the overall assignment ceiling."""
        pairs = [pair(1, mentee, 90.0 - mentee, mentee) for mentee in range(5)]

        self.assertEqual(len(assign_greedily(pairs, {1: 3}, {1: 0})), 3)
        self.assertEqual(
            len(assign_greedily(pairs, {1: 3}, {1: 0}, max_assignments=2)), 2
        )
        self.assertEqual(assign_greedily(pairs, {1: 0}, {1: 0}), [])

    def test_input_order_does_not_change_result(self):
        """Test the result only depends on the pairs, not their list order."""
        pairs = [pair(1, 10, 80.0, 0), pair(1, 11, 85.0, 1), pair(2, 10, 70.0, 2)]

        forward = assign_greedily(pairs, {1: 1, 2: 1}, {1: 0, 2: 0})
        backward = assign_greedily(list(reversed(pairs)), {1: 1, 2: 1}, {1: 0, 2: 0})

        self.assertEqual(forward, backward)


if __name__ == "__main__":
    unittest.main()
