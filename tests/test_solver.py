"""
Unit tests for the required-average solver.

Round-trip rule: if the solver says the free modules need R (one open UE),
setting those modules to R must give back the target average.
"""

import unittest

from moyenne.averages import semester_average
from moyenne.solver import solve
from tests.helpers import exam_only, mixed, semester, single_ue_semester, two_ue_semester, ue


class TestSolve(unittest.TestCase):
    def test_single_ue_feasible(self) -> None:
        result = solve(single_ue_semester(), 10, {"B"})
        assert result is not None
        self.assertTrue(result.feasible)
        self.assertAlmostEqual(result.per_module["B"], 6.8)
        self.assertAlmostEqual(result.overall_required, 6.8)

    def test_single_ue_infeasible(self) -> None:
        result = solve(single_ue_semester(), 19, {"B"})
        assert result is not None
        self.assertFalse(result.feasible)
        self.assertAlmostEqual(result.per_module["B"], 24.8)

    def test_round_trip(self) -> None:
        s = two_ue_semester()
        result = solve(s, 12, {"Z"})
        assert result is not None
        self.assertTrue(result.feasible)

        r = result.overall_required
        filled = s.with_grades({"Z": (r, r)})
        self.assertAlmostEqual(semester_average(filled), 12, places=6)

    def test_locked_incomplete_module_counts_as_zero(self) -> None:
        # W has no exam: it stays locked and contributes 0, so Z must carry the whole UE
        result = solve(two_ue_semester(w_exam=None), 12, {"Z"})
        assert result is not None
        self.assertFalse(result.feasible)
        self.assertGreater(result.per_module["Z"], 20)

    def test_all_free_modules_of_a_ue_share_requirement(self) -> None:
        s = semester(ue("u", 3, mixed("a", 1), exam_only("b", 2), mixed("c", 1, cc=10, exam=10)))
        result = solve(s, 12, {"a", "b"})
        assert result is not None
        self.assertAlmostEqual(result.per_module["a"], result.per_module["b"])

    def test_negative_requirement_is_infeasible(self) -> None:
        s = semester(ue("u", 1, exam_only("a", 1, exam=20), exam_only("b", 1)))
        result = solve(s, 2, {"b"})
        assert result is not None
        self.assertFalse(result.feasible)
        self.assertLess(result.per_module["b"], 0)

    def test_target_twenty_boundaries(self) -> None:
        maxed = semester(ue("u", 2, mixed("a", 1, cc=20, exam=20), mixed("b", 1)))
        result = solve(maxed, 20, {"b"})
        assert result is not None
        self.assertTrue(result.feasible)
        self.assertAlmostEqual(result.per_module["b"], 20)

        below = semester(ue("u", 2, mixed("a", 1, cc=20, exam=19), mixed("b", 1)))
        result = solve(below, 20, {"b"})
        assert result is not None
        self.assertFalse(result.feasible)

    def test_invalid_input_returns_none(self) -> None:
        s = single_ue_semester()
        self.assertIsNone(solve(s, 10, set()))
        self.assertIsNone(solve(s, 25, {"B"}))
        self.assertIsNone(solve(s, -1, {"B"}))
        self.assertIsNone(solve(s, "abc", {"B"}))
        self.assertIsNone(solve(s, 10, {"unknown"}))

    def test_string_target_is_accepted(self) -> None:
        result = solve(single_ue_semester(), "10", {"B"})
        assert result is not None
        self.assertAlmostEqual(result.per_module["B"], 6.8)

    def test_zero_weight_open_ue_is_infeasible(self) -> None:
        s = semester(ue("u1", 1, exam_only("a", 1, exam=12)), ue("u2", 0, exam_only("b", 1)))
        result = solve(s, 12, {"b"})
        assert result is not None
        self.assertFalse(result.feasible)
        self.assertIsNone(result.overall_required)
        self.assertEqual(result.per_module, {})


if __name__ == "__main__":
    unittest.main()
