"""
Unit tests for the session object.

Session contract:
- Every edit produces a new snapshot; earlier snapshots never change
- Invalid grades are rejected with ValueError
- generate() is all-or-nothing
"""

import random
import unittest
from dataclasses import replace

from moyenne.averages import semester_average
from moyenne.session import Session
from tests.helpers import single_ue_semester, two_ue_semester


class TestSession(unittest.TestCase):
    def setUp(self) -> None:
        self.session = Session([single_ue_semester()], rng=random.Random(0))

    def test_set_grade_is_copy_on_write(self) -> None:
        before = self.session.active
        after = self.session.set_grade("B", "cc", "15,5")
        self.assertIsNot(before, after)
        self.assertIsNone(before.find_module("B").cc)
        self.assertEqual(after.find_module("B").cc, 15.5)
        self.assertIs(self.session.active, after)

    def test_clear_single_field(self) -> None:
        self.session.set_grade("A", "exam", None)
        self.assertIsNone(self.session.active.find_module("A").exam)
        self.assertEqual(self.session.active.find_module("A").cc, 12)

    def test_invalid_grades_rejected(self) -> None:
        with self.assertRaises(ValueError):
            self.session.set_grade("A", "cc", 21)
        with self.assertRaises(ValueError):
            self.session.set_grade("A", "exam", "abc")
        with self.assertRaises(ValueError):
            self.session.set_grade("A", "bonus", 10)
        with self.assertRaises(KeyError):
            self.session.set_grade("nope", "exam", 10)

    def test_cc_on_exam_only_module_rejected(self) -> None:
        session = Session([two_ue_semester()])
        with self.assertRaises(ValueError):
            session.set_grade("W", "cc", 10)

    def test_current_average_none_without_grades(self) -> None:
        self.session.clear_grades()
        self.assertIsNone(self.session.current_average())
        self.session.set_grade("A", "exam", 0)
        self.assertEqual(self.session.current_average(), 0)

    def test_requirements_need_target_and_selection(self) -> None:
        self.assertIsNone(self.session.requirements())
        self.session.set_target(10)
        self.assertIsNone(self.session.requirements())
        self.assertTrue(self.session.toggle("B"))
        result = self.session.requirements()
        assert result is not None
        self.assertAlmostEqual(result.per_module["B"], 6.8)
        self.assertFalse(self.session.toggle("B"))
        self.assertIsNone(self.session.requirements())

    def test_generate_commits_on_success(self) -> None:
        self.session.set_target(12)
        self.session.toggle("B")
        self.assertTrue(self.session.generate())
        self.assertAlmostEqual(semester_average(self.session.active), 12, delta=0.01)

    def test_generate_leaves_state_on_failure(self) -> None:
        before = self.session.active
        self.session.set_target(19)
        self.session.toggle("B")
        self.assertFalse(self.session.is_feasible())
        self.assertFalse(self.session.generate())
        self.assertIs(self.session.active, before)

    def test_invalid_target_clears_it(self) -> None:
        self.assertIsNone(self.session.set_target("30"))
        self.assertIsNone(self.session.desired_average)

    def test_switch_resets_simulation(self) -> None:
        other = replace(two_ue_semester(), id="s2", name="S2")
        session = Session([single_ue_semester(), other])
        session.set_target(12)
        session.toggle("A")
        session.switch("s2")
        self.assertEqual(session.active.id, "s2")
        self.assertIsNone(session.desired_average)
        self.assertEqual(session.selected, set())
        with self.assertRaises(KeyError):
            session.switch("missing")


if __name__ == "__main__":
    unittest.main()
