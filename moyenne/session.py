"""
Application session.

Holds the state one user works with: the catalog semesters (with grades), the active
semester, the desired average and the set of modules selected for simulation.

Semester snapshots are immutable. Every edit or generation replaces the stored
snapshot with a new one, so a snapshot handed out earlier never changes.
"""

from __future__ import annotations

import logging
import random
from typing import Any, Iterable, Optional

from moyenne.averages import has_any_grade, semester_average
from moyenne.model import ModuleType, Semester, as_grade
from moyenne.solver import RequirementResult, solve
from moyenne.synthesizer import synthesize_with_retries

log = logging.getLogger(__name__)

GRADE_FIELDS = ("cc", "exam")


class Session:
    def __init__(
        self,
        semesters: Iterable[Semester],
        active_id: Optional[str] = None,
        synthesis_attempts: int = 1,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._semesters: dict[str, Semester] = {s.id: s for s in semesters}
        if not self._semesters:
            raise ValueError("Session needs at least one semester")

        self._active_id = active_id if active_id is not None else next(iter(self._semesters))
        if self._active_id not in self._semesters:
            raise KeyError(f"Unknown semester: {self._active_id}")

        self.synthesis_attempts = max(1, synthesis_attempts)
        self.rng = rng if rng is not None else random.Random()

        self.desired_average: Optional[float] = None
        self.selected: set[str] = set()

    # ------------------------------------------------------------------
    # Semesters
    # ------------------------------------------------------------------

    @property
    def active(self) -> Semester:
        return self._semesters[self._active_id]

    @property
    def semesters(self) -> list[Semester]:
        return list(self._semesters.values())

    def switch(self, semester_id: str) -> None:
        """
        Make another semester active. Target and selection belong to one semester, so they reset.
        """
        if semester_id not in self._semesters:
            raise KeyError(f"Unknown semester: {semester_id}")
        if semester_id != self._active_id:
            self._active_id = semester_id
            self.desired_average = None
            self.selected = set()

    def replace_active(self, semester: Semester) -> None:
        """
        Replace the active snapshot with a loaded one (same program structure expected).
        """
        self._semesters[semester.id] = semester
        self._active_id = semester.id
        self.selected &= set(semester.module_ids())

    # ------------------------------------------------------------------
    # Grades
    # ------------------------------------------------------------------

    def set_grade(self, module_id: str, field: str, value: Any) -> Semester:
        """
        Set one grade field of one module. `value` None (or "") clears the field.

        Raises KeyError for an unknown module and ValueError for an invalid field or value.
        """
        if field not in GRADE_FIELDS:
            raise ValueError(f"Unknown grade field: {field!r}")

        semester = self.active
        module = semester.find_module(module_id)
        if module is None:
            raise KeyError(f"Unknown module: {module_id}")
        if field == "cc" and module.type is ModuleType.FULL_EXAM:
            raise ValueError(f"{module_id} is graded by exam only (no CC)")

        if value is None or (isinstance(value, str) and not value.strip()):
            grade = None
        else:
            grade = as_grade(value)
            if grade is None:
                raise ValueError(f"Grade must be a number between 0 and 20, got {value!r}")

        cc, exam = module.cc, module.exam
        if field == "cc":
            cc = grade
        else:
            exam = grade

        updated = semester.with_grades({module_id: (cc, exam)})
        self._semesters[semester.id] = updated
        return updated

    def clear_grades(self) -> Semester:
        semester = self.active
        updated = semester.with_grades({mid: (None, None) for mid in semester.module_ids()})
        self._semesters[semester.id] = updated
        return updated

    def current_average(self) -> Optional[float]:
        """
        Semester average, or None while nothing has been entered.
        """
        if not has_any_grade(self.active):
            return None
        return semester_average(self.active)

    # ------------------------------------------------------------------
    # Simulation
    # ------------------------------------------------------------------

    def set_target(self, value: Any) -> Optional[float]:
        """
        Set the desired average. Invalid input clears it (returns None).
        """
        self.desired_average = as_grade(value)
        return self.desired_average

    def toggle(self, module_id: str) -> bool:
        """
        Add or remove a module from the selection. Returns True if it is now selected.
        """
        if self.active.find_module(module_id) is None:
            raise KeyError(f"Unknown module: {module_id}")
        if module_id in self.selected:
            self.selected.discard(module_id)
            return False
        self.selected.add(module_id)
        return True

    def requirements(self) -> Optional[RequirementResult]:
        if self.desired_average is None or not self.selected:
            return None
        return solve(self.active, self.desired_average, self.selected)

    def is_feasible(self) -> bool:
        """
        Feasibility for the reaction message. Without a computed requirement there is nothing to fail.
        """
        result = self.requirements()
        return result.feasible if result is not None else True

    def generate(self) -> bool:
        """
        Generate grades for the selected modules and commit them.

        All-or-nothing: on failure the active snapshot is left untouched.
        """
        if self.desired_average is None or not self.selected:
            return False

        result = synthesize_with_retries(
            self.active,
            self.desired_average,
            self.selected,
            attempts=self.synthesis_attempts,
            rng=self.rng,
        )
        if result is None:
            log.info("Target %.2f not reached for %d selected module(s)", self.desired_average, len(self.selected))
            return False

        self._semesters[result.id] = result
        return True
