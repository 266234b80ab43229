"""
Central data model definitions used across the project.

This module defines the canonical structure of Semester, UE and Module objects so that:
- the averaging engine, the solvers and the UI layers share the same field names
- every edit produces a new snapshot instead of mutating shared state
- JSON catalogs and grade files map 1:1 onto these classes

A grade that was never entered is None. A grade of 0 is a real grade.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Optional


GRADE_MIN = 0.0
GRADE_MAX = 20.0

CC_WEIGHT = 0.4
EXAM_WEIGHT = 0.6


def as_grade(value: Any) -> Optional[float]:
    """
    Convert user input (number or numeric string) into a grade in [0, 20].

    Returns None for anything that is not a finite number inside the legal range.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        x = float(str(value).strip().replace(",", ".")) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(x) or not (GRADE_MIN <= x <= GRADE_MAX):
        return None
    return x


class ModuleType(Enum):
    """
    How a module is graded.

    FULL_EXAM: the exam is the whole grade (no continuous assessment)
    CC_EXAM: 40% continuous assessment (CC) + 60% exam
    """

    FULL_EXAM = "100%"
    CC_EXAM = "40/60"


@dataclass(frozen=True)
class Module:
    """
    The smallest graded unit. Holds up to two grade slots (cc, exam).
    """

    id: str
    name: str
    coefficient: float
    type: ModuleType
    cc: Optional[float] = None
    exam: Optional[float] = None

    @property
    def has_cc(self) -> bool:
        return self.type is ModuleType.CC_EXAM


@dataclass(frozen=True)
class UE:
    """
    Teaching unit: a coefficient-weighted group of modules.

    The UE coefficient is independent of the sum of its module coefficients.
    """

    id: str
    name: str
    coefficient: float
    modules: tuple[Module, ...]


@dataclass(frozen=True)
class Semester:
    id: str
    name: str
    ues: tuple[UE, ...]

    def modules(self) -> list[Module]:
        return [m for ue in self.ues for m in ue.modules]

    def module_ids(self) -> list[str]:
        return [m.id for m in self.modules()]

    def find_module(self, module_id: str) -> Optional[Module]:
        for m in self.modules():
            if m.id == module_id:
                return m
        return None

    def with_grades(self, updates: dict[str, tuple[Optional[float], Optional[float]]]) -> Semester:
        """
        Return a new snapshot where each module in `updates` gets new (cc, exam) values.

        Modules not listed are carried over unchanged. The current object is never touched.
        """
        if not updates:
            return self

        new_ues: list[UE] = []
        for ue in self.ues:
            new_modules: list[Module] = []
            for m in ue.modules:
                if m.id in updates:
                    cc, exam = updates[m.id]
                    # exam-only modules never carry a meaningful cc
                    new_modules.append(replace(m, cc=cc if m.has_cc else None, exam=exam))
                else:
                    new_modules.append(m)
            new_ues.append(replace(ue, modules=tuple(new_modules)))
        return replace(self, ues=tuple(new_ues))


# ---------------------------------------------------------------------------
# JSON shapes
# ---------------------------------------------------------------------------


def _opt_float(x: Any) -> Optional[float]:
    # "" comes from blank form fields and means "not entered"
    if x is None or x == "":
        return None
    return float(x)


def module_from_dict(data: dict[str, Any]) -> Module:
    return Module(
        id=str(data["id"]),
        name=str(data.get("name", "")),
        coefficient=float(data["coefficient"]),
        type=ModuleType(data.get("type", ModuleType.CC_EXAM.value)),
        cc=_opt_float(data.get("cc")),
        exam=_opt_float(data.get("exam")),
    )


def semester_from_dict(data: dict[str, Any]) -> Semester:
    ues: list[UE] = []
    for ue in data.get("ues", []):
        ues.append(
            UE(
                id=str(ue["id"]),
                name=str(ue.get("name", "")),
                coefficient=float(ue["coefficient"]),
                modules=tuple(module_from_dict(m) for m in ue.get("modules", [])),
            )
        )
    return Semester(id=str(data["id"]), name=str(data.get("name", "")), ues=tuple(ues))


def semester_to_dict(semester: Semester) -> dict[str, Any]:
    return {
        "id": semester.id,
        "name": semester.name,
        "ues": [
            {
                "id": ue.id,
                "name": ue.name,
                "coefficient": ue.coefficient,
                "modules": [
                    {
                        "id": m.id,
                        "name": m.name,
                        "coefficient": m.coefficient,
                        "type": m.type.value,
                        "cc": m.cc,
                        "exam": m.exam,
                    }
                    for m in ue.modules
                ],
            }
            for ue in semester.ues
        ],
    }
