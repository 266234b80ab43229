"""
Average computation (module -> UE -> semester).

Rules:
- A module average needs every slot of its type. A missing slot makes it incomplete (None).
- An incomplete module still counts in its UE denominator, with 0 in the numerator.
  Semesters with many ungraded modules therefore show a low average, not an undefined one.
- Zero coefficient sums give 0.0 instead of dividing by zero.
"""

from __future__ import annotations

from typing import Optional

from moyenne.model import CC_WEIGHT, EXAM_WEIGHT, Module, ModuleType, Semester, UE


def module_average(module: Module) -> Optional[float]:
    """
    Return the module average, or None when data is incomplete.
    """
    if module.type is ModuleType.FULL_EXAM:
        return module.exam

    if module.cc is None or module.exam is None:
        return None
    return module.cc * CC_WEIGHT + module.exam * EXAM_WEIGHT


def ue_average(ue: UE) -> float:
    total_weighted = 0.0
    total_coeff = 0.0
    for m in ue.modules:
        total_coeff += m.coefficient
        avg = module_average(m)
        if avg is not None:
            total_weighted += avg * m.coefficient

    if total_coeff == 0:
        return 0.0
    return total_weighted / total_coeff


def semester_average(semester: Semester) -> float:
    total_weighted = 0.0
    total_coeff = 0.0
    for ue in semester.ues:
        total_coeff += ue.coefficient
        total_weighted += ue_average(ue) * ue.coefficient

    if total_coeff == 0:
        return 0.0
    return total_weighted / total_coeff


def has_any_grade(semester: Semester) -> bool:
    """
    True if at least one cc/exam field holds a value.
    """
    for m in semester.modules():
        if m.exam is not None or (m.has_cc and m.cc is not None):
            return True
    return False


def color_of(average: Optional[float]) -> str:
    """
    Map an average to a display colour: neutral / red / orange / green.
    """
    if average is None:
        return "neutral"
    if average < 10:
        return "red"
    if average < 12:
        return "orange"
    return "green"
