"""
Small semester builders shared by the tests.
"""

from __future__ import annotations

from typing import Optional

from moyenne.model import Module, ModuleType, Semester, UE


def mixed(mid: str, coef: float, cc: Optional[float] = None, exam: Optional[float] = None) -> Module:
    return Module(id=mid, name=mid, coefficient=coef, type=ModuleType.CC_EXAM, cc=cc, exam=exam)


def exam_only(mid: str, coef: float, exam: Optional[float] = None) -> Module:
    return Module(id=mid, name=mid, coefficient=coef, type=ModuleType.FULL_EXAM, exam=exam)


def ue(uid: str, coef: float, *modules: Module) -> UE:
    return UE(id=uid, name=uid, coefficient=coef, modules=tuple(modules))


def semester(*ues: UE) -> Semester:
    return Semester(id="s", name="S", ues=tuple(ues))


def single_ue_semester() -> Semester:
    """
    One UE (coef 9), module A graded (CC 12, exam 14 -> 13.2), module B empty.
    """
    return semester(ue("ue1", 9, mixed("A", 3, cc=12, exam=14), mixed("B", 3)))


def two_ue_semester(w_exam: Optional[float] = 12) -> Semester:
    """
    UE1 (coef 4): X exam-only 15 (coef 2), Y CC 10 / exam 8 (coef 1) -> locked
    UE2 (coef 2): Z mixed, empty (coef 1), W exam-only (coef 1)
    """
    return semester(
        ue("ue1", 4, exam_only("X", 2, exam=15), mixed("Y", 1, cc=10, exam=8)),
        ue("ue2", 2, mixed("Z", 1), exam_only("W", 1, exam=w_exam)),
    )
