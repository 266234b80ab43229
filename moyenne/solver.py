"""
Required-average solver.

Given a target semester average and a set of "free" modules (not graded yet, or re-opened),
compute the average those modules need. The result is advisory: one number per module,
not concrete CC/exam values (see moyenne.synthesizer for those).

Procedure:
1) UEs without any free module are locked: they contribute ue_average * coefficient.
2) All open UEs share one required UE average:
       (target * total_ue_coeff - locked) / open_ue_coeff
3) Inside an open UE, non-free modules contribute their average (0 if incomplete).
   All free modules of that UE get the same requirement:
       (required_ue_avg * total_mod_coeff - locked_raw) / free_mod_coeff
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from moyenne.averages import module_average, ue_average
from moyenne.model import GRADE_MAX, GRADE_MIN, Module, Semester, UE, as_grade

log = logging.getLogger(__name__)


@dataclass
class RequirementResult:
    """
    feasible: every per-module requirement lies in [0, 20]
    overall_required: mean of the per-module requirements
    per_module: module_id -> required module average (not clamped)
    """

    feasible: bool
    overall_required: Optional[float]
    per_module: dict[str, float] = field(default_factory=dict)


def _open_ue_requirement(
    ue: UE, free_modules: list[Module], required_ue_avg: float, free_ids: set[str]
) -> Optional[float]:
    locked_raw = 0.0
    for m in ue.modules:
        if m.id in free_ids:
            continue
        avg = module_average(m)
        locked_raw += (avg if avg is not None else 0.0) * m.coefficient

    total_mod_coeff = sum(m.coefficient for m in ue.modules)
    required_raw_sum = required_ue_avg * total_mod_coeff
    required_selected_raw = required_raw_sum - locked_raw

    selected_coeff = sum(m.coefficient for m in free_modules)
    if selected_coeff <= 0:
        return None
    return required_selected_raw / selected_coeff


def solve(semester: Semester, target: Any, free_ids: Iterable[str]) -> Optional[RequirementResult]:
    """
    Compute what the free modules must average so the semester reaches `target`.

    Returns None when there is nothing to compute (invalid target, no free module).
    Infeasibility is reported through RequirementResult.feasible, never raised.
    """
    target_avg = as_grade(target)
    if target_avg is None:
        return None

    known = set(semester.module_ids())
    free = {mid for mid in free_ids if mid in known}
    if not free:
        return None

    locked_contribution = 0.0
    open_ues: list[tuple[UE, list[Module]]] = []
    for ue in semester.ues:
        free_modules = [m for m in ue.modules if m.id in free]
        if free_modules:
            open_ues.append((ue, free_modules))
        else:
            locked_contribution += ue_average(ue) * ue.coefficient

    total_coeff = sum(ue.coefficient for ue in semester.ues)
    required_from_open = target_avg * total_coeff - locked_contribution

    open_coeff = sum(ue.coefficient for ue, _ in open_ues)
    if open_coeff == 0:
        log.debug("No open UE carries weight; target %.2f cannot be influenced", target_avg)
        return RequirementResult(feasible=False, overall_required=None)

    required_open_ue_avg = required_from_open / open_coeff

    per_module: dict[str, float] = {}
    for ue, free_modules in open_ues:
        req = _open_ue_requirement(ue, free_modules, required_open_ue_avg, free)
        if req is None:
            continue
        for m in free_modules:
            per_module[m.id] = req

    feasible = all(GRADE_MIN <= v <= GRADE_MAX for v in per_module.values())

    if per_module:
        overall = sum(per_module.values()) / len(per_module)
    else:
        overall = required_open_ue_avg

    return RequirementResult(feasible=feasible, overall_required=overall, per_module=per_module)
