"""
Grade synthesis: produce concrete CC/exam values that hit a target semester average.

Every module is split into slots:
- FULL_EXAM module: one exam slot (fraction 1.0)
- CC_EXAM module: a CC slot (0.4) and an exam slot (0.6)

Slot weight inside the semester sum:
    ue_coeff * mod_coeff / total_mod_coeff_in_ue * fraction

The UE coefficient is not normalized here. The target raw score is
target * total_ue_coeff, so weights and target live on the same scale.

Construction (single attempt, no backtracking):
- shuffle the free slots
- every slot but the last draws a random value from the window that still lets the
  remaining slots (each in [0, 20]) reach the target
- the last slot takes the exact value that closes the equation

A feasible target can still fail on an unlucky order; synthesize_with_retries() reshuffles.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from moyenne.model import CC_WEIGHT, EXAM_WEIGHT, GRADE_MAX, GRADE_MIN, ModuleType, Semester, as_grade

log = logging.getLogger(__name__)

# accepted float error on the closing slot
CLOSURE_TOLERANCE = 0.01


@dataclass
class _Slot:
    module_id: str
    field: str  # "cc" or "exam"
    weight: float


def _collect_slots(semester: Semester, free: set[str]) -> tuple[float, list[_Slot]]:
    """
    Return (locked_weighted_score, mutable_slots).

    Locked slots with no value count as 0 here, unlike module_average().
    """
    locked = 0.0
    slots: list[_Slot] = []

    for ue in semester.ues:
        total_mod_coeff = sum(m.coefficient for m in ue.modules)
        for m in ue.modules:
            mod_weight = (m.coefficient * ue.coefficient) / total_mod_coeff if total_mod_coeff > 0 else 0.0
            is_free = m.id in free

            if m.type is ModuleType.FULL_EXAM:
                parts = [("exam", mod_weight, m.exam)]
            else:
                parts = [("cc", mod_weight * CC_WEIGHT, m.cc), ("exam", mod_weight * EXAM_WEIGHT, m.exam)]

            for field_name, weight, value in parts:
                if is_free:
                    slots.append(_Slot(module_id=m.id, field=field_name, weight=weight))
                else:
                    locked += (value or 0.0) * weight

    return locked, slots


def synthesize(
    semester: Semester,
    target: Any,
    free_ids: Iterable[str],
    rng: Optional[random.Random] = None,
) -> Optional[Semester]:
    """
    Generate grades for the free modules so the semester average equals `target`.

    Returns a new Semester snapshot, or None if the target is invalid or this attempt
    could not reach it. The input snapshot is never modified.
    """
    target_avg = as_grade(target)
    if target_avg is None:
        return None

    free = set(free_ids)
    if not free:
        return None

    total_ue_coeff = sum(ue.coefficient for ue in semester.ues)
    if total_ue_coeff == 0:
        return None

    locked, slots = _collect_slots(semester, free)
    if not slots:
        return None

    remaining_target = target_avg * total_ue_coeff - locked

    values: dict[tuple[str, str], float] = {}
    for slot in slots:
        if slot.weight <= 0:
            # contributes nothing either way
            values[(slot.module_id, slot.field)] = 0.0

    slots = [s for s in slots if s.weight > 0]
    if not slots:
        log.debug("No free slot carries weight")
        return None

    rnd = rng if rng is not None else random.Random()
    rnd.shuffle(slots)

    accumulated = 0.0

    for i, slot in enumerate(slots):
        needed = remaining_target - accumulated

        if i == len(slots) - 1:
            exact = needed / slot.weight
            if not (GRADE_MIN - CLOSURE_TOLERANCE <= exact <= GRADE_MAX + CLOSURE_TOLERANCE):
                log.debug("Closing slot %s.%s needs %.3f", slot.module_id, slot.field, exact)
                return None
            values[(slot.module_id, slot.field)] = min(GRADE_MAX, max(GRADE_MIN, round(exact, 2)))
            break

        rest_weights = sum(s.weight for s in slots[i + 1 :])
        lo = max(GRADE_MIN, (needed - rest_weights * GRADE_MAX) / slot.weight)
        hi = min(GRADE_MAX, needed / slot.weight)
        if lo > hi:
            log.debug("Empty window for %s.%s: [%.3f, %.3f]", slot.module_id, slot.field, lo, hi)
            return None

        value = round(rnd.uniform(lo, hi), 2)
        values[(slot.module_id, slot.field)] = value
        accumulated += value * slot.weight

    updates: dict[str, tuple[Optional[float], Optional[float]]] = {}
    for (module_id, field_name), value in values.items():
        cc, exam = updates.get(module_id, (None, None))
        if field_name == "cc":
            cc = value
        else:
            exam = value
        updates[module_id] = (cc, exam)

    return semester.with_grades(updates)


def synthesize_with_retries(
    semester: Semester,
    target: Any,
    free_ids: Iterable[str],
    attempts: int = 1,
    rng: Optional[random.Random] = None,
) -> Optional[Semester]:
    """
    Run up to `attempts` independent synthesis attempts, each with a fresh shuffle.
    """
    free = list(free_ids)
    rnd = rng if rng is not None else random.Random()
    for attempt in range(max(1, attempts)):
        result = synthesize(semester, target, free, rng=rnd)
        if result is not None:
            if attempt:
                log.info("Synthesis succeeded on attempt %d", attempt + 1)
            return result
    return None
