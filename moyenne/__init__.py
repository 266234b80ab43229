"""
Moyenne Calculator: semester averages and target simulation for the
Algerian university grading system (Semester -> UE -> Module).
"""

from moyenne.averages import color_of, module_average, semester_average, ue_average
from moyenne.solver import RequirementResult, solve
from moyenne.synthesizer import synthesize

__all__ = [
    "color_of",
    "module_average",
    "semester_average",
    "ue_average",
    "RequirementResult",
    "solve",
    "synthesize",
]
