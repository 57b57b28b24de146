"""
Planners: choose which pieces to show for every budget k.

- GreedyPlanner: best-first heuristic, fast, not optimal
- ExactPlanner: tree dynamic program, optimal
- ApproximatePlanner: same program on rounded weights, within epsilon
"""

from .base import AbstractPlanner, PlanResult
from .dynamic import ApproximatePlanner, DPCell, ExactPlanner, SubtreeProgram
from .greedy import GreedyPlanner, replay

__all__ = [
    "AbstractPlanner",
    "ApproximatePlanner",
    "DPCell",
    "ExactPlanner",
    "GreedyPlanner",
    "PlanResult",
    "SubtreeProgram",
    "replay",
]
