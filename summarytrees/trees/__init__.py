"""
Tree structures.

Key concepts:
- TreeModel: validated, immutable arena of the input tree
- FrontierState: one allocation (which nodes are expanded, what is folded
  into "other"), immutable, advanced with apply()
- SummaryTree: the k displayed pieces built from an allocation

Usage:
    model = TreeModel(ids, parents, weights, labels)
    state = FrontierState.initial(model)
    state = state.apply(Expansion(Expansion.EXPAND, model.root))
    tree = SummaryTreeBuilder(model).build(state)
"""

from .frontier import Expansion, FrontierNode, FrontierState, PieceType
from .model import ROOT_PARENT, TreeData, TreeModel
from .summary import SummaryTree, SummaryTreeBuilder

__all__ = [
    "Expansion",
    "FrontierNode",
    "FrontierState",
    "PieceType",
    "ROOT_PARENT",
    "SummaryTree",
    "SummaryTreeBuilder",
    "TreeData",
    "TreeModel",
]
