"""
Materialize allocations into summary trees.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Any, List, Optional, Set, Tuple

import numpy as np

from summarytrees.operators.entropy import allocation_entropy

from .frontier import FrontierNode, FrontierState, PieceType
from .model import TreeModel

OTHER_LABEL = "{count} others"


@dataclass(frozen=True)
class SummaryTree:
    """
    A k-piece summary of a tree.

    Attributes:
        k: Number of pieces
        nodes: Pieces, every parent listed before its children
        entropy: Entropy of the displayed weights
    """

    k: int
    nodes: Tuple[FrontierNode, ...]
    entropy: float

    def to_records(self) -> List[Tuple[Optional[int], Optional[int], float, int, Any]]:
        """Rows of (node id or None, parent id, weight, type code, label)."""
        return [node.to_record() for node in self.nodes]

    def weights(self) -> np.ndarray:
        return np.array([node.weight for node in self.nodes], dtype=np.float64)

    def node_ids(self) -> Set[int]:
        """Original node ids shown, ignoring "other" clusters."""
        return {node.node_id for node in self.nodes if node.node_id is not None}

    def __len__(self) -> int:
        return len(self.nodes)


class SummaryTreeBuilder:
    """Turns a FrontierState into the exported SummaryTree."""

    def __init__(self, model: TreeModel):
        self.model = model

    def build(self, state: FrontierState, entropy: Optional[float] = None) -> SummaryTree:
        """
        Build the summary tree for one allocation.

        Args:
            state: Allocation over self.model
            entropy: Entropy to report; computed from the allocation if None
        """
        model = self.model
        nodes: List[FrontierNode] = []
        # (position, is_other): an "other" entry stands for its parent's pool
        queue = deque([(model.root, False)])
        while queue:
            position, is_other = queue.popleft()
            node_id = int(model.ids[position])

            if is_other:
                pool = sorted(state.pool(position))
                nodes.append(
                    FrontierNode(
                        node_id=None,
                        parent_id=node_id,
                        weight=float(sum(model.subtree_weight[c] for c in pool)),
                        piece_type=PieceType.OTHER,
                        label=OTHER_LABEL.format(count=len(pool)),
                        members=tuple(int(model.ids[c]) for c in pool),
                    )
                )
                continue

            parent = int(model.parent_position[position])
            parent_id = None if parent < 0 else int(model.ids[parent])

            if state.is_expanded(position) or model.is_leaf(position):
                piece_type = PieceType.SINGLETON
                weight = float(model.weights[position])
            else:
                piece_type = PieceType.SUBTREE
                weight = float(model.subtree_weight[position])
            nodes.append(
                FrontierNode(
                    node_id=node_id,
                    parent_id=parent_id,
                    weight=weight,
                    piece_type=piece_type,
                    label=model.labels[position],
                )
            )

            if not state.is_expanded(position):
                continue
            queue.extend((c, False) for c in state.exposed_children(position))
            if state.pool(position):
                queue.append((position, True))

        if entropy is None:
            entropy = allocation_entropy(state)
        return SummaryTree(k=len(nodes), nodes=tuple(nodes), entropy=float(entropy))
