"""
Frontier value types.

A FrontierState is the allocation behind one summary tree: which nodes are
expanded, and for each of them which children are still folded into its
"other" pool. States are immutable; apply() returns a new state, which is
what lets the greedy planner rebuild the tree for any k by replay.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Dict, FrozenSet, Iterator, Mapping, Optional, Tuple

if TYPE_CHECKING:
    from .model import TreeModel


class PieceType(IntEnum):
    """Row type codes of the exported record schema."""

    SINGLETON = 1
    SUBTREE = 2
    OTHER = 3


@dataclass(frozen=True)
class Expansion:
    """
    One step that adds exactly one piece to a frontier.

    Attributes:
        kind: EXPAND turns a collapsed internal node into its own weight plus
            a pool of its children; EXPOSE pulls one child out of its
            parent's pool
        position: Node being expanded, or child being exposed
        gain: Entropy increase of the step (informational)
    """

    EXPAND = "expand"
    EXPOSE = "expose"

    kind: str
    position: int
    gain: float = 0.0


@dataclass(frozen=True)
class FrontierNode:
    """
    One displayed piece of a summary tree.

    Attributes:
        node_id: Original node id, None for an "other" cluster
        parent_id: Node id of the parent piece, None for the root
        weight: Displayed weight
        piece_type: SINGLETON, SUBTREE or OTHER
        label: Original label, or "<count> others"
        members: Ids of the siblings an "other" cluster aggregates
    """

    node_id: Optional[int]
    parent_id: Optional[int]
    weight: float
    piece_type: PieceType
    label: Any
    members: Tuple[int, ...] = field(default=())

    def to_record(self) -> Tuple[Optional[int], Optional[int], float, int, Any]:
        return (self.node_id, self.parent_id, self.weight, int(self.piece_type), self.label)


def _normalize_pool(children: FrozenSet[int]) -> FrozenSet[int]:
    # a lone folded child is displayed as itself; same mass, same count
    if len(children) == 1:
        return frozenset()
    return children


class FrontierState:
    """
    Immutable allocation over a TreeModel.

    The root is always exposed. A node is expanded when it appears in
    `pools`; its exposed children are those not in its pool. An "other"
    piece exists for every non-empty pool, and pools never hold a single
    child.
    """

    __slots__ = ("_model", "_pools", "_size")

    def __init__(self, model: TreeModel, pools: Optional[Mapping[int, FrozenSet[int]]] = None):
        normalized: Dict[int, FrozenSet[int]] = {
            int(p): _normalize_pool(frozenset(pool)) for p, pool in (pools or {}).items()
        }
        self._model = model
        self._pools = MappingProxyType(normalized)
        for position in normalized:
            if not self.is_exposed(position):
                raise ValueError(f"Position {position} is expanded but not displayed")
        size = 1
        for position, pool in normalized.items():
            size += model.n_children(position) - len(pool) + (1 if pool else 0)
        self._size = size

    @classmethod
    def initial(cls, model: TreeModel) -> FrontierState:
        """Root alone, collapsed: the 1-node summary tree."""
        return cls(model)

    @property
    def model(self) -> TreeModel:
        return self._model

    @property
    def size(self) -> int:
        """Number of displayed pieces."""
        return self._size

    @property
    def pools(self) -> Mapping[int, FrozenSet[int]]:
        return self._pools

    def is_expanded(self, position: int) -> bool:
        return position in self._pools

    def pool(self, position: int) -> FrozenSet[int]:
        return self._pools.get(position, frozenset())

    def is_exposed(self, position: int) -> bool:
        parent = int(self._model.parent_position[position])
        if parent < 0:
            return True
        return parent in self._pools and position not in self._pools[parent]

    def exposed_children(self, position: int) -> Tuple[int, ...]:
        if position not in self._pools:
            return ()
        pool = self._pools[position]
        return tuple(c for c in self._model.children(position) if c not in pool)

    def expanded_positions(self) -> Iterator[int]:
        return iter(sorted(self._pools))

    def apply(self, expansion: Expansion) -> FrontierState:
        """
        Return the state with one more piece.

        Raises:
            ValueError: The expansion is not available in this state
        """
        pools = dict(self._pools)
        position = expansion.position

        if expansion.kind == Expansion.EXPAND:
            if not self.is_exposed(position) or position in pools:
                raise ValueError(f"Position {position} is not a collapsed exposed node")
            if self._model.is_leaf(position):
                raise ValueError(f"Position {position} is a leaf and cannot be expanded")
            pools[position] = frozenset(self._model.children(position))
        elif expansion.kind == Expansion.EXPOSE:
            parent = int(self._model.parent_position[position])
            if position not in self.pool(parent):
                raise ValueError(f"Position {position} is not folded into its parent's pool")
            pools[parent] = self._pools[parent] - {position}
        else:
            raise ValueError(f"Unknown expansion kind {expansion.kind!r}")

        return FrontierState(self._model, pools)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, FrontierState):
            return NotImplemented
        return self._model is other._model and dict(self._pools) == dict(other._pools)

    def __hash__(self) -> int:
        return hash(frozenset(self._pools.items()))

    def __repr__(self) -> str:
        return f"FrontierState(size={self._size}, expanded={len(self._pools)})"
