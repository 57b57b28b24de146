"""
Validated, immutable tree representation.

Key design principles:
- Nodes live in one arena sorted by (depth, parent id, id); parents, children
  and subtree sums are integer positions into that arena
- Children of any node occupy one contiguous position range, so the whole
  shape is captured by (parent, first child, last child) per position
- All validation happens here, once; planners trust the model
- Depth-sorted order means reversed positions are a valid bottom-up order,
  so nothing in the package walks the tree recursively
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from summarytrees.common.errors import (
    DanglingReferenceError,
    DuplicateNodeError,
    InvalidWeightError,
    MalformedTreeError,
)

logger = logging.getLogger(__name__)

ROOT_PARENT = 0
NO_CHILD = -1


@dataclass(frozen=True)
class TreeData:
    """Caller's columns, reordered into arena order."""

    ids: np.ndarray
    parents: np.ndarray
    weights: np.ndarray
    labels: Tuple[Any, ...]


def _as_ids(values: Iterable, name: str) -> np.ndarray:
    arr = np.asarray(list(values))
    if arr.size == 0:
        return arr.astype(np.int64)
    if arr.dtype.kind == "f":
        if not np.all(np.isfinite(arr)) or not np.all(arr == np.floor(arr)):
            raise MalformedTreeError(f"{name} must be integers")
    elif arr.dtype.kind not in "iu":
        raise MalformedTreeError(f"{name} must be integers, got dtype {arr.dtype}")
    return arr.astype(np.int64)


class TreeModel:
    """
    Weighted rooted tree, built once per invocation.

    Example:
        model = TreeModel(ids=[1, 2, 3], parents=[0, 1, 1], weights=[0, 2, 3])
        model.root                 # 0 (position of id 1)
        model.subtree_weight[0]    # 5.0
        model.children(0)          # (1, 2)
    """

    def __init__(
        self,
        ids: Sequence[int],
        parents: Sequence[int],
        weights: Sequence[float],
        labels: Optional[Sequence[Any]] = None,
    ):
        """
        Validate the input and build the sorted arena.

        Args:
            ids: Unique positive node ids
            parents: Parent id per node; ROOT_PARENT marks the root
            weights: Non-negative weight per node
            labels: Optional label per node (defaults to the id as a string)

        Raises:
            MalformedTreeError: Mismatched lengths, non-positive ids, root count
                other than one, or nodes unreachable from the root
            DuplicateNodeError: An id appears twice
            DanglingReferenceError: A parent id matches no node
            InvalidWeightError: A weight is negative or not finite
        """
        raw_ids = _as_ids(ids, "ids")
        raw_parents = _as_ids(parents, "parent ids")
        try:
            raw_weights = np.asarray(list(weights), dtype=np.float64)
        except (TypeError, ValueError) as exc:
            raise InvalidWeightError(f"weights must be numeric: {exc}") from exc
        raw_labels = (
            [str(i) for i in raw_ids.tolist()] if labels is None else list(labels)
        )

        n = len(raw_ids)
        if not (len(raw_parents) == len(raw_weights) == len(raw_labels) == n):
            raise MalformedTreeError(
                f"Column lengths differ: {n} ids, {len(raw_parents)} parents, "
                f"{len(raw_weights)} weights, {len(raw_labels)} labels"
            )
        if n == 0:
            raise MalformedTreeError("Tree has no nodes")
        if np.any(raw_ids <= 0):
            bad = raw_ids[raw_ids <= 0][0]
            raise MalformedTreeError(f"Node ids must be positive, got {bad}")

        index_of: Dict[int, int] = {}
        for i, node_id in enumerate(raw_ids.tolist()):
            if node_id in index_of:
                raise DuplicateNodeError(f"Node id {node_id} appears more than once")
            index_of[node_id] = i

        roots = np.flatnonzero(raw_parents == ROOT_PARENT)
        if len(roots) != 1:
            raise MalformedTreeError(
                f"Expected exactly one root (parent id {ROOT_PARENT}), found {len(roots)}"
            )
        root_index = int(roots[0])

        parent_index = np.full(n, -1, dtype=np.int64)
        for i, parent_id in enumerate(raw_parents.tolist()):
            if i == root_index:
                continue
            if parent_id not in index_of:
                raise DanglingReferenceError(
                    f"Node {raw_ids[i]} references missing parent {parent_id}"
                )
            parent_index[i] = index_of[parent_id]

        if not np.all(np.isfinite(raw_weights)):
            raise InvalidWeightError("Weights must be finite")
        if np.any(raw_weights < 0):
            bad = int(np.flatnonzero(raw_weights < 0)[0])
            raise InvalidWeightError(
                f"Node {raw_ids[bad]} has negative weight {raw_weights[bad]}"
            )

        depth = self._depths(parent_index, root_index)

        # Primary key is the last one handed to lexsort
        order = np.lexsort((raw_ids, raw_parents, depth))
        position_of_index = np.empty(n, dtype=np.int64)
        position_of_index[order] = np.arange(n)

        self._n = n
        self.order = order
        self.ids = raw_ids[order]
        self.parents = raw_parents[order]
        self.weights = raw_weights[order]
        self.labels: Tuple[Any, ...] = tuple(raw_labels[i] for i in order.tolist())
        self.depth = depth[order]

        parent_position = np.full(n, -1, dtype=np.int64)
        has_parent = parent_index[order] >= 0
        parent_position[has_parent] = position_of_index[parent_index[order][has_parent]]
        self.parent_position = parent_position

        first_child = np.full(n, NO_CHILD, dtype=np.int64)
        last_child = np.full(n, NO_CHILD, dtype=np.int64)
        for position in range(1, n):
            p = parent_position[position]
            if first_child[p] == NO_CHILD:
                first_child[p] = position
            last_child[p] = position
        self.first_child = first_child
        self.last_child = last_child

        self.subtree_weight = self.subtree_sums(self.weights)
        self.subtree_size = self.subtree_sums(np.ones(n, dtype=np.int64))

        self._position_of = {node_id: i for i, node_id in enumerate(self.ids.tolist())}

        for arr in (
            self.order,
            self.ids,
            self.parents,
            self.weights,
            self.depth,
            self.parent_position,
            self.first_child,
            self.last_child,
            self.subtree_weight,
            self.subtree_size,
        ):
            arr.setflags(write=False)

        logger.debug(
            f"TreeModel built: {n} nodes, depth {int(self.depth.max())}, "
            f"total weight {self.total_weight:.6g}"
        )

    @staticmethod
    def _depths(parent_index: np.ndarray, root_index: int) -> np.ndarray:
        """Breadth-first depths; anything not reached from the root is a cycle."""
        n = len(parent_index)
        children: List[List[int]] = [[] for _ in range(n)]
        for i, p in enumerate(parent_index.tolist()):
            if p >= 0:
                children[p].append(i)

        depth = np.full(n, -1, dtype=np.int64)
        depth[root_index] = 0
        queue = deque([root_index])
        while queue:
            i = queue.popleft()
            for c in children[i]:
                depth[c] = depth[i] + 1
                queue.append(c)

        unreachable = np.flatnonzero(depth < 0)
        if len(unreachable) > 0:
            raise MalformedTreeError(
                f"{len(unreachable)} node(s) are not connected to the root (cycle)"
            )
        return depth

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def n_nodes(self) -> int:
        return self._n

    @property
    def root(self) -> int:
        """Position of the root (always 0 after sorting)."""
        return 0

    @property
    def total_weight(self) -> float:
        """Total mass W."""
        return float(self.subtree_weight[0])

    def children(self, position: int) -> Tuple[int, ...]:
        """Child positions of a node, ordered by id."""
        first = int(self.first_child[position])
        if first == NO_CHILD:
            return ()
        return tuple(range(first, int(self.last_child[position]) + 1))

    def n_children(self, position: int) -> int:
        first = int(self.first_child[position])
        if first == NO_CHILD:
            return 0
        return int(self.last_child[position]) - first + 1

    def is_leaf(self, position: int) -> bool:
        return int(self.first_child[position]) == NO_CHILD

    def position_of(self, node_id: int) -> int:
        """Arena position for a caller's node id."""
        try:
            return self._position_of[int(node_id)]
        except KeyError:
            raise KeyError(f"No node with id {node_id}") from None

    def subtree_sums(self, values: np.ndarray) -> np.ndarray:
        """
        Per-position subtree totals of an arbitrary per-node vector.

        Args:
            values: One value per position (arena order)

        Returns:
            New array of the same dtype with descendant values accumulated
        """
        sums = np.array(values, copy=True)
        parent_position = self.parent_position
        for position in range(self._n - 1, 0, -1):
            sums[parent_position[position]] += sums[position]
        return sums

    # ------------------------------------------------------------------
    # Exports
    # ------------------------------------------------------------------

    def compact(self) -> np.ndarray:
        """
        n x 3 integer array: parent id, first child position, last child position.

        Child positions are -1 for leaves. Only meaningful together with the
        arena order, since it relies on children being contiguous.
        """
        return np.column_stack([self.parents, self.first_child, self.last_child])

    def reordered(self) -> TreeData:
        """Input columns in arena order."""
        return TreeData(
            ids=self.ids.copy(),
            parents=self.parents.copy(),
            weights=self.weights.copy(),
            labels=self.labels,
        )

    def __len__(self) -> int:
        return self._n

    def __repr__(self) -> str:
        return (
            f"TreeModel(n_nodes={self._n}, "
            f"total_weight={self.total_weight:.6f}, "
            f"max_depth={int(self.depth.max())})"
        )
