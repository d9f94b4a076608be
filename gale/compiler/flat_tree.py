"""Arena-backed tree with stable node identities and tombstoned deletion."""

from __future__ import annotations

from collections import deque
from typing import Generic, Iterator, Optional, TypeVar

from .errors import InvariantViolation

T = TypeVar("T")

NodeId = int

ROOT_ID: NodeId = 0
# Placeholder child id used while a node's children are still being built.
ERROR_ID: NodeId = -1


class FlatTree(Generic[T]):
    """Insertion-ordered store of ``[value, live, parent]`` slots.

    A node id is the slot index at creation time. Ids are never reused or
    renumbered, and the root (id 0) is its own parent. Only a node's value
    may change after creation; its parent pointer is fixed.
    """

    def __init__(self):
        self._slots: list[list] = []

    @classmethod
    def new_with_root(cls, root: T) -> "FlatTree[T]":
        tree = cls()
        tree._slots.append([root, True, ROOT_ID])
        return tree

    @classmethod
    def new_empty(cls) -> "FlatTree[T]":
        return cls()

    def _slot(self, n: NodeId) -> list:
        if n < 0 or n >= len(self._slots):
            raise InvariantViolation(f"Node id {n} was never issued by this tree")
        return self._slots[n]

    def set_root(self, value: T) -> None:
        if self._slots:
            self._slots[ROOT_ID] = [value, True, ROOT_ID]
        else:
            self._slots.append([value, True, ROOT_ID])

    def new_node(self, value: T, parent: NodeId) -> NodeId:
        self._slot(parent)
        node_id = len(self._slots)
        self._slots.append([value, True, parent])
        return node_id

    def delete_node(self, n: NodeId) -> None:
        """Tombstone ``n`` and every live node whose parent chain reaches it."""

        pending = [n]
        while pending:
            current = pending.pop()
            slot = self._slot(current)
            if not slot[1]:
                continue
            slot[1] = False
            for node_id, (_, live, parent) in enumerate(self._slots):
                if parent == current and live and node_id != current:
                    pending.append(node_id)

    def set_node_value(self, n: NodeId, value: T) -> None:
        slot = self._slot(n)
        if slot[1]:
            slot[0] = value

    def get_node_value(self, n: NodeId) -> Optional[T]:
        value, live, _ = self._slot(n)
        return value if live else None

    # Payloads are mutable objects, so the "mutable" accessor hands back the
    # same reference; it exists to mirror the read accessor at call sites
    # that intend to edit in place.
    get_mut_node_value = get_node_value

    def is_live(self, n: NodeId) -> bool:
        return self._slot(n)[1]

    def get_parent(self, n: NodeId) -> NodeId:
        return self._slot(n)[2]

    def get_children(self, n: NodeId) -> list[NodeId]:
        return [
            node_id
            for node_id, (_, live, parent) in enumerate(self._slots)
            if live and parent == n and node_id != parent
        ]

    def iter_live(self) -> Iterator[tuple[NodeId, T]]:
        """Yield every live ``(id, value)`` once, in slot order."""

        for node_id, (value, live, _) in enumerate(self._slots):
            if live:
                yield node_id, value

    def iter_preorder(self) -> Iterator[tuple[NodeId, T]]:
        """Yield live nodes so that a parent precedes all its descendants.

        Children of the most recently visited node are pushed to the front
        of the queue, which gives a depth-first walk.
        """

        if not self._slots or not self._slots[ROOT_ID][1]:
            return
        queue: deque[NodeId] = deque([ROOT_ID])
        while queue:
            current = queue.popleft()
            for child in self.get_children(current):
                queue.appendleft(child)
            yield current, self._slots[current][0]

    def __len__(self) -> int:
        return len(self._slots)

    def __repr__(self) -> str:  # pragma: no cover - representation helper
        slots = ", ".join(
            f"({value!r}, {live}, {parent})" for value, live, parent in self._slots
        )
        return f"Tree [{slots}]"


__all__ = [
    "ERROR_ID",
    "FlatTree",
    "NodeId",
    "ROOT_ID",
]
