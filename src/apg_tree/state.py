"""Ordered id sets that may be owned internally or mirrored from the caller."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator

ChangeCallback = Callable[[list[str]], None]


class IdSet:
    """Insertion-ordered set of node ids with controlled/uncontrolled ownership.

    In controlled mode commits are only reported through *on_change*; the
    stored ids change only when the caller pushes a new value with
    :meth:`set_controlled`.
    """

    def __init__(
        self,
        initial: Iterable[str] = (),
        controlled: Iterable[str] | None = None,
        on_change: ChangeCallback | None = None,
    ) -> None:
        self._controlled = controlled is not None
        source = controlled if controlled is not None else initial
        self._ids: dict[str, None] = dict.fromkeys(source)
        self._on_change = on_change

    @property
    def controlled(self) -> bool:
        return self._controlled

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._ids

    def __iter__(self) -> Iterator[str]:
        return iter(self._ids)

    def __len__(self) -> int:
        return len(self._ids)

    def as_list(self) -> list[str]:
        return list(self._ids)

    def commit(self, new_ids: Iterable[str]) -> list[str]:
        """Apply a change and notify. Returns the committed ids in order."""
        ids = dict.fromkeys(new_ids)
        if not self._controlled:
            self._ids = ids
        committed = list(ids)
        if self._on_change is not None:
            self._on_change(committed)
        return committed

    def set_controlled(self, ids: Iterable[str]) -> None:
        """Overwrite the cached ids with a caller-owned value."""
        self._controlled = True
        self._ids = dict.fromkeys(ids)
