"""Transactional key/value store consulted by grammar rules.

Matcher hooks write here (the last attribute names seen, the captured
custom-tag name, whether EL is enabled). Writes are staged in a layer per
matcher attempt; a successful attempt commits its layer into the one below,
a failed attempt discards it, so an abandoned OneOf branch never leaks state
into its siblings.

Thread Safety:
MetadataStore instances are single-use per lex run.
All state is instance-local; no shared mutable state.

"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

# Marks a key deleted in a staged layer
_TOMBSTONE = object()


class MetadataStore:
    """Layered mapping with staged writes.

    The bottom layer holds committed state for the whole lex run. Each
    begin() pushes a staging layer; commit() folds it into the layer below,
    rollback() drops it.

    Usage:
        >>> store = MetadataStore({"el_enabled": True})
        >>> store.begin()
        >>> store.set("el_enabled", False)
        >>> store.rollback()
        >>> store.get("el_enabled")
        True

    """

    __slots__ = ("_layers",)

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._layers: list[dict[str, Any]] = [dict(initial or {})]

    def get(self, key: str, default: Any = None) -> Any:
        """Read a key through all staged layers, newest first."""
        for layer in reversed(self._layers):
            if key in layer:
                value = layer[key]
                return default if value is _TOMBSTONE else value
        return default

    def set(self, key: str, value: Any) -> None:
        """Stage a write in the current layer."""
        self._layers[-1][key] = value

    def delete(self, key: str) -> None:
        """Stage a deletion in the current layer."""
        if len(self._layers) == 1:
            self._layers[0].pop(key, None)
        else:
            self._layers[-1][key] = _TOMBSTONE

    def __contains__(self, key: str) -> bool:
        return self.get(key, _TOMBSTONE) is not _TOMBSTONE

    @property
    def depth(self) -> int:
        """Number of open (uncommitted) staging layers."""
        return len(self._layers) - 1

    def begin(self) -> None:
        """Open a staging layer."""
        self._layers.append({})

    def commit(self) -> None:
        """Fold the newest staging layer into the one below it.

        Raises:
            RuntimeError: If no staging layer is open
        """
        if len(self._layers) == 1:
            raise RuntimeError("commit() without matching begin()")
        staged = self._layers.pop()
        target = self._layers[-1]
        bottom = len(self._layers) == 1
        for key, value in staged.items():
            if value is _TOMBSTONE and bottom:
                target.pop(key, None)
            else:
                target[key] = value

    def rollback(self) -> None:
        """Discard the newest staging layer.

        Raises:
            RuntimeError: If no staging layer is open
        """
        if len(self._layers) == 1:
            raise RuntimeError("rollback() without matching begin()")
        self._layers.pop()

    @contextmanager
    def transaction(self) -> Iterator[MetadataStore]:
        """Stage writes for the duration of a block.

        Commits on normal exit, rolls back if the block raises.
        """
        self.begin()
        try:
            yield self
        except BaseException:
            self.rollback()
            raise
        self.commit()

    def snapshot(self) -> dict[str, Any]:
        """Flattened view of every visible key."""
        merged: dict[str, Any] = {}
        for layer in self._layers:
            for key, value in layer.items():
                if value is _TOMBSTONE:
                    merged.pop(key, None)
                else:
                    merged[key] = value
        return merged

    def __repr__(self) -> str:
        return f"MetadataStore({self.snapshot()!r}, depth={self.depth})"
