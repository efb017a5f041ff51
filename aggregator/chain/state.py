"""Staged key/value state with all-or-nothing scopes.

Python gives no transactional rollback, so every piece of mutable host state
(token balances, pool prices) lives here. Writes inside ``atomic()`` land in
an overlay; the overlay is merged into its parent when the block exits
cleanly and dropped when it raises. Scopes nest.

Open scopes belong to the thread that opened them. Other threads only ever
read committed state, and a commit replaces it in a single step, so no
reader sees half of a swap. Committed dicts are never mutated after they
are published; ``view()`` relies on that to pin one version for a
multi-key read.
"""

from __future__ import annotations

import threading
from collections.abc import Hashable, Iterator
from contextlib import contextmanager

import structlog

logger = structlog.get_logger()


class ChainState:
    """Integer key/value store with nested, per-thread staging overlays."""

    def __init__(self) -> None:
        self._committed: dict[Hashable, int] = {}
        self._publish_lock = threading.Lock()
        self._local = threading.local()

    def _scope(self) -> threading.local:
        local = self._local
        if not hasattr(local, "overlays"):
            local.overlays = []
            local.pinned = None
        return local

    def _base(self) -> dict[Hashable, int]:
        pinned = self._scope().pinned
        return self._committed if pinned is None else pinned

    def _publish(self, writes: dict[Hashable, int]) -> None:
        with self._publish_lock:
            self._committed = {**self._committed, **writes}
            local = self._scope()
            # A pinned thread always sees its own commits
            if local.pinned is not None:
                local.pinned = self._committed

    @property
    def depth(self) -> int:
        """Number of atomic scopes open on the calling thread."""
        return len(self._scope().overlays)

    def get(self, key: Hashable, default: int = 0) -> int:
        for overlay in reversed(self._scope().overlays):
            if key in overlay:
                return overlay[key]
        return self._base().get(key, default)

    def set(self, key: Hashable, value: int) -> None:
        overlays = self._scope().overlays
        if overlays:
            overlays[-1][key] = value
        else:
            self._publish({key: value})

    def add(self, key: Hashable, delta: int) -> int:
        """Add delta to a key and return the new value."""
        value = self.get(key) + delta
        self.set(key, value)
        return value

    @contextmanager
    def view(self) -> Iterator[ChainState]:
        """Read one committed version for the whole block.

        Commits made by other threads while the block runs stay invisible
        until it exits. Nested views keep the outermost pin.
        """
        local = self._scope()
        if local.pinned is not None:
            yield self
            return
        local.pinned = self._committed
        try:
            yield self
        finally:
            local.pinned = None

    @contextmanager
    def atomic(self) -> Iterator[ChainState]:
        """Stage writes and commit them only if the block completes."""
        local = self._scope()
        overlay: dict[Hashable, int] = {}
        with self.view():
            local.overlays.append(overlay)
            try:
                yield self
            except BaseException:
                local.overlays.pop()
                logger.debug("state_rolled_back", discarded_writes=len(overlay), depth=self.depth)
                raise
            local.overlays.pop()
            if local.overlays:
                local.overlays[-1].update(overlay)
            else:
                self._publish(overlay)

    def snapshot(self) -> dict[Hashable, int]:
        """Flattened view of the state as the calling thread sees it."""
        view = dict(self._base())
        for overlay in self._scope().overlays:
            view.update(overlay)
        return view
