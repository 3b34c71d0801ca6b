"""InMemoryUnitOfWork — snapshot transactions over in-memory stores."""

from __future__ import annotations

import logging
from typing import Any

from ...ports.unit_of_work import UnitOfWork

logger = logging.getLogger("dao_commons.memory.uow")


class InMemoryUnitOfWork(UnitOfWork):
    """
    Transaction over the dict stores of :class:`InMemoryDao`.

    The first write a DAO makes to its store inside this unit of work
    snapshots the store.  Commit drops the snapshots; rollback puts every
    snapshotted store back as it was, entry order included.  The
    commit/rollback flags and counters stay available for assertions.
    """

    def __init__(self) -> None:
        super().__init__()
        self.committed: bool = False
        self.rolled_back: bool = False
        self.commit_count: int = 0
        self.rollback_count: int = 0
        self._snapshots: dict[int, tuple[dict[Any, Any], dict[Any, Any]]] = {}

    @property
    def finished(self) -> bool:
        return self.committed or self.rolled_back

    @property
    def tracked_stores(self) -> int:
        """Number of stores a rollback would restore."""
        return len(self._snapshots)

    def track(self, store: dict[Any, Any]) -> None:
        """Snapshot *store* unless this unit of work already holds one."""
        if id(store) not in self._snapshots:
            self._snapshots[id(store)] = (store, dict(store))

    async def commit(self) -> None:
        if self.finished:
            return
        self._snapshots.clear()
        self.committed = True
        self.commit_count += 1

    async def rollback(self) -> None:
        if self.finished:
            return
        for store, saved in self._snapshots.values():
            store.clear()
            store.update(saved)
        logger.debug("Restored %d in-memory store(s)", len(self._snapshots))
        self._snapshots.clear()
        self.rolled_back = True
        self.rollback_count += 1

    def reset(self) -> None:
        """Reopen the unit of work, forgetting flags, counters and snapshots."""
        self.committed = False
        self.rolled_back = False
        self.commit_count = 0
        self.rollback_count = 0
        self._snapshots.clear()
