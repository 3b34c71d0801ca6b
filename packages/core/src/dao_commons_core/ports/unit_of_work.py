"""UnitOfWork — abstract transaction boundary shared by every backend."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections import deque
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = logging.getLogger("dao_commons.uow")


class UnitOfWork(ABC):
    """
    Abstract base class for Unit of Work implementations.

    A unit of work is one backend transaction.  Used as an async context
    manager it commits when the block exits cleanly and rolls back on every
    other exit path, so callers never demarcate transactions by hand::

        async with SQLAlchemyUnitOfWork(session_factory=factory) as uow:
            await dao.save(user, uow=uow)
            await dao.update_where({"status": "new"}, {"status": "seen"}, uow=uow)

    Hooks registered with :meth:`on_commit` run only after the commit
    succeeded.
    """

    def __init__(self) -> None:
        self._on_commit_hooks: deque[Callable[[], Awaitable[Any]]] = deque()

    def on_commit(self, callback: Callable[[], Awaitable[Any]]) -> None:
        """Register an async callback to be executed after a successful commit.

        Args:
            callback: An async function that takes no arguments.
        """
        self._on_commit_hooks.append(callback)

    async def trigger_commit_hooks(self) -> None:
        """Execute all registered on_commit hooks.

        Called automatically by __aexit__ AFTER commit completes.
        """
        while self._on_commit_hooks:
            callback = self._on_commit_hooks.popleft()
            try:
                await callback()
            except Exception as exc:
                logger.error("Error in on_commit hook: %s", exc, exc_info=True)

    def discard_commit_hooks(self) -> None:
        """Drop pending hooks; used when the transaction rolls back."""
        self._on_commit_hooks.clear()

    @abstractmethod
    async def commit(self) -> None:
        """Commit the transaction. Must be implemented by subclasses."""
        ...

    @abstractmethod
    async def rollback(self) -> None:
        """Rollback the transaction. Must be implemented by subclasses."""
        ...

    async def __aenter__(self) -> UnitOfWork:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        """
        Exit the context manager.

        1. On success commit first, then trigger the on_commit hooks.
        2. On any exception roll back and drop the hooks.
        """
        if exc_type is None:
            await self.commit()
            await self.trigger_commit_hooks()
        else:
            logger.debug(
                "Rolling back %s after %s", type(self).__name__, exc_type.__name__
            )
            self.discard_commit_hooks()
            await self.rollback()
