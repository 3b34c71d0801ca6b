"""
SQLAlchemy implementation of the Unit of Work pattern.
"""

from __future__ import annotations

import contextlib
import logging
from typing import TYPE_CHECKING

from dao_commons_core.ports.unit_of_work import UnitOfWork
from dao_commons_core.primitives.exceptions import UnitOfWorkError

from ..exceptions import SessionManagementError

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    from sqlalchemy.ext.asyncio import AsyncSession

    AsyncSessionFactory = Callable[[], AsyncSession]

logger = logging.getLogger("dao_commons.sqlalchemy.uow")


class SQLAlchemyUnitOfWork(UnitOfWork):
    """
    Unit of Work implementation using SQLAlchemy AsyncSession.

    Supports two usage patterns:

    1. **Caller-Managed Sessions**:
       ```python
       async with SQLAlchemyUnitOfWork(session=session) as uow:
           await dao.save(entity, uow=uow)
       ```
       The session lifecycle belongs to the caller.

    2. **Self-Managed Sessions**:
       ```python
       factory = create_session_factory(engine)
       async with SQLAlchemyUnitOfWork(session_factory=factory) as uow:
           await dao.save(entity, uow=uow)
       ```
       The UoW creates the session on enter and closes it on exit.

    **Important:** Exactly one of `session` or `session_factory` must be provided.
    Errors raised by the database during commit are re-raised unchanged after
    the transaction has been rolled back.
    """

    def __init__(
        self,
        session: AsyncSession | None = None,
        session_factory: AsyncSessionFactory | None = None,
    ) -> None:
        if session is not None and session_factory is not None:
            raise SessionManagementError(
                "Cannot provide both 'session' and 'session_factory'. "
                "Use either caller-managed (session) or self-managed "
                "(session_factory) pattern."
            )

        if session is None and session_factory is None:
            raise SessionManagementError(
                "Must provide either 'session' or 'session_factory'. "
                "Use caller-managed pattern with session=(AsyncSession) "
                "or self-managed pattern with session_factory=(callable)."
            )

        self._session: AsyncSession | None = session
        self._session_factory = session_factory
        self._owns_session = session_factory is not None and session is None
        super().__init__()

    @property
    def session(self) -> AsyncSession:
        """Get the active session. Raises if session not yet created."""
        if self._session is None:
            raise UnitOfWorkError(
                "Session not yet created. Ensure __aenter__ was called."
            )
        return self._session

    async def __aenter__(self) -> SQLAlchemyUnitOfWork:
        """Begin a transaction, creating session if factory provided."""
        if self._owns_session and self._session_factory:
            self._session = self._session_factory()

        try:
            if not self.session.in_transaction():
                await self.session.begin()
        except Exception:
            if self._owns_session:
                await self.session.close()
                self._session = None
            raise
        logger.debug("Transaction started on %r", self.session)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """
        Commit or rollback transaction via base class, closing session if
        factory-created.
        """
        try:
            await super().__aexit__(exc_type, exc_val, exc_tb)
        finally:
            if self._owns_session and self._session is not None:
                await self._session.close()
                self._session = None

    async def commit(self) -> None:
        """Commit the current transaction; roll back and re-raise on failure."""
        try:
            await self.session.commit()
        except Exception:
            with contextlib.suppress(Exception):
                await self.rollback()
            raise
        logger.debug("Transaction committed")

    async def rollback(self) -> None:
        """Rollback the current transaction."""
        if self.session.in_transaction():
            await self.session.rollback()
            logger.debug("Transaction rolled back")
