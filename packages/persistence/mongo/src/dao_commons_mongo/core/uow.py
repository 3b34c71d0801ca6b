"""
MongoDB implementation of the Unit of Work pattern.

Supports MongoDB 4.0+ transactions with sessions, or non-transactional mode
for standalone deployments.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from types import TracebackType
from typing import TYPE_CHECKING, Any

from dao_commons_core.ports.unit_of_work import UnitOfWork

from ..exceptions import MongoUnitOfWorkError

if TYPE_CHECKING:
    from motor.motor_asyncio import AsyncIOMotorClientSession

    from ..connection import MongoConnectionManager

    AsyncSessionFactory = Any  # Callable[[], AsyncIOMotorClientSession]

logger = logging.getLogger("dao_commons.mongo.uow")


def _in_transaction(session: AsyncIOMotorClientSession) -> bool:
    # Motor exposes in_transaction as a property; some doubles make it a method.
    flag = getattr(session, "in_transaction", False)
    return bool(flag() if callable(flag) else flag)


_REPLICA_SET_REQUIRED_MSG = (
    "MongoDB multi-document transactions require a replica set. "
    "The server is running in standalone mode; use a single-node replica "
    "set locally or pass require_replica_set=False to run without "
    "transactions."
)


class MongoUnitOfWork(UnitOfWork):
    """
    Unit of Work implementation using a Motor client session.

    Supports two usage patterns:

    1. **Client-managed sessions**:
       ```python
       session = await client.start_session()
       async with MongoUnitOfWork(session=session) as uow:
           await dao.save(doc, uow=uow)
       ```

    2. **Self-managed sessions** (with connection manager):
       ```python
       async with MongoUnitOfWork(connection=connection) as uow:
           await dao.update_where({"status": "A"}, {"status": "B"}, uow=uow)
       ```

    With ``require_replica_set=False`` the session is used without a
    transaction and commit/rollback are no-ops.
    """

    def __init__(
        self,
        session: AsyncIOMotorClientSession | None = None,
        connection: MongoConnectionManager | None = None,
        session_factory: AsyncSessionFactory | None = None,
        *,
        require_replica_set: bool = True,
    ) -> None:
        if session is not None and connection is not None:
            raise MongoUnitOfWorkError(
                "Cannot provide both 'session' and 'connection'. "
                "Use either client-managed (session) or self-managed "
                "(connection/session_factory) pattern."
            )

        super().__init__()
        self._session = session
        self._connection = connection
        self._session_factory = session_factory
        self._owns_session = session is None
        self._require_replica_set = require_replica_set

    @property
    def session(self) -> AsyncIOMotorClientSession:
        """Get the current session.

        Raises:
            MongoUnitOfWorkError: If the context has not been entered.
        """
        if self._session is None:
            raise MongoUnitOfWorkError(
                "Session not available. Use the Unit of Work as a context manager first."
            )
        return self._session

    @property
    def has_session(self) -> bool:
        return self._session is not None

    async def _create_session(self) -> AsyncIOMotorClientSession:
        if self._session_factory is not None:
            result = self._session_factory()
            return await result if asyncio.iscoroutine(result) else result
        if self._connection is not None:
            client = await self._connection.connect()
            return await client.start_session()
        raise MongoUnitOfWorkError(
            "No session_factory or connection provided for self-managed session."
        )

    async def _check_replica_set(self) -> None:
        """Raise if MongoDB is not running as a replica set."""
        client = getattr(self._session, "client", None)
        if client is None and self._connection is not None:
            client = self._connection.client
        if client is None:
            return
        try:
            result = await client.admin.command("replSetGetStatus")
        except Exception as e:
            raise MongoUnitOfWorkError(_REPLICA_SET_REQUIRED_MSG) from e
        if result.get("ok") != 1:
            raise MongoUnitOfWorkError(_REPLICA_SET_REQUIRED_MSG)

    async def __aenter__(self) -> MongoUnitOfWork:
        if self._owns_session:
            self._session = await self._create_session()
        if self._require_replica_set:
            await self._check_replica_set()
            if not _in_transaction(self.session):
                self.session.start_transaction()
                logger.debug("MongoDB transaction started")
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Commit on success, roll back on exception, end owned sessions."""
        if self._session is None:
            return
        try:
            await super().__aexit__(exc_type, exc_val, exc_tb)
        finally:
            if self._owns_session and self._session is not None:
                self._session.end_session()
                self._session = None

    async def commit(self) -> None:
        """Commit the transaction; a no-op outside a transaction."""
        if self._session is None:
            return
        if _in_transaction(self._session):
            try:
                await self._session.commit_transaction()
            except Exception:
                with contextlib.suppress(Exception):
                    await self.rollback()
                raise
            logger.debug("MongoDB transaction committed")
        else:
            logger.debug("MongoDB session not in transaction, commit is no-op")

    async def rollback(self) -> None:
        """Abort the transaction; a no-op outside a transaction."""
        if self._session is None:
            return
        if _in_transaction(self._session):
            await self._session.abort_transaction()
            logger.debug("MongoDB transaction aborted")
        else:
            logger.debug("MongoDB session not in transaction, rollback is no-op")
