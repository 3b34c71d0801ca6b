from __future__ import annotations

import builtins
import contextlib
import logging
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any, Generic, TypeVar, cast

from sqlalchemy import func, inspect, select, update

from dao_commons_core.dao import BaseDao
from dao_commons_core.primitives.exceptions import (
    InvalidEntityStateError,
    MissingUnitOfWorkError,
)

from ..compiler import (
    apply_page_window,
    build_sqla_filter,
    build_update_values,
    resolve_column,
)
from .uow import SQLAlchemyUnitOfWork

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable

    from sqlalchemy import Select
    from sqlalchemy.ext.asyncio import AsyncSession

    from dao_commons_core.domain.descriptor import EntityDescriptor
    from dao_commons_core.ports.unit_of_work import UnitOfWork

T = TypeVar("T")
ID = TypeVar("ID")

logger = logging.getLogger("dao_commons.sqlalchemy")


class SQLAlchemyDao(BaseDao[T, ID], Generic[T, ID]):
    """
    Generic DAO over a SQLAlchemy mapped class.

    The descriptor's ``entity_cls`` is the declarative model itself; the DAO
    hands ORM instances straight to the session.  Every call runs in the
    session of a :class:`SQLAlchemyUnitOfWork`, resolved from ``uow=``, the
    ambient ``transaction_scope`` or ``uow_factory``::

        users = SQLAlchemyDao(EntityDescriptor(UserModel), uow_factory=factory)

        async with transaction_scope(factory):
            await users.save(UserModel(name="ada", status="A"))
            active = await users.list({"status": ["A", "B"]}, max_results=20)
            await users.update_where({"status": "A"}, {"status": "C"})

    Writes are flushed immediately so identifiers and constraint violations
    surface at the call site; the commit belongs to the unit of work.
    """

    uow_type = SQLAlchemyUnitOfWork

    def __init__(
        self,
        descriptor: EntityDescriptor[T],
        uow_factory: Callable[[], SQLAlchemyUnitOfWork] | None = None,
    ) -> None:
        super().__init__(descriptor, uow_factory)
        self._id_column = resolve_column(
            descriptor.entity_cls, descriptor.resolve(descriptor.id_field)
        )

    # -- session access -----------------------------------------------------

    def session(self, uow: UnitOfWork | None = None) -> AsyncSession:
        """Return the session of the explicit or ambient unit of work."""
        active = self._joined_uow(uow)
        if active is None:
            raise MissingUnitOfWorkError(type(self).__name__)
        return cast("SQLAlchemyUnitOfWork", active).session

    @contextlib.asynccontextmanager
    async def _session(self, uow: UnitOfWork | None) -> AsyncIterator[AsyncSession]:
        async with self._unit_of_work(uow) as active:
            yield cast("SQLAlchemyUnitOfWork", active).session

    def _identifier(self, entity: T) -> ID:
        return cast("ID", getattr(entity, self.descriptor.id_field))

    # -- persist ------------------------------------------------------------

    async def save(self, entity: T, *, uow: UnitOfWork | None = None) -> ID:
        """Persist a transient instance and return its identifier."""
        async with self._session(uow) as session:
            session.add(entity)
            await session.flush()
            logger.debug(
                "Saved %s id=%r", self.descriptor.entity_name, self._identifier(entity)
            )
        return self._identifier(entity)

    async def update(self, entity: T, *, uow: UnitOfWork | None = None) -> None:
        """Re-attach a detached (or persistent) instance and flush its state."""
        if inspect(entity).transient:
            raise InvalidEntityStateError(entity, "persistent or detached")
        async with self._session(uow) as session:
            session.add(entity)
            await session.flush()
        logger.debug("Updated %s id=%r", self.descriptor.entity_name, self._identifier(entity))

    async def update_all(
        self, entities: Iterable[T], *, uow: UnitOfWork | None = None
    ) -> None:
        for entity in entities:
            await self.update(entity, uow=uow)

    async def save_or_update(self, entity: T, *, uow: UnitOfWork | None = None) -> ID:
        """Either save a transient instance or re-attach a detached one."""
        async with self._session(uow) as session:
            session.add(entity)
            await session.flush()
        return self._identifier(entity)

    async def save_or_update_all(
        self, entities: Iterable[T], *, uow: UnitOfWork | None = None
    ) -> builtins.list[ID]:
        return [await self.save_or_update(entity, uow=uow) for entity in entities]

    async def merge(self, entity: T, *, uow: UnitOfWork | None = None) -> T:
        """
        Copy the state of *entity* onto the persistent instance with the same
        identifier, loading or inserting it as needed, and return that
        persistent instance.  *entity* itself does not become attached.
        """
        async with self._session(uow) as session:
            merged = await session.merge(entity)
            await session.flush()
        return merged

    # -- delete -------------------------------------------------------------

    async def delete(self, entity: T | None, *, uow: UnitOfWork | None = None) -> None:
        """Remove a persistent instance; ``None`` is ignored."""
        if entity is None:
            return
        async with self._session(uow) as session:
            await session.delete(entity)
            await session.flush()
        logger.debug("Deleted %s id=%r", self.descriptor.entity_name, self._identifier(entity))

    async def delete_all(
        self, entities: Iterable[T | None], *, uow: UnitOfWork | None = None
    ) -> None:
        for entity in entities:
            await self.delete(entity, uow=uow)

    async def delete_by_id(self, entity_id: ID, *, uow: UnitOfWork | None = None) -> None:
        """Load and remove the instance with *entity_id*; a missing one is ignored."""
        async with self._session(uow) as session:
            entity = await session.get(self.entity_cls, entity_id)
            if entity is None:
                return
            await session.delete(entity)
            await session.flush()
        logger.debug("Deleted %s id=%r", self.descriptor.entity_name, entity_id)

    # -- read ---------------------------------------------------------------

    async def get(self, entity_id: ID, *, uow: UnitOfWork | None = None) -> T | None:
        async with self._session(uow) as session:
            return await session.get(self.entity_cls, entity_id)

    def _select(self, restrictions: Mapping[str, Any] | None) -> Select[Any]:
        stmt = select(self.entity_cls)
        ast = self._restriction_ast(restrictions)
        if ast:
            stmt = stmt.where(build_sqla_filter(self.entity_cls, ast))
        return stmt

    async def list(
        self,
        restrictions: Mapping[str, Any] | None = None,
        *,
        first_result: int = 0,
        max_results: int = 0,
        uow: UnitOfWork | None = None,
    ) -> builtins.list[T]:
        """
        Return entities matching *restrictions*, ordered by identifier.

        Keys are AND-ed; a list/tuple/set value becomes ``IN``.  The page
        starts at *first_result*; ``max_results <= 0`` returns every match.
        """
        window = self._window(first_result, max_results)
        stmt = apply_page_window(
            self._select(restrictions).order_by(self._id_column), window
        )
        async with self._session(uow) as session:
            result = await session.execute(stmt)
            return builtins.list(result.scalars().all())

    async def count(
        self,
        restrictions: Mapping[str, Any] | None = None,
        *,
        uow: UnitOfWork | None = None,
    ) -> int:
        stmt = select(func.count()).select_from(self.entity_cls)
        ast = self._restriction_ast(restrictions)
        if ast:
            stmt = stmt.where(build_sqla_filter(self.entity_cls, ast))
        async with self._session(uow) as session:
            result = await session.execute(stmt)
            return int(result.scalar_one())

    async def find(
        self,
        statement: Select[Any],
        first_result: int = 0,
        max_results: int = 0,
        params: Mapping[str, Any] | None = None,
        *,
        uow: UnitOfWork | None = None,
    ) -> builtins.list[Any]:
        """
        Execute a caller-built ORM ``select()``, binding *params* to its
        ``bindparam()`` placeholders.  Paging applies only when
        ``max_results > 0``.
        """
        if max_results > 0:
            statement = apply_page_window(
                statement, self._window(first_result, max_results)
            )
        async with self._session(uow) as session:
            result = await session.execute(statement, dict(params or {}))
            return builtins.list(result.scalars().all())

    # -- partial update -----------------------------------------------------

    async def update_by_id(
        self,
        entity_id: ID,
        contents: Mapping[str, Any],
        *,
        uow: UnitOfWork | None = None,
    ) -> int:
        return await self.update_where(
            {self.descriptor.id_field: entity_id}, contents, uow=uow
        )

    async def update_where(
        self,
        restrictions: Mapping[str, Any],
        contents: Mapping[str, Any],
        *,
        uow: UnitOfWork | None = None,
    ) -> int:
        """
        Issue one ``UPDATE ... SET`` touching only the fields in *contents*
        on every row matching *restrictions*.  Returns the matched row count.
        """
        values = build_update_values(self.entity_cls, self._update_document(contents))
        stmt = (
            update(self.entity_cls)
            .where(build_sqla_filter(self.entity_cls, self._restriction_ast(restrictions)))
            .values(**values)
        )
        async with self._session(uow) as session:
            result = await session.execute(stmt)
        logger.debug(
            "Updated %d %s row(s) with %s",
            result.rowcount,
            self.descriptor.entity_name,
            sorted(values),
        )
        return int(result.rowcount)
