"""MongoDao[T] — generic document DAO over a Motor collection."""

from __future__ import annotations

import builtins
import contextlib
import logging
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from bson import ObjectId
from pydantic import BaseModel

from dao_commons_core.dao import BaseDao
from dao_commons_core.restrictions import build_restriction_ast, build_update_document

from ..mapper import MongoDocumentMapper
from ..query_builder import MongoQueryBuilder
from .uow import MongoUnitOfWork

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable, Mapping

    from dao_commons_core.domain.descriptor import EntityDescriptor
    from dao_commons_core.ports.unit_of_work import UnitOfWork

    from ..connection import MongoConnectionManager

T = TypeVar("T", bound=BaseModel)

logger = logging.getLogger("dao_commons.mongo")


class MongoDao(BaseDao[T, Any], Generic[T]):
    """
    Generic DAO over one MongoDB collection.

    Entities are pydantic models; the descriptor names the collection
    (``name``) and the field stored as ``_id`` (``id_field``).  Calls run
    without a session unless a :class:`MongoUnitOfWork` is passed as
    ``uow=``, is the ambient transaction or comes from ``uow_factory``.
    The connection manager is connected on first use, so a DAO can be built
    before the application has awaited ``connection.connect()``::

        users = MongoDao(connection, EntityDescriptor(User, name="users"))
        await users.save(User(name="ada", status="A"))
        await users.update_where({"status": "A"}, {"status": "C"})
        page = await users.list({"status": ["A", "C"]}, first_result=20, max_results=20)
    """

    uow_type = MongoUnitOfWork
    requires_uow = False

    def __init__(
        self,
        connection: MongoConnectionManager,
        descriptor: EntityDescriptor[T],
        *,
        database: str | None = None,
        uow_factory: Callable[[], MongoUnitOfWork] | None = None,
        query_builder: MongoQueryBuilder | None = None,
    ) -> None:
        super().__init__(descriptor, uow_factory)
        self._connection = connection
        self._database = database
        self._query_builder = query_builder or MongoQueryBuilder()
        self._mapper: MongoDocumentMapper[T] = MongoDocumentMapper(descriptor)

    # -- plumbing -----------------------------------------------------------

    def _collection(self) -> Any:
        return self._connection.database(self._database).get_collection(
            self.descriptor.storage_name
        )

    @contextlib.asynccontextmanager
    async def _session_kwargs(
        self, uow: UnitOfWork | None
    ) -> AsyncIterator[dict[str, Any]]:
        await self._connection.connect()
        async with self._unit_of_work(uow) as active:
            if isinstance(active, MongoUnitOfWork) and active.has_session:
                yield {"session": active.session}
            else:
                yield {}

    def _restriction_ast(self, restrictions: Mapping[str, Any] | None) -> dict[str, Any]:
        return build_restriction_ast(restrictions, field_map=self._mapper.field_map)

    def _update_document(self, contents: Mapping[str, Any]) -> dict[str, Any]:
        return build_update_document(contents, field_map=self._mapper.field_map)

    def _filter(self, restrictions: Mapping[str, Any] | None) -> dict[str, Any]:
        return self._query_builder.build_filter(self._restriction_ast(restrictions))

    # -- persist ------------------------------------------------------------

    async def save(self, entity: T, *, uow: UnitOfWork | None = None) -> Any:
        """Insert or replace the document; assigns an ObjectId string when missing."""
        if getattr(entity, self.descriptor.id_field, None) is None:
            setattr(entity, self.descriptor.id_field, str(ObjectId()))
        doc = self._mapper.to_doc(entity)
        async with self._session_kwargs(uow) as options:
            await self._collection().replace_one(
                {"_id": doc["_id"]}, doc, upsert=True, **options
            )
        logger.debug("Saved %s _id=%r", self.descriptor.entity_name, doc["_id"])
        return doc["_id"]

    async def update_by_id(
        self,
        entity_id: Any,
        contents: Mapping[str, Any],
        *,
        uow: UnitOfWork | None = None,
    ) -> int:
        """Set the fields in *contents* on one document; returns matched count."""
        update = self._query_builder.build_update(self._update_document(contents))
        async with self._session_kwargs(uow) as options:
            result = await self._collection().update_one(
                {"_id": entity_id}, update, **options
            )
        return int(result.matched_count)

    async def update_where(
        self,
        restrictions: Mapping[str, Any],
        contents: Mapping[str, Any],
        *,
        uow: UnitOfWork | None = None,
    ) -> int:
        """Set the fields in *contents* on every matching document."""
        update = self._query_builder.build_update(self._update_document(contents))
        async with self._session_kwargs(uow) as options:
            result = await self._collection().update_many(
                self._filter(restrictions), update, **options
            )
        logger.debug(
            "Updated %d %s document(s) with %s",
            result.matched_count,
            self.descriptor.entity_name,
            sorted(update["$set"]),
        )
        return int(result.matched_count)

    # -- delete -------------------------------------------------------------

    async def delete_by_id(self, entity_id: Any, *, uow: UnitOfWork | None = None) -> None:
        async with self._session_kwargs(uow) as options:
            await self._collection().delete_one({"_id": entity_id}, **options)

    # -- read ---------------------------------------------------------------

    async def get(self, entity_id: Any, *, uow: UnitOfWork | None = None) -> T | None:
        async with self._session_kwargs(uow) as options:
            doc = await self._collection().find_one({"_id": entity_id}, **options)
        if doc is None:
            return None
        return self._mapper.from_doc(doc)

    async def list(
        self,
        restrictions: Mapping[str, Any] | None = None,
        *,
        first_result: int = 0,
        max_results: int = 0,
        uow: UnitOfWork | None = None,
    ) -> builtins.list[T]:
        """
        Return documents matching *restrictions*, ordered by ``_id``.

        Keys are AND-ed; a list/tuple/set value becomes ``$in``.  The page
        starts at *first_result*; ``max_results <= 0`` returns every match.
        """
        window = self._window(first_result, max_results)
        async with self._session_kwargs(uow) as options:
            cursor = self._collection().find(
                self._filter(restrictions),
                sort=self._query_builder.build_sort(["_id"]),
                **self._query_builder.build_page(window),
                **options,
            )
            return [self._mapper.from_doc(doc) async for doc in cursor]

    async def count(
        self,
        restrictions: Mapping[str, Any] | None = None,
        *,
        uow: UnitOfWork | None = None,
    ) -> int:
        async with self._session_kwargs(uow) as options:
            return int(
                await self._collection().count_documents(
                    self._filter(restrictions), **options
                )
            )
