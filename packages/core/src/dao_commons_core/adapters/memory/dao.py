"""InMemoryDao — dict-backed DAO for unit tests."""

from __future__ import annotations

import builtins
import contextlib
import copy
import itertools
from collections.abc import Mapping, MutableMapping
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from ...dao import BaseDao
from ...restrictions import RestrictionSpecification, build_update_document
from .unit_of_work import InMemoryUnitOfWork

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable

    from ...domain.descriptor import EntityDescriptor
    from ...ports.unit_of_work import UnitOfWork

T = TypeVar("T")
ID = TypeVar("ID")


class InMemoryDao(BaseDao[T, ID], Generic[T, ID]):
    """In-memory implementation of the DAO contract.

    Stores entities in a dict keyed by their identifier and evaluates
    restriction maps with :class:`RestrictionSpecification`.  Entities may
    be plain objects, pydantic models or mappings.  ``list`` returns them in
    insertion order.

    Writes made inside an :class:`InMemoryUnitOfWork` (explicit, ambient or
    from ``uow_factory``) are undone when it rolls back.  Without one they
    apply immediately.  Updates store copies, so entities handed out
    earlier keep their old field values.
    """

    uow_type = InMemoryUnitOfWork
    requires_uow = False

    def __init__(
        self,
        descriptor: EntityDescriptor[T],
        uow_factory: Callable[[], InMemoryUnitOfWork] | None = None,
    ) -> None:
        super().__init__(descriptor, uow_factory)
        self._store: dict[Any, T] = {}
        self._sequence = itertools.count(1)

    def _identifier(self, entity: T) -> Any:
        if isinstance(entity, Mapping):
            return entity.get(self.descriptor.id_field)
        return getattr(entity, self.descriptor.id_field, None)

    def _assign_identifier(self, entity: T) -> Any:
        entity_id = next(self._sequence)
        while entity_id in self._store:
            entity_id = next(self._sequence)
        if isinstance(entity, MutableMapping):
            entity[self.descriptor.id_field] = entity_id
        else:
            setattr(entity, self.descriptor.id_field, entity_id)
        return entity_id

    async def save(self, entity: T, *, uow: UnitOfWork | None = None) -> ID:
        entity_id = self._identifier(entity)
        if entity_id is None:
            entity_id = self._assign_identifier(entity)
        async with self._writing(uow):
            self._store[entity_id] = entity
        return entity_id  # type: ignore[no-any-return]

    async def get(self, entity_id: ID, *, uow: UnitOfWork | None = None) -> T | None:  # noqa: ARG002
        return self._store.get(entity_id)

    async def delete_by_id(self, entity_id: ID, *, uow: UnitOfWork | None = None) -> None:
        async with self._writing(uow):
            self._store.pop(entity_id, None)

    async def list(
        self,
        restrictions: Mapping[str, Any] | None = None,
        *,
        first_result: int = 0,
        max_results: int = 0,
        uow: UnitOfWork | None = None,  # noqa: ARG002
    ) -> builtins.list[T]:
        window = self._window(first_result, max_results)
        matches = self._matching(restrictions)
        start = window.first_result
        stop = start + window.limit if window.limit is not None else None
        return matches[start:stop]

    async def count(
        self,
        restrictions: Mapping[str, Any] | None = None,
        *,
        uow: UnitOfWork | None = None,  # noqa: ARG002
    ) -> int:
        return len(self._matching(restrictions))

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
        changes = build_update_document(contents)
        matched = self._matching(restrictions)
        async with self._writing(uow):
            for entity in matched:
                entity_id = self._identifier(entity)
                self._store[entity_id] = self._apply(entity, changes)
        return len(matched)

    def _matching(self, restrictions: Mapping[str, Any] | None) -> builtins.list[T]:
        spec = RestrictionSpecification(restrictions)
        return [entity for entity in self._store.values() if spec.is_satisfied_by(entity)]

    @contextlib.asynccontextmanager
    async def _writing(self, uow: UnitOfWork | None) -> AsyncIterator[None]:
        async with self._unit_of_work(uow) as active:
            if isinstance(active, InMemoryUnitOfWork):
                active.track(self._store)
            yield

    @staticmethod
    def _apply(entity: T, changes: dict[str, Any]) -> T:
        model_copy = getattr(entity, "model_copy", None)
        if model_copy is not None:
            return model_copy(update=changes)  # type: ignore[no-any-return]
        updated = copy.copy(entity)
        if isinstance(updated, MutableMapping):
            updated.update(changes)
        else:
            for key, value in changes.items():
                setattr(updated, key, value)
        return updated

    # ── Test helpers ─────────────────────────────────────────────

    def clear(self) -> None:
        self._store.clear()

    def __len__(self) -> int:
        return len(self._store)
