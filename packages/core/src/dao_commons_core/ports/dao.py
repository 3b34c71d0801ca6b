"""IDao — the CRUD and pagination contract shared by the generic DAOs."""

from __future__ import annotations

import builtins
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any, Protocol, TypeVar, runtime_checkable

if TYPE_CHECKING:
    from .unit_of_work import UnitOfWork

T = TypeVar("T")
ID = TypeVar("ID")


@runtime_checkable
class IDao(Protocol[T, ID]):
    """
    Generic data-access object for one entity type.

    Restriction maps follow the same rules on every backend: keys are
    AND-ed, a list/tuple/set value means "one of", anything else means
    "equal to", and an empty map matches every entity.  ``max_results <= 0``
    disables the limit.
    """

    async def save(self, entity: T, *, uow: UnitOfWork | None = None) -> ID: ...

    async def save_all(
        self, entities: Iterable[T], *, uow: UnitOfWork | None = None
    ) -> builtins.list[ID]: ...

    async def get(self, entity_id: ID, *, uow: UnitOfWork | None = None) -> T | None: ...

    async def delete_by_id(
        self, entity_id: ID, *, uow: UnitOfWork | None = None
    ) -> None: ...

    async def list(
        self,
        restrictions: Mapping[str, Any] | None = None,
        *,
        first_result: int = 0,
        max_results: int = 0,
        uow: UnitOfWork | None = None,
    ) -> builtins.list[T]: ...

    async def count(
        self,
        restrictions: Mapping[str, Any] | None = None,
        *,
        uow: UnitOfWork | None = None,
    ) -> int: ...


@runtime_checkable
class IPartialUpdateDao(IDao[T, ID], Protocol[T, ID]):
    """DAO that can apply SET-only updates without loading entities."""

    async def update_by_id(
        self,
        entity_id: ID,
        contents: Mapping[str, Any],
        *,
        uow: UnitOfWork | None = None,
    ) -> int: ...

    async def update_where(
        self,
        restrictions: Mapping[str, Any],
        contents: Mapping[str, Any],
        *,
        uow: UnitOfWork | None = None,
    ) -> int: ...
