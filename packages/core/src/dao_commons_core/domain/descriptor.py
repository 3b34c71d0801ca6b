"""
Entity descriptors — explicit target-type configuration for DAOs.

A DAO never inspects its own generic parameters.  It is handed an
``EntityDescriptor`` naming the entity class, the table / collection /
directory base it lives in, its identifier field and, optionally, how
entity field names map onto storage field names.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Generic, TypeVar

from ..primitives.exceptions import ConfigurationError

T = TypeVar("T")


@dataclass(frozen=True)
class EntityDescriptor(Generic[T]):
    """
    Describes one persistent entity type.

    Attributes:
        entity_cls: The entity class every backend call targets.
        name: Table, collection or directory base.  Falls back to the
            class ``__tablename__`` or its lower-cased name.
        id_field: Name of the identifier field on the entity.
        field_map: Entity field name -> storage field name.  Fields that
            are not listed keep their own name.

    Example::

        users = EntityDescriptor(User, name="users", field_map={"email": "mail"})
        users.resolve("email")  # "mail"
    """

    entity_cls: type[T]
    name: str | None = None
    id_field: str = "id"
    field_map: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.entity_cls, type):
            raise ConfigurationError(
                f"entity_cls must be a class, got {self.entity_cls!r}"
            )
        if not self.id_field:
            raise ConfigurationError("id_field must not be empty")
        object.__setattr__(self, "field_map", MappingProxyType(dict(self.field_map)))

    @property
    def storage_name(self) -> str:
        if self.name:
            return self.name
        tablename: Any = getattr(self.entity_cls, "__tablename__", None)
        if isinstance(tablename, str):
            return tablename
        return self.entity_cls.__name__.lower()

    @property
    def entity_name(self) -> str:
        return self.entity_cls.__name__

    def resolve(self, entity_field: str) -> str:
        """Map an entity field name onto its storage field name."""
        return self.field_map.get(entity_field, entity_field)

    def reverse(self, storage_field: str) -> str:
        """Map a storage field name back onto the entity field name."""
        for entity_field, mapped in self.field_map.items():
            if mapped == storage_field:
                return entity_field
        return storage_field
