"""Directory entry descriptor."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypeVar

from dao_commons_core.domain.descriptor import EntityDescriptor
from dao_commons_core.primitives.exceptions import ConfigurationError

T = TypeVar("T")


@dataclass(frozen=True)
class LdapEntryDescriptor(EntityDescriptor[T]):
    """
    Describes an entity stored as directory entries.

    ``name`` is the search base (defaults to the connection's base DN),
    ``id_field`` holds the entry DN and ``rdn_field`` names the entity
    field whose value forms the relative DN of new entries::

        people = LdapEntryDescriptor(
            Person,
            name="ou=people,dc=example,dc=org",
            object_classes=("inetOrgPerson",),
            rdn_field="uid",
            field_map={"surname": "sn", "common_name": "cn"},
        )
    """

    id_field: str = "dn"
    object_classes: tuple[str, ...] = ("top",)
    rdn_field: str = "cn"

    def __post_init__(self) -> None:
        super().__post_init__()
        object.__setattr__(self, "object_classes", tuple(self.object_classes))
        if self.rdn_field == self.id_field:
            raise ConfigurationError("rdn_field cannot be the DN field itself")

    @property
    def rdn_attribute(self) -> str:
        return self.resolve(self.rdn_field)
