"""Entity <-> directory entry mapping."""

from __future__ import annotations

import types
from typing import TYPE_CHECKING, Any, Generic, TypeVar, Union, get_args, get_origin

from ldap3 import MODIFY_REPLACE
from pydantic import BaseModel, ValidationError

from .exceptions import LdapPersistenceError
from .filters import to_ldap_value

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .descriptor import LdapEntryDescriptor

T_Entity = TypeVar("T_Entity", bound=BaseModel)

_COLLECTIONS = (list, tuple, set, frozenset)


def _is_multi_valued(annotation: Any) -> bool:
    if annotation in _COLLECTIONS or get_origin(annotation) in _COLLECTIONS:
        return True
    if get_origin(annotation) in (Union, types.UnionType):
        return any(_is_multi_valued(arg) for arg in get_args(annotation))
    return False


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, _COLLECTIONS) and not value)


class LdapEntryMapper(Generic[T_Entity]):
    """
    Converts pydantic entities to ldap3 attribute dicts and back.

    Directory attributes are multi-valued; a value read back for a field
    that is not annotated as a collection is collapsed to its single
    element.
    """

    def __init__(self, descriptor: LdapEntryDescriptor[T_Entity]) -> None:
        self.descriptor = descriptor
        fields = descriptor.entity_cls.model_fields
        self._fields = {
            name: descriptor.resolve(name)
            for name in fields
            if name != descriptor.id_field
        }
        self._multi = {
            name for name, info in fields.items() if _is_multi_valued(info.annotation)
        }

    @property
    def attribute_names(self) -> list[str]:
        return list(self._fields.values())

    def dn_of(self, entity: T_Entity) -> str | None:
        return getattr(entity, self.descriptor.id_field, None)

    def to_attributes(self, entity: T_Entity) -> dict[str, Any]:
        """Attributes for an add; ``None`` and empty collections are left out."""
        data = entity.model_dump(mode="python")
        return {
            attr: self._serialize(data[name])
            for name, attr in self._fields.items()
            if not _is_blank(data.get(name))
        }

    def to_changes(self, entity: T_Entity) -> dict[str, list[tuple[str, list[Any]]]]:
        """MODIFY_REPLACE changes for every mapped attribute."""
        data = entity.model_dump(mode="python")
        changes: dict[str, list[tuple[str, list[Any]]]] = {}
        for name, attr in self._fields.items():
            value = self._serialize(data.get(name))
            if value is None:
                values: list[Any] = []
            elif isinstance(value, list):
                values = value
            else:
                values = [value]
            changes[attr] = [(MODIFY_REPLACE, values)]
        return changes

    def from_entry(self, dn: str, attributes: Mapping[str, Any]) -> T_Entity:
        data: dict[str, Any] = {self.descriptor.id_field: dn}
        for name, attr in self._fields.items():
            value = attributes.get(attr)
            if value is None or value == []:
                continue
            if isinstance(value, list) and name not in self._multi:
                value = value[0] if len(value) == 1 else value
            data[name] = value
        try:
            return self.descriptor.entity_cls.model_validate(data)
        except ValidationError as e:
            raise LdapPersistenceError(
                f"Entry {dn!r} does not match {self.descriptor.entity_name}: {e}"
            ) from e

    @staticmethod
    def _serialize(value: Any) -> Any:
        if isinstance(value, _COLLECTIONS):
            return [to_ldap_value(v) for v in value]
        return to_ldap_value(value)
