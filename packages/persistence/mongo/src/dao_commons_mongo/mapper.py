"""MongoDB document mapper with BSON type preservation."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from bson.decimal128 import Decimal128
from pydantic import BaseModel, ValidationError

from .exceptions import MongoMappingError

if TYPE_CHECKING:
    from dao_commons_core.domain.descriptor import EntityDescriptor

T_Entity = TypeVar("T_Entity", bound=BaseModel)


class MongoDocumentMapper(Generic[T_Entity]):
    """
    Entity <-> document mapper driven by an :class:`EntityDescriptor`.

    Uses ``model_dump(mode="python")`` so PyMongo converts datetime, UUID and
    bytes natively; ``Decimal`` round-trips through ``Decimal128``.  The
    descriptor's id field is stored as ``_id`` and its ``field_map``
    renames the remaining keys.
    """

    def __init__(self, descriptor: EntityDescriptor[T_Entity]) -> None:
        self.descriptor = descriptor
        self.field_map = {
            **descriptor.field_map,
            descriptor.id_field: "_id",
        }
        self._reverse = {v: k for k, v in self.field_map.items()}

    def to_doc(self, entity: T_Entity) -> dict[str, Any]:
        data = entity.model_dump(mode="python")
        return {
            self.field_map.get(k, k): self._serialize(v) for k, v in data.items()
        }

    def from_doc(self, doc: dict[str, Any]) -> T_Entity:
        data = {self._reverse.get(k, k): self._deserialize(v) for k, v in doc.items()}
        try:
            return self.descriptor.entity_cls.model_validate(data)
        except ValidationError as e:
            raise MongoMappingError(
                f"Document {doc.get('_id')!r} does not match "
                f"{self.descriptor.entity_name}: {e}"
            ) from e

    def _serialize(self, value: Any) -> Any:
        if isinstance(value, Decimal):
            return Decimal128(str(value))
        if isinstance(value, dict):
            return {k: self._serialize(v) for k, v in value.items()}
        if isinstance(value, list | tuple):
            return [self._serialize(v) for v in value]
        return value

    def _deserialize(self, value: Any) -> Any:
        if isinstance(value, Decimal128):
            return value.to_decimal()
        if isinstance(value, dict):
            return {k: self._deserialize(v) for k, v in value.items()}
        if isinstance(value, list):
            return [self._deserialize(v) for v in value]
        return value
