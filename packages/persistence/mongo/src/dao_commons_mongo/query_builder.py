"""Mongo query builder from restriction ASTs."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from dao_commons_core.primitives.exceptions import RestrictionError
from dao_commons_core.restrictions import RestrictionOperator

if TYPE_CHECKING:
    from dao_commons_core.domain.paging import PageWindow


def _compile_leaf(data: dict[str, Any]) -> dict[str, Any]:
    """Compile a single field condition to a MongoDB query document."""
    op_str = str(data.get("op", "")).lower()
    field = data.get("attr")
    if not field:
        raise RestrictionError(f"Restriction node missing 'attr': {data}")
    val = data.get("val")
    if op_str == RestrictionOperator.IN:
        return {field: {"$in": list(val)}}
    if op_str == RestrictionOperator.EQ:
        return {field: {"$eq": val}}
    raise RestrictionError(f"Unsupported restriction operator: {op_str!r}")


def _compile_node(data: dict[str, Any]) -> dict[str, Any]:
    """Recursively compile a restriction AST to a MongoDB filter."""
    if not isinstance(data, dict):
        raise RestrictionError("Restriction node must be a dict")
    op_str = str(data.get("op", "")).lower()
    if op_str == RestrictionOperator.AND:
        conditions = data.get("conditions", [])
        if not conditions:
            return {}
        return {"$and": [_compile_node(c) for c in conditions]}
    if op_str == RestrictionOperator.OR:
        conditions = data.get("conditions", [])
        if not conditions:
            return {"$expr": False}
        return {"$or": [_compile_node(c) for c in conditions]}
    return _compile_leaf(data)


class MongoQueryBuilder:
    """Compiles restriction ASTs and update documents to MongoDB syntax."""

    def build_filter(self, ast: dict[str, Any]) -> dict[str, Any]:
        """Build a ``find`` filter; ``{}`` matches every document."""
        if not ast:
            return {}
        return _compile_node(ast)

    def build_update(self, changes: dict[str, Any]) -> dict[str, Any]:
        """Build a SET-only update document."""
        if not changes:
            raise RestrictionError("Update contents must name at least one field")
        if "_id" in changes:
            raise RestrictionError("The document identifier cannot be updated")
        return {"$set": dict(changes)}

    def build_page(self, window: PageWindow) -> dict[str, int]:
        """Build ``skip`` / ``limit`` keyword arguments for ``find``."""
        options: dict[str, int] = {}
        if window.offset is not None:
            options["skip"] = window.offset
        if window.limit is not None:
            options["limit"] = window.limit
        return options

    def build_sort(
        self, order_by: list[tuple[str, str]] | list[str] | None
    ) -> list[tuple[str, int]]:
        """Build MongoDB sort tuples.

        Accepts either ``[(field, "asc"|"desc")]`` or ``["-field", "field"]``.
        """
        if not order_by:
            return []
        result: list[tuple[str, int]] = []
        for item in order_by:
            if isinstance(item, tuple):
                field, direction = item[0], item[1]
                result.append((field, -1 if str(direction).lower() == "desc" else 1))
            elif isinstance(item, str):
                if item.startswith("-"):
                    result.append((item[1:], -1))
                else:
                    result.append((item, 1))
        return result
