"""
Restriction-to-predicate translation.

A restriction map is ``{field: value}`` where ``value`` is either a scalar
(equality) or a candidate set (membership).  Fields are combined with AND,
candidate values of one field with OR::

    {"status": ["A", "B"], "owner": 7}
    -> owner == 7 AND status IN ("A", "B")

The translation is split in two steps so that every backend shares the
same semantics:

1. :func:`build_restriction_ast` turns the map into a small dictionary
   AST (``{"op": "and", "conditions": [...]}``).
2. Each backend compiles that AST into its native predicate
   (SQLAlchemy expression, MongoDB filter document, LDAP filter string).

:class:`RestrictionSpecification` evaluates the same AST against
in-memory objects.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any

from .primitives.exceptions import RestrictionError

# Sequence types read as "one of these values".  Strings, bytes and
# mappings are deliberately scalars.
_CANDIDATE_SET_TYPES = (list, tuple, set, frozenset)


class RestrictionOperator(str, Enum):
    """Operators that appear in a restriction AST."""

    EQ = "="
    IN = "in"
    AND = "and"
    OR = "or"


def is_candidate_set(value: Any) -> bool:
    """Return True when *value* lists candidate values rather than one value."""
    return isinstance(value, _CANDIDATE_SET_TYPES)


def _resolve(field_map: Mapping[str, str] | None, key: str) -> str:
    if not isinstance(key, str) or not key:
        raise RestrictionError(f"Restriction keys must be non-empty strings: {key!r}")
    if field_map:
        return field_map.get(key, key)
    return key


def build_restriction_ast(
    restrictions: Mapping[str, Any] | None,
    *,
    field_map: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """
    Build the restriction AST for *restrictions*.

    Args:
        restrictions: Field name -> scalar or candidate set.  ``None`` and
            ``{}`` impose no constraint.
        field_map: Optional entity -> storage field name mapping applied to
            every key.

    Returns:
        ``{}`` for an empty map, otherwise an AND node whose leaves are
        ``{"attr", "op", "val"}`` dictionaries in map iteration order.
    """
    if not restrictions:
        return {}

    conditions: list[dict[str, Any]] = []
    for key, value in restrictions.items():
        attr = _resolve(field_map, key)
        if is_candidate_set(value):
            # Copy so the AST never aliases the caller's container.
            conditions.append(
                {"attr": attr, "op": RestrictionOperator.IN.value, "val": list(value)}
            )
        else:
            conditions.append(
                {"attr": attr, "op": RestrictionOperator.EQ.value, "val": value}
            )
    return {"op": RestrictionOperator.AND.value, "conditions": conditions}


def build_update_document(
    contents: Mapping[str, Any],
    *,
    field_map: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """
    Build a SET-only partial update from *contents*.

    Every entry becomes "set storage field to value"; fields that are not
    named keep their stored value.

    Raises:
        RestrictionError: If *contents* is empty.
    """
    if not contents:
        raise RestrictionError("Update contents must name at least one field")
    return {_resolve(field_map, key): value for key, value in contents.items()}


def iter_leaves(ast: Mapping[str, Any]) -> list[dict[str, Any]]:
    """Return the leaf conditions of a restriction AST (``[]`` when empty)."""
    if not ast:
        return []
    op = str(ast.get("op", "")).lower()
    if op in (RestrictionOperator.AND.value, RestrictionOperator.OR.value):
        leaves: list[dict[str, Any]] = []
        for condition in ast.get("conditions", []):
            leaves.extend(iter_leaves(condition))
        return leaves
    return [dict(ast)]


class RestrictionSpecification:
    """
    In-memory evaluation of a restriction map.

    ``to_dict()`` returns the same AST the database backends compile, and
    ``is_satisfied_by()`` applies exact-or-membership semantics to object
    attributes or mapping keys.
    """

    def __init__(
        self,
        restrictions: Mapping[str, Any] | None = None,
        *,
        field_map: Mapping[str, str] | None = None,
    ) -> None:
        self._ast = build_restriction_ast(restrictions, field_map=field_map)

    def to_dict(self) -> dict[str, Any]:
        return self._ast

    def is_satisfied_by(self, candidate: Any) -> bool:
        return _evaluate(self._ast, candidate)

    def __repr__(self) -> str:
        return f"RestrictionSpecification({self._ast!r})"


_MISSING = object()


def _field_value(candidate: Any, attr: str) -> Any:
    if isinstance(candidate, Mapping):
        return candidate.get(attr, _MISSING)
    return getattr(candidate, attr, _MISSING)


def _evaluate(node: Mapping[str, Any], candidate: Any) -> bool:
    if not node:
        return True
    op = str(node.get("op", "")).lower()
    if op == RestrictionOperator.AND.value:
        return all(_evaluate(c, candidate) for c in node.get("conditions", []))
    if op == RestrictionOperator.OR.value:
        return any(_evaluate(c, candidate) for c in node.get("conditions", []))

    actual = _field_value(candidate, node["attr"])
    if actual is _MISSING:
        return False
    if op == RestrictionOperator.IN.value:
        return actual in node["val"]
    if op == RestrictionOperator.EQ.value:
        return bool(actual == node["val"])
    raise RestrictionError(f"Unsupported restriction operator: {op!r}")
