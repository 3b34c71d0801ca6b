"""
Compile a restriction AST into an RFC 4515 search filter.

Each equality leaf becomes ``(attr=value)``; a candidate set becomes an
OR of equalities.  The entry's object classes are always AND-ed in::

    {"op": "and", "conditions": [
        {"attr": "ou", "op": "in", "val": ["dev", "ops"]},
        {"attr": "l", "op": "=", "val": "Athens"},
    ]}
    -> (&(objectClass=inetOrgPerson)(|(ou=dev)(ou=ops))(l=Athens))

Values are escaped with ``ldap3.utils.conv.escape_filter_chars``.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from ldap3.utils.conv import escape_filter_chars

from dao_commons_core.primitives.exceptions import RestrictionError
from dao_commons_core.restrictions import RestrictionOperator

MATCH_ALL = "(objectClass=*)"
MATCH_NONE = "(!(objectClass=*))"


def to_ldap_value(value: Any) -> Any:
    """Directory representation of a Python value (booleans are TRUE/FALSE)."""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    return value


def build_ldap_filter(
    ast: dict[str, Any], object_classes: Iterable[str] = ()
) -> str:
    """
    Build a search filter from a restriction AST.

    An empty AST with no object classes matches every entry.
    """
    parts = [f"(objectClass={escape_filter_chars(oc)})" for oc in object_classes]
    if ast:
        if str(ast.get("op", "")).lower() == RestrictionOperator.AND:
            parts.extend(_compile_node(c) for c in ast.get("conditions", []))
        else:
            parts.append(_compile_node(ast))
    return _join("&", parts, empty=MATCH_ALL)


def _join(op: str, parts: list[str], *, empty: str) -> str:
    if not parts:
        return empty
    if len(parts) == 1:
        return parts[0]
    return f"({op}{''.join(parts)})"


def _equality(attr: str, value: Any) -> str:
    if value is None:
        # A null value matches entries that lack the attribute.
        return f"(!({attr}=*))"
    value = to_ldap_value(value)
    if isinstance(value, bytes):
        return f"({attr}={escape_filter_chars(value)})"
    return f"({attr}={escape_filter_chars(str(value))})"


def _compile_node(data: dict[str, Any]) -> str:
    op_str = str(data.get("op", "")).lower()

    if op_str in (RestrictionOperator.AND, RestrictionOperator.OR):
        parts = [_compile_node(c) for c in data.get("conditions", [])]
        if op_str == RestrictionOperator.AND:
            return _join("&", parts, empty=MATCH_ALL)
        return _join("|", parts, empty=MATCH_NONE)

    attr = data.get("attr")
    if not attr:
        raise RestrictionError(f"Restriction node missing 'attr': {data}")
    val = data.get("val")

    if op_str == RestrictionOperator.IN:
        return _join("|", [_equality(attr, v) for v in val], empty=MATCH_NONE)
    if op_str == RestrictionOperator.EQ:
        return _equality(attr, val)
    raise RestrictionError(f"Unsupported restriction operator: {op_str!r}")
