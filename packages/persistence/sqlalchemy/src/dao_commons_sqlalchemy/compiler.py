"""
Compile a restriction AST into SQLAlchemy expressions.

``build_sqla_filter`` walks the AST produced by
:func:`dao_commons_core.restrictions.build_restriction_ast` and returns a
boolean column expression::

    {"op": "and", "conditions": [
        {"attr": "status", "op": "in", "val": ["A", "B"]},
        {"attr": "owner_id", "op": "=", "val": 7},
    ]}
    -> and_(Model.status.in_(["A", "B"]), Model.owner_id == 7)

An empty AST compiles to ``true()`` so callers can always attach a WHERE
clause.  ``apply_page_window`` adds OFFSET / LIMIT, and
``build_update_values`` turns a SET document into ``update().values()``
keyword arguments.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import and_, false, or_, true
from sqlalchemy import inspect as sa_inspect

from dao_commons_core.primitives.exceptions import RestrictionError
from dao_commons_core.restrictions import RestrictionOperator

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement, Select

    from dao_commons_core.domain.paging import PageWindow

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def build_sqla_filter(model: type[Any], data: dict[str, Any]) -> ColumnElement[bool]:
    """
    Build a SQLAlchemy filter expression from a restriction AST.

    Args:
        model: The SQLAlchemy mapped class.
        data: Restriction AST (``{}`` selects every row).

    Returns:
        SQLAlchemy Boolean expression.

    Raises:
        RestrictionError: If a leaf names an attribute the model does not map.
    """
    if not data:
        return true()
    return _compile_node(model, data)


def apply_page_window(stmt: Select[Any], window: PageWindow) -> Select[Any]:
    """Apply OFFSET / LIMIT from *window*; an unbounded window is a no-op."""
    if window.offset is not None:
        stmt = stmt.offset(window.offset)
    if window.limit is not None:
        stmt = stmt.limit(window.limit)
    return stmt


def build_update_values(model: type[Any], changes: dict[str, Any]) -> dict[str, Any]:
    """Validate SET targets against the model's columns and return them."""
    columns = _column_keys(model)
    unknown = [name for name in changes if name not in columns]
    if unknown:
        raise RestrictionError(
            f"{model.__name__} has no column(s) {', '.join(sorted(unknown))}"
        )
    return dict(changes)


def resolve_column(model: type[Any], attr: str) -> Any:
    """Return the mapped column attribute *attr* of *model*."""
    if attr not in _column_keys(model):
        raise RestrictionError(f"{model.__name__} has no column {attr!r}")
    return getattr(model, attr)


# ---------------------------------------------------------------------------
# Internal compilation
# ---------------------------------------------------------------------------


def _column_keys(model: type[Any]) -> set[str]:
    return set(sa_inspect(model).column_attrs.keys())


def _compile_node(model: type[Any], data: dict[str, Any]) -> ColumnElement[bool]:
    op_str = str(data.get("op", "")).lower()

    if op_str in (RestrictionOperator.AND, RestrictionOperator.OR):
        conditions = [_compile_node(model, c) for c in data.get("conditions", [])]
        if op_str == RestrictionOperator.AND:
            return and_(*conditions) if conditions else true()
        return or_(*conditions) if conditions else false()

    attr = data.get("attr")
    if not attr:
        raise RestrictionError(f"Restriction node missing 'attr': {data}")
    column = resolve_column(model, attr)
    val = data.get("val")

    if op_str == RestrictionOperator.IN:
        return column.in_(list(val))  # type: ignore[no-any-return]
    if op_str == RestrictionOperator.EQ:
        return column == val  # type: ignore[no-any-return]
    raise RestrictionError(f"Unsupported restriction operator: {op_str!r}")
