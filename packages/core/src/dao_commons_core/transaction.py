"""
Explicit transaction demarcation.

Instead of intercepting methods by name, callers wrap a unit of work in a
scope.  The scope commits when the block exits cleanly and rolls back on
every other exit path.  While the scope is open its unit of work is the
*ambient* transaction: DAO calls made without ``uow=`` inside the block
join it::

    async with transaction_scope(uow_factory) as uow:
        await users.save(user)          # joins ``uow``
        await audit.save(entry)         # same transaction

    result = await run_in_transaction(uow_factory, lambda uow: users.count())

    @transactional(uow_factory)
    async def rename(user_id, name):
        await users.update_by_id(user_id, {"name": name})

Scopes are keyed by unit-of-work type.  A nested scope whose factory
builds the same type as an open one joins it, so a transactional service
method called from another one does not commit on its own; a scope for a
different backend opens its own transaction beside the outer one.
"""

from __future__ import annotations

import contextlib
import functools
import logging
from contextvars import ContextVar
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, TypeVar

from .ports.unit_of_work import UnitOfWork

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Awaitable, Callable, Mapping

logger = logging.getLogger("dao_commons.transaction")

R = TypeVar("R")

# Open scopes of this context, oldest first, keyed by unit-of-work type.
_ambient_uows: ContextVar[Mapping[type[UnitOfWork], UnitOfWork]] = ContextVar(
    "ambient_uows", default=MappingProxyType({})
)


def get_current_uow(uow_type: type[UnitOfWork] | None = None) -> UnitOfWork | None:
    """
    Return the unit of work of the innermost open scope, if any.

    With *uow_type*, only open units of work that are instances of it are
    considered, so a DAO never picks up another backend's transaction.
    """
    for uow in reversed(list(_ambient_uows.get().values())):
        if uow_type is None or isinstance(uow, uow_type):
            return uow
    return None


@contextlib.asynccontextmanager
async def transaction_scope(
    uow_factory: Callable[[], UnitOfWork],
) -> AsyncIterator[UnitOfWork]:
    """
    Open a transaction, or join the open one of the same unit-of-work type.

    The factory is always called to learn which type it builds; a unit of
    work that is joined instead is never entered and holds no session.
    """
    fresh = uow_factory()
    ambient = _ambient_uows.get()
    current = ambient.get(type(fresh))
    if current is not None:
        logger.debug("Joining ambient %s", type(current).__name__)
        yield current
        return

    async with fresh as active:
        token = _ambient_uows.set(MappingProxyType({**ambient, type(fresh): active}))
        logger.debug("Opened transaction scope with %s", type(active).__name__)
        try:
            yield active
        finally:
            _ambient_uows.reset(token)


async def run_in_transaction(
    uow_factory: Callable[[], UnitOfWork],
    work: Callable[[UnitOfWork], Awaitable[R]],
) -> R:
    """Execute *work* inside a transaction scope and return its result."""
    async with transaction_scope(uow_factory) as uow:
        return await work(uow)


def transactional(
    uow_factory: Callable[[], UnitOfWork],
) -> Callable[[Callable[..., Awaitable[R]]], Callable[..., Awaitable[R]]]:
    """Decorate a coroutine function so every call runs in a transaction scope."""

    def decorator(func: Callable[..., Awaitable[R]]) -> Callable[..., Awaitable[R]]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> R:
            async with transaction_scope(uow_factory):
                return await func(*args, **kwargs)

        return wrapper

    return decorator
