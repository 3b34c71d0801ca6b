"""Engine and session-factory wiring from :class:`SqlSettings`."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from dao_commons_core.config import SqlSettings
from dao_commons_core.primitives.exceptions import ConfigurationError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger("dao_commons.sqlalchemy.engine")


def engine_options(settings: SqlSettings) -> dict[str, Any]:
    """
    Translate pool settings into ``create_async_engine`` keyword arguments.

    ``pool_min_size`` connections stay open, up to ``pool_max_size`` in
    total; idle connections are recycled after ``pool_idle_timeout``
    seconds.  SQLite URLs get no pool arguments because SQLAlchemy picks a
    dedicated pool class for them.
    """
    try:
        url = make_url(settings.url)
    except Exception as e:
        raise ConfigurationError(f"Invalid database URL: {e}") from e

    options: dict[str, Any] = {"echo": settings.echo}
    if settings.isolation_level:
        options["isolation_level"] = settings.isolation_level
    if url.get_backend_name() != "sqlite":
        options.update(
            pool_size=settings.pool_min_size,
            max_overflow=settings.pool_max_size - settings.pool_min_size,
            pool_recycle=settings.pool_idle_timeout,
            pool_timeout=settings.pool_acquire_timeout,
            pool_pre_ping=True,
        )
    return options


def create_engine_from_settings(settings: SqlSettings) -> AsyncEngine:
    """Create the pooled :class:`AsyncEngine` described by *settings*."""
    options = engine_options(settings)
    logger.debug(
        "Creating engine for %s with %s",
        make_url(settings.url).render_as_string(hide_password=True),
        {k: v for k, v in options.items() if k != "echo"},
    )
    return create_async_engine(settings.url, **options)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory for :class:`SQLAlchemyUnitOfWork` (``expire_on_commit=False``)."""
    return async_sessionmaker(engine, expire_on_commit=False)
