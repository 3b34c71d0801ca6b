"""LdapConnectionManager — ldap3 server/connection lifecycle."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ldap3 import SYNC, Connection, Server

from .exceptions import LdapConnectionError

if TYPE_CHECKING:
    from dao_commons_core.config import LdapSettings

logger = logging.getLogger("dao_commons.ldap.connection")


class LdapConnectionManager:
    """
    Own one ldap3 ``Connection`` bound as the configured principal.

    ``client_strategy`` is passed to ldap3 unchanged, so tests can run the
    same code against ``MOCK_SYNC``.
    """

    def __init__(
        self,
        url: str = "ldap://localhost:389",
        *,
        base_dn: str = "",
        bind_dn: str | None = None,
        password: str | None = None,
        connect_timeout: int | None = None,
        client_strategy: str = SYNC,
        **kwargs: Any,
    ) -> None:
        self._url = url
        self._base_dn = base_dn
        self._bind_dn = bind_dn
        self._password = password
        self._connect_timeout = connect_timeout
        self._client_strategy = client_strategy
        self._kwargs = kwargs
        self._connection: Connection | None = None

    @classmethod
    def from_settings(cls, settings: LdapSettings, **kwargs: Any) -> LdapConnectionManager:
        """Build a manager from the ``ldap`` section of :class:`DaoSettings`."""
        return cls(
            settings.url,
            base_dn=settings.base_dn,
            bind_dn=settings.bind_dn,
            password=(
                settings.password.get_secret_value() if settings.password else None
            ),
            connect_timeout=settings.connect_timeout,
            **kwargs,
        )

    @property
    def base_dn(self) -> str:
        return self._base_dn

    @property
    def connection(self) -> Connection:
        """The ldap3 connection; created unbound on first access."""
        if self._connection is None:
            server = Server(self._url, connect_timeout=self._connect_timeout)
            self._connection = Connection(
                server,
                user=self._bind_dn,
                password=self._password,
                client_strategy=self._client_strategy,
                raise_exceptions=False,
                **self._kwargs,
            )
        return self._connection

    @property
    def bound(self) -> bool:
        return self._connection is not None and bool(self._connection.bound)

    def connect(self) -> Connection:
        """Open and bind the connection. Idempotent."""
        connection = self.connection
        if connection.bound:
            return connection
        try:
            ok = connection.bind()
        except Exception as e:
            raise LdapConnectionError(f"Cannot reach {self._url}: {e}") from e
        if not ok:
            description = (connection.result or {}).get("description", "bind failed")
            raise LdapConnectionError(
                f"Bind as {self._bind_dn or 'anonymous'} to {self._url} failed: "
                f"{description}"
            )
        logger.debug("Bound to %s as %s", self._url, self._bind_dn or "anonymous")
        return connection

    def close(self) -> None:
        """Unbind and drop the connection."""
        if self._connection is not None:
            if self._connection.bound:
                self._connection.unbind()
            self._connection = None
