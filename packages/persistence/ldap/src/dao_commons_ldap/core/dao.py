"""LdapDao[T] — generic DAO over directory entries."""

from __future__ import annotations

import builtins
import logging
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from ldap3 import BASE, SUBTREE
from ldap3.core.results import RESULT_NO_SUCH_OBJECT, RESULT_SUCCESS
from ldap3.utils.dn import escape_rdn
from pydantic import BaseModel

from dao_commons_core.domain.paging import PageWindow
from dao_commons_core.primitives.exceptions import InvalidEntityStateError
from dao_commons_core.restrictions import build_restriction_ast

from ..exceptions import LdapOperationError
from ..filters import MATCH_ALL, build_ldap_filter, to_ldap_value
from ..mapper import LdapEntryMapper

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from ldap3 import Connection

    from ..connection import LdapConnectionManager
    from ..descriptor import LdapEntryDescriptor

T = TypeVar("T", bound=BaseModel)

logger = logging.getLogger("dao_commons.ldap")


class LdapDao(Generic[T]):
    """
    Generic DAO over entries of one object class set.

    Entities are pydantic models whose ``id_field`` (``dn`` by default)
    holds the entry DN.  Directory writes are not transactional: every
    call is applied immediately on the bound connection::

        people = LdapDao(connection, LdapEntryDescriptor(Person, ...))
        dn = await people.save(Person(uid="ada", sn="Lovelace", cn="Ada"))
        devs = await people.list({"ou": ["dev", "ops"]})
    """

    def __init__(
        self,
        connection: LdapConnectionManager,
        descriptor: LdapEntryDescriptor[T],
    ) -> None:
        self._connection = connection
        self.descriptor = descriptor
        self._mapper: LdapEntryMapper[T] = LdapEntryMapper(descriptor)

    @property
    def entity_cls(self) -> type[T]:
        return self.descriptor.entity_cls

    @property
    def base_dn(self) -> str:
        """Search base: the descriptor ``name`` or the connection base DN."""
        return self.descriptor.name or self._connection.base_dn

    def _conn(self) -> Connection:
        return self._connection.connect()

    def _check(self, ok: bool, operation: str, dn: str) -> None:
        if not ok:
            raise LdapOperationError(operation, dn, self._conn().result)

    def _check_search(self, ok: bool, conn: Connection, base: str) -> None:
        # ldap3 reports an empty result set as a failed search with code 0
        code = conn.result.get("result")
        if not ok and code not in (RESULT_SUCCESS, RESULT_NO_SUCH_OBJECT):
            raise LdapOperationError("search", base, conn.result)

    def _new_dn(self, entity: T) -> str:
        rdn_value = getattr(entity, self.descriptor.rdn_field, None)
        if rdn_value is None:
            raise InvalidEntityStateError(
                entity, f"given a {self.descriptor.rdn_field!r} value to derive its DN"
            )
        value = escape_rdn(str(to_ldap_value(rdn_value)))
        rdn = f"{self.descriptor.rdn_attribute}={value}"
        return f"{rdn},{self.base_dn}" if self.base_dn else rdn

    # -- persist ------------------------------------------------------------

    async def save(self, entity: T) -> str:
        """Add the entry and return its DN; the DN is derived when unset."""
        dn = self._mapper.dn_of(entity) or self._new_dn(entity)
        conn = self._conn()
        ok = conn.add(
            dn,
            object_class=list(self.descriptor.object_classes),
            attributes=self._mapper.to_attributes(entity),
        )
        self._check(ok, "add", dn)
        setattr(entity, self.descriptor.id_field, dn)
        logger.debug("Added %s %s", self.descriptor.entity_name, dn)
        return dn

    async def save_all(self, entities: Iterable[T]) -> builtins.list[str]:
        return [await self.save(entity) for entity in entities]

    async def update(self, entity: T) -> None:
        """Replace every mapped attribute of an existing entry."""
        dn = self._mapper.dn_of(entity)
        if dn is None:
            raise InvalidEntityStateError(entity, "an entry with a DN")
        conn = self._conn()
        self._check(conn.modify(dn, self._mapper.to_changes(entity)), "modify", dn)
        logger.debug("Modified %s %s", self.descriptor.entity_name, dn)

    async def update_all(self, entities: Iterable[T]) -> None:
        for entity in entities:
            await self.update(entity)

    # -- delete -------------------------------------------------------------

    async def delete(self, entity: T | None) -> None:
        """Delete the entry; ``None`` is ignored."""
        if entity is None:
            return
        dn = self._mapper.dn_of(entity)
        if dn is None:
            raise InvalidEntityStateError(entity, "an entry with a DN")
        await self.delete_by_id(dn)

    async def delete_all(self, entities: Iterable[T | None]) -> None:
        for entity in entities:
            await self.delete(entity)

    async def delete_by_id(self, dn: str) -> None:
        conn = self._conn()
        self._check(conn.delete(dn), "delete", dn)
        logger.debug("Deleted %s %s", self.descriptor.entity_name, dn)

    # -- read ---------------------------------------------------------------

    async def get(self, dn: str) -> T | None:
        """Read one entry by DN; ``None`` when it does not exist."""
        conn = self._conn()
        ok = conn.search(
            dn, MATCH_ALL, search_scope=BASE, attributes=self._mapper.attribute_names
        )
        self._check_search(ok, conn, dn)
        entries = self._entries(conn)
        return entries[0] if entries else None

    async def list(
        self,
        restrictions: Mapping[str, Any] | None = None,
        *,
        first_result: int = 0,
        max_results: int = 0,
    ) -> builtins.list[T]:
        """
        Subtree search under :attr:`base_dn`.

        Keys are AND-ed with the descriptor's object classes; a list/tuple/set
        value becomes an OR of equalities.  The page window is applied to the
        entries in server order.
        """
        window = PageWindow(first_result, max_results)
        search_filter = build_ldap_filter(
            build_restriction_ast(restrictions, field_map=self.descriptor.field_map),
            self.descriptor.object_classes,
        )
        conn = self._conn()
        ok = conn.search(
            self.base_dn,
            search_filter,
            search_scope=SUBTREE,
            attributes=self._mapper.attribute_names,
        )
        self._check_search(ok, conn, self.base_dn)
        logger.debug("Searched %s with %s", self.base_dn, search_filter)
        entries = self._entries(conn)
        end = None if window.limit is None else window.first_result + window.limit
        return entries[window.first_result : end]

    async def count(self, restrictions: Mapping[str, Any] | None = None) -> int:
        return len(await self.list(restrictions))

    def _entries(self, conn: Connection) -> builtins.list[T]:
        return [
            self._mapper.from_entry(item["dn"], item["attributes"])
            for item in conn.response or []
            if item.get("type") == "searchResEntry"
        ]
