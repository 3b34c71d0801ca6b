"""LdapDao against an ldap3 MOCK_SYNC directory."""

import pytest
from pydantic import BaseModel

from dao_commons_core.config import LdapSettings
from dao_commons_core.primitives.exceptions import InvalidEntityStateError
from dao_commons_ldap import (
    LdapConnectionError,
    LdapConnectionManager,
    LdapDao,
    LdapEntryDescriptor,
    LdapOperationError,
)

PEOPLE_DN = "ou=people,dc=example,dc=org"


class Person(BaseModel):
    dn: str | None = None
    uid: str
    common_name: str
    surname: str
    department: str | None = None
    mail: list[str] = []


PEOPLE = LdapEntryDescriptor(
    Person,
    name=PEOPLE_DN,
    object_classes=("inetOrgPerson",),
    rdn_field="uid",
    field_map={"common_name": "cn", "surname": "sn", "department": "ou"},
)


@pytest.fixture
def dao(ldap_connection):
    return LdapDao(ldap_connection, PEOPLE)


@pytest.fixture
async def seeded(dao):
    people = [
        Person(uid="ada", common_name="Ada", surname="Lovelace", department="dev"),
        Person(uid="alan", common_name="Alan", surname="Turing", department="ops"),
        Person(uid="grace", common_name="Grace", surname="Hopper", department="dev"),
        Person(uid="linus", common_name="Linus", surname="Torvalds", department="qa"),
    ]
    await dao.save_all(people)
    return people


class TestConnection:
    def test_connect_binds_once(self, ldap_connection):
        assert ldap_connection.bound
        assert ldap_connection.connect() is ldap_connection.connection

    def test_bad_credentials(self, make_ldap_connection):
        manager = make_ldap_connection("wrong")

        with pytest.raises(LdapConnectionError, match="failed"):
            manager.connect()

    def test_close_unbinds(self, ldap_connection):
        ldap_connection.close()

        assert not ldap_connection.bound


class TestWrites:
    async def test_save_derives_dn_and_round_trips(self, dao):
        person = Person(
            uid="ada",
            common_name="Ada",
            surname="Lovelace",
            mail=["ada@example.org", "countess@example.org"],
        )

        dn = await dao.save(person)

        assert dn == f"uid=ada,{PEOPLE_DN}"
        assert person.dn == dn
        loaded = await dao.get(dn)
        assert loaded.common_name == "Ada"
        assert loaded.surname == "Lovelace"
        assert loaded.department is None
        assert sorted(loaded.mail) == ["ada@example.org", "countess@example.org"]

    async def test_save_without_rdn_value(self, ldap_connection):
        class Loose(BaseModel):
            dn: str | None = None
            uid: str | None = None
            common_name: str = "x"
            surname: str = "y"

        loose_dao = LdapDao(
            ldap_connection, LdapEntryDescriptor(Loose, name=PEOPLE_DN, rdn_field="uid")
        )

        with pytest.raises(InvalidEntityStateError):
            await loose_dao.save(Loose())

    async def test_duplicate_add_fails(self, dao, seeded):
        with pytest.raises(LdapOperationError) as info:
            await dao.save(
                Person(uid="ada", common_name="Ada", surname="Lovelace")
            )

        assert info.value.dn == f"uid=ada,{PEOPLE_DN}"

    async def test_update_replaces_attributes(self, dao, seeded):
        ada = await dao.get(f"uid=ada,{PEOPLE_DN}")
        ada.department = "research"
        ada.mail = ["ada@example.org"]

        await dao.update(ada)

        loaded = await dao.get(ada.dn)
        assert loaded.department == "research"
        assert loaded.mail == ["ada@example.org"]

    async def test_update_requires_dn(self, dao):
        with pytest.raises(InvalidEntityStateError):
            await dao.update(Person(uid="x", common_name="x", surname="x"))

    async def test_delete(self, dao, seeded):
        await dao.delete(seeded[0])
        await dao.delete(None)
        await dao.delete_all([seeded[1], None])

        assert await dao.get(seeded[0].dn) is None
        assert await dao.count() == 2

    async def test_delete_missing_entry_fails(self, dao):
        with pytest.raises(LdapOperationError):
            await dao.delete_by_id(f"uid=nobody,{PEOPLE_DN}")


class TestReads:
    async def test_get_missing_returns_none(self, dao):
        assert await dao.get(f"uid=nobody,{PEOPLE_DN}") is None

    async def test_list_everything(self, dao, seeded):
        people = await dao.list()

        assert {p.uid for p in people} == {"ada", "alan", "grace", "linus"}

    async def test_list_with_scalar_and_set_restrictions(self, dao, seeded):
        devs = await dao.list({"department": "dev"})
        dev_or_ops = await dao.list({"department": ["dev", "ops"]})
        grace = await dao.list({"department": "dev", "surname": "Hopper"})

        assert {p.uid for p in devs} == {"ada", "grace"}
        assert {p.uid for p in dev_or_ops} == {"ada", "alan", "grace"}
        assert [p.uid for p in grace] == ["grace"]

    async def test_list_pages(self, dao, seeded):
        everyone = await dao.list()
        page = await dao.list(first_result=1, max_results=2)
        tail = await dao.list(first_result=3)

        assert [p.uid for p in page] == [p.uid for p in everyone[1:3]]
        assert [p.uid for p in tail] == [everyone[3].uid]

    async def test_count(self, dao, seeded):
        assert await dao.count() == 4
        assert await dao.count({"department": "dev"}) == 2
        assert await dao.count({"department": "hr"}) == 0


def test_manager_from_settings():
    settings = LdapSettings(
        url="ldap://directory:389",
        base_dn="dc=example,dc=org",
        bind_dn="cn=reader,dc=example,dc=org",
        password="pw",
    )

    manager = LdapConnectionManager.from_settings(settings)

    assert manager.base_dn == "dc=example,dc=org"
    assert not manager.bound
    assert manager.connection.user == "cn=reader,dc=example,dc=org"
    assert manager.connection.password == "pw"
