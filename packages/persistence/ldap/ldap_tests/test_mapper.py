"""Tests for LdapEntryMapper and LdapEntryDescriptor."""

import pytest
from ldap3 import MODIFY_REPLACE
from pydantic import BaseModel

from dao_commons_core.primitives.exceptions import ConfigurationError
from dao_commons_ldap import LdapEntryDescriptor, LdapEntryMapper, LdapPersistenceError


class Account(BaseModel):
    dn: str | None = None
    uid: str
    common_name: str
    enabled: bool = True
    groups: list[str] = []
    phone: str | None = None


DESCRIPTOR = LdapEntryDescriptor(
    Account,
    object_classes=["account"],
    rdn_field="uid",
    field_map={"common_name": "cn", "phone": "telephoneNumber"},
)


@pytest.fixture
def mapper():
    return LdapEntryMapper(DESCRIPTOR)


def test_descriptor_defaults_and_rdn():
    assert DESCRIPTOR.object_classes == ("account",)
    assert DESCRIPTOR.id_field == "dn"
    assert DESCRIPTOR.rdn_attribute == "uid"
    assert LdapEntryDescriptor(Account, field_map={"common_name": "cn"}).rdn_attribute == "cn"


def test_descriptor_rejects_dn_as_rdn():
    with pytest.raises(ConfigurationError):
        LdapEntryDescriptor(Account, rdn_field="dn")


def test_attribute_names_exclude_dn(mapper):
    assert mapper.attribute_names == ["uid", "cn", "enabled", "groups", "telephoneNumber"]


def test_to_attributes_skips_blank_values(mapper):
    account = Account(uid="ada", common_name="Ada", groups=["dev"])

    assert mapper.to_attributes(account) == {
        "uid": "ada",
        "cn": "Ada",
        "enabled": "TRUE",
        "groups": ["dev"],
    }


def test_to_changes_replaces_every_attribute(mapper):
    account = Account(dn="uid=ada,dc=x", uid="ada", common_name="Ada", enabled=False)

    changes = mapper.to_changes(account)

    assert changes["cn"] == [(MODIFY_REPLACE, ["Ada"])]
    assert changes["enabled"] == [(MODIFY_REPLACE, ["FALSE"])]
    assert changes["groups"] == [(MODIFY_REPLACE, [])]
    assert changes["telephoneNumber"] == [(MODIFY_REPLACE, [])]
    assert "dn" not in changes


def test_from_entry_collapses_single_values(mapper):
    account = mapper.from_entry(
        "uid=ada,dc=x",
        {
            "uid": ["ada"],
            "cn": ["Ada"],
            "enabled": ["FALSE"],
            "groups": ["dev"],
            "telephoneNumber": [],
        },
    )

    assert account == Account(
        dn="uid=ada,dc=x", uid="ada", common_name="Ada", enabled=False, groups=["dev"]
    )


def test_from_entry_reports_invalid_entries(mapper):
    with pytest.raises(LdapPersistenceError, match="does not match Account"):
        mapper.from_entry("uid=ghost,dc=x", {"uid": ["ghost"]})
