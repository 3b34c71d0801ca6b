"""Test configuration for the LDAP persistence package (ldap3 MOCK_SYNC)."""

import pytest
from ldap3 import MOCK_SYNC

from dao_commons_ldap import LdapConnectionManager

BASE_DN = "dc=example,dc=org"
BIND_DN = f"cn=admin,{BASE_DN}"
BIND_PASSWORD = "secret"


def _mock_manager(password):
    """Manager on a fake server that knows the bind user and the people OU."""
    manager = LdapConnectionManager(
        "ldap://fake-directory:389",
        base_dn=BASE_DN,
        bind_dn=BIND_DN,
        password=password,
        client_strategy=MOCK_SYNC,
    )
    strategy = manager.connection.strategy
    strategy.add_entry(BIND_DN, {"userPassword": BIND_PASSWORD, "sn": "admin"})
    strategy.add_entry(
        f"ou=people,{BASE_DN}", {"objectClass": ["organizationalUnit"], "ou": "people"}
    )
    return manager


@pytest.fixture
def make_ldap_connection():
    """Build an unbound mock manager binding with *password*."""
    return _mock_manager


@pytest.fixture
def ldap_connection():
    manager = _mock_manager(BIND_PASSWORD)
    manager.connect()
    yield manager
    manager.close()
