from pytest_archon import archrule


def test_core_independence() -> None:
    """
    Core module should not import from any persistence backend.
    It is the foundation and must remain independent.
    """
    (
        archrule("core_is_independent")
        .match("dao_commons_core*")
        .should_not_import("dao_commons_sqlalchemy*")
        .should_not_import("dao_commons_mongo*")
        .should_not_import("dao_commons_ldap*")
        .check("dao_commons_core")
    )


def test_backends_are_independent() -> None:
    """Each persistence backend depends on Core only, never on a sibling."""
    (
        archrule("sqlalchemy_independence")
        .match("dao_commons_sqlalchemy*")
        .should_not_import("dao_commons_mongo*")
        .should_not_import("dao_commons_ldap*")
        .check("dao_commons_sqlalchemy")
    )
    (
        archrule("mongo_independence")
        .match("dao_commons_mongo*")
        .should_not_import("dao_commons_sqlalchemy*")
        .should_not_import("dao_commons_ldap*")
        .check("dao_commons_mongo")
    )
    (
        archrule("ldap_independence")
        .match("dao_commons_ldap*")
        .should_not_import("dao_commons_sqlalchemy*")
        .should_not_import("dao_commons_mongo*")
        .check("dao_commons_ldap")
    )


def test_domain_isolation() -> None:
    """
    Domain layer should be self-contained.
    It must not import from adapters or ports.
    """
    (
        archrule("domain_isolation")
        .match("dao_commons_core.domain*")
        .should_not_import("dao_commons_core.adapters*")
        .should_not_import("dao_commons_core.ports*")
        .check("dao_commons_core")
    )


def test_primitives_isolation() -> None:
    """
    Primitives layer is the lowest level.
    It must not import from domain, adapters or ports.
    """
    (
        archrule("primitives_isolation")
        .match("dao_commons_core.primitives*")
        .should_not_import("dao_commons_core.domain*")
        .should_not_import("dao_commons_core.adapters*")
        .should_not_import("dao_commons_core.ports*")
        .check("dao_commons_core")
    )


def test_ports_layering() -> None:
    """
    Ports (interfaces) should not depend on Adapters (implementations).
    """
    (
        archrule("ports_layering")
        .match("dao_commons_core.ports*")
        .should_not_import("dao_commons_core.adapters*")
        .check("dao_commons_core")
    )
