"""Tests for restriction-map translation and in-memory evaluation."""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from dao_commons_core.primitives.exceptions import RestrictionError
from dao_commons_core.restrictions import (
    RestrictionOperator,
    RestrictionSpecification,
    build_restriction_ast,
    build_update_document,
    is_candidate_set,
    iter_leaves,
)


@dataclass
class Row:
    id: int
    status: str
    owner: str = "ada"


DATASET = [Row(1, "A"), Row(2, "B"), Row(3, "A", owner="bob")]


def matching_ids(restrictions: dict | None) -> set[int]:
    spec = RestrictionSpecification(restrictions)
    return {row.id for row in DATASET if spec.is_satisfied_by(row)}


class TestCandidateSets:
    @pytest.mark.parametrize("value", [[1, 2], (1, 2), {1, 2}, frozenset({1})])
    def test_collections_are_candidate_sets(self, value: object) -> None:
        assert is_candidate_set(value)

    @pytest.mark.parametrize("value", ["AB", b"AB", {"a": 1}, 3, None])
    def test_strings_bytes_mappings_and_scalars_are_not(self, value: object) -> None:
        assert not is_candidate_set(value)


class TestBuildRestrictionAst:
    def test_empty_map_builds_empty_ast(self) -> None:
        assert build_restriction_ast({}) == {}
        assert build_restriction_ast(None) == {}

    def test_scalar_becomes_equality(self) -> None:
        ast = build_restriction_ast({"status": "A"})

        assert ast == {
            "op": "and",
            "conditions": [{"attr": "status", "op": "=", "val": "A"}],
        }

    def test_candidate_set_becomes_membership(self) -> None:
        ast = build_restriction_ast({"status": ("A", "B")})

        assert ast["conditions"] == [{"attr": "status", "op": "in", "val": ["A", "B"]}]

    def test_keys_are_conjoined_in_iteration_order(self) -> None:
        ast = build_restriction_ast({"owner": "ada", "status": ["A"]})

        assert ast["op"] == RestrictionOperator.AND.value
        assert [leaf["attr"] for leaf in ast["conditions"]] == ["owner", "status"]

    def test_field_map_renames_keys(self) -> None:
        ast = build_restriction_ast({"email": "a@b.c"}, field_map={"email": "mail"})

        assert ast["conditions"][0]["attr"] == "mail"

    def test_ast_does_not_alias_caller_container(self) -> None:
        statuses = ["A"]
        ast = build_restriction_ast({"status": statuses})
        statuses.append("B")

        assert ast["conditions"][0]["val"] == ["A"]

    def test_scalar_and_set_calls_do_not_cross_contaminate(self) -> None:
        first = build_restriction_ast({"status": ["A", "B"]})
        second = build_restriction_ast({"status": "A"})
        third = build_restriction_ast({"status": ["B"]})

        assert first["conditions"][0] == {"attr": "status", "op": "in", "val": ["A", "B"]}
        assert second["conditions"][0] == {"attr": "status", "op": "=", "val": "A"}
        assert third["conditions"][0] == {"attr": "status", "op": "in", "val": ["B"]}

    def test_non_string_key_is_rejected(self) -> None:
        with pytest.raises(RestrictionError):
            build_restriction_ast({1: "x"})  # type: ignore[dict-item]

    def test_iter_leaves(self) -> None:
        ast = build_restriction_ast({"a": 1, "b": [2, 3]})

        assert [leaf["attr"] for leaf in iter_leaves(ast)] == ["a", "b"]
        assert iter_leaves({}) == []


class TestBuildUpdateDocument:
    def test_every_entry_is_a_set_instruction(self) -> None:
        assert build_update_document({"status": "C", "tags": ["x"]}) == {
            "status": "C",
            "tags": ["x"],
        }

    def test_field_map_applies(self) -> None:
        doc = build_update_document({"email": "x"}, field_map={"email": "mail"})

        assert doc == {"mail": "x"}

    def test_empty_contents_rejected(self) -> None:
        with pytest.raises(RestrictionError, match="at least one field"):
            build_update_document({})


class TestRestrictionSpecification:
    def test_scalar_restriction(self) -> None:
        assert matching_ids({"status": "A"}) == {1, 3}

    def test_membership_restriction(self) -> None:
        assert matching_ids({"status": ["A", "B"]}) == {1, 2, 3}

    def test_empty_restriction_matches_everything(self) -> None:
        assert matching_ids({}) == {1, 2, 3}

    def test_all_keys_must_match(self) -> None:
        assert matching_ids({"status": "A", "owner": "bob"}) == {3}

    def test_key_order_does_not_matter(self) -> None:
        assert matching_ids({"owner": ["ada"], "status": "A"}) == matching_ids(
            {"status": "A", "owner": ["ada"]}
        )

    def test_empty_candidate_set_matches_nothing(self) -> None:
        assert matching_ids({"status": []}) == set()

    def test_missing_field_never_matches(self) -> None:
        assert matching_ids({"colour": "red"}) == set()

    def test_mappings_are_evaluated_by_key(self) -> None:
        spec = RestrictionSpecification({"status": "A"})

        assert spec.is_satisfied_by({"id": 1, "status": "A"})
        assert not spec.is_satisfied_by({"id": 2, "status": "B"})

    def test_to_dict_is_backend_ast(self) -> None:
        spec = RestrictionSpecification({"status": ["A"]})

        assert spec.to_dict() == build_restriction_ast({"status": ["A"]})
