"""Tests for MongoDocumentMapper."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest
from bson.decimal128 import Decimal128
from pydantic import BaseModel

from dao_commons_core.domain.descriptor import EntityDescriptor
from dao_commons_mongo import MongoDocumentMapper, MongoMappingError


class Invoice(BaseModel):
    id: str | None = None
    customer: str
    total: Decimal
    lines: list[dict] = []
    issued_at: datetime | None = None


@pytest.fixture
def mapper():
    return MongoDocumentMapper(
        EntityDescriptor(Invoice, name="invoices", field_map={"customer": "cust"})
    )


def test_to_doc_renames_fields_and_id(mapper):
    doc = mapper.to_doc(Invoice(id="i1", customer="ada", total=Decimal("1.50")))

    assert doc["_id"] == "i1"
    assert doc["cust"] == "ada"
    assert "id" not in doc
    assert "customer" not in doc


def test_decimals_round_trip_through_decimal128(mapper):
    invoice = Invoice(
        id="i1",
        customer="ada",
        total=Decimal("10.25"),
        lines=[{"amount": Decimal("0.25")}],
    )

    doc = mapper.to_doc(invoice)

    assert doc["total"] == Decimal128("10.25")
    assert doc["lines"][0]["amount"] == Decimal128("0.25")
    assert mapper.from_doc(doc) == invoice


def test_datetimes_are_left_to_the_driver(mapper):
    issued = datetime(2024, 1, 2, tzinfo=timezone.utc)

    doc = mapper.to_doc(Invoice(customer="ada", total=Decimal(1), issued_at=issued))

    assert doc["issued_at"] == issued


def test_invalid_document_raises_mapping_error(mapper):
    with pytest.raises(MongoMappingError, match="i9"):
        mapper.from_doc({"_id": "i9", "cust": "ada"})
