"""Tests for offer normalization across the three ingestion paths."""
import asyncio
import io
from datetime import date
from decimal import Decimal

import pytest
from openpyxl import Workbook

from offerdesk.errors import ExternalServiceError, PreconditionError, ValidationError
from offerdesk.models import OfferItem, OfferStatus, Vendor
from offerdesk.services.normalizer import (
    compute_line, normalize_free_text, normalize_manual, normalize_spreadsheet, validate_parsed_offer,
)

PAYLOAD = {
    "vendor_name": "Acme Supply",
    "lead_time_days": 10,
    "items": [
        {"sku": "W-1", "description": "Widget", "quantity": 2, "unit": "ea", "unit_price": 10},
        {"description": "Gadget", "quantity": 1, "unit_price": 5},
    ],
}


class FailingExtractor:
    async def extract(self, text):
        raise ExternalServiceError("model unavailable")


def _sheet(rows):
    wb = Workbook()
    ws = wb.active
    for row in rows:
        ws.append(row)
    buffer = io.BytesIO()
    wb.save(buffer)
    buffer.seek(0)
    return buffer


def _items(db, offer_id):
    return db.query(OfferItem).filter(OfferItem.offer_id == offer_id).order_by(OfferItem.position).all()


def test_validate_parsed_offer_fills_defaults():
    parsed = validate_parsed_offer({"items": [{"description": " Widget ", "quantity": "3", "unit_price": "1.5", "unit": ""}]})
    item = parsed.items[0]
    assert item.description == "Widget"
    assert item.unit == "ea"
    assert item.quantity == Decimal("3")
    assert parsed.vendor_name is None


def test_validate_parsed_offer_reports_every_problem():
    with pytest.raises(ValidationError) as exc_info:
        validate_parsed_offer({"items": [{"description": "", "quantity": -1, "unit_price": "abc"}]})
    errors = exc_info.value.details["errors"]
    assert len(errors) == 3
    assert any(error.startswith("items.0.quantity") for error in errors)


def test_compute_line_total_is_exact_product():
    parsed = validate_parsed_offer({"items": [{"description": "Bolt", "quantity": "3", "unit_price": "0.3333"}]})
    quantity, unit_price, total = compute_line(parsed.items[0])
    assert total == quantity * unit_price == Decimal("0.9999")


def test_manual_normalization_writes_items_and_vendor(db, make_offer):
    offer = make_offer(vendor_name=None)

    normalized, parsed = normalize_manual(db, offer.org_id, offer.id, PAYLOAD)

    items = _items(db, offer.id)
    assert [item.description for item in items] == ["Widget", "Gadget"]
    assert [item.position for item in items] == [0, 1]
    for item in items:
        assert item.total_price == item.quantity * item.unit_price
    assert items[1].unit == "ea"

    vendor = db.query(Vendor).filter(Vendor.id == normalized.vendor_id).one()
    assert vendor.name == "Acme Supply"
    assert normalized.lead_time_days == 10
    assert normalized.parsed_json["items"][0]["sku"] == "W-1"
    assert parsed.vendor_name == "Acme Supply"


def test_renormalizing_identical_input_keeps_item_ids(db, make_offer):
    offer = make_offer(vendor_name=None)
    normalize_manual(db, offer.org_id, offer.id, PAYLOAD)
    first_ids = [item.id for item in _items(db, offer.id)]

    normalize_manual(db, offer.org_id, offer.id, PAYLOAD)
    assert [item.id for item in _items(db, offer.id)] == first_ids


def test_renormalizing_shorter_list_drops_surplus_rows(db, make_offer):
    offer = make_offer(vendor_name=None)
    normalize_manual(db, offer.org_id, offer.id, PAYLOAD)
    first_ids = [item.id for item in _items(db, offer.id)]

    shorter = {"items": [{"description": "Widget v2", "quantity": 4, "unit_price": 9}]}
    normalize_manual(db, offer.org_id, offer.id, shorter)

    items = _items(db, offer.id)
    assert len(items) == 1
    assert items[0].id == first_ids[0]
    assert items[0].description == "Widget v2"
    assert items[0].total_price == Decimal("36")


def test_omitted_lead_time_is_left_alone(db, make_offer):
    offer = make_offer(vendor_name=None, lead_time_days=21)
    normalize_manual(db, offer.org_id, offer.id, {"items": PAYLOAD["items"]})
    db.refresh(offer)
    assert offer.lead_time_days == 21


def test_non_positive_quantity_is_rejected_without_writes(db, make_offer):
    offer = make_offer(vendor_name=None)
    payload = {"items": [{"description": "Widget", "quantity": 0, "unit_price": 10}]}

    with pytest.raises(ValidationError):
        normalize_manual(db, offer.org_id, offer.id, payload)
    assert _items(db, offer.id) == []


def test_empty_item_set_is_rejected(db, make_offer):
    offer = make_offer(vendor_name=None)
    with pytest.raises(ValidationError):
        normalize_manual(db, offer.org_id, offer.id, {"vendor_name": "Acme", "items": []})
    assert db.query(Vendor).count() == 0


def test_converted_offer_cannot_be_renormalized(db, make_offer):
    offer = make_offer(status=OfferStatus.ORDERED, items=[(1, 1)])
    with pytest.raises(PreconditionError):
        normalize_manual(db, offer.org_id, offer.id, PAYLOAD)


def test_free_text_normalization(db, make_offer, fake_extractor):
    offer = make_offer(vendor_name=None, raw_content="2 widgets at $10, 1 gadget at $5. Valid to Dec 31.")

    normalized, parsed = asyncio.run(normalize_free_text(db, offer.org_id, offer.id, fake_extractor))

    assert fake_extractor.calls == [offer.raw_content]
    assert parsed.valid_until == date(2026, 12, 31)
    assert normalized.valid_until == date(2026, 12, 31)
    assert normalized.lead_time_days == 14
    assert sum(item.total_price for item in _items(db, offer.id)) == Decimal("25")


def test_free_text_requires_raw_content(db, make_offer, fake_extractor):
    offer = make_offer(vendor_name=None, raw_content="   ")
    with pytest.raises(ValidationError):
        asyncio.run(normalize_free_text(db, offer.org_id, offer.id, fake_extractor))
    assert fake_extractor.calls == []


def test_free_text_extractor_failure_leaves_items_untouched(db, make_offer):
    offer = make_offer(vendor_name=None, raw_content="some quote", items=[(1, 3)])
    with pytest.raises(ExternalServiceError):
        asyncio.run(normalize_free_text(db, offer.org_id, offer.id, FailingExtractor()))
    assert len(_items(db, offer.id)) == 1


def test_spreadsheet_normalization(db, org, make_offer, document_store):
    offer = make_offer(vendor_name=None)
    sheet = _sheet([
        ["Item", "Qty", "Unit", "Unit Price", "SKU"],
        ["Widget", 2, "ea", 10, "W-1"],
        ["Gadget", 1, "case", 5, None],
        [None, None, None, None, None],
    ])
    document = document_store.save(db, org.id, "acme-prices.xlsx", sheet)

    normalized = normalize_spreadsheet(db, org.id, offer.id, document.id, document_store)

    items = _items(db, offer.id)
    assert len(items) == 2
    assert items[1].unit == "case"
    assert normalized.document_id == document.id
    assert normalized.vendor_id is None


def test_spreadsheet_without_required_columns_writes_nothing(db, org, make_offer, document_store):
    offer = make_offer(vendor_name=None, items=[(1, 1)])
    document = document_store.save(db, org.id, "bad.xlsx", _sheet([["Foo", "Bar"], ["a", "b"]]))

    with pytest.raises(ValidationError):
        normalize_spreadsheet(db, org.id, offer.id, document.id, document_store)
    assert len(_items(db, offer.id)) == 1


@pytest.mark.parametrize("line", [
    {"description": "Widget", "quantity": "1e30", "unit_price": 1},
    {"description": "Widget", "quantity": 1, "unit_price": "1e30"},
    {"description": "Widget", "quantity": "10000000000", "unit_price": 1},
    {"description": "Widget", "quantity": 1, "unit_price": 1, "moq": "1e12"},
])
def test_out_of_range_numbers_are_validation_errors(db, make_offer, line):
    offer = make_offer(vendor_name=None)
    with pytest.raises(ValidationError):
        normalize_manual(db, offer.org_id, offer.id, {"items": [line]})
    assert _items(db, offer.id) == []


def test_rounding_up_to_the_column_limit_is_rejected():
    parsed = validate_parsed_offer({"items": [{"description": "Widget", "quantity": "9999999999.99999", "unit_price": 1}]})
    with pytest.raises(ValidationError):
        compute_line(parsed.items[0])


def test_line_total_beyond_column_limit_is_rejected():
    parsed = validate_parsed_offer({"items": [{"description": "Widget", "quantity": "999999999", "unit_price": "999999999"}]})
    with pytest.raises(ValidationError):
        compute_line(parsed.items[0])


def test_huge_spreadsheet_quantity_is_a_validation_error(db, org, make_offer, document_store):
    offer = make_offer(vendor_name=None)
    sheet = _sheet([["Item", "Qty", "Unit Price"], ["Widget", 1e30, 10]])
    document = document_store.save(db, org.id, "huge.xlsx", sheet)

    with pytest.raises(ValidationError):
        normalize_spreadsheet(db, org.id, offer.id, document.id, document_store)
    assert _items(db, offer.id) == []
