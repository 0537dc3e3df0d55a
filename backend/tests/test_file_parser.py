"""Tests for spreadsheet reading and row mapping."""
import io
from decimal import Decimal

import pytest
from openpyxl import Workbook

from offerdesk.errors import ValidationError
from offerdesk.services.file_parser import (
    coerce_price, coerce_quantity, infer_file_type, locate_columns, parse_offer_rows, read_grid,
)

HEADER = ["Item", "Qty", "Unit", "Unit Price", "SKU"]


def _xlsx_bytes(rows):
    wb = Workbook()
    ws = wb.active
    for row in rows:
        ws.append(row)
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def test_infer_file_type():
    assert infer_file_type("Prices.XLSX") == "xlsx"
    assert infer_file_type("legacy.xls") == "xlsx"
    assert infer_file_type("prices.csv") == "csv"
    assert infer_file_type("quote.pdf") == "pdf"


def test_locate_columns_uses_first_matching_token():
    columns = locate_columns(HEADER)
    assert columns == {"description": 0, "quantity": 1, "unit": 2, "price": 3, "sku": 4}


def test_locate_columns_prefers_earlier_token_over_earlier_cell():
    # "description" is tried before "name", so column 1 wins
    columns = locate_columns(["Vendor Name", "Description", "Price"])
    assert columns["description"] == 1


def test_parse_offer_rows_keeps_every_complete_row():
    grid = [
        HEADER,
        ["Widget", 2, "ea", 10, "W-1"],
        ["Gadget", 1, "case", "$5.00", None],
        ["Sprocket", "3 pcs", None, "1,234.50", "S-9"],
    ]
    items = parse_offer_rows(grid)

    assert len(items) == 3
    assert items[0] == {
        "sku": "W-1",
        "description": "Widget",
        "quantity": Decimal("2"),
        "unit": "ea",
        "unit_price": Decimal("10"),
    }
    assert items[1]["unit_price"] == Decimal("5.00")
    assert items[1]["sku"] is None
    assert items[2]["quantity"] == Decimal("3")
    assert items[2]["unit"] == "ea"
    assert items[2]["unit_price"] == Decimal("1234.50")


def test_parse_offer_rows_skips_rows_without_description_or_price():
    grid = [
        HEADER,
        ["Widget", 2, "ea", 10, None],
        [None, 1, "ea", 4, None],
        ["Freebie", 1, "ea", None, None],
        ["Call for price", 1, "ea", "TBD", None],
    ]
    items = parse_offer_rows(grid)
    assert [item["description"] for item in items] == ["Widget"]


def test_parse_offer_rows_defaults_missing_quantity_to_one():
    items = parse_offer_rows([["Description", "Price"], ["Widget", 7]])
    assert items[0]["quantity"] == Decimal("1")
    assert items[0]["unit"] == "ea"


def test_parse_offer_rows_requires_description_and_price_columns():
    with pytest.raises(ValidationError) as exc_info:
        parse_offer_rows([["Foo", "Bar"], ["a", "b"]])
    assert "Required columns not found" in exc_info.value.message
    assert exc_info.value.details["missing"] == ["description", "price"]


def test_parse_offer_rows_rejects_non_positive_quantity():
    with pytest.raises(ValidationError) as exc_info:
        parse_offer_rows([HEADER, ["Widget", 0, "ea", 10, None]])
    assert "Row 2" in exc_info.value.message


def test_parse_offer_rows_needs_data_rows():
    with pytest.raises(ValidationError):
        parse_offer_rows([HEADER])
    with pytest.raises(ValidationError):
        parse_offer_rows([])


def test_coerce_helpers():
    assert coerce_price("USD 12.5") == Decimal("12.5")
    assert coerce_price("n/a") is None
    assert coerce_price(None) is None
    assert coerce_quantity("12 cases") == Decimal("12")
    assert coerce_quantity("lots") == Decimal("1")
    assert coerce_quantity(None) == Decimal("1")
    assert coerce_quantity("1e3") == Decimal("1000")
    assert coerce_quantity("2.5E-1 kg") == Decimal("0.25")
    assert coerce_quantity("3e pallets") == Decimal("3")


def test_read_grid_from_xlsx():
    data = _xlsx_bytes([HEADER, ["Widget", 2, "ea", 10, "W-1"], ["Gadget", 1, None, 5, None]])
    grid = read_grid(data, "xlsx")

    assert grid[0] == HEADER
    assert grid[1][0] == "Widget"
    assert grid[2][2] is None
    assert len(parse_offer_rows(grid)) == 2


def test_read_grid_from_csv():
    data = b"Item,Qty,Unit,Unit Price,SKU\nWidget,2,ea,10,W-1\nGadget,1,,5,\n"
    grid = read_grid(data, "csv")
    items = parse_offer_rows(grid)

    assert len(items) == 2
    assert items[1]["unit"] == "ea"
    assert items[1]["sku"] is None


def test_read_grid_rejects_unsupported_type():
    with pytest.raises(ValidationError):
        read_grid(b"%PDF-1.4", "pdf")


def test_exponent_quantity_text_cell():
    items = parse_offer_rows([HEADER, ["Widget", "1e3", "ea", 2, None]])
    assert items[0]["quantity"] == Decimal("1000")
