"""
Spreadsheet parsing - reads vendor price sheets into a cell grid and maps the
grid onto canonical offer items.
"""
import io
import re
import logging
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from offerdesk.config.mapping_loader import get_offer_column_tokens
from offerdesk.errors import ValidationError

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("description", "price")
DEFAULT_UNIT = "ea"

_LEADING_NUMBER = re.compile(r"^\s*([-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?)")
_PRICE_NOISE = re.compile(r"[^0-9.\-]")


def infer_file_type(filename: str) -> str:
    """Infer file type from extension."""
    ext = Path(filename).suffix.lower()
    if ext == ".xlsx" or ext == ".xls":
        return "xlsx"
    elif ext == ".csv":
        return "csv"
    else:
        return ext.lstrip(".")


def read_grid(data: bytes, file_type: str) -> List[List[Any]]:
    """
    Read the first sheet of a workbook (or a CSV file) into a list of rows.

    No header inference happens here: row 0 is returned as-is and empty
    cells come back as None.
    """
    try:
        if file_type == "xlsx":
            df = pd.read_excel(io.BytesIO(data), sheet_name=0, header=None, dtype=object)
        elif file_type == "csv":
            df = None
            for encoding in ["utf-8", "latin-1", "cp1252"]:
                try:
                    df = pd.read_csv(io.BytesIO(data), header=None, dtype=str, encoding=encoding)
                    break
                except UnicodeDecodeError:
                    continue
            if df is None:
                raise ValidationError("Could not decode CSV file")
        else:
            raise ValidationError(f"Unsupported file type: {file_type}")
    except ValidationError:
        raise
    except pd.errors.EmptyDataError as e:
        raise ValidationError("Sheet has no data rows") from e
    except Exception as e:
        raise ValidationError(f"Could not read spreadsheet: {e}") from e

    df = df.astype(object).where(pd.notna(df), None)
    return df.values.tolist()


def locate_columns(header: List[Any], tokens: Optional[Dict[str, List[str]]] = None) -> Dict[str, int]:
    """
    Map canonical fields to header positions.

    For each field the token list is tried in order and the first header cell
    (left to right) containing the token wins. Fields with no match are left
    out of the result.
    """
    tokens = tokens or get_offer_column_tokens()
    header_cells = [str(cell).lower().strip() if cell is not None else "" for cell in header]

    columns: Dict[str, int] = {}
    for field, field_tokens in tokens.items():
        for token in field_tokens:
            index = next((i for i, cell in enumerate(header_cells) if token in cell), -1)
            if index >= 0:
                columns[field] = index
                break
    return columns


def _cell(row: List[Any], index: Optional[int]) -> Any:
    if index is None or index >= len(row):
        return None
    return row[index]


def _cell_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    return text or None


def coerce_price(value: Any) -> Optional[Decimal]:
    """
    Parse a price cell.

    Numeric cells are taken as-is; text cells are stripped of everything but
    digits, dots and minus signs first ("$1,234.50" -> 1234.50). Returns None
    when nothing numeric is left.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        raw = str(value)
    else:
        raw = _PRICE_NOISE.sub("", str(value))
    if not raw:
        return None
    try:
        price = Decimal(raw)
    except InvalidOperation:
        return None
    return price if price.is_finite() else None


def coerce_quantity(value: Any) -> Decimal:
    """Parse a quantity cell; anything unparseable counts as 1."""
    if value is None or isinstance(value, bool):
        return Decimal("1")
    if isinstance(value, (int, float, Decimal)):
        try:
            quantity = Decimal(str(value))
        except InvalidOperation:
            return Decimal("1")
        return quantity if quantity.is_finite() else Decimal("1")
    match = _LEADING_NUMBER.match(str(value))
    if not match:
        return Decimal("1")
    return Decimal(match.group(1))


def parse_offer_rows(grid: List[List[Any]], tokens: Optional[Dict[str, List[str]]] = None) -> List[Dict[str, Any]]:
    """
    Turn a cell grid (row 0 = header) into canonical item dicts.

    Rows without a description or a usable price are skipped. Positions are
    assigned contiguously over the kept rows.
    """
    if not grid:
        raise ValidationError("Sheet is empty")

    columns = locate_columns(grid[0], tokens)
    missing = [field for field in REQUIRED_COLUMNS if field not in columns]
    if missing:
        raise ValidationError(
            "Required columns not found: could not find description and price columns",
            details={"missing": missing, "header": [_cell_text(c) for c in grid[0]]},
        )
    if len(grid) < 2:
        raise ValidationError("Sheet has no data rows")

    items: List[Dict[str, Any]] = []
    skipped = 0
    for row_number, row in enumerate(grid[1:], start=2):
        description = _cell_text(_cell(row, columns["description"]))
        price = coerce_price(_cell(row, columns["price"]))
        if not description or price is None:
            skipped += 1
            continue

        quantity = coerce_quantity(_cell(row, columns.get("quantity")))
        if quantity <= 0:
            raise ValidationError(
                f"Row {row_number}: quantity must be positive",
                details={"row": row_number, "quantity": str(quantity)},
            )

        items.append({
            "sku": _cell_text(_cell(row, columns.get("sku"))),
            "description": description,
            "quantity": quantity,
            "unit": _cell_text(_cell(row, columns.get("unit"))) or DEFAULT_UNIT,
            "unit_price": price,
        })

    logger.info(
        "Parsed %d offer rows (%d skipped) using columns %s",
        len(items),
        skipped,
        columns,
    )
    return items
