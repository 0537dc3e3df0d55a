"""
Offer normalization - turns free text, spreadsheets and manual edits into the
canonical item set of an offer.
"""
import time
import logging
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from offerdesk.db.unit_of_work import unit_of_work
from offerdesk.errors import PreconditionError, ValidationError
from offerdesk.models import Offer, OfferItem, OfferStatus
from offerdesk.schemas.offer import MAX_LINE_VALUE, ParsedOffer, ParsedOfferItem
from offerdesk.services.document_store import LocalDocumentStore
from offerdesk.services.extractor import OpenAIExtractor
from offerdesk.services.file_parser import parse_offer_rows, read_grid
from offerdesk.services.lifecycle import EDITABLE_STATUSES, load_offer
from offerdesk.services.vendor_resolver import resolve_vendor

logger = logging.getLogger(__name__)

# Matches the Numeric(14, 4) columns
LINE_PRECISION = Decimal("0.0001")
# Numeric(24, 8) holds at most 16 integer digits
MAX_LINE_TOTAL = Decimal("1e16")


def validate_parsed_offer(payload: Any) -> ParsedOffer:
    """Check a loosely-typed payload against the canonical offer shape."""
    try:
        return ParsedOffer.model_validate(payload)
    except PydanticValidationError as e:
        problems = [
            f"{'.'.join(str(part) for part in err['loc']) or 'payload'}: {err['msg']}"
            for err in e.errors()
        ]
        raise ValidationError(
            "Offer payload does not match the canonical shape",
            details={"errors": problems},
        ) from e


def compute_line(item: ParsedOfferItem) -> Tuple[Decimal, Decimal, Decimal]:
    """
    Return (quantity, unit_price, total_price) as stored.

    Quantity and price are rounded to the column precision first, so the
    stored total is exactly their product.
    """
    try:
        quantity = item.quantity.quantize(LINE_PRECISION, rounding=ROUND_HALF_UP)
        unit_price = item.unit_price.quantize(LINE_PRECISION, rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        raise ValidationError(f"Quantity or price out of range for '{item.description}'") from e
    if quantity <= 0:
        raise ValidationError(f"Quantity must be positive for '{item.description}'")
    if quantity >= MAX_LINE_VALUE or abs(unit_price) >= MAX_LINE_VALUE:
        raise ValidationError(f"Quantity or price out of range for '{item.description}'")
    total_price = quantity * unit_price
    if abs(total_price) >= MAX_LINE_TOTAL:
        raise ValidationError(f"Line total out of range for '{item.description}'")
    return quantity, unit_price, total_price


def _ensure_editable(offer: Offer) -> None:
    if offer.status not in EDITABLE_STATUSES:
        raise PreconditionError(
            f"Offer {offer.id} is {OfferStatus(offer.status).value}; converted offers cannot be re-normalized"
        )


def _replace_items(db: Session, offer: Offer, items: List[ParsedOfferItem]) -> None:
    """
    Make the stored item set equal ``items``.

    Rows are matched by position: position k keeps its id across re-runs,
    new positions are inserted, positions past the new end are deleted.
    """
    existing = {
        row.position: row
        for row in db.query(OfferItem).filter(OfferItem.offer_id == offer.id).all()
    }

    for position, item in enumerate(items):
        quantity, unit_price, total_price = compute_line(item)
        row = existing.pop(position, None)
        if row is None:
            row = OfferItem(offer_id=offer.id, position=position)
            db.add(row)
        row.sku = item.sku
        row.description = item.description
        row.quantity = quantity
        row.unit = item.unit
        row.unit_price = unit_price
        row.total_price = total_price
        row.moq = item.moq

    for row in existing.values():
        db.delete(row)
    db.flush()


def apply_parsed_offer(
    db: Session,
    org_id: UUID,
    offer_id: UUID,
    parsed: ParsedOffer,
    document_id: Optional[UUID] = None,
) -> Offer:
    """
    Write a validated canonical payload onto an offer in one transaction.

    The item set is replaced wholesale. ``valid_until`` and ``lead_time_days``
    are only touched when the payload carries the key; a vendor is resolved
    and attached when ``vendor_name`` is present.
    """
    if not parsed.items:
        raise ValidationError("Offer has no line items")

    start_time = time.perf_counter()
    with unit_of_work(db):
        offer = load_offer(db, org_id, offer_id, lock=True)
        _ensure_editable(offer)

        if parsed.vendor_name:
            offer.vendor_id = resolve_vendor(db, offer.org_id, parsed.vendor_name, parsed.vendor_email)
        if "valid_until" in parsed.model_fields_set:
            offer.valid_until = parsed.valid_until
        if "lead_time_days" in parsed.model_fields_set:
            offer.lead_time_days = parsed.lead_time_days
        if document_id is not None:
            offer.document_id = document_id
        offer.parsed_json = parsed.model_dump(mode="json")

        _replace_items(db, offer, parsed.items)

    db.refresh(offer)
    duration = round(time.perf_counter() - start_time, 3)
    logger.info(
        "Normalized offer %s: %d items, vendor=%s in %.2fs",
        offer_id,
        len(parsed.items),
        offer.vendor_id,
        duration,
    )
    return offer


def _load_editable_offer(db: Session, org_id: UUID, offer_id: UUID) -> Tuple[Optional[str], OfferStatus]:
    # Short read transaction, so nothing stays open during slow I/O
    with unit_of_work(db):
        offer = load_offer(db, org_id, offer_id)
        _ensure_editable(offer)
        return offer.raw_content, offer.status


async def normalize_free_text(
    db: Session,
    org_id: UUID,
    offer_id: UUID,
    extractor: OpenAIExtractor,
) -> Tuple[Offer, ParsedOffer]:
    """Run the offer's raw text through the extractor and apply the result."""
    raw_content, _ = _load_editable_offer(db, org_id, offer_id)
    if not raw_content or not raw_content.strip():
        raise ValidationError(f"Offer {offer_id} has no raw content to parse")

    payload = await extractor.extract(raw_content)
    parsed = validate_parsed_offer(payload)
    offer = apply_parsed_offer(db, org_id, offer_id, parsed)
    return offer, parsed


def normalize_spreadsheet(
    db: Session,
    org_id: UUID,
    offer_id: UUID,
    document_id: UUID,
    store: LocalDocumentStore,
) -> Offer:
    """Import line items from an uploaded price sheet."""
    _load_editable_offer(db, org_id, offer_id)

    timings = {}
    read_start = time.perf_counter()
    document, data = store.fetch(db, org_id, document_id)
    grid = read_grid(data, document.file_type)
    timings["read_file"] = round(time.perf_counter() - read_start, 3)

    parsed = validate_parsed_offer({"items": parse_offer_rows(grid)})
    offer = apply_parsed_offer(db, org_id, offer_id, parsed, document_id=document.id)
    logger.info(
        "Imported %s into offer %s timings=%s",
        document.original_filename,
        offer_id,
        timings,
    )
    return offer


def normalize_manual(
    db: Session,
    org_id: UUID,
    offer_id: UUID,
    payload: Dict[str, Any],
) -> Tuple[Offer, ParsedOffer]:
    """Apply a canonical payload edited by hand."""
    parsed = validate_parsed_offer(payload)
    offer = apply_parsed_offer(db, org_id, offer_id, parsed)
    return offer, parsed
