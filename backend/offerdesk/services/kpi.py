"""
KPI aggregation - read-only rollups over an organization's offers and orders.
"""
from __future__ import annotations

import time
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from offerdesk.models import Offer, OfferStatus, Order, OrderStatus, Vendor
from offerdesk.schemas.kpi import KpiSnapshot, VendorRevenue

logger = logging.getLogger(__name__)

REVENUE_ORDER_STATUSES = [OrderStatus.CONFIRMED, OrderStatus.SHIPPED, OrderStatus.DELIVERED]
CONVERTED_OFFER_STATUSES = [
    OfferStatus.ACCEPTED,
    OfferStatus.ORDERED,
    OfferStatus.IN_TRANSIT,
    OfferStatus.DELIVERED,
]
TOP_VENDOR_LIMIT = 10

# Metrics reported as null because the data model cannot support them
UNAVAILABLE_METRICS = ["avg_margin_pct"]


def _decimal_to_float(value: Optional[Decimal]) -> float:
    return float(value) if value is not None else 0.0


def _total_revenue(db: Session, org_id: UUID) -> Decimal:
    value = (
        db.query(func.sum(Order.total_amount))
        .filter(Order.org_id == org_id, Order.status.in_(REVENUE_ORDER_STATUSES))
        .scalar()
    )
    return value or Decimal("0")


def _conversion_rate(db: Session, org_id: UUID) -> float:
    total_offers = db.query(func.count(Offer.id)).filter(Offer.org_id == org_id).scalar() or 0
    if not total_offers:
        return 0.0
    converted = (
        db.query(func.count(Offer.id))
        .filter(Offer.org_id == org_id, Offer.status.in_(CONVERTED_OFFER_STATUSES))
        .scalar()
        or 0
    )
    return converted / total_offers


def _avg_lead_time(db: Session, org_id: UUID) -> float:
    lead_times = [
        days
        for (days,) in db.query(Offer.lead_time_days)
        .filter(Offer.org_id == org_id, Offer.lead_time_days.isnot(None), Offer.lead_time_days > 0)
        .all()
    ]
    if not lead_times:
        return 0.0
    return sum(lead_times) / len(lead_times)


def _top_vendors(db: Session, org_id: UUID) -> List[VendorRevenue]:
    revenue = func.sum(Order.total_amount)
    rows = (
        db.query(Vendor.name, revenue, func.count(Order.id))
        .join(Order, Order.vendor_id == Vendor.id)
        .filter(Order.org_id == org_id, Order.status.in_(REVENUE_ORDER_STATUSES))
        .group_by(Vendor.name)
        .order_by(revenue.desc())
        .limit(TOP_VENDOR_LIMIT)
        .all()
    )
    return [
        VendorRevenue(vendor_name=name, revenue=_decimal_to_float(total), order_count=count)
        for name, total, count in rows
    ]


def build_kpi_snapshot(db: Session, org_id: UUID) -> KpiSnapshot:
    """
    Compute the KPI snapshot for one organization.

    Margin is not computed: no cost basis is stored, so ``avg_margin_pct`` is
    null and listed in ``unavailable_metrics`` rather than reported as zero.
    """
    start_time = time.perf_counter()
    snapshot = KpiSnapshot(
        total_revenue=_decimal_to_float(_total_revenue(db, org_id)),
        avg_margin_pct=None,
        conversion_rate=_conversion_rate(db, org_id),
        avg_lead_time_days=_avg_lead_time(db, org_id),
        top_vendors=_top_vendors(db, org_id),
        unavailable_metrics=list(UNAVAILABLE_METRICS),
    )
    duration = round(time.perf_counter() - start_time, 3)
    logger.info("KPI snapshot for org %s computed in %.2fs", org_id, duration)
    return snapshot


def snapshot_rows(snapshot: KpiSnapshot) -> List[Dict[str, Any]]:
    """Flatten the headline metrics into label/value rows for exports."""
    return [
        {"Metric": "Total Revenue", "Value": f"${snapshot.total_revenue:,.2f}"},
        {"Metric": "Conversion Rate", "Value": f"{snapshot.conversion_rate * 100:.1f}%"},
        {"Metric": "Average Lead Time (days)", "Value": f"{snapshot.avg_lead_time_days:.1f}"},
        {
            "Metric": "Average Margin",
            "Value": "Not available" if snapshot.avg_margin_pct is None else f"{snapshot.avg_margin_pct:.1f}%",
        },
    ]
