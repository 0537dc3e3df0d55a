"""
KPI snapshot schemas.
"""
from pydantic import BaseModel
from typing import Optional, List


class VendorRevenue(BaseModel):
    vendor_name: str
    revenue: float
    order_count: int


class KpiSnapshot(BaseModel):
    total_revenue: float = 0.0
    avg_margin_pct: Optional[float] = None  # No cost basis is tracked
    conversion_rate: float = 0.0
    avg_lead_time_days: float = 0.0
    top_vendors: List[VendorRevenue] = []
    unavailable_metrics: List[str] = []
