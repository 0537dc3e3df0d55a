from .organization import OrganizationCreate, OrganizationResponse
from .document import DocumentResponse
from .offer import (
    ParsedOffer,
    ParsedOfferItem,
    OfferCreate,
    OfferResponse,
    OfferItemResponse,
    SpreadsheetImportRequest,
    ParsedOfferResponse,
    SpreadsheetImportResponse,
)
from .order import ConversionResponse, OrderResponse, OrderItemResponse
from .shipment import (
    ShipmentAdvanceRequest,
    ShipmentAdvanceResponse,
    ShipmentResponse,
    ShipmentEventResponse,
)
from .kpi import KpiSnapshot, VendorRevenue

__all__ = [
    "OrganizationCreate",
    "OrganizationResponse",
    "DocumentResponse",
    "ParsedOffer",
    "ParsedOfferItem",
    "OfferCreate",
    "OfferResponse",
    "OfferItemResponse",
    "SpreadsheetImportRequest",
    "ParsedOfferResponse",
    "SpreadsheetImportResponse",
    "ConversionResponse",
    "OrderResponse",
    "OrderItemResponse",
    "ShipmentAdvanceRequest",
    "ShipmentAdvanceResponse",
    "ShipmentResponse",
    "ShipmentEventResponse",
    "KpiSnapshot",
    "VendorRevenue",
]
