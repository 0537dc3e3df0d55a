from .organization import Organization
from .document import Document
from .vendor import Vendor
from .offer import Offer, OfferItem, OfferStatus, OfferSourceType
from .order import Order, OrderItem, OrderStatus
from .shipment import Shipment, ShipmentEvent, ShipmentStatus

__all__ = [
    "Organization",
    "Document",
    "Vendor",
    "Offer",
    "OfferItem",
    "OfferStatus",
    "OfferSourceType",
    "Order",
    "OrderItem",
    "OrderStatus",
    "Shipment",
    "ShipmentEvent",
    "ShipmentStatus",
]
