"""
Typed errors raised by the offer, order and shipment services.

Every error carries a machine-readable ``code`` and the HTTP status the API
layer answers with, so callers catch by type and clients switch on ``kind``:

    OfferDeskError
    +-- ValidationError       malformed input, missing columns, empty item set
    +-- NotFoundError         missing offer, vendor, document, order or shipment
    +-- PreconditionError     guard not met (no vendor, no items, wrong status)
    +-- ConflictError         re-entrant conversion, lost status race, regression
    +-- ExternalServiceError  extractor or document store failing
    +-- PersistenceError      datastore write failure
"""
from typing import Any, Dict, Optional


class OfferDeskError(Exception):
    code = "offerdesk_error"
    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"kind": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationError(OfferDeskError):
    code = "validation_error"
    status_code = 422


class NotFoundError(OfferDeskError):
    code = "not_found"
    status_code = 404


class PreconditionError(OfferDeskError):
    code = "precondition_failed"
    status_code = 409


class ConflictError(OfferDeskError):
    code = "conflict"
    status_code = 409


class ExternalServiceError(OfferDeskError):
    code = "external_service_error"
    status_code = 502


class PersistenceError(OfferDeskError):
    code = "persistence_error"
    status_code = 500
