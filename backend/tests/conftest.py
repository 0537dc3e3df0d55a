"""
Pytest fixtures: in-memory SQLite database, FastAPI test client, fakes.
"""
import os
import tempfile

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="offerdesk-uploads-"))
os.environ.setdefault("EXPORT_DIR", tempfile.mkdtemp(prefix="offerdesk-exports-"))

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from offerdesk.db.database import Base, get_db, settings
from offerdesk.main import app
from offerdesk.models import Offer, OfferItem, OfferStatus, Organization, Vendor
from offerdesk.services.document_store import LocalDocumentStore, get_document_store
from offerdesk.services.extractor import get_extractor


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def document_store(tmp_path):
    return LocalDocumentStore(root=str(tmp_path / "uploads"))


@pytest.fixture()
def export_dir(tmp_path, monkeypatch):
    path = tmp_path / "exports"
    monkeypatch.setattr(settings, "export_dir", str(path))
    return path


class FakeExtractor:
    """Returns a canned payload instead of calling the model."""

    def __init__(self, payload=None):
        self.payload = payload if payload is not None else {}
        self.calls = []

    async def extract(self, text):
        self.calls.append(text)
        return self.payload


@pytest.fixture()
def fake_extractor():
    return FakeExtractor({
        "vendor_name": "Acme Supply",
        "vendor_email": "sales@acme.test",
        "valid_until": "2026-12-31",
        "lead_time_days": 14,
        "terms": "Net 30",
        "items": [
            {"sku": "W-1", "description": "Widget", "quantity": 2, "unit": "ea", "unit_price": 10},
            {"sku": None, "description": "Gadget", "quantity": 1, "unit": None, "unit_price": "5.00"},
        ],
    })


@pytest.fixture()
def client(session_factory, document_store, fake_extractor):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_document_store] = lambda: document_store
    app.dependency_overrides[get_extractor] = lambda: fake_extractor
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def org(db):
    organization = Organization(name="Northwind Wholesale", currency="USD")
    db.add(organization)
    db.commit()
    db.refresh(organization)
    return organization


@pytest.fixture()
def other_org(db):
    organization = Organization(name="Contoso Traders", currency="EUR")
    db.add(organization)
    db.commit()
    db.refresh(organization)
    return organization


@pytest.fixture()
def make_offer(db, org):
    """Build an offer directly in the database, with optional vendor and items."""

    def _make_offer(status=OfferStatus.NEW, items=None, vendor_name="Acme Supply", org_id=None,
                    raw_content=None, lead_time_days=None):
        org_id = org_id or org.id
        vendor = None
        if vendor_name:
            vendor = db.query(Vendor).filter(Vendor.org_id == org_id, Vendor.name == vendor_name).first()
            if vendor is None:
                vendor = Vendor(org_id=org_id, name=vendor_name)
                db.add(vendor)
                db.flush()
        offer = Offer(
            org_id=org_id,
            vendor_id=vendor.id if vendor else None,
            status=status,
            raw_content=raw_content,
            lead_time_days=lead_time_days,
        )
        db.add(offer)
        db.flush()
        for position, (quantity, unit_price) in enumerate(items or []):
            quantity, unit_price = Decimal(str(quantity)), Decimal(str(unit_price))
            db.add(OfferItem(
                offer_id=offer.id,
                description=f"Item {position + 1}",
                quantity=quantity,
                unit="ea",
                unit_price=unit_price,
                total_price=quantity * unit_price,
                position=position,
            ))
        db.commit()
        db.refresh(offer)
        return offer

    return _make_offer
