"""Tests for the offer -> order -> shipment conversion transaction."""
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from offerdesk.db.database import Base
from offerdesk.errors import ConflictError, PreconditionError, ValidationError
from offerdesk.models import (
    Offer, OfferItem, OfferStatus, Order, OrderItem, OrderStatus, Organization, Shipment, ShipmentStatus, Vendor,
)
from offerdesk.services import conversion
from offerdesk.services.conversion import convert_offer, generate_tracking_number


def test_convert_creates_order_items_and_shipment(db, make_offer):
    offer = make_offer(status=OfferStatus.ACCEPTED, items=[(2, 10), (1, 5)])

    result = convert_offer(db, offer.org_id, offer.id)

    order = db.query(Order).filter(Order.id == result.order_id).one()
    assert order.total_amount == Decimal("25")
    assert order.status == OrderStatus.CONFIRMED
    assert order.currency == "USD"
    assert order.vendor_id == offer.vendor_id

    order_items = db.query(OrderItem).filter(OrderItem.order_id == order.id).order_by(OrderItem.position).all()
    assert [item.total_price for item in order_items] == [Decimal("20"), Decimal("5")]
    assert [item.offer_item_id for item in order_items] == [item.id for item in offer.items]

    shipment = db.query(Shipment).filter(Shipment.id == result.shipment_id).one()
    assert shipment.order_id == order.id
    assert shipment.status == ShipmentStatus.PENDING
    assert shipment.carrier == "Demo Carrier"
    assert shipment.tracking_number.startswith("TL-")

    db.refresh(offer)
    assert offer.status == OfferStatus.ORDERED


def test_convert_from_negotiating_is_allowed(db, make_offer):
    offer = make_offer(status=OfferStatus.NEGOTIATING, items=[(1, 1)])
    assert convert_offer(db, offer.org_id, offer.id).shipment_id is not None


def test_convert_twice_conflicts_and_keeps_one_order(db, make_offer):
    offer = make_offer(status=OfferStatus.ACCEPTED, items=[(2, 10), (1, 5)])
    convert_offer(db, offer.org_id, offer.id)

    with pytest.raises(ConflictError):
        convert_offer(db, offer.org_id, offer.id)
    assert db.query(Order).filter(Order.offer_id == offer.id).count() == 1
    assert db.query(Shipment).count() == 1


def test_convert_new_offer_needs_approval(db, make_offer):
    offer = make_offer(items=[(1, 1)])
    with pytest.raises(PreconditionError):
        convert_offer(db, offer.org_id, offer.id)
    assert db.query(Order).count() == 0


def test_convert_requires_vendor(db, make_offer):
    offer = make_offer(status=OfferStatus.ACCEPTED, items=[(1, 1)], vendor_name=None)
    with pytest.raises(PreconditionError):
        convert_offer(db, offer.org_id, offer.id)


def test_convert_requires_items(db, make_offer):
    offer = make_offer(status=OfferStatus.ACCEPTED)
    with pytest.raises(PreconditionError):
        convert_offer(db, offer.org_id, offer.id)
    assert db.query(Offer).filter(Offer.id == offer.id).one().status == OfferStatus.ACCEPTED


def test_order_uses_organization_currency(db, other_org, make_offer):
    offer = make_offer(status=OfferStatus.ACCEPTED, items=[(3, 2)], org_id=other_org.id)
    result = convert_offer(db, other_org.id, offer.id)
    assert db.query(Order).filter(Order.id == result.order_id).one().currency == "EUR"


def test_tracking_numbers_are_unique():
    numbers = {generate_tracking_number() for _ in range(50)}
    assert len(numbers) == 50
    assert all(len(number) == 15 for number in numbers)


def test_failure_after_order_insert_rolls_everything_back(db, make_offer, monkeypatch):
    offer = make_offer(status=OfferStatus.ACCEPTED, items=[(2, 10), (1, 5)])

    def carrier_down():
        raise RuntimeError("carrier unavailable")

    monkeypatch.setattr(conversion, "generate_tracking_number", carrier_down)
    with pytest.raises(RuntimeError):
        convert_offer(db, offer.org_id, offer.id)

    assert db.query(Order).count() == 0
    assert db.query(OrderItem).count() == 0
    assert db.query(Shipment).count() == 0
    db.refresh(offer)
    assert offer.status == OfferStatus.ACCEPTED


def test_order_total_out_of_range_is_rejected(db, make_offer):
    offer = make_offer(status=OfferStatus.ACCEPTED, items=[(9999999, 999999999), (9999999, 999999999)])
    with pytest.raises(ValidationError):
        convert_offer(db, offer.org_id, offer.id)
    assert db.query(Order).count() == 0


@pytest.fixture()
def file_session_factory(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'offerdesk.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


def test_concurrent_conversion_loser_conflicts(file_session_factory, monkeypatch):
    setup = file_session_factory()
    organization = Organization(name="Northwind Wholesale", currency="USD")
    setup.add(organization)
    setup.flush()
    vendor = Vendor(org_id=organization.id, name="Acme Supply")
    setup.add(vendor)
    setup.flush()
    offer = Offer(org_id=organization.id, vendor_id=vendor.id, status=OfferStatus.ACCEPTED)
    setup.add(offer)
    setup.flush()
    setup.add(OfferItem(
        offer_id=offer.id,
        description="Widget",
        quantity=Decimal("2"),
        unit="ea",
        unit_price=Decimal("10"),
        total_price=Decimal("20"),
        position=0,
    ))
    setup.commit()
    org_id, offer_id, vendor_id = organization.id, offer.id, vendor.id
    setup.close()

    original_currency = conversion._org_currency

    def rival_commits_first(db, org):
        # Another request's order lands after our checks but before our insert
        rival = file_session_factory()
        try:
            rival.add(Order(
                org_id=org_id,
                offer_id=offer_id,
                vendor_id=vendor_id,
                status=OrderStatus.CONFIRMED,
                total_amount=Decimal("20"),
                currency="USD",
            ))
            rival.commit()
        finally:
            rival.close()
        return original_currency(db, org)

    monkeypatch.setattr(conversion, "_org_currency", rival_commits_first)

    loser = file_session_factory()
    try:
        with pytest.raises(ConflictError):
            convert_offer(loser, org_id, offer_id)
    finally:
        loser.close()

    check = file_session_factory()
    try:
        assert check.query(Order).filter(Order.offer_id == offer_id).count() == 1
        assert check.query(Shipment).count() == 0
        assert check.query(Offer).filter(Offer.id == offer_id).one().status == OfferStatus.ACCEPTED
    finally:
        check.close()
