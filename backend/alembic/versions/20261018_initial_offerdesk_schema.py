"""Initial offer, order and shipment schema

Revision ID: 20261018_initial_schema
Revises: 
Create Date: 2026-10-18 09:00:00.000000
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = "20261018_initial_schema"
down_revision = None
branch_labels = None
depends_on = None

OFFER_STATUSES = ("new", "negotiating", "accepted", "ordered", "in_transit", "delivered")
OFFER_SOURCE_TYPES = ("free_text", "spreadsheet", "manual")
ORDER_STATUSES = ("draft", "confirmed", "shipped", "delivered", "cancelled")
SHIPMENT_STATUSES = ("pending", "picked_up", "in_transit", "out_for_delivery", "delivered")


def _timestamps(with_updated=True):
    columns = [sa.Column("created_at", sa.DateTime(), nullable=True)]
    if with_updated:
        columns.append(sa.Column("updated_at", sa.DateTime(), nullable=True))
    return columns


def upgrade():
    op.create_table(
        "organizations",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False, unique=True),
        sa.Column("currency", sa.String(3), nullable=False, server_default="USD"),
        *_timestamps(),
    )

    op.create_table(
        "documents",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("org_id", sa.Uuid(), sa.ForeignKey("organizations.id"), nullable=False),
        sa.Column("original_filename", sa.String(), nullable=False),
        sa.Column("storage_path", sa.String(), nullable=False),
        sa.Column("file_type", sa.String(), nullable=False),
        *_timestamps(with_updated=False),
    )
    op.create_index("ix_documents_org_id", "documents", ["org_id"])

    op.create_table(
        "vendors",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("org_id", sa.Uuid(), sa.ForeignKey("organizations.id"), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("normalized_name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("address", sa.String(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("org_id", "normalized_name", name="uq_vendors_org_normalized_name"),
    )

    op.create_table(
        "offers",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("org_id", sa.Uuid(), sa.ForeignKey("organizations.id"), nullable=False),
        sa.Column("vendor_id", sa.Uuid(), sa.ForeignKey("vendors.id"), nullable=True),
        sa.Column("status", sa.Enum(*OFFER_STATUSES, name="offerstatus", native_enum=False), nullable=False),
        sa.Column("source_type", sa.Enum(*OFFER_SOURCE_TYPES, name="offersourcetype", native_enum=False), nullable=False),
        sa.Column("raw_content", sa.Text(), nullable=True),
        sa.Column("document_id", sa.Uuid(), sa.ForeignKey("documents.id"), nullable=True),
        sa.Column("parsed_json", postgresql.JSONB(), nullable=True),
        sa.Column("valid_until", sa.Date(), nullable=True),
        sa.Column("lead_time_days", sa.Integer(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_by", sa.Uuid(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_offers_org_id", "offers", ["org_id"])

    op.create_table(
        "offer_items",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("offer_id", sa.Uuid(), sa.ForeignKey("offers.id"), nullable=False),
        sa.Column("sku", sa.String(), nullable=True),
        sa.Column("description", sa.String(), nullable=False),
        sa.Column("quantity", sa.Numeric(14, 4), nullable=False),
        sa.Column("unit", sa.String(), nullable=False),
        sa.Column("unit_price", sa.Numeric(14, 4), nullable=False),
        sa.Column("total_price", sa.Numeric(24, 8), nullable=False),
        sa.Column("moq", sa.Numeric(14, 4), nullable=True),
        sa.Column("position", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("offer_id", "position", name="uq_offer_items_offer_position"),
    )
    op.create_index("ix_offer_items_offer_id", "offer_items", ["offer_id"])

    op.create_table(
        "orders",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("org_id", sa.Uuid(), sa.ForeignKey("organizations.id"), nullable=False),
        sa.Column("offer_id", sa.Uuid(), sa.ForeignKey("offers.id"), nullable=False, unique=True),
        sa.Column("vendor_id", sa.Uuid(), sa.ForeignKey("vendors.id"), nullable=False),
        sa.Column("status", sa.Enum(*ORDER_STATUSES, name="orderstatus", native_enum=False), nullable=False),
        sa.Column("total_amount", sa.Numeric(24, 8), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_by", sa.Uuid(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_orders_org_id", "orders", ["org_id"])

    op.create_table(
        "order_items",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("order_id", sa.Uuid(), sa.ForeignKey("orders.id"), nullable=False),
        sa.Column("offer_item_id", sa.Uuid(), sa.ForeignKey("offer_items.id"), nullable=False),
        sa.Column("sku", sa.String(), nullable=True),
        sa.Column("description", sa.String(), nullable=False),
        sa.Column("quantity", sa.Numeric(14, 4), nullable=False),
        sa.Column("unit", sa.String(), nullable=False),
        sa.Column("unit_price", sa.Numeric(14, 4), nullable=False),
        sa.Column("total_price", sa.Numeric(24, 8), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        *_timestamps(with_updated=False),
    )
    op.create_index("ix_order_items_order_id", "order_items", ["order_id"])

    op.create_table(
        "shipments",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("org_id", sa.Uuid(), sa.ForeignKey("organizations.id"), nullable=False),
        sa.Column("order_id", sa.Uuid(), sa.ForeignKey("orders.id"), nullable=False, unique=True),
        sa.Column("carrier", sa.String(), nullable=True),
        sa.Column("tracking_number", sa.String(), nullable=True),
        sa.Column("status", sa.Enum(*SHIPMENT_STATUSES, name="shipmentstatus", native_enum=False), nullable=False),
        sa.Column("estimated_delivery", sa.DateTime(), nullable=True),
        sa.Column("last_lat", sa.Float(), nullable=True),
        sa.Column("last_lng", sa.Float(), nullable=True),
        sa.Column("last_location_name", sa.String(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_shipments_org_id", "shipments", ["org_id"])

    op.create_table(
        "shipment_events",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("shipment_id", sa.Uuid(), sa.ForeignKey("shipments.id"), nullable=False),
        sa.Column("sequence", sa.Integer(), nullable=False),
        sa.Column("event_type", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("location_name", sa.String(), nullable=True),
        sa.Column("lat", sa.Float(), nullable=True),
        sa.Column("lng", sa.Float(), nullable=True),
        sa.Column("occurred_at", sa.DateTime(), nullable=False),
        *_timestamps(with_updated=False),
    )
    op.create_index("ix_shipment_events_shipment_id", "shipment_events", ["shipment_id"])


def downgrade():
    op.drop_table("shipment_events")
    op.drop_table("shipments")
    op.drop_table("order_items")
    op.drop_table("orders")
    op.drop_table("offer_items")
    op.drop_table("offers")
    op.drop_table("vendors")
    op.drop_table("documents")
    op.drop_table("organizations")
