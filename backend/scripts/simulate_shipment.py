"""
Script to walk a shipment through its carrier milestones.

Usage:
    python scripts/simulate_shipment.py <org_id> [shipment_id] [--event-index N]

Without --event-index every remaining milestone is recorded in order.
"""
import sys
import os
import argparse
from uuid import UUID
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from offerdesk.db.database import SessionLocal
from offerdesk.models import Shipment
from offerdesk.services.shipment_tracker import MILESTONES, STATUS_PROGRESS, advance_shipment


def simulate_shipment(org_id, shipment_id=None, event_index=None):
    db = SessionLocal()
    try:
        if event_index is not None:
            indexes = [event_index]
        else:
            start = 0
            if shipment_id:
                shipment = db.query(Shipment).filter(Shipment.id == shipment_id).first()
                if shipment:
                    start = STATUS_PROGRESS[shipment.status] + 1
            indexes = range(start, len(MILESTONES))

        for index in indexes:
            result = advance_shipment(db, org_id, shipment_id, index)
            shipment_id = result.shipment_id
            print(f"✓ {result.shipment_id}: {result.event_type} -> {result.status.value}")
    finally:
        db.close()


def main():
    parser = argparse.ArgumentParser(description="Advance a shipment through its milestones")
    parser.add_argument("org_id", type=UUID)
    parser.add_argument("shipment_id", type=UUID, nargs="?")
    parser.add_argument("--event-index", type=int, default=None)
    args = parser.parse_args()
    simulate_shipment(args.org_id, args.shipment_id, args.event_index)


if __name__ == "__main__":
    main()
