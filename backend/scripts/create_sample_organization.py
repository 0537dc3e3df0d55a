"""
Script to create a sample organization for testing.
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from offerdesk.db.database import SessionLocal, Base, engine
from offerdesk.models import Organization


def create_sample_organization(name="Northwind Wholesale", currency="USD"):
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        existing = db.query(Organization).filter(Organization.name == name).first()
        if existing:
            print(f"Organization '{name}' already exists with ID: {existing.id}")
            return existing.id

        organization = Organization(name=name, currency=currency)
        db.add(organization)
        db.commit()
        db.refresh(organization)
        print(f"Created organization: {organization.name} (ID: {organization.id})")
        print(f"Send it as the X-Org-Id header: {organization.id}")
        return organization.id
    except Exception as e:
        print(f"Error: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    create_sample_organization(*sys.argv[1:3])
