"""
KPI report API endpoints (JSON, Excel, PDF).
"""
from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session
from uuid import UUID
from offerdesk.api.deps import get_org_id
from offerdesk.db.database import get_db
from offerdesk.schemas.kpi import KpiSnapshot
from offerdesk.services.export import generate_kpi_excel, generate_kpi_pdf
from offerdesk.services.kpi import build_kpi_snapshot

router = APIRouter()


@router.get("/kpi", response_model=KpiSnapshot)
async def get_kpi_snapshot(
    org_id: UUID = Depends(get_org_id),
    db: Session = Depends(get_db)
):
    """Revenue, conversion and lead-time rollups for the organization."""
    return build_kpi_snapshot(db, org_id)


@router.get("/kpi/excel")
async def download_kpi_excel(
    org_id: UUID = Depends(get_org_id),
    db: Session = Depends(get_db)
):
    """Download the KPI report as Excel."""
    file_path = generate_kpi_excel(db, org_id)
    return FileResponse(
        file_path,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        filename=f"kpi_report_{org_id}.xlsx"
    )


@router.get("/kpi/pdf")
async def download_kpi_pdf(
    org_id: UUID = Depends(get_org_id),
    db: Session = Depends(get_db)
):
    """Download the KPI summary as PDF."""
    file_path = generate_kpi_pdf(db, org_id)
    return FileResponse(
        file_path,
        media_type="application/pdf",
        filename=f"kpi_summary_{org_id}.pdf"
    )
