"""
Export services for Excel and PDF KPI reports.
"""
from pathlib import Path
from datetime import datetime
from uuid import UUID
from sqlalchemy.orm import Session
from openpyxl import Workbook
from openpyxl.styles import Font
from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
import time
import logging
from offerdesk.db.database import settings
from offerdesk.errors import NotFoundError
from offerdesk.models import Organization
from offerdesk.services.kpi import build_kpi_snapshot, snapshot_rows

logger = logging.getLogger(__name__)


def _export_dir() -> Path:
    export_dir = Path(settings.export_dir)
    export_dir.mkdir(parents=True, exist_ok=True)
    return export_dir


def _get_organization(db: Session, org_id: UUID) -> Organization:
    org = db.query(Organization).filter(Organization.id == org_id).first()
    if not org:
        raise NotFoundError(f"Organization {org_id} not found")
    return org


def generate_kpi_excel(db: Session, org_id: UUID) -> str:
    """
    Generate Excel KPI report with:
    - Summary sheet
    - Top vendors by revenue
    """
    start_time = time.perf_counter()
    org = _get_organization(db, org_id)
    snapshot = build_kpi_snapshot(db, org_id)

    wb = Workbook()

    ws_summary = wb.active
    ws_summary.title = "Summary"
    ws_summary.append(["KPI Summary"])
    ws_summary["A1"].font = Font(bold=True, size=14)
    ws_summary.append(["Organization", org.name])
    ws_summary.append(["Generated", datetime.utcnow().strftime("%Y-%m-%d %H:%M UTC")])
    ws_summary.append([])
    for row in snapshot_rows(snapshot):
        ws_summary.append([row["Metric"], row["Value"]])

    ws_vendors = wb.create_sheet("Top Vendors")
    ws_vendors.append(["Vendor", "Revenue", "Orders"])
    for cell in ws_vendors[1]:
        cell.font = Font(bold=True)
    for vendor in snapshot.top_vendors:
        ws_vendors.append([vendor.vendor_name, vendor.revenue, vendor.order_count])

    file_path = _export_dir() / f"kpi_report_{org_id}.xlsx"
    wb.save(file_path)
    duration = round(time.perf_counter() - start_time, 3)
    logger.info(
        "Excel KPI report generated for org %s vendors=%d in %.2fs",
        org_id,
        len(snapshot.top_vendors),
        duration,
    )
    return str(file_path)


def generate_kpi_pdf(db: Session, org_id: UUID) -> str:
    """
    Generate a one-page PDF KPI summary.
    """
    start_time = time.perf_counter()
    org = _get_organization(db, org_id)
    snapshot = build_kpi_snapshot(db, org_id)

    file_path = _export_dir() / f"kpi_summary_{org_id}.pdf"
    doc = SimpleDocTemplate(str(file_path), pagesize=letter)
    story = []

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        'CustomTitle',
        parent=styles['Heading1'],
        fontSize=18,
        textColor=colors.HexColor('#1a1a1a'),
        spaceAfter=30,
    )

    story.append(Paragraph(f"Commercial KPIs: {org.name}", title_style))
    story.append(Spacer(1, 0.2*inch))

    metrics = Table([[row["Metric"], row["Value"]] for row in snapshot_rows(snapshot)], colWidths=[3*inch, 2*inch])
    metrics.setStyle(TableStyle([
        ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
        ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
    ]))
    story.append(metrics)
    story.append(Spacer(1, 0.3*inch))

    story.append(Paragraph("Top Vendors", styles['Heading2']))
    if snapshot.top_vendors:
        vendor_rows = [["Vendor", "Revenue", "Orders"]] + [
            [v.vendor_name, f"${v.revenue:,.2f}", str(v.order_count)] for v in snapshot.top_vendors
        ]
        vendors = Table(vendor_rows, colWidths=[3*inch, 1.5*inch, 1*inch])
        vendors.setStyle(TableStyle([
            ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
            ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#e8e8e8')),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ]))
        story.append(vendors)
    else:
        story.append(Paragraph("No orders yet.", styles['Normal']))

    doc.build(story)
    duration = round(time.perf_counter() - start_time, 3)
    logger.info("PDF KPI summary generated for org %s in %.2fs", org_id, duration)
    return str(file_path)
