"""
Main FastAPI application entry point.
"""
import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from offerdesk.api import documents, offers, orders, organizations, reports, shipments
from offerdesk.db.database import engine, Base
from offerdesk.errors import OfferDeskError
import offerdesk.models  # noqa: F401  registers tables on Base.metadata

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Create database tables
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="OfferDesk Commercial Operations Platform",
    description="Vendor offer intake, order conversion and shipment tracking",
    version="1.0.0"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://localhost:5173"],  # React dev servers
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(OfferDeskError)
async def handle_offerdesk_error(request: Request, exc: OfferDeskError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.warning("%s %s rejected (%s): %s", request.method, request.url.path, exc.code, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.to_dict()})


# Include routers
app.include_router(organizations.router, prefix="/api/organizations", tags=["organizations"])
app.include_router(documents.router, prefix="/api/documents", tags=["documents"])
app.include_router(offers.router, prefix="/api/offers", tags=["offers"])
app.include_router(orders.router, prefix="/api/orders", tags=["orders"])
app.include_router(shipments.router, prefix="/api/shipments", tags=["shipments"])
app.include_router(reports.router, prefix="/api/reports", tags=["reports"])


@app.get("/")
async def root():
    return {"message": "OfferDesk Commercial Operations API"}


@app.get("/health")
async def health():
    return {"status": "healthy"}
