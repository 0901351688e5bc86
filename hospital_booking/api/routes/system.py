from datetime import datetime, timezone
from fastapi import APIRouter, Depends
import time

from ...core.config import settings
from ...repositories import AppointmentStore
from ...services.catalog import Catalog
from ...services.reporting import compute_stats, today_iso
from ..deps import get_catalog, get_store

router = APIRouter(tags=["System"])

STARTED_AT = time.monotonic()

@router.get("/health")
def health_check(store: AppointmentStore = Depends(get_store)):
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": time.monotonic() - STARTED_AT,
        "appointments": store.count(),
        "patients": store.count_patients(),
    }

@router.get("/stats")
def stats(
    store: AppointmentStore = Depends(get_store),
    catalog: Catalog = Depends(get_catalog),
):
    """Appointment counts by status plus patient, doctor and today totals."""
    return {"success": True, "data": compute_stats(store, catalog, today_iso())}
