from fastapi import Depends
from functools import lru_cache

from ..core.config import settings
from ..repositories import AppointmentStore, build_store
from ..services.availability import AvailabilityService
from ..services.booking_service import BookingService
from ..services.catalog import Catalog
from ..services.lifecycle import StatusManager

@lru_cache()
def get_catalog() -> Catalog:
    """Doctor roster shared by every request."""
    return Catalog()

@lru_cache()
def get_store() -> AppointmentStore:
    """Process-wide appointment store. Override in tests."""
    return build_store(settings, get_catalog())

def get_availability_service(
    store: AppointmentStore = Depends(get_store),
    catalog: Catalog = Depends(get_catalog),
) -> AvailabilityService:
    return AvailabilityService(store, catalog)

def get_booking_service(
    store: AppointmentStore = Depends(get_store),
    catalog: Catalog = Depends(get_catalog),
) -> BookingService:
    return BookingService(store, catalog)

def get_status_manager(
    store: AppointmentStore = Depends(get_store),
) -> StatusManager:
    return StatusManager(store, strict=settings.STRICT_STATUS_TRANSITIONS)
