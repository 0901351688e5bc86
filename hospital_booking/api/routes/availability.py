from fastapi import APIRouter, Depends

from ...services.availability import AvailabilityService
from ..deps import get_availability_service

router = APIRouter(prefix="/availability", tags=["Availability"])

@router.get("/{doctor_id}/{date}")
def get_availability(
    doctor_id: int,
    date: str,
    service: AvailabilityService = Depends(get_availability_service),
):
    """Free and booked slots of a doctor's working hours on ``date``."""
    availability = service.compute_availability(doctor_id, date)
    return {"success": True, **availability.model_dump(by_alias=True)}
