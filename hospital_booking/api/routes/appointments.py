from fastapi import APIRouter, Depends, status

from ...core.exceptions import NotFoundError
from ...repositories import AppointmentStore
from ...schemas.appointment import AppointmentCreate, StatusUpdate
from ...services.booking_service import BookingService
from ...services.lifecycle import StatusManager
from ...services.reporting import today_iso
from ..deps import get_booking_service, get_status_manager, get_store

router = APIRouter(prefix="/appointments", tags=["Appointments"])

def _listing(appointments):
    return {"success": True, "count": len(appointments), "data": appointments}

@router.get("")
def list_appointments(store: AppointmentStore = Depends(get_store)):
    return _listing(store.list())

@router.post("", status_code=status.HTTP_201_CREATED)
def create_appointment(
    booking: AppointmentCreate,
    service: BookingService = Depends(get_booking_service),
):
    """Book a slot. 400 on invalid input, 404 for an unknown doctor, 409 if taken."""
    appointment = service.submit_booking(booking)
    return {
        "success": True,
        "message": "Appointment created successfully",
        "data": appointment,
    }

# Declared before /{appointment_id} so they are not captured as ids
@router.get("/today")
def todays_appointments(store: AppointmentStore = Depends(get_store)):
    return _listing(store.list(date=today_iso()))

@router.get("/search/{phone}")
def search_appointments(phone: str, store: AppointmentStore = Depends(get_store)):
    """All appointments booked with a phone number."""
    return _listing(store.list(patient_phone=phone))

@router.get("/{appointment_id}")
def get_appointment(appointment_id: str, store: AppointmentStore = Depends(get_store)):
    appointment = store.get(appointment_id)
    if appointment is None:
        raise NotFoundError("Appointment not found")
    return {"success": True, "data": appointment}

@router.put("/{appointment_id}/status")
def update_appointment_status(
    appointment_id: str,
    update: StatusUpdate,
    manager: StatusManager = Depends(get_status_manager),
):
    appointment = manager.set_status(appointment_id, update.status)
    return {
        "success": True,
        "message": f"Appointment {appointment.status.value} successfully",
        "data": appointment,
    }

@router.delete("/{appointment_id}")
def delete_appointment(
    appointment_id: str,
    manager: StatusManager = Depends(get_status_manager),
):
    appointment = manager.delete(appointment_id)
    return {
        "success": True,
        "message": "Appointment deleted successfully",
        "data": appointment,
    }
