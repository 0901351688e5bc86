from .doctor import Department, Doctor, WORKING_HOURS
from .appointment import (
    Appointment, AppointmentCreate, AppointmentStatus, Availability,
    Patient, StatusUpdate,
)

__all__ = [
    "Appointment",
    "AppointmentCreate",
    "AppointmentStatus",
    "Availability",
    "Department",
    "Doctor",
    "Patient",
    "StatusUpdate",
    "WORKING_HOURS",
]
