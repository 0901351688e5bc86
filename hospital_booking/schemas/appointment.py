from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel
from datetime import datetime
from typing import List, Optional
import enum

from .doctor import Department

class AppointmentStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

class AppointmentCreate(CamelModel):
    """Booking request as submitted by the patient form.

    Fields are optional here so that missing values are reported by the
    booking workflow with a 400 instead of a schema error.
    """
    patient_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    doctor_id: Optional[int] = None
    department: Optional[str] = None
    symptoms: Optional[str] = None

    @field_validator("doctor_id", mode="before")
    @classmethod
    def reject_bool_doctor_id(cls, value):
        # bool is an int subclass and would otherwise select doctor 1
        if isinstance(value, bool):
            raise ValueError("doctorId must be a number")
        return value

class Appointment(CamelModel):
    model_config = ConfigDict(frozen=True)

    id: str
    patient_name: str
    patient_phone: str
    patient_email: str = ""
    date: str
    time: str
    doctor_id: int
    # Snapshot of the doctor at booking time, never re-synchronised.
    doctor_name: str
    department: Department
    symptoms: str = ""
    status: AppointmentStatus = AppointmentStatus.PENDING
    created_at: datetime
    updated_at: datetime

    @property
    def slot_key(self):
        return (self.doctor_id, self.date, self.time)

    @property
    def submission_key(self):
        return (self.patient_phone, self.doctor_id, self.date, self.time)

class Patient(CamelModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    phone: str
    email: str = ""
    created_at: datetime

class StatusUpdate(CamelModel):
    status: Optional[str] = None

class Availability(CamelModel):
    doctor_id: int
    date: str
    available_slots: List[str]
    booked_slots: List[str]
