from datetime import date as calendar_date, datetime, timezone
import logging
import re

from ..core.exceptions import ConflictError, ValidationError
from ..core.identifiers import appointment_ids, patient_ids
from ..repositories.base import AppointmentStore
from ..schemas.appointment import Appointment, AppointmentCreate, AppointmentStatus, Patient
from .availability import AvailabilityService
from .catalog import Catalog, parse_department

logger = logging.getLogger(__name__)

# Local mobile numbers: 06xxxxxxxx or 07xxxxxxxx
PHONE_PATTERN = re.compile(r"^0[67]\d{8}$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

REQUIRED_FIELDS = (
    ("patient_name", "patientName"),
    ("phone", "phone"),
    ("date", "date"),
    ("time", "time"),
    ("doctor_id", "doctorId"),
)

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

def _clean(value):
    return value.strip() if isinstance(value, str) else value

class BookingService:
    def __init__(
        self,
        store: AppointmentStore,
        catalog: Catalog,
        clock=utcnow,
        new_appointment_id=appointment_ids,
        new_patient_id=patient_ids,
    ):
        self.store = store
        self.catalog = catalog
        self.availability = AvailabilityService(store, catalog)
        self._clock = clock
        self._new_appointment_id = new_appointment_id
        self._new_patient_id = new_patient_id

    def submit_booking(self, request: AppointmentCreate) -> Appointment:
        """Validate a booking request and create a pending appointment.

        Nothing is written until every check has passed. The final insert is
        still guarded by the store, so a concurrent booking of the same slot
        that slips past the availability check ends in ``ConflictError``.
        """
        self._validate_fields(request)

        name = _clean(request.patient_name)
        phone = _clean(request.phone)
        email = _clean(request.email) or ""
        date = _clean(request.date)
        time = _clean(request.time)

        doctor = self.catalog.get_doctor(request.doctor_id)
        if not doctor.available:
            raise ValidationError(f"{doctor.name} is not available for appointments")
        if request.department and parse_department(_clean(request.department)) != doctor.department:
            raise ValidationError(
                f"{doctor.name} does not work in the {request.department} department"
            )
        if time not in doctor.working_hours:
            raise ValidationError(
                f"{time} is not a working hour for {doctor.name}. "
                f"Choose one of: {', '.join(doctor.working_hours)}"
            )

        # Same patient resubmitting is reported before the generic slot check
        duplicate = self.store.list(
            lambda a: a.time == time,
            doctor_id=doctor.id,
            date=date,
            patient_phone=phone,
        )
        if duplicate:
            raise ConflictError("Appointment already exists for this patient at the same time")

        availability = self.availability.compute_availability(doctor.id, date)
        if time not in availability.available_slots:
            raise ConflictError(f"{time} on {date} is already booked for {doctor.name}")

        now = self._clock()
        appointment = Appointment(
            id=self._new_appointment_id(),
            patient_name=name,
            patient_phone=phone,
            patient_email=email,
            date=date,
            time=time,
            doctor_id=doctor.id,
            doctor_name=doctor.name,
            department=doctor.department,
            symptoms=_clean(request.symptoms) or "",
            status=AppointmentStatus.PENDING,
            created_at=now,
            updated_at=now,
        )
        added = self.store.book(
            appointment,
            Patient(id=self._new_patient_id(), name=name, phone=phone, email=email, created_at=now),
        )
        if added:
            logger.info(f"Registered new patient with phone {phone}")

        logger.info(
            f"Booked {appointment.id}: doctor {doctor.id} on {date} at {time}"
        )
        return appointment

    def _validate_fields(self, request: AppointmentCreate) -> None:
        missing = [
            label for field, label in REQUIRED_FIELDS
            # doctorId 0 is treated as absent, like an empty string
            if _clean(getattr(request, field)) in (None, "", 0)
        ]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        if not PHONE_PATTERN.match(_clean(request.phone)):
            raise ValidationError(
                "Invalid phone number. Use 10 digits starting with 06 or 07"
            )

        email = _clean(request.email)
        if email and not EMAIL_PATTERN.match(email):
            raise ValidationError("Invalid email address")

        date = _clean(request.date)
        if not DATE_PATTERN.match(date):
            raise ValidationError("Invalid date. Use the YYYY-MM-DD format")
        try:
            calendar_date.fromisoformat(date)
        except ValueError:
            raise ValidationError(f"Invalid date: {date}")
