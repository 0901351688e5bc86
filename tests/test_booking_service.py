import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from pydantic import ValidationError as PydanticValidationError

from hospital_booking.core.exceptions import ConflictError, NotFoundError, ValidationError
from hospital_booking.schemas.appointment import AppointmentStatus
from hospital_booking.schemas.doctor import Department, Doctor
from hospital_booking.services.booking_service import BookingService
from hospital_booking.services.catalog import Catalog

from .conftest import FIXED_NOW, booking_request


class TestSubmitBooking:

    def test_creates_pending_appointment(self, booking_service, store):
        """A valid request creates a pending appointment with a doctor snapshot."""
        appointment = booking_service.submit_booking(booking_request())

        assert appointment.status == AppointmentStatus.PENDING
        assert appointment.doctor_name == "Dr. John Mwamba"
        assert appointment.department == Department.GENERAL
        assert appointment.created_at == appointment.updated_at == FIXED_NOW
        assert appointment.patient_email == "amina@example.com"
        assert store.get(appointment.id) == appointment

    def test_optional_fields_default_to_empty(self, booking_service):
        """Email, symptoms and department may be omitted."""
        appointment = booking_service.submit_booking(
            booking_request(email=None, symptoms=None, department=None)
        )
        assert appointment.patient_email == ""
        assert appointment.symptoms == ""
        assert appointment.department == Department.GENERAL

    def test_values_are_trimmed(self, booking_service):
        """Surrounding whitespace is stripped before storing."""
        appointment = booking_service.submit_booking(
            booking_request(patientName="  Amina Juma ", phone=" 0712345678")
        )
        assert appointment.patient_name == "Amina Juma"
        assert appointment.patient_phone == "0712345678"

    def test_ids_are_unique(self, booking_service):
        """Every appointment gets its own APT id."""
        ids = {
            booking_service.submit_booking(booking_request(time=slot)).id
            for slot in ("08:00", "09:00", "10:00", "11:00")
        }
        assert len(ids) == 4
        assert all(i.startswith("APT") for i in ids)

    def test_patient_created_once(self, booking_service, store):
        """The first booking registers the patient; later ones leave it unchanged."""
        booking_service.submit_booking(booking_request())
        booking_service.submit_booking(
            booking_request(time="09:00", patientName="Someone Else", email="other@example.com")
        )

        assert store.count_patients() == 1
        patient = store.get_patient("0712345678")
        assert patient.name == "Amina Juma"
        assert patient.email == "amina@example.com"
        assert patient.id.startswith("PAT")


class TestConflicts:

    def test_duplicate_resubmission(self, booking_service, store):
        """An identical resubmission is rejected and only one appointment exists."""
        booking_service.submit_booking(booking_request())

        with pytest.raises(ConflictError) as exc_info:
            booking_service.submit_booking(booking_request())

        assert "already exists for this patient" in exc_info.value.message
        assert store.count() == 1

    def test_slot_taken_by_other_patient(self, booking_service):
        """A different patient cannot book a taken slot."""
        booking_service.submit_booking(booking_request())

        with pytest.raises(ConflictError) as exc_info:
            booking_service.submit_booking(booking_request(phone="0698765432"))
        assert "already booked" in exc_info.value.message

    def test_same_slot_other_doctor_or_date(self, booking_service):
        """Slots are per doctor and per date."""
        booking_service.submit_booking(booking_request())
        booking_service.submit_booking(
            booking_request(phone="0698765432", doctorId=2, department="pediatrics")
        )
        booking_service.submit_booking(booking_request(phone="0698765432", date="2025-06-11"))

    def test_cancelled_slot_can_be_rebooked(self, booking_service, store, clock):
        """Cancelling frees the slot for others but not for the same submission."""
        first = booking_service.submit_booking(booking_request())
        store.update_status(first.id, AppointmentStatus.CANCELLED, clock())

        second = booking_service.submit_booking(booking_request(phone="0698765432"))
        assert second.time == first.time

        with pytest.raises(ConflictError):
            booking_service.submit_booking(booking_request())

    @pytest.mark.parametrize("threads", [8])
    def test_concurrent_bookings_for_one_slot(self, any_store, catalog, threads):
        """Of many simultaneous bookings for one slot exactly one succeeds."""
        service = BookingService(any_store, catalog)
        barrier = threading.Barrier(threads)

        def attempt(n):
            barrier.wait()
            try:
                return service.submit_booking(booking_request(phone=f"07{n:08d}"))
            except ConflictError:
                return None

        with ThreadPoolExecutor(max_workers=threads) as pool:
            results = list(pool.map(attempt, range(threads)))

        booked = [r for r in results if r is not None]
        assert len(booked) == 1
        assert len(any_store.list(doctor_id=1, date="2025-06-10")) == 1

    def test_concurrent_duplicate_submissions(self, any_store, catalog):
        """The same request sent twice at once yields one appointment."""
        service = BookingService(any_store, catalog)
        barrier = threading.Barrier(2)

        def attempt(_):
            barrier.wait()
            try:
                service.submit_booking(booking_request())
                return "created"
            except ConflictError:
                return "conflict"

        with ThreadPoolExecutor(max_workers=2) as pool:
            outcomes = sorted(pool.map(attempt, range(2)))

        assert outcomes == ["conflict", "created"]
        assert any_store.count() == 1


class TestValidation:

    @pytest.mark.parametrize("field", ["patientName", "phone", "date", "time", "doctorId"])
    def test_required_fields(self, booking_service, field):
        """Each required field is enforced."""
        with pytest.raises(ValidationError) as exc_info:
            booking_service.submit_booking(booking_request(**{field: None}))
        assert field in exc_info.value.message

    def test_blank_field_counts_as_missing(self, booking_service):
        """Whitespace-only values are missing."""
        with pytest.raises(ValidationError) as exc_info:
            booking_service.submit_booking(booking_request(patientName="   "))
        assert "patientName" in exc_info.value.message

    def test_zero_doctor_id_counts_as_missing(self, booking_service):
        with pytest.raises(ValidationError) as exc_info:
            booking_service.submit_booking(booking_request(doctorId=0, department=None))
        assert exc_info.value.message == "Missing required fields: doctorId"

    def test_boolean_doctor_id_is_rejected(self):
        """True is not read as doctor 1."""
        with pytest.raises(PydanticValidationError):
            booking_request(doctorId=True)

    @pytest.mark.parametrize("phone", [
        "0812345678", "0512345678", "071234567", "07123456789", "+255712345678", "07123456ab",
    ])
    def test_invalid_phone(self, booking_service, phone):
        """Phones must be 10 digits starting with 06 or 07."""
        with pytest.raises(ValidationError):
            booking_service.submit_booking(booking_request(phone=phone))

    @pytest.mark.parametrize("phone", ["0612345678", "0798765432"])
    def test_valid_phone(self, booking_service, phone):
        assert booking_service.submit_booking(booking_request(phone=phone)).patient_phone == phone

    @pytest.mark.parametrize("email", ["plain", "a@b", "a b@c.com", "@example.com"])
    def test_invalid_email(self, booking_service, email):
        with pytest.raises(ValidationError):
            booking_service.submit_booking(booking_request(email=email))

    @pytest.mark.parametrize("date", ["2025-02-30", "10/06/2025", "20250610", "tomorrow"])
    def test_invalid_date(self, booking_service, date):
        with pytest.raises(ValidationError):
            booking_service.submit_booking(booking_request(date=date))

    @pytest.mark.parametrize("time", ["13:00", "17:00", "8:00", "08:30"])
    def test_time_outside_working_hours(self, booking_service, time):
        """Only template slots can be booked; the lunch gap is never offered."""
        with pytest.raises(ValidationError):
            booking_service.submit_booking(booking_request(time=time))

    def test_unknown_doctor(self, booking_service):
        with pytest.raises(NotFoundError):
            booking_service.submit_booking(booking_request(doctorId=42, department=None))

    def test_unknown_department(self, booking_service):
        with pytest.raises(ValidationError):
            booking_service.submit_booking(booking_request(department="cardiology"))

    def test_department_must_match_doctor(self, booking_service):
        with pytest.raises(ValidationError):
            booking_service.submit_booking(booking_request(department="surgery"))

    def test_unavailable_doctor(self, store, clock):
        """Doctors flagged unavailable take no bookings."""
        catalog = Catalog([
            Doctor(id=1, name="Dr. Away", specialty="General Medicine",
                   department=Department.GENERAL, available=False),
        ])
        service = BookingService(store, catalog, clock=clock)
        with pytest.raises(ValidationError):
            service.submit_booking(booking_request())

    def test_nothing_written_on_rejection(self, booking_service, store):
        """Rejected requests leave no appointment and no patient behind."""
        with pytest.raises(ValidationError):
            booking_service.submit_booking(booking_request(time="13:00"))
        assert store.count() == 0
        assert store.count_patients() == 0
