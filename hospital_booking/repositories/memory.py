import threading
from datetime import datetime
from typing import Dict, List, Optional, Set, Tuple

from ..core.exceptions import ConflictError
from ..schemas.appointment import Appointment, AppointmentStatus, Patient
from .base import AppointmentStore, Predicate, matches

SlotKey = Tuple[int, str, str]
SubmissionKey = Tuple[str, int, str, str]


class MemoryAppointmentStore(AppointmentStore):
    """Dict-backed store guarded by a single re-entrant lock.

    ``_active_slots`` maps each non-cancelled ``(doctor_id, date, time)`` to the
    appointment holding it and ``_submissions`` holds every
    ``(phone, doctor_id, date, time)``; both are checked and updated under the
    lock together with the insert.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._appointments: Dict[str, Appointment] = {}
        self._patients: Dict[str, Patient] = {}
        self._active_slots: Dict[SlotKey, str] = {}
        self._submissions: Set[SubmissionKey] = set()

    def create(self, appointment: Appointment) -> str:
        with self._lock:
            if appointment.id in self._appointments:
                raise ConflictError(f"Appointment {appointment.id} already exists")
            if appointment.submission_key in self._submissions:
                raise ConflictError("Appointment already exists for this patient at the same time")
            active = appointment.status != AppointmentStatus.CANCELLED
            if active and appointment.slot_key in self._active_slots:
                raise ConflictError("This time slot is already booked")

            self._appointments[appointment.id] = appointment
            self._submissions.add(appointment.submission_key)
            if active:
                self._active_slots[appointment.slot_key] = appointment.id
            return appointment.id

    def get(self, appointment_id: str) -> Optional[Appointment]:
        with self._lock:
            return self._appointments.get(appointment_id)

    def list(
        self,
        predicate: Optional[Predicate] = None,
        *,
        doctor_id: Optional[int] = None,
        date: Optional[str] = None,
        patient_phone: Optional[str] = None,
    ) -> List[Appointment]:
        with self._lock:
            snapshot = list(self._appointments.values())
        return [
            a for a in snapshot
            if matches(a, predicate, doctor_id, date, patient_phone)
        ]

    def update_status(
        self,
        appointment_id: str,
        status: AppointmentStatus,
        updated_at: datetime,
        expected_status: Optional[AppointmentStatus] = None,
    ) -> Optional[Appointment]:
        with self._lock:
            current = self._appointments.get(appointment_id)
            if current is None:
                return None
            if expected_status is not None and current.status != expected_status:
                raise ConflictError(
                    f"Appointment status changed to {current.status.value} concurrently"
                )

            was_active = current.status != AppointmentStatus.CANCELLED
            now_active = status != AppointmentStatus.CANCELLED
            key = current.slot_key
            if now_active and not was_active:
                holder = self._active_slots.get(key)
                if holder is not None and holder != appointment_id:
                    raise ConflictError("This time slot has been booked by another patient")

            updated = current.model_copy(update={"status": status, "updated_at": updated_at})
            self._appointments[appointment_id] = updated
            if was_active and not now_active:
                self._active_slots.pop(key, None)
            elif now_active:
                self._active_slots[key] = appointment_id
            return updated

    def delete(self, appointment_id: str) -> Optional[Appointment]:
        with self._lock:
            removed = self._appointments.pop(appointment_id, None)
            if removed is None:
                return None
            self._submissions.discard(removed.submission_key)
            if self._active_slots.get(removed.slot_key) == appointment_id:
                del self._active_slots[removed.slot_key]
            return removed

    def add_patient_if_absent(self, patient: Patient) -> bool:
        with self._lock:
            if patient.phone in self._patients:
                return False
            self._patients[patient.phone] = patient
            return True

    def book(self, appointment: Appointment, patient: Patient) -> bool:
        with self._lock:
            MemoryAppointmentStore.create(self, appointment)
            return MemoryAppointmentStore.add_patient_if_absent(self, patient)

    def get_patient(self, phone: str) -> Optional[Patient]:
        with self._lock:
            return self._patients.get(phone)

    def count_patients(self) -> int:
        with self._lock:
            return len(self._patients)

    def count(self) -> int:
        with self._lock:
            return len(self._appointments)

    def _load(self, appointments, patients) -> None:
        """Replace the whole state, rebuilding both indexes."""
        with self._lock:
            self._appointments = {}
            self._patients = {}
            self._active_slots = {}
            self._submissions = set()
            for appointment in appointments:
                MemoryAppointmentStore.create(self, appointment)
            for patient in patients:
                MemoryAppointmentStore.add_patient_if_absent(self, patient)
