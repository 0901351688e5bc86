from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable, List, Optional

from ..schemas.appointment import Appointment, AppointmentStatus, Patient

Predicate = Callable[[Appointment], bool]


class AppointmentStore(ABC):
    """Repository interface for appointments and the patients they create.

    Implementations must make ``create`` an atomic insert-if-absent on both
    uniqueness keys: ``(doctor_id, date, time)`` among non-cancelled
    appointments, and ``(patient_phone, doctor_id, date, time)`` in any status.
    """

    @abstractmethod
    def create(self, appointment: Appointment) -> str:
        """Insert ``appointment`` or raise ``ConflictError``."""

    @abstractmethod
    def get(self, appointment_id: str) -> Optional[Appointment]:
        ...

    @abstractmethod
    def list(
        self,
        predicate: Optional[Predicate] = None,
        *,
        doctor_id: Optional[int] = None,
        date: Optional[str] = None,
        patient_phone: Optional[str] = None,
    ) -> List[Appointment]:
        """Return appointments in insertion order matching every filter given."""

    @abstractmethod
    def update_status(
        self,
        appointment_id: str,
        status: AppointmentStatus,
        updated_at: datetime,
        expected_status: Optional[AppointmentStatus] = None,
    ) -> Optional[Appointment]:
        """Replace status and ``updated_at``; compare-and-set on ``expected_status``."""

    @abstractmethod
    def delete(self, appointment_id: str) -> Optional[Appointment]:
        ...

    @abstractmethod
    def add_patient_if_absent(self, patient: Patient) -> bool:
        """Store ``patient`` unless its phone is already known. Returns True if added."""

    @abstractmethod
    def book(self, appointment: Appointment, patient: Patient) -> bool:
        """Insert ``appointment`` and register ``patient`` in one write.

        Either both are stored or neither is. Returns True if the patient was
        new, raises ``ConflictError`` like ``create``.
        """

    @abstractmethod
    def get_patient(self, phone: str) -> Optional[Patient]:
        ...

    @abstractmethod
    def count_patients(self) -> int:
        ...

    def count(self) -> int:
        return len(self.list())

    def close(self) -> None:
        pass


def matches(
    appointment: Appointment,
    predicate: Optional[Predicate] = None,
    doctor_id: Optional[int] = None,
    date: Optional[str] = None,
    patient_phone: Optional[str] = None,
) -> bool:
    if doctor_id is not None and appointment.doctor_id != doctor_id:
        return False
    if date is not None and appointment.date != date:
        return False
    if patient_phone is not None and appointment.patient_phone != patient_phone:
        return False
    return predicate is None or predicate(appointment)
