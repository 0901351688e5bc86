import logging

from ..core.exceptions import NotFoundError, ValidationError
from ..repositories.base import AppointmentStore
from ..schemas.appointment import Appointment, AppointmentStatus
from .booking_service import utcnow

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS = {
    AppointmentStatus.PENDING: {AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELLED},
    AppointmentStatus.CONFIRMED: {AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED},
    AppointmentStatus.COMPLETED: set(),
    AppointmentStatus.CANCELLED: set(),
}

def parse_status(value) -> AppointmentStatus:
    try:
        return AppointmentStatus(value)
    except ValueError:
        raise ValidationError(
            "Invalid status. Must be: pending, confirmed, completed, or cancelled"
        )

class StatusManager:
    """Applies staff status changes and deletions to stored appointments.

    With ``strict`` set, only the transitions in ``ALLOWED_TRANSITIONS`` are
    accepted; otherwise any status may be set at any time.
    """

    def __init__(self, store: AppointmentStore, strict: bool = True, clock=utcnow):
        self.store = store
        self.strict = strict
        self._clock = clock

    def set_status(self, appointment_id: str, target) -> Appointment:
        status = parse_status(target)

        current = self.store.get(appointment_id)
        if current is None:
            raise NotFoundError("Appointment not found")

        if self.strict and status not in ALLOWED_TRANSITIONS[current.status]:
            raise ValidationError(
                f"Cannot change appointment from {current.status.value} to {status.value}"
            )

        updated = self.store.update_status(
            appointment_id, status, self._clock(), expected_status=current.status
        )
        if updated is None:
            raise NotFoundError("Appointment not found")

        logger.info(f"Appointment {appointment_id}: {current.status.value} -> {status.value}")
        return updated

    def delete(self, appointment_id: str) -> Appointment:
        removed = self.store.delete(appointment_id)
        if removed is None:
            raise NotFoundError("Appointment not found")
        logger.info(f"Deleted appointment {appointment_id}")
        return removed
