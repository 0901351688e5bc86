from ..repositories.base import AppointmentStore
from ..schemas.appointment import AppointmentStatus, Availability
from .catalog import Catalog


class AvailabilityService:
    def __init__(self, store: AppointmentStore, catalog: Catalog):
        self.store = store
        self.catalog = catalog

    def compute_availability(self, doctor_id: int, date: str) -> Availability:
        """Split the doctor's working hours into booked and free slots for ``date``.

        Booked slots are the times of non-cancelled appointments for the doctor
        on that exact date string. Both lists keep the template order, so
        together they always partition the template.
        """
        doctor = self.catalog.get_doctor(doctor_id)

        taken = {
            a.time
            for a in self.store.list(doctor_id=doctor_id, date=date)
            if a.status != AppointmentStatus.CANCELLED
        }
        template = doctor.working_hours

        return Availability(
            doctor_id=doctor_id,
            date=date,
            available_slots=[slot for slot in template if slot not in taken],
            booked_slots=[slot for slot in template if slot in taken],
        )
