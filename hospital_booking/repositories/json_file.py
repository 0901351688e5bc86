import json
import logging
import os
import tempfile
from contextlib import contextmanager
from typing import Iterable

from ..core.exceptions import InternalError
from ..core.identifiers import appointment_ids, patient_ids
from ..schemas.appointment import Appointment, Patient
from ..schemas.doctor import Doctor
from .memory import MemoryAppointmentStore

logger = logging.getLogger(__name__)


class JsonFileAppointmentStore(MemoryAppointmentStore):
    """Memory store mirrored to a single JSON document.

    The document has ``appointments``, ``doctors`` and ``patients`` keys. Each
    mutation rewrites the whole document while holding the store lock; the
    write goes to a temporary file next to the target which is then renamed
    over it, so readers of the file never see a partial document.
    """

    def __init__(self, path: str, doctors: Iterable[Doctor] = ()):
        super().__init__()
        self.path = path
        self._doctors = list(doctors)
        self._read()

    def _read(self) -> None:
        if not os.path.exists(self.path):
            logger.info(f"No data file at {self.path}, starting empty")
            return

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to read data file {self.path}: {str(e)}")
            raise InternalError(f"Data file {self.path} is unreadable")

        appointments = [Appointment.model_validate(a) for a in raw.get("appointments", [])]
        patients = [Patient.model_validate(p) for p in raw.get("patients", [])]
        for appointment in appointments:
            appointment_ids.observe(appointment.id)
        for patient in patients:
            patient_ids.observe(patient.id)

        self._load(appointments, patients)
        logger.info(
            f"Loaded {len(appointments)} appointments and {len(patients)} patients from {self.path}"
        )

    def _write(self) -> None:
        data = {
            "appointments": [
                a.model_dump(mode="json", by_alias=True) for a in self._appointments.values()
            ],
            "doctors": [d.model_dump(mode="json", by_alias=True) for d in self._doctors],
            "patients": [
                p.model_dump(mode="json", by_alias=True) for p in self._patients.values()
            ],
        }

        folder = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(folder, exist_ok=True)

        tmp_name = None
        try:
            with tempfile.NamedTemporaryFile(
                "w", delete=False, encoding="utf-8", dir=folder, suffix=".tmp"
            ) as tf:
                tmp_name = tf.name
                json.dump(data, tf, ensure_ascii=False, indent=2)
                tf.flush()
                os.fsync(tf.fileno())
            os.replace(tmp_name, self.path)
        except OSError:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    @contextmanager
    def _mutation(self):
        """Run a mutation and persist it, restoring memory if the write fails."""
        with self._lock:
            saved = (
                dict(self._appointments),
                dict(self._patients),
                dict(self._active_slots),
                set(self._submissions),
            )
            yield
            try:
                self._write()
            except OSError as e:
                (
                    self._appointments,
                    self._patients,
                    self._active_slots,
                    self._submissions,
                ) = saved
                logger.error(f"Failed to write data file {self.path}: {str(e)}")
                raise InternalError("Failed to persist appointment data")

    def create(self, appointment):
        with self._mutation():
            return super().create(appointment)

    def update_status(self, appointment_id, status, updated_at, expected_status=None):
        with self._mutation():
            return super().update_status(appointment_id, status, updated_at, expected_status)

    def delete(self, appointment_id):
        with self._mutation():
            return super().delete(appointment_id)

    def add_patient_if_absent(self, patient):
        with self._mutation():
            return super().add_patient_if_absent(patient)

    def book(self, appointment, patient):
        with self._mutation():
            return super().book(appointment, patient)
