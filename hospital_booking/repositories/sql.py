from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from ..core.exceptions import ConflictError
from ..core.identifiers import appointment_ids, patient_ids
from ..models.appointment import AppointmentRecord
from ..models.patient import PatientRecord
from ..schemas.appointment import Appointment, AppointmentStatus, Patient
from .base import AppointmentStore, Predicate


def _as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _columns(row) -> dict:
    return {column.name: getattr(row, column.name) for column in row.__table__.columns}


def _to_appointment(row: AppointmentRecord) -> Appointment:
    data = _columns(row)
    data["created_at"] = _as_utc(data["created_at"])
    data["updated_at"] = _as_utc(data["updated_at"])
    return Appointment.model_validate(data)


def _to_patient(row: PatientRecord) -> Patient:
    data = _columns(row)
    data["created_at"] = _as_utc(data["created_at"])
    return Patient.model_validate(data)


class SqlAppointmentStore(AppointmentStore):
    """SQLAlchemy-backed store.

    Uniqueness is enforced by the database: a partial unique index over live
    ``(doctor_id, date, time)`` rows and a unique constraint over
    ``(patient_phone, doctor_id, date, time)``. A violated constraint on insert
    is reported as ``ConflictError``.
    """

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory
        self._observe_stored_ids()

    def _observe_stored_ids(self) -> None:
        """Advance the id generators past the newest stored ids."""
        with self._session_factory() as db:
            for record, generator in ((AppointmentRecord, appointment_ids), (PatientRecord, patient_ids)):
                # Longer numeric suffix first, so the order is numeric
                last = db.query(record.id).order_by(
                    func.length(record.id).desc(), record.id.desc()
                ).first()
                if last:
                    generator.observe(last[0])

    def _conflict(self, db, appointment: Appointment) -> ConflictError:
        duplicate = db.query(AppointmentRecord).filter(
            AppointmentRecord.patient_phone == appointment.patient_phone,
            AppointmentRecord.doctor_id == appointment.doctor_id,
            AppointmentRecord.date == appointment.date,
            AppointmentRecord.time == appointment.time,
        ).first()
        if duplicate:
            return ConflictError("Appointment already exists for this patient at the same time")
        return ConflictError("This time slot is already booked")

    def create(self, appointment: Appointment) -> str:
        with self._session_factory() as db:
            db.add(AppointmentRecord(**appointment.model_dump()))
            try:
                db.commit()
            except IntegrityError:
                db.rollback()
                raise self._conflict(db, appointment)
            return appointment.id

    def book(self, appointment: Appointment, patient: Patient) -> bool:
        with self._session_factory() as db:
            known = db.query(PatientRecord).filter(PatientRecord.phone == patient.phone).first()
            db.add(AppointmentRecord(**appointment.model_dump()))
            if not known:
                db.add(PatientRecord(**patient.model_dump()))
            try:
                db.commit()
            except IntegrityError:
                db.rollback()
                if known or not self.get_patient(patient.phone):
                    raise self._conflict(db, appointment)
                # Another request registered the same phone first
                self.create(appointment)
                return False
            return not known

    def get(self, appointment_id: str) -> Optional[Appointment]:
        with self._session_factory() as db:
            row = db.query(AppointmentRecord).filter(
                AppointmentRecord.id == appointment_id
            ).first()
            return _to_appointment(row) if row else None

    def list(
        self,
        predicate: Optional[Predicate] = None,
        *,
        doctor_id: Optional[int] = None,
        date: Optional[str] = None,
        patient_phone: Optional[str] = None,
    ) -> List[Appointment]:
        with self._session_factory() as db:
            query = db.query(AppointmentRecord)
            if doctor_id is not None:
                query = query.filter(AppointmentRecord.doctor_id == doctor_id)
            if date is not None:
                query = query.filter(AppointmentRecord.date == date)
            if patient_phone is not None:
                query = query.filter(AppointmentRecord.patient_phone == patient_phone)
            rows = query.order_by(AppointmentRecord.created_at, AppointmentRecord.id).all()
            appointments = [_to_appointment(row) for row in rows]

        if predicate is None:
            return appointments
        return [a for a in appointments if predicate(a)]

    def update_status(
        self,
        appointment_id: str,
        status: AppointmentStatus,
        updated_at: datetime,
        expected_status: Optional[AppointmentStatus] = None,
    ) -> Optional[Appointment]:
        with self._session_factory() as db:
            query = db.query(AppointmentRecord).filter(AppointmentRecord.id == appointment_id)
            if expected_status is not None:
                query = query.filter(AppointmentRecord.status == expected_status)
            try:
                changed = query.update(
                    {"status": status, "updated_at": updated_at},
                    synchronize_session=False,
                )
                db.commit()
            except IntegrityError:
                db.rollback()
                raise ConflictError("This time slot has been booked by another patient")

            row = db.query(AppointmentRecord).filter(
                AppointmentRecord.id == appointment_id
            ).first()
            if row is None:
                return None
            if not changed:
                raise ConflictError(
                    f"Appointment status changed to {row.status.value} concurrently"
                )
            return _to_appointment(row)

    def delete(self, appointment_id: str) -> Optional[Appointment]:
        with self._session_factory() as db:
            row = db.query(AppointmentRecord).filter(
                AppointmentRecord.id == appointment_id
            ).first()
            if row is None:
                return None
            removed = _to_appointment(row)
            db.delete(row)
            db.commit()
            return removed

    def add_patient_if_absent(self, patient: Patient) -> bool:
        with self._session_factory() as db:
            existing = db.query(PatientRecord).filter(PatientRecord.phone == patient.phone).first()
            if existing:
                return False
            db.add(PatientRecord(**patient.model_dump()))
            try:
                db.commit()
            except IntegrityError:
                # Another request registered the same phone first
                db.rollback()
                return False
            return True

    def get_patient(self, phone: str) -> Optional[Patient]:
        with self._session_factory() as db:
            row = db.query(PatientRecord).filter(PatientRecord.phone == phone).first()
            return _to_patient(row) if row else None

    def count_patients(self) -> int:
        with self._session_factory() as db:
            return db.query(PatientRecord).count()

    def count(self) -> int:
        with self._session_factory() as db:
            return db.query(AppointmentRecord).count()

    def close(self) -> None:
        bind = self._session_factory.kw.get("bind")
        if bind is not None:
            bind.dispose()
