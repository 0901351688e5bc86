from sqlalchemy import Column, Integer, String, DateTime, Text, Index, UniqueConstraint, Enum as SQLEnum, text

from ..core.database import Base
from ..schemas.appointment import AppointmentStatus
from ..schemas.doctor import Department

def _enum_values(enum_cls):
    return [member.value for member in enum_cls]

class AppointmentRecord(Base):
    __tablename__ = "appointments"

    # "APT<millis>"
    id = Column(String(32), primary_key=True, index=True)

    # Patient details
    patient_name = Column(String(200), nullable=False)
    patient_phone = Column(String(20), nullable=False, index=True)
    patient_email = Column(String(255), nullable=False, default="")

    # Slot
    date = Column(String(10), nullable=False, index=True)
    time = Column(String(5), nullable=False)
    doctor_id = Column(Integer, nullable=False)

    # Doctor snapshot taken at booking time
    doctor_name = Column(String(200), nullable=False)
    department = Column(SQLEnum(Department, values_callable=_enum_values), nullable=False)

    symptoms = Column(Text, nullable=False, default="")
    status = Column(
        SQLEnum(AppointmentStatus, values_callable=_enum_values),
        nullable=False,
        default=AppointmentStatus.PENDING,
    )

    # Tracking
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        # At most one live booking per doctor slot
        Index(
            "uq_appointments_active_slot",
            "doctor_id", "date", "time",
            unique=True,
            sqlite_where=text("status != 'cancelled'"),
            postgresql_where=text("status != 'cancelled'"),
        ),
        UniqueConstraint(
            "patient_phone", "doctor_id", "date", "time",
            name="uq_appointments_submission",
        ),
    )

    def __repr__(self):
        return f"<AppointmentRecord(id={self.id}, doctor_id={self.doctor_id}, date='{self.date}', time='{self.time}', status='{self.status}')>"
