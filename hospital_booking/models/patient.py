from sqlalchemy import Column, String, DateTime

from ..core.database import Base

class PatientRecord(Base):
    __tablename__ = "patients"

    id = Column(String(32), primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    phone = Column(String(20), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, default="")

    # Timestamps
    created_at = Column(DateTime(timezone=True), nullable=False)

    def __repr__(self):
        return f"<PatientRecord(id={self.id}, phone='{self.phone}')>"
