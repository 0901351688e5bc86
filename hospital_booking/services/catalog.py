from typing import Iterable, List, Optional

from ..core.exceptions import NotFoundError, ValidationError
from ..schemas.doctor import Department, Doctor

DEFAULT_DOCTORS = (
    Doctor(id=1, name="Dr. John Mwamba", specialty="General Medicine", department=Department.GENERAL),
    Doctor(id=2, name="Dr. Sarah Chuma", specialty="Pediatrics", department=Department.PEDIATRICS),
    Doctor(id=3, name="Dr. Robert Kimani", specialty="Surgery", department=Department.SURGERY),
    Doctor(id=4, name="Dr. Grace Mwenda", specialty="Dentistry", department=Department.DENTAL),
    Doctor(id=5, name="Dr. David Omondi", specialty="Eye Care", department=Department.EYE),
    Doctor(id=6, name="Dr. Mary Achieng", specialty="Maternity", department=Department.MATERNITY),
)


def parse_department(value: str) -> Department:
    """Resolve a department code, rejecting anything outside the enum."""
    try:
        return Department(value)
    except ValueError:
        allowed = ", ".join(d.value for d in Department)
        raise ValidationError(f"Invalid department '{value}'. Must be one of: {allowed}")


class Catalog:
    """Read-only roster of doctors."""

    def __init__(self, doctors: Iterable[Doctor] = DEFAULT_DOCTORS):
        self._doctors = {doctor.id: doctor for doctor in doctors}

    def get_doctor(self, doctor_id: int) -> Doctor:
        doctor = self._doctors.get(doctor_id)
        if doctor is None:
            raise NotFoundError("Doctor not found")
        return doctor

    def list_doctors(self, department: Optional[str] = None) -> List[Doctor]:
        doctors = list(self._doctors.values())
        if department is None:
            return doctors
        wanted = parse_department(department)
        return [d for d in doctors if d.department == wanted]

    def __len__(self) -> int:
        return len(self._doctors)
