from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import List
import enum

# Daily slot template shared by every doctor; 12:00-14:00 is the lunch gap.
WORKING_HOURS = ("08:00", "09:00", "10:00", "11:00", "12:00", "14:00", "15:00", "16:00")

class Department(str, enum.Enum):
    GENERAL = "general"
    PEDIATRICS = "pediatrics"
    SURGERY = "surgery"
    DENTAL = "dental"
    EYE = "eye"
    MATERNITY = "maternity"

class Doctor(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    id: int
    name: str
    specialty: str
    department: Department
    working_hours: List[str] = Field(default_factory=lambda: list(WORKING_HOURS))
    available: bool = True
