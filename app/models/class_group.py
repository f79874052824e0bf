"""Class group: a program section taught by one teacher in one shift."""
from datetime import datetime
from enum import Enum
from typing import Optional

from beanie import Document, Indexed
from pydantic import BaseModel, Field


class Shift(str, Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"


SHIFT_LABELS = {
    Shift.MORNING: "Matutino",
    Shift.AFTERNOON: "Vespertino",
    Shift.EVENING: "Nocturno",
}


class ClassGroup(Document):
    name: str
    program_id: Indexed(str)
    teacher_id: Indexed(str)
    shift: Shift
    semester: str
    year: int
    is_active: bool = True
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "class_groups"
        use_state_management = True


class ClassGroupCreate(BaseModel):
    name: str = Field(min_length=1)
    program_id: str = Field(min_length=1)
    teacher_id: str = Field(min_length=1)
    shift: Shift = Shift.MORNING
    semester: str = Field(min_length=1)
    year: int = Field(default_factory=lambda: datetime.utcnow().year)
    is_active: bool = True


class ClassGroupUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    program_id: Optional[str] = Field(default=None, min_length=1)
    teacher_id: Optional[str] = Field(default=None, min_length=1)
    shift: Optional[Shift] = None
    semester: Optional[str] = Field(default=None, min_length=1)
    year: Optional[int] = None
    is_active: Optional[bool] = None
