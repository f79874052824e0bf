"""School (escuela), belongs to one campus."""
from datetime import datetime
from typing import Optional

from beanie import Document, Indexed
from pydantic import BaseModel, Field


class School(Document):
    name: str
    campus_id: Indexed(str)
    is_active: bool = True
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "schools"
        use_state_management = True


class SchoolCreate(BaseModel):
    name: str = Field(min_length=1)
    campus_id: str = Field(min_length=1)
    is_active: bool = True


class SchoolUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    campus_id: Optional[str] = Field(default=None, min_length=1)
    is_active: Optional[bool] = None
