"""Academic program (carrera), belongs to one school."""
from datetime import datetime
from typing import Optional

from beanie import Document, Indexed
from pydantic import BaseModel, Field


class Program(Document):
    name: str
    code: str
    school_id: Indexed(str)
    is_active: bool = True
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "programs"
        use_state_management = True


class ProgramCreate(BaseModel):
    name: str = Field(min_length=1)
    code: str = Field(min_length=1)
    school_id: str = Field(min_length=1)
    is_active: bool = True


class ProgramUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    code: Optional[str] = Field(default=None, min_length=1)
    school_id: Optional[str] = Field(default=None, min_length=1)
    is_active: Optional[bool] = None
