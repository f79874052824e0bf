"""Campus (recinto): root of the organizational hierarchy."""
from datetime import datetime
from typing import Optional

from beanie import Document, Indexed
from pydantic import BaseModel, Field


class Campus(Document):
    name: Indexed(str)
    address: Optional[str] = None
    is_active: bool = True
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "campuses"
        use_state_management = True


class CampusCreate(BaseModel):
    name: str = Field(min_length=1)
    address: Optional[str] = None
    is_active: bool = True


class CampusUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    address: Optional[str] = None
    is_active: Optional[bool] = None
