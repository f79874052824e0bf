"""System users: admins, teachers and area managers."""
from datetime import datetime
from enum import Enum
from typing import Optional

from beanie import Document, Indexed
from pydantic import BaseModel, EmailStr, Field


class UserRole(str, Enum):
    ADMIN = "admin"
    TEACHER = "teacher"
    AREA_MANAGER = "area_manager"


ROLE_LABELS = {
    UserRole.ADMIN: "Administrador",
    UserRole.TEACHER: "Docente",
    UserRole.AREA_MANAGER: "Responsable de Área",
}


class User(Document):
    """User document; identity is owned by the external provider."""

    email: Indexed(EmailStr, unique=True)
    display_name: str
    role: UserRole = UserRole.TEACHER
    photo_url: Optional[str] = None
    external_id: Optional[str] = None  # identity provider subject
    is_active: bool = True
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "users"
        use_state_management = True
        indexes = ["external_id"]


class UserCreate(BaseModel):
    email: EmailStr
    display_name: str = Field(min_length=1)
    role: UserRole = UserRole.TEACHER
    is_active: bool = True


class UserUpdate(BaseModel):
    email: Optional[EmailStr] = None
    display_name: Optional[str] = Field(default=None, min_length=1)
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None
