"""Enrolled students, each assigned to one class group."""
from datetime import datetime
from typing import Optional

from beanie import Document, Indexed
from pydantic import BaseModel, EmailStr, Field


class Student(Document):
    student_number: Indexed(str)  # matrícula
    first_name: str
    last_name: str
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    class_group_id: Indexed(str)
    is_active: bool = True
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    class Settings:
        name = "students"
        use_state_management = True


class StudentCreate(BaseModel):
    student_number: str = Field(min_length=1)
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    class_group_id: str = Field(min_length=1)
    is_active: bool = True


class StudentUpdate(BaseModel):
    """All fields optional for PATCH."""
    student_number: Optional[str] = Field(default=None, min_length=1)
    first_name: Optional[str] = Field(default=None, min_length=1)
    last_name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    class_group_id: Optional[str] = Field(default=None, min_length=1)
    is_active: Optional[bool] = None
