"""
Schémas Pydantic pour les cours et leurs supports.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import field_validator

from app.schemas.common import CamelModel, FileReference


class CourseCreate(CamelModel):
    name: str
    code: str
    description: Optional[str] = ""

    @field_validator("name", "code")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le nom et le code du cours sont obligatoires.")
        return v.strip()


class CourseResponse(CamelModel):
    id: uuid.UUID
    name: str
    code: str
    description: Optional[str]
    teacher_id: uuid.UUID
    teacher_name: Optional[str] = None
    nb_students: int = 0
    created_at: Optional[datetime]


class MaterialResponse(FileReference):
    id: int
    course_id: uuid.UUID
    uploaded_at: Optional[datetime]
