"""
Schémas Pydantic pour les devoirs, les rendus et la notation.
"""

import math
import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import field_validator

from app.schemas.common import CamelModel, FileReference
from app.timeutils import to_utc_naive


class AssignmentCreate(CamelModel):
    """Corps de POST /api/assignments. Sans dueDate, l'échéance est immédiate."""
    course_id: uuid.UUID
    title: str
    description: Optional[str] = ""
    due_date: Optional[datetime] = None
    max_marks: float

    @field_validator("title")
    @classmethod
    def title_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le titre du devoir est obligatoire.")
        return v.strip()

    @field_validator("max_marks")
    @classmethod
    def max_marks_positive(cls, v: float) -> float:
        if not math.isfinite(v) or v <= 0 or v != int(v):
            raise ValueError("maxMarks doit être un entier strictement positif.")
        return v

    @field_validator("due_date")
    @classmethod
    def due_date_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_utc_naive(v)


class AssignmentResponse(CamelModel):
    id: uuid.UUID
    course_id: uuid.UUID
    title: str
    description: str
    due_date: datetime
    max_marks: int
    created_by: uuid.UUID
    created_at: Optional[datetime]


class SubmissionResponse(CamelModel):
    """Rendu d'un étudiant, enrichi de son nom et de son numéro."""
    student_id: uuid.UUID
    student_name: Optional[str] = None
    roll_number: Optional[str] = None
    files: List[FileReference]
    submitted_at: datetime
    marks: Optional[float]
    feedback: Optional[str]
    is_late: bool


class SubmissionListResponse(CamelModel):
    assignment_id: uuid.UUID
    max_marks: int
    submissions: List[SubmissionResponse]


class FileDeleteRequest(CamelModel):
    file_url: str

    @field_validator("file_url")
    @classmethod
    def url_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("fileUrl est obligatoire.")
        return v.strip()


class GradeRequest(CamelModel):
    student_id: uuid.UUID
    marks: float
    feedback: Optional[str] = None

    @field_validator("marks")
    @classmethod
    def marks_finite(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError("La note doit être un nombre fini.")
        return v
