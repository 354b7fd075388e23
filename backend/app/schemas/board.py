"""
Schémas Pydantic pour le fil de discussion des cours et le tableau de bord.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import field_validator

from app.schemas.common import CamelModel


class MessageCreate(CamelModel):
    content: str

    @field_validator("content")
    @classmethod
    def content_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le message ne peut pas être vide.")
        return v.strip()


class BoardMessageResponse(CamelModel):
    id: int
    course_id: uuid.UUID
    author_id: uuid.UUID
    author_name: Optional[str] = None
    author_role: Optional[str] = None
    content: str
    created_at: datetime


class DashboardSummary(CamelModel):
    """Compteurs selon le rôle : pendingAssignmentsCount (étudiant) ou submissionsToGradeCount (enseignant)."""
    role: str
    my_courses_count: int
    pending_assignments_count: Optional[int] = None
    submissions_to_grade_count: Optional[int] = None
