"""
Modèles SQLAlchemy pour les devoirs, les rendus des étudiants et leurs fichiers.
"""

import uuid
from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)

from app.database import Base
from app.timeutils import utcnow


class Assignment(Base):
    __tablename__ = "assignments"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    course_id = Column(Uuid, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    due_date = Column(DateTime, nullable=False)
    max_marks = Column(Integer, nullable=False)
    created_by = Column(Uuid, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime, default=utcnow)


class Submission(Base):
    """Rendu d'un étudiant : un seul par couple (devoir, étudiant)."""
    __tablename__ = "submissions"
    __table_args__ = (
        UniqueConstraint("assignment_id", "student_id", name="uq_submissions_assignment_student"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    assignment_id = Column(Uuid, ForeignKey("assignments.id", ondelete="CASCADE"), nullable=False)
    student_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    submitted_at = Column(DateTime, nullable=False, default=utcnow)
    marks = Column(Float, nullable=True)     # NULL = non corrigé
    feedback = Column(Text, nullable=True)
    is_late = Column(Boolean, nullable=False, default=False)


class SubmissionFile(Base):
    __tablename__ = "submission_files"

    id = Column(Integer, primary_key=True, autoincrement=True)
    submission_id = Column(Integer, ForeignKey("submissions.id", ondelete="CASCADE"), nullable=False)
    url = Column(String(500), nullable=False)
    original_name = Column(String(255), nullable=False)
    mimetype = Column(String(100), nullable=True)
    size = Column(BigInteger, nullable=False, default=0)
    public_id = Column(String(255), nullable=True)
    resource_type = Column(String(20), nullable=True)
    uploaded_at = Column(DateTime, default=utcnow)
