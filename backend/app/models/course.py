"""
Modèles SQLAlchemy pour les cours, leurs inscriptions et leurs supports.
"""

import uuid
from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, Integer, String, Text, Uuid, func

from app.database import Base
from app.timeutils import utcnow


class Course(Base):
    __tablename__ = "courses"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(200), nullable=False)
    code = Column(String(50), unique=True, nullable=False)
    description = Column(Text, nullable=True)
    teacher_id = Column(Uuid, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime, server_default=func.now())


class CourseStudent(Base):
    """Association cours ↔ étudiants inscrits. La clé composite interdit les doublons."""
    __tablename__ = "course_students"

    course_id = Column(Uuid, ForeignKey("courses.id", ondelete="CASCADE"), primary_key=True)
    student_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    enrolled_at = Column(DateTime, default=utcnow)


class CourseMaterial(Base):
    """Support de cours déposé par l'enseignant."""
    __tablename__ = "course_materials"

    id = Column(Integer, primary_key=True, autoincrement=True)
    course_id = Column(Uuid, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    url = Column(String(500), nullable=False)
    original_name = Column(String(255), nullable=False)
    mimetype = Column(String(100), nullable=True)
    size = Column(BigInteger, nullable=False, default=0)
    public_id = Column(String(255), nullable=True)       # identifiant Cloudinary
    resource_type = Column(String(20), nullable=True)    # image, video, raw
    uploaded_by = Column(Uuid, ForeignKey("users.id"), nullable=True)
    uploaded_at = Column(DateTime, default=utcnow)
