"""
Modèle SQLAlchemy pour les utilisateurs (étudiants et enseignants).
"""

import uuid
from sqlalchemy import Column, DateTime, Index, String, UniqueConstraint, Uuid, func, text

from app.database import Base

ROLE_STUDENT = "student"
ROLE_TEACHER = "teacher"


class User(Base):
    __tablename__ = "users"
    # roll_number n'est renseigné que pour les étudiants ; l'email n'est unique que parmi les enseignants.
    __table_args__ = (
        UniqueConstraint("role", "roll_number", name="uq_users_role_roll_number"),
        Index(
            "uq_users_teacher_email",
            "email",
            unique=True,
            postgresql_where=text("role = 'teacher'"),
            sqlite_where=text("role = 'teacher'"),
        ),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    role = Column(String(20), nullable=False)  # student, teacher
    name = Column(String(200), nullable=False)
    roll_number = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)
    department = Column(String(200), nullable=True)
    password_hash = Column(String(255), nullable=False)
    photo_url = Column(String(500), nullable=True)
    photo_public_id = Column(String(255), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
