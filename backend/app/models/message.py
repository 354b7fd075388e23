"""
Modèle SQLAlchemy pour le fil de discussion d'un cours (append-only).
"""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Text, Uuid

from app.database import Base
from app.timeutils import utcnow


class Message(Base):
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    course_id = Column(Uuid, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    author_id = Column(Uuid, ForeignKey("users.id"), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)
