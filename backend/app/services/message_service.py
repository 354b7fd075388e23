"""
Service métier pour le fil de discussion d'un cours.
Les messages sont immuables et listés par ordre chronologique.
"""

import uuid
import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.exceptions import Forbidden, InvalidInput, NotFound
from app.models.course import Course
from app.models.message import Message
from app.models.user import User
from app.schemas.board import BoardMessageResponse
from app.services.course_service import is_member

logger = logging.getLogger(__name__)


def post_message(db: Session, course_id: uuid.UUID, content: str, user: User) -> BoardMessageResponse:
    """Publie un message. Réservé aux étudiants inscrits et à l'enseignant du cours."""
    if not content or not content.strip():
        raise InvalidInput("Le message ne peut pas être vide.")

    course = _get_course_for_member(db, course_id, user)

    message = Message(course_id=course.id, author_id=user.id, content=content.strip())
    db.add(message)
    db.commit()
    db.refresh(message)

    logger.info("Message %s publié sur le cours %s par %s", message.id, course_id, user.id)
    return _to_response(message, user)


def list_messages(db: Session, course_id: uuid.UUID, user: User) -> List[BoardMessageResponse]:
    """Messages du cours du plus ancien au plus récent, avec le nom et le rôle de l'auteur."""
    _get_course_for_member(db, course_id, user)

    rows = db.execute(
        select(Message, User)
        .outerjoin(User, User.id == Message.author_id)
        .where(Message.course_id == course_id)
        .order_by(Message.created_at, Message.id)
    ).all()
    return [_to_response(message, author) for message, author in rows]


def _get_course_for_member(db: Session, course_id: uuid.UUID, user: User) -> Course:
    course = db.get(Course, course_id)
    if course is None:
        raise NotFound("Cours introuvable.")
    if not is_member(db, course, user):
        raise Forbidden("Vous n'êtes pas membre de ce cours.")
    return course


def _to_response(message: Message, author) -> BoardMessageResponse:
    return BoardMessageResponse(
        id=message.id,
        course_id=message.course_id,
        author_id=message.author_id,
        author_name=author.name if author else None,
        author_role=author.role if author else None,
        content=message.content,
        created_at=message.created_at,
    )
