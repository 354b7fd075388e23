"""
Service métier pour l'inscription et la connexion des utilisateurs.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.exceptions import Conflict, Unauthorized
from app.models.user import ROLE_STUDENT, ROLE_TEACHER, User
from app.schemas.user import AuthResponse, LoginRequest, SignupRequest, UserSummary
from app.security import create_access_token, hash_password, verify_password

logger = logging.getLogger(__name__)


def find_student_by_roll_number(db: Session, roll_number: str) -> Optional[User]:
    return db.execute(
        select(User).where(User.role == ROLE_STUDENT, User.roll_number == roll_number)
    ).scalar_one_or_none()


def find_teacher_by_email(db: Session, email: str) -> Optional[User]:
    return db.execute(
        select(User).where(User.role == ROLE_TEACHER, User.email == email.lower())
    ).scalar_one_or_none()


def signup(db: Session, data: SignupRequest) -> AuthResponse:
    """
    Crée un compte et retourne un token de session.
    Lève Conflict si le numéro d'étudiant (ou l'email enseignant) est déjà utilisé.
    """
    if data.role == ROLE_STUDENT:
        if find_student_by_roll_number(db, data.roll_number):
            raise Conflict(f"Le numéro d'étudiant '{data.roll_number}' est déjà utilisé.")
        user = User(
            role=ROLE_STUDENT,
            name=data.name,
            roll_number=data.roll_number,
            email=data.email.lower() if data.email else None,
            password_hash=hash_password(data.password),
        )
    else:
        if find_teacher_by_email(db, data.email):
            raise Conflict(f"L'email '{data.email}' est déjà utilisé.")
        user = User(
            role=ROLE_TEACHER,
            name=data.name,
            email=data.email.lower(),
            department=data.department,
            password_hash=hash_password(data.password),
        )

    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("Un compte avec cet identifiant existe déjà.")
    db.refresh(user)

    logger.info("Nouveau compte %s créé : %s", user.role, user.id)
    return _auth_response(user)


def login(db: Session, data: LoginRequest) -> AuthResponse:
    """Vérifie les identifiants. Lève Unauthorized sans préciser lequel est faux."""
    if data.role == ROLE_STUDENT:
        user = find_student_by_roll_number(db, data.identifier)
    else:
        user = find_teacher_by_email(db, data.identifier)

    if user is None or not verify_password(data.password, user.password_hash):
        logger.info("Échec de connexion %s pour l'identifiant %s", data.role, data.identifier)
        raise Unauthorized("Identifiant ou mot de passe incorrect.")

    return _auth_response(user)


def _auth_response(user: User) -> AuthResponse:
    return AuthResponse(
        token=create_access_token(user.id, user.role),
        user=UserSummary(id=user.id, role=user.role, name=user.name),
    )
