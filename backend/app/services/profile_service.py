"""
Service métier pour l'édition du profil (champs, mot de passe, photo).
"""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.exceptions import Conflict, InvalidInput
from app.models.user import ROLE_STUDENT, ROLE_TEACHER, User
from app.schemas.user import ProfileUpdate, UserProfile
from app.security import hash_password, verify_password
from app.services import storage_service
from app.services.auth_service import find_student_by_roll_number, find_teacher_by_email
from app.services.storage_service import IncomingFile

logger = logging.getLogger(__name__)


def get_profile(user: User) -> UserProfile:
    return UserProfile.model_validate(user)


def update_profile(db: Session, user: User, data: ProfileUpdate) -> UserProfile:
    """
    Met à jour les champs fournis du profil.

    Règles :
    - numéro d'étudiant modifiable uniquement par un étudiant, unique parmi les étudiants
    - email unique parmi les enseignants
    - changement de mot de passe : currentPassword obligatoire et correct
    """
    update_data = data.model_dump(exclude_unset=True, exclude={"current_password", "new_password"})

    if "roll_number" in update_data:
        if user.role != ROLE_STUDENT:
            raise InvalidInput("Seul un étudiant possède un numéro d'étudiant.")
        existing = find_student_by_roll_number(db, update_data["roll_number"])
        if existing is not None and existing.id != user.id:
            raise Conflict(f"Le numéro d'étudiant '{update_data['roll_number']}' est déjà utilisé.")

    if update_data.get("email"):
        update_data["email"] = update_data["email"].lower()
        if user.role == ROLE_TEACHER:
            existing = find_teacher_by_email(db, update_data["email"])
            if existing is not None and existing.id != user.id:
                raise Conflict(f"L'email '{update_data['email']}' est déjà utilisé.")
    elif "email" in update_data and user.role == ROLE_TEACHER:
        raise InvalidInput("L'email est obligatoire pour un enseignant.")

    if data.new_password is not None:
        if not data.current_password or not verify_password(data.current_password, user.password_hash):
            raise InvalidInput("Mot de passe actuel incorrect.")
        user.password_hash = hash_password(data.new_password)
        logger.info("Mot de passe modifié pour l'utilisateur %s", user.id)

    for field, value in update_data.items():
        setattr(user, field, value)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        # Seule une collision d'identifiant concurrente est un conflit ; le reste remonte en 500
        if _identifier_taken(db, user, update_data):
            raise Conflict("Un compte avec cet identifiant existe déjà.")
        raise
    db.refresh(user)
    return UserProfile.model_validate(user)


def _identifier_taken(db: Session, user: User, update_data: dict) -> bool:
    """Vrai si le numéro d'étudiant ou l'email demandé appartient déjà à un autre compte."""
    if update_data.get("roll_number"):
        existing = find_student_by_roll_number(db, update_data["roll_number"])
        if existing is not None and existing.id != user.id:
            return True
    if update_data.get("email") and user.role == ROLE_TEACHER:
        existing = find_teacher_by_email(db, update_data["email"])
        if existing is not None and existing.id != user.id:
            return True
    return False


def update_photo(db: Session, user: User, file: IncomingFile) -> UserProfile:
    """Remplace la photo de profil. L'ancienne photo est supprimée au mieux."""
    if not (file.content_type or "").startswith("image/"):
        raise InvalidInput("La photo de profil doit être une image.")

    stored = storage_service.upload_file(file, folder="profiles")
    old_public_id = user.photo_public_id

    user.photo_url = stored.url
    user.photo_public_id = stored.public_id
    db.commit()
    db.refresh(user)

    if old_public_id:
        storage_service.delete_file(old_public_id, "image")

    logger.info("Photo de profil mise à jour pour l'utilisateur %s", user.id)
    return UserProfile.model_validate(user)
