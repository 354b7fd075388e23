"""
Router du profil de l'utilisateur connecté.
"""

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_user
from app.models.user import User
from app.schemas.user import ProfileUpdate, UserProfile
from app.services import profile_service, storage_service

router = APIRouter(prefix="/api/me", tags=["Profil"])


@router.get("", response_model=UserProfile, summary="Mon profil")
def get_me(user: User = Depends(get_current_user)):
    return profile_service.get_profile(user)


@router.put("", response_model=UserProfile, summary="Modifier mon profil")
def update_me(
    data: ProfileUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Met à jour les champs fournis. Un changement de mot de passe exige le mot de passe actuel."""
    return profile_service.update_profile(db, user, data)


@router.post("/photo", response_model=UserProfile, summary="Changer ma photo de profil")
def upload_photo(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    incoming = storage_service.read_upload_files([file], max_files=1)
    return profile_service.update_photo(db, user, incoming[0])
