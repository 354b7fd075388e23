"""
Router d'authentification : inscription et connexion.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.user import AuthResponse, LoginRequest, SignupRequest
from app.services import auth_service

router = APIRouter(prefix="/api", tags=["Authentification"])


@router.post("/signup", response_model=AuthResponse, summary="Créer un compte")
def signup(data: SignupRequest, db: Session = Depends(get_db)):
    """
    Crée un compte étudiant (numéro d'étudiant obligatoire) ou enseignant (email obligatoire).
    Retourne le token de session et le profil résumé.
    """
    return auth_service.signup(db, data)


@router.post("/login", response_model=AuthResponse, summary="Se connecter")
def login(data: LoginRequest, db: Session = Depends(get_db)):
    """identifier = numéro d'étudiant pour un étudiant, email pour un enseignant."""
    return auth_service.login(db, data)
