"""
Dépendances FastAPI partagées : résolution de l'utilisateur courant depuis le header Authorization.
"""

import uuid
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.database import get_db
from app.exceptions import Unauthorized
from app.models.user import User
from app.security import decode_access_token

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Retourne l'utilisateur du token Bearer. Lève Unauthorized si absent, invalide ou inconnu."""
    if credentials is None:
        raise Unauthorized("Token manquant.")

    payload = decode_access_token(credentials.credentials)
    try:
        user_id = uuid.UUID(payload["sub"])
    except ValueError:
        raise Unauthorized("Token invalide.")

    user = db.get(User, user_id)
    if user is None:
        raise Unauthorized("Utilisateur introuvable.")
    return user
