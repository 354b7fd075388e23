"""
Hachage des mots de passe et émission/vérification des tokens JWT.
"""

import uuid
from datetime import timedelta
from typing import Optional

import jwt
from werkzeug.security import check_password_hash, generate_password_hash

from app.config import settings
from app.exceptions import Unauthorized
from app.timeutils import utcnow


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return check_password_hash(password_hash, password)


def create_access_token(user_id: uuid.UUID, role: str, expires_delta: Optional[timedelta] = None) -> str:
    """Token porteur de l'identité (sub) et du rôle, avec une expiration fixe."""
    expire = utcnow() + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    payload = {"sub": str(user_id), "role": role, "exp": expire}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Retourne le payload du token. Lève Unauthorized si signature invalide ou token expiré."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise Unauthorized("Session expirée, veuillez vous reconnecter.")
    except jwt.InvalidTokenError:
        raise Unauthorized("Token invalide.")

    if "sub" not in payload:
        raise Unauthorized("Token invalide.")
    return payload
