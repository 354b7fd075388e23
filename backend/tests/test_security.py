"""
Tests unitaires pour le hachage des mots de passe et les tokens JWT.
"""

import uuid
from datetime import timedelta

import jwt
import pytest

from app.config import settings
from app.exceptions import Unauthorized
from app.security import create_access_token, decode_access_token, hash_password, verify_password


def test_hash_password_verifiable():
    h = hash_password("secret")
    assert h != "secret"
    assert verify_password("secret", h)
    assert not verify_password("autre", h)


def test_token_contient_sujet_et_role():
    user_id = uuid.uuid4()
    payload = decode_access_token(create_access_token(user_id, "teacher"))
    assert payload["sub"] == str(user_id)
    assert payload["role"] == "teacher"
    assert "exp" in payload


def test_token_expire_rejete():
    token = create_access_token(uuid.uuid4(), "student", expires_delta=timedelta(seconds=-10))
    with pytest.raises(Unauthorized, match="expirée"):
        decode_access_token(token)


def test_token_mauvaise_signature_rejete():
    token = jwt.encode({"sub": str(uuid.uuid4()), "role": "student"}, "autre-cle", algorithm=settings.ALGORITHM)
    with pytest.raises(Unauthorized, match="invalide"):
        decode_access_token(token)


def test_token_sans_sujet_rejete():
    token = jwt.encode({"role": "student"}, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    with pytest.raises(Unauthorized):
        decode_access_token(token)
