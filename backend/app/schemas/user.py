"""
Schémas Pydantic pour l'authentification et le profil utilisateur.
"""

import uuid
from datetime import datetime
from typing import Literal, Optional

from pydantic import EmailStr, field_validator, model_validator

from app.schemas.common import CamelModel


class SignupRequest(CamelModel):
    """Corps de POST /api/signup. Numéro d'étudiant ou email selon le rôle."""
    role: Literal["student", "teacher"]
    name: str
    password: str
    roll_number: Optional[str] = None
    email: Optional[EmailStr] = None
    department: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le nom ne peut pas être vide.")
        return v.strip()

    @field_validator("password")
    @classmethod
    def password_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le mot de passe ne peut pas être vide.")
        return v

    @field_validator("roll_number", "department")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v.strip()

    @model_validator(mode="after")
    def identifier_for_role(self):
        if self.role == "student" and not self.roll_number:
            raise ValueError("Le numéro d'étudiant est obligatoire.")
        if self.role == "teacher" and not self.email:
            raise ValueError("L'email est obligatoire pour un enseignant.")
        return self


class LoginRequest(CamelModel):
    """identifier = numéro d'étudiant (student) ou email (teacher)."""
    role: Literal["student", "teacher"]
    identifier: str
    password: str

    @field_validator("identifier")
    @classmethod
    def identifier_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("L'identifiant ne peut pas être vide.")
        return v.strip()


class UserSummary(CamelModel):
    id: uuid.UUID
    role: str
    name: str


class UserProfile(CamelModel):
    id: uuid.UUID
    role: str
    name: str
    roll_number: Optional[str]
    email: Optional[str]
    department: Optional[str]
    photo_url: Optional[str]
    created_at: Optional[datetime]


class AuthResponse(CamelModel):
    token: str
    user: UserSummary


class ProfileUpdate(CamelModel):
    """Mise à jour partielle du profil. newPassword exige currentPassword."""
    name: Optional[str] = None
    roll_number: Optional[str] = None
    email: Optional[EmailStr] = None
    department: Optional[str] = None
    current_password: Optional[str] = None
    new_password: Optional[str] = None

    @field_validator("name", "roll_number")
    @classmethod
    def not_empty(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("Le champ ne peut pas être vide.")
        return v.strip() if v else v

    @field_validator("new_password")
    @classmethod
    def password_not_empty(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("Le nouveau mot de passe ne peut pas être vide.")
        return v

    @model_validator(mode="after")
    def identity_not_null(self):
        # null explicite : "name" et "rollNumber" ne peuvent qu'être modifiés, jamais effacés
        if "name" in self.model_fields_set and self.name is None:
            raise ValueError("Le nom ne peut pas être effacé.")
        if "roll_number" in self.model_fields_set and self.roll_number is None:
            raise ValueError("Le numéro d'étudiant ne peut pas être effacé.")
        return self
