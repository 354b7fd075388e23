"""
Stockage distant des fichiers (rendus, supports de cours, photos de profil) via Cloudinary.

Les limites (nombre de fichiers, taille) sont vérifiées avant tout transfert.
Les transferts sont séquentiels ; un échec n'annule pas les fichiers déjà envoyés.
"""

import base64
import logging
from dataclasses import dataclass
from typing import List, Optional

import cloudinary
import cloudinary.uploader
from fastapi import UploadFile

from app.config import settings
from app.exceptions import InvalidInput, UploadError

logger = logging.getLogger(__name__)


@dataclass
class IncomingFile:
    """Fichier reçu en multipart, lu en mémoire."""
    filename: str
    content_type: Optional[str]
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass
class StoredFile:
    """Résultat d'un upload : référence publique + identifiants de suppression."""
    url: str
    original_name: str
    mimetype: Optional[str]
    size: int
    public_id: str
    resource_type: str


def read_upload_files(files: List[UploadFile], max_files: Optional[int] = None) -> List[IncomingFile]:
    """
    Lit les fichiers multipart et applique les limites d'upload.
    Lève InvalidInput si aucun fichier, trop de fichiers ou un fichier trop volumineux.

    Lecture synchrone : les routes d'upload sont des `def` exécutées dans le threadpool de FastAPI.
    Un fichier dont la taille annoncée dépasse la limite est refusé sans être lu.
    """
    max_files = max_files or settings.MAX_FILES_PER_REQUEST
    max_bytes = settings.MAX_FILE_SIZE_MB * 1024 * 1024

    if not files:
        raise InvalidInput("Aucun fichier reçu.")
    if len(files) > max_files:
        raise InvalidInput(f"Trop de fichiers. Maximum : {max_files} par envoi.")

    incoming = []
    for upload in files:
        if upload.size is not None and upload.size > max_bytes:
            raise _too_large(upload.filename)
        content = upload.file.read()
        if len(content) > max_bytes:
            raise _too_large(upload.filename)
        incoming.append(IncomingFile(
            filename=upload.filename or "fichier",
            content_type=upload.content_type,
            content=content,
        ))
    return incoming


def _too_large(filename: Optional[str]) -> InvalidInput:
    return InvalidInput(
        f"Fichier '{filename}' trop volumineux. Taille maximale : {settings.MAX_FILE_SIZE_MB} Mo."
    )


def _configure() -> None:
    cloudinary.config(
        cloud_name=settings.CLOUDINARY_CLOUD_NAME,
        api_key=settings.CLOUDINARY_API_KEY,
        api_secret=settings.CLOUDINARY_API_SECRET,
        secure=True,
    )


def upload_file(file: IncomingFile, folder: str) -> StoredFile:
    """Envoie un fichier vers Cloudinary (type détecté automatiquement). Lève UploadError en cas d'échec."""
    _configure()
    mimetype = file.content_type or "application/octet-stream"
    data_uri = f"data:{mimetype};base64,{base64.b64encode(file.content).decode('ascii')}"

    try:
        result = cloudinary.uploader.upload(
            data_uri,
            folder=f"{settings.UPLOAD_FOLDER_PREFIX}/{folder}",
            resource_type="auto",
        )
    except Exception as exc:
        logger.error("Échec de l'upload de '%s' vers Cloudinary : %s", file.filename, exc)
        raise UploadError(f"Échec de l'envoi du fichier '{file.filename}'.")

    return StoredFile(
        url=result["secure_url"],
        original_name=file.filename,
        mimetype=file.content_type,
        size=file.size,
        public_id=result["public_id"],
        resource_type=result.get("resource_type", "image"),
    )


def upload_files(files: List[IncomingFile], folder: str) -> List[StoredFile]:
    """Envoie les fichiers un par un, dans l'ordre reçu."""
    return [upload_file(f, folder) for f in files]


def delete_file(public_id: Optional[str], resource_type: Optional[str]) -> bool:
    """
    Supprime un fichier distant, au mieux : un échec est journalisé, jamais levé.
    Retourne True si Cloudinary confirme la suppression.
    """
    if not public_id:
        return False

    _configure()
    try:
        result = cloudinary.uploader.destroy(public_id, resource_type=resource_type or "image")
    except Exception as exc:
        logger.warning("Suppression distante impossible pour %s : %s", public_id, exc)
        return False

    if result.get("result") != "ok":
        logger.warning("Suppression distante refusée pour %s : %s", public_id, result.get("result"))
        return False
    return True
