"""
Router pour les cours : catalogue, création, inscription et supports de cours.
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_user
from app.models.user import User
from app.schemas.course import CourseCreate, CourseResponse, MaterialResponse
from app.services import course_service, storage_service

router = APIRouter(prefix="/api", tags=["Cours"])


@router.get("/courses", response_model=List[CourseResponse], summary="Lister / rechercher les cours")
def list_courses(
    q: Optional[str] = None,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Recherche insensible à la casse sur le nom, le code et la description. Sans `q`, tous les cours."""
    return course_service.search_courses(db, q)


@router.post("/courses", response_model=CourseResponse, status_code=201, summary="Créer un cours")
def create_course(
    data: CourseCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Réservé aux enseignants. Le code du cours est unique."""
    return course_service.create_course(db, data, user)


@router.get("/my-courses", response_model=List[CourseResponse], summary="Mes cours")
def my_courses(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    """Cours donnés (enseignant) ou suivis (étudiant)."""
    return course_service.get_my_courses(db, user)


@router.get("/courses/{course_id}", response_model=CourseResponse, summary="Détail d'un cours")
def get_course(
    course_id: uuid.UUID,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return course_service.get_course(db, course_id)


@router.post("/courses/{course_id}/join", response_model=CourseResponse, summary="Rejoindre un cours")
def join_course(
    course_id: uuid.UUID,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Inscrit l'étudiant courant. Rejoindre deux fois est sans effet."""
    return course_service.join_course(db, course_id, user)


# --- Supports de cours ---

@router.get("/courses/{course_id}/materials", response_model=List[MaterialResponse], summary="Supports du cours")
def list_materials(
    course_id: uuid.UUID,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return course_service.list_materials(db, course_id, user)


@router.post(
    "/courses/{course_id}/materials",
    response_model=List[MaterialResponse],
    status_code=201,
    summary="Déposer des supports de cours",
)
def upload_materials(
    course_id: uuid.UUID,
    files: List[UploadFile] = File(...),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """5 fichiers maximum par envoi, 20 Mo maximum par fichier. Réservé à l'enseignant du cours."""
    course_service.get_owned_course(db, course_id, user)
    incoming = storage_service.read_upload_files(files)
    return course_service.upload_materials(db, course_id, incoming, user)
