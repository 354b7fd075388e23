"""
Router pour les devoirs : création, rendus, suppression de fichiers et notation.
"""

import uuid
from typing import List

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_user
from app.models.user import User
from app.schemas.common import MessageResponse
from app.schemas.coursework import (
    AssignmentCreate,
    AssignmentResponse,
    FileDeleteRequest,
    GradeRequest,
    SubmissionListResponse,
    SubmissionResponse,
)
from app.services import assignment_service, storage_service

router = APIRouter(prefix="/api", tags=["Devoirs"])


@router.post("/assignments", response_model=AssignmentResponse, status_code=201, summary="Créer un devoir")
def create_assignment(
    data: AssignmentCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """
    Crée un devoir dans un cours de l'enseignant courant.

    Contraintes :
    - courseId et title obligatoires
    - maxMarks entier strictement positif
    - sans dueDate, l'échéance est l'instant de création
    """
    return assignment_service.create_assignment(db, data, user)


@router.get(
    "/courses/{course_id}/assignments",
    response_model=List[AssignmentResponse],
    summary="Devoirs d'un cours",
)
def list_assignments(
    course_id: uuid.UUID,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return assignment_service.list_assignments(db, course_id)


@router.post(
    "/assignments/{assignment_id}/submit",
    response_model=SubmissionResponse,
    summary="Rendre des fichiers",
)
def submit_assignment(
    assignment_id: uuid.UUID,
    files: List[UploadFile] = File(...),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """
    Dépose jusqu'à 5 fichiers (20 Mo max chacun) pour le devoir.
    Les envois successifs s'ajoutent au même rendu ; le retard est recalculé à chaque envoi.
    Les droits sont vérifiés avant la lecture des fichiers.
    """
    assignment_service.get_assignment_for_submission(db, assignment_id, user)
    incoming = storage_service.read_upload_files(files)
    return assignment_service.submit_files(db, assignment_id, incoming, user)


@router.delete("/assignments/{assignment_id}/files", response_model=MessageResponse, summary="Supprimer un fichier rendu")
def delete_submission_file(
    assignment_id: uuid.UUID,
    data: FileDeleteRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Retire un fichier de son propre rendu (corps : {"fileUrl": "..."})."""
    assignment_service.delete_file(db, assignment_id, data.file_url, user)
    return MessageResponse(message="Fichier supprimé.")


@router.get(
    "/assignments/{assignment_id}/submissions",
    response_model=SubmissionListResponse,
    summary="Rendus d'un devoir",
)
def list_submissions(
    assignment_id: uuid.UUID,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Enseignant du cours : tous les rendus. Étudiant : son rendu uniquement."""
    return assignment_service.list_submissions(db, assignment_id, user)


@router.post(
    "/assignments/{assignment_id}/grade",
    response_model=SubmissionResponse,
    summary="Noter un rendu",
)
def grade_submission(
    assignment_id: uuid.UUID,
    data: GradeRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return assignment_service.grade_submission(db, assignment_id, data, user)
