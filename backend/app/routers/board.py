"""
Router du fil de discussion des cours et du tableau de bord.
Pas de push temps réel : les clients interrogent ces routes.
"""

import uuid
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_user
from app.models.user import User
from app.schemas.board import BoardMessageResponse, DashboardSummary, MessageCreate
from app.services import dashboard_service, message_service

router = APIRouter(prefix="/api", tags=["Discussion et tableau de bord"])


@router.get(
    "/courses/{course_id}/messages",
    response_model=List[BoardMessageResponse],
    summary="Messages du cours",
)
def list_messages(
    course_id: uuid.UUID,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Messages du plus ancien au plus récent. Réservé aux membres du cours."""
    return message_service.list_messages(db, course_id, user)


@router.post(
    "/courses/{course_id}/messages",
    response_model=BoardMessageResponse,
    status_code=201,
    summary="Publier un message",
)
def post_message(
    course_id: uuid.UUID,
    data: MessageCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return message_service.post_message(db, course_id, data.content, user)


@router.get(
    "/dashboard/summary",
    response_model=DashboardSummary,
    response_model_exclude_none=True,
    summary="Compteurs du tableau de bord",
)
def dashboard_summary(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    """Étudiant : pendingAssignmentsCount. Enseignant : submissionsToGradeCount."""
    return dashboard_service.get_summary(db, user)
