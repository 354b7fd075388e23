"""
Service métier pour les devoirs : création, rendu de fichiers, suppression de fichiers et notation.

Cycle de vie d'un rendu (un seul par couple devoir/étudiant) :
  non rendu → rendu (au moins un fichier) → noté (marks renseigné)
  Un nouvel envoi sur un rendu noté le repasse en "rendu" sans effacer la note ni le commentaire.
"""

import uuid
import logging
from collections import defaultdict
from typing import Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import Forbidden, InvalidInput, NotFound
from app.models.course import Course
from app.models.coursework import Assignment, Submission, SubmissionFile
from app.models.user import ROLE_STUDENT, ROLE_TEACHER, User
from app.schemas.common import FileReference
from app.schemas.coursework import (
    AssignmentCreate,
    AssignmentResponse,
    GradeRequest,
    SubmissionListResponse,
    SubmissionResponse,
)
from app.services import storage_service
from app.services.course_service import is_enrolled
from app.services.storage_service import IncomingFile
from app.timeutils import utcnow

logger = logging.getLogger(__name__)


def create_assignment(db: Session, data: AssignmentCreate, user: User) -> AssignmentResponse:
    """
    Crée un devoir dans un cours.
    Lève Forbidden si l'utilisateur n'est pas l'enseignant propriétaire du cours
    (un cours inexistant est traité de la même façon).
    """
    if user.role != ROLE_TEACHER:
        raise Forbidden("Seuls les enseignants peuvent créer un devoir.")

    course = db.get(Course, data.course_id)
    if course is None or course.teacher_id != user.id:
        raise Forbidden("Vous n'êtes pas l'enseignant de ce cours.")

    assignment = Assignment(
        course_id=course.id,
        title=data.title,
        description=data.description or "",
        due_date=data.due_date or utcnow(),
        max_marks=int(data.max_marks),
        created_by=user.id,
    )
    db.add(assignment)
    db.commit()
    db.refresh(assignment)

    logger.info("Devoir '%s' (%s) créé dans le cours %s", assignment.title, assignment.id, course.id)
    return AssignmentResponse.model_validate(assignment)


def list_assignments(db: Session, course_id: uuid.UUID) -> List[AssignmentResponse]:
    """Devoirs d'un cours, triés par échéance. Lisibles par tout utilisateur authentifié."""
    assignments = db.execute(
        select(Assignment)
        .where(Assignment.course_id == course_id)
        .order_by(Assignment.due_date, Assignment.created_at)
    ).scalars().all()
    return [AssignmentResponse.model_validate(a) for a in assignments]


def get_assignment_for_submission(db: Session, assignment_id: uuid.UUID, user: User) -> Assignment:
    """
    Vérifie que l'utilisateur peut rendre ce devoir et retourne le devoir.
    Appelé par le router avant la lecture des fichiers : un refus passe avant les limites d'upload.

    Validations :
    1. L'utilisateur est un étudiant
    2. Le devoir existe
    3. L'étudiant est inscrit au cours du devoir
    """
    if user.role != ROLE_STUDENT:
        raise Forbidden("Seuls les étudiants peuvent rendre un devoir.")

    assignment = db.get(Assignment, assignment_id)
    if assignment is None:
        raise NotFound("Devoir introuvable.")

    if not is_enrolled(db, assignment.course_id, user.id):
        raise Forbidden("Vous n'êtes pas inscrit à ce cours.")
    return assignment


def submit_files(
    db: Session,
    assignment_id: uuid.UUID,
    files: List[IncomingFile],
    user: User,
) -> SubmissionResponse:
    """
    Dépose des fichiers pour le devoir, après les contrôles de get_assignment_for_submission.
    Au moins un fichier est requis (les limites de taille/nombre sont vérifiées à la lecture).

    Le premier envoi crée le rendu ; les suivants ajoutent les fichiers.
    Dans les deux cas submitted_at et is_late sont recalculés (dernier envoi gagnant).
    Lève UploadError si un transfert échoue ; les fichiers déjà transférés ne sont pas annulés.
    """
    assignment = get_assignment_for_submission(db, assignment_id, user)

    if not files:
        raise InvalidInput("Aucun fichier reçu.")

    stored_files = storage_service.upload_files(files, folder=f"assignments/{assignment_id}")

    now = utcnow()
    submission = _find_submission(db, assignment_id, user.id)
    if submission is None:
        submission = Submission(
            assignment_id=assignment_id,
            student_id=user.id,
            marks=None,
            feedback=None,
        )
        db.add(submission)
    submission.submitted_at = now
    submission.is_late = now > assignment.due_date

    # Obtenir l'ID du rendu avant d'y rattacher les fichiers
    db.flush()

    for stored in stored_files:
        db.add(SubmissionFile(
            submission_id=submission.id,
            url=stored.url,
            original_name=stored.original_name,
            mimetype=stored.mimetype,
            size=stored.size,
            public_id=stored.public_id,
            resource_type=stored.resource_type,
            uploaded_at=now,
        ))
    db.commit()
    db.refresh(submission)

    logger.info(
        "Rendu de l'étudiant %s sur le devoir %s : %d fichier(s) ajouté(s)%s",
        user.id, assignment_id, len(stored_files), " (en retard)" if submission.is_late else "",
    )
    return _to_submission_response(submission, _files_by_submission(db, [submission.id]), user)


def delete_file(db: Session, assignment_id: uuid.UUID, file_url: str, user: User) -> None:
    """
    Retire un fichier du rendu de l'étudiant courant.
    La suppression distante est faite au mieux : un échec est journalisé,
    l'état local est mis à jour quand même.
    """
    if user.role != ROLE_STUDENT:
        raise Forbidden("Seul l'auteur du rendu peut en supprimer un fichier.")

    if db.get(Assignment, assignment_id) is None:
        raise NotFound("Devoir introuvable.")

    submission = _find_submission(db, assignment_id, user.id)
    if submission is None:
        raise NotFound("Aucun rendu pour ce devoir.")

    file = db.execute(
        select(SubmissionFile)
        .where(
            SubmissionFile.submission_id == submission.id,
            SubmissionFile.url == file_url,
        )
        .limit(1)
    ).scalar()
    if file is None:
        raise NotFound("Fichier introuvable dans ce rendu.")

    public_id, resource_type = file.public_id, file.resource_type
    db.delete(file)
    db.commit()

    if not storage_service.delete_file(public_id, resource_type):
        logger.warning("Fichier %s retiré du rendu mais pas du stockage distant", file_url)
    logger.info("Fichier retiré du rendu de l'étudiant %s (devoir %s)", user.id, assignment_id)


def list_submissions(db: Session, assignment_id: uuid.UUID, user: User) -> SubmissionListResponse:
    """
    Enseignant propriétaire du cours : tous les rendus, avec nom et numéro des étudiants.
    Étudiant : son propre rendu uniquement (liste vide s'il n'a rien rendu).
    """
    assignment = db.get(Assignment, assignment_id)
    if assignment is None:
        raise NotFound("Devoir introuvable.")

    if user.role == ROLE_TEACHER:
        course = db.get(Course, assignment.course_id)
        if course is None or course.teacher_id != user.id:
            raise Forbidden("Vous n'êtes pas l'enseignant de ce cours.")
        rows = db.execute(
            select(Submission, User)
            .join(User, User.id == Submission.student_id)
            .where(Submission.assignment_id == assignment_id)
            .order_by(User.name, Submission.submitted_at)
        ).all()
    elif user.role == ROLE_STUDENT:
        submission = _find_submission(db, assignment_id, user.id)
        rows = [(submission, user)] if submission is not None else []
    else:
        raise Forbidden("Accès refusé.")

    files = _files_by_submission(db, [s.id for s, _ in rows])
    return SubmissionListResponse(
        assignment_id=assignment.id,
        max_marks=assignment.max_marks,
        submissions=[_to_submission_response(s, files, student) for s, student in rows],
    )


def grade_submission(db: Session, assignment_id: uuid.UUID, data: GradeRequest, user: User) -> SubmissionResponse:
    """
    Note le rendu d'un étudiant : marks obligatoire, feedback conservé s'il n'est pas fourni.
    La note n'est bornée à [0, maxMarks] que si ENFORCE_MARKS_RANGE est activé.
    """
    assignment = db.get(Assignment, assignment_id)
    if assignment is None:
        raise NotFound("Devoir introuvable.")

    course = db.get(Course, assignment.course_id)
    if user.role != ROLE_TEACHER or course is None or course.teacher_id != user.id:
        raise Forbidden("Seul l'enseignant du cours peut noter ce devoir.")

    submission = _find_submission(db, assignment_id, data.student_id)
    if submission is None:
        raise NotFound("Aucun rendu de cet étudiant pour ce devoir.")

    if settings.ENFORCE_MARKS_RANGE and not 0 <= data.marks <= assignment.max_marks:
        raise InvalidInput(f"La note doit être comprise entre 0 et {assignment.max_marks}.")

    submission.marks = data.marks
    if data.feedback is not None:
        submission.feedback = data.feedback
    db.commit()
    db.refresh(submission)

    logger.info("Rendu de l'étudiant %s noté %s sur le devoir %s", data.student_id, data.marks, assignment_id)
    student = db.get(User, data.student_id)
    return _to_submission_response(submission, _files_by_submission(db, [submission.id]), student)


def _find_submission(db: Session, assignment_id: uuid.UUID, student_id: uuid.UUID) -> Optional[Submission]:
    return db.execute(
        select(Submission).where(
            Submission.assignment_id == assignment_id,
            Submission.student_id == student_id,
        )
    ).scalar_one_or_none()


def _files_by_submission(db: Session, submission_ids: List[int]) -> Dict[int, List[FileReference]]:
    """Fichiers groupés par rendu, dans l'ordre d'envoi."""
    grouped: Dict[int, List[FileReference]] = defaultdict(list)
    if not submission_ids:
        return grouped

    files = db.execute(
        select(SubmissionFile)
        .where(SubmissionFile.submission_id.in_(submission_ids))
        .order_by(SubmissionFile.id)
    ).scalars().all()
    for f in files:
        grouped[f.submission_id].append(FileReference.model_validate(f))
    return grouped


def _to_submission_response(
    submission: Submission,
    files: Dict[int, List[FileReference]],
    student: Optional[User],
) -> SubmissionResponse:
    return SubmissionResponse(
        student_id=submission.student_id,
        student_name=student.name if student else None,
        roll_number=student.roll_number if student else None,
        files=files.get(submission.id, []),
        submitted_at=submission.submitted_at,
        marks=submission.marks,
        feedback=submission.feedback,
        is_late=submission.is_late,
    )
