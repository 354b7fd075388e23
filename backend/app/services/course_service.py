"""
Service métier pour les cours : création, inscription, recherche et supports de cours.
"""

import uuid
import logging
from typing import List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import Conflict, Forbidden, NotFound
from app.models.course import Course, CourseMaterial, CourseStudent
from app.models.user import ROLE_STUDENT, ROLE_TEACHER, User
from app.schemas.course import CourseCreate, CourseResponse, MaterialResponse
from app.services import storage_service
from app.services.storage_service import IncomingFile

logger = logging.getLogger(__name__)


def create_course(db: Session, data: CourseCreate, user: User) -> CourseResponse:
    """
    Crée un cours appartenant à l'enseignant courant.
    Si COURSE_ADMIN_EMAIL est défini, seul cet enseignant peut créer des cours.
    Lève Conflict si le code existe déjà.
    """
    if user.role != ROLE_TEACHER:
        raise Forbidden("Seuls les enseignants peuvent créer un cours.")
    admin_email = settings.COURSE_ADMIN_EMAIL
    if admin_email and (user.email or "").lower() != admin_email.lower():
        raise Forbidden("Création de cours réservée à l'administrateur des cours.")

    existing = db.execute(select(Course.id).where(Course.code == data.code)).scalar()
    if existing:
        raise Conflict(f"Un cours avec le code '{data.code}' existe déjà.")

    course = Course(
        name=data.name,
        code=data.code,
        description=data.description or "",
        teacher_id=user.id,
    )
    db.add(course)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict(f"Un cours avec le code '{data.code}' existe déjà.")
    db.refresh(course)

    logger.info("Cours %s (%s) créé par %s", course.code, course.id, user.id)
    return _to_response(db, course)


def get_course(db: Session, course_id: uuid.UUID) -> CourseResponse:
    """Retourne un cours par son ID. Lève NotFound si inexistant."""
    course = db.get(Course, course_id)
    if course is None:
        raise NotFound("Cours introuvable.")
    return _to_response(db, course)


def search_courses(db: Session, query: Optional[str] = None) -> List[CourseResponse]:
    """Recherche insensible à la casse sur le nom, le code et la description. Tous les cours si vide."""
    stmt = select(Course).order_by(Course.name)
    if query and query.strip():
        pattern = f"%{query.strip().lower()}%"
        stmt = stmt.where(or_(
            func.lower(Course.name).like(pattern),
            func.lower(Course.code).like(pattern),
            func.lower(func.coalesce(Course.description, "")).like(pattern),
        ))
    courses = db.execute(stmt).scalars().all()
    return [_to_response(db, c) for c in courses]


def join_course(db: Session, course_id: uuid.UUID, user: User) -> CourseResponse:
    """Inscrit l'étudiant courant. Une seconde inscription est sans effet."""
    if user.role != ROLE_STUDENT:
        raise Forbidden("Seuls les étudiants peuvent rejoindre un cours.")

    course = db.get(Course, course_id)
    if course is None:
        raise NotFound("Cours introuvable.")

    if db.get(CourseStudent, (course_id, user.id)) is None:
        db.add(CourseStudent(course_id=course_id, student_id=user.id))
        try:
            db.commit()
        except IntegrityError:
            # Inscription concurrente du même étudiant : déjà inscrit
            db.rollback()
        else:
            logger.info("Étudiant %s inscrit au cours %s", user.id, course_id)

    return _to_response(db, course)


def get_my_courses(db: Session, user: User) -> List[CourseResponse]:
    """Cours dont l'utilisateur est l'enseignant (teacher) ou auxquels il est inscrit (student)."""
    if user.role == ROLE_TEACHER:
        stmt = select(Course).where(Course.teacher_id == user.id)
    else:
        stmt = (
            select(Course)
            .join(CourseStudent, CourseStudent.course_id == Course.id)
            .where(CourseStudent.student_id == user.id)
        )
    courses = db.execute(stmt.order_by(Course.name)).scalars().all()
    return [_to_response(db, c) for c in courses]


def is_enrolled(db: Session, course_id: uuid.UUID, student_id: uuid.UUID) -> bool:
    return db.get(CourseStudent, (course_id, student_id)) is not None


def is_member(db: Session, course: Course, user: User) -> bool:
    """Enseignant propriétaire du cours ou étudiant inscrit."""
    if user.role == ROLE_TEACHER:
        return course.teacher_id == user.id
    return is_enrolled(db, course.id, user.id)


def get_owned_course(db: Session, course_id: uuid.UUID, user: User) -> Course:
    """Cours dont l'utilisateur est l'enseignant. Vérifié par le router avant la lecture des fichiers."""
    course = db.get(Course, course_id)
    if course is None:
        raise NotFound("Cours introuvable.")
    if user.role != ROLE_TEACHER or course.teacher_id != user.id:
        raise Forbidden("Seul l'enseignant du cours peut déposer des supports.")
    return course


def upload_materials(
    db: Session,
    course_id: uuid.UUID,
    files: List[IncomingFile],
    user: User,
) -> List[MaterialResponse]:
    """
    Dépose des supports de cours. Réservé à l'enseignant propriétaire.
    Lève UploadError si un transfert échoue : les supports déjà envoyés ne sont pas enregistrés.
    """
    get_owned_course(db, course_id, user)

    stored_files = storage_service.upload_files(files, folder=f"materials/{course_id}")

    materials = []
    for stored in stored_files:
        material = CourseMaterial(
            course_id=course_id,
            url=stored.url,
            original_name=stored.original_name,
            mimetype=stored.mimetype,
            size=stored.size,
            public_id=stored.public_id,
            resource_type=stored.resource_type,
            uploaded_by=user.id,
        )
        db.add(material)
        materials.append(material)
    db.commit()

    logger.info("%d support(s) déposé(s) sur le cours %s", len(materials), course_id)
    return [MaterialResponse.model_validate(m) for m in materials]


def list_materials(db: Session, course_id: uuid.UUID, user: User) -> List[MaterialResponse]:
    """Supports d'un cours, du plus ancien au plus récent. Réservé aux membres du cours."""
    course = db.get(Course, course_id)
    if course is None:
        raise NotFound("Cours introuvable.")
    if not is_member(db, course, user):
        raise Forbidden("Vous n'êtes pas membre de ce cours.")

    materials = db.execute(
        select(CourseMaterial)
        .where(CourseMaterial.course_id == course_id)
        .order_by(CourseMaterial.uploaded_at, CourseMaterial.id)
    ).scalars().all()
    return [MaterialResponse.model_validate(m) for m in materials]


def _to_response(db: Session, course: Course) -> CourseResponse:
    """Construit le schéma de réponse avec le nom de l'enseignant et le nombre d'inscrits."""
    nb_students = db.execute(
        select(func.count())
        .select_from(CourseStudent)
        .where(CourseStudent.course_id == course.id)
    ).scalar() or 0

    teacher = db.get(User, course.teacher_id)

    return CourseResponse(
        id=course.id,
        name=course.name,
        code=course.code,
        description=course.description,
        teacher_id=course.teacher_id,
        teacher_name=teacher.name if teacher else None,
        nb_students=nb_students,
        created_at=course.created_at,
    )
