"""
Compteurs du tableau de bord, recalculés à chaque appel (aucun cache).
"""

from sqlalchemy import and_, func, select
from sqlalchemy.orm import Session

from app.models.course import Course, CourseStudent
from app.models.coursework import Assignment, Submission
from app.models.user import ROLE_TEACHER, User
from app.schemas.board import DashboardSummary
from app.timeutils import utcnow


def get_summary(db: Session, user: User) -> DashboardSummary:
    """
    Étudiant : cours suivis + devoirs à rendre (pas de rendu, échéance future).
    Enseignant : cours donnés + rendus non notés sur ses devoirs.
    """
    if user.role == ROLE_TEACHER:
        courses_count = db.execute(
            select(func.count()).select_from(Course).where(Course.teacher_id == user.id)
        ).scalar() or 0

        to_grade = db.execute(
            select(func.count())
            .select_from(Submission)
            .join(Assignment, Assignment.id == Submission.assignment_id)
            .join(Course, Course.id == Assignment.course_id)
            .where(Course.teacher_id == user.id, Submission.marks.is_(None))
        ).scalar() or 0

        return DashboardSummary(
            role=user.role,
            my_courses_count=courses_count,
            submissions_to_grade_count=to_grade,
        )

    courses_count = db.execute(
        select(func.count()).select_from(CourseStudent).where(CourseStudent.student_id == user.id)
    ).scalar() or 0

    pending = db.execute(
        select(func.count())
        .select_from(Assignment)
        .join(
            CourseStudent,
            and_(CourseStudent.course_id == Assignment.course_id, CourseStudent.student_id == user.id),
        )
        .outerjoin(
            Submission,
            and_(Submission.assignment_id == Assignment.id, Submission.student_id == user.id),
        )
        .where(Submission.id.is_(None), Assignment.due_date > utcnow())
    ).scalar() or 0

    return DashboardSummary(
        role=user.role,
        my_courses_count=courses_count,
        pending_assignments_count=pending,
    )
