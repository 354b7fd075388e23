"""
Tests d'intégration API pour les cours, le fil de discussion et le tableau de bord.
"""

import uuid
from datetime import datetime
from unittest.mock import patch

import pytest

from app.exceptions import Conflict, Forbidden, NotFound
from app.models.user import User
from app.schemas.board import BoardMessageResponse, DashboardSummary
from app.schemas.course import CourseResponse, MaterialResponse


# --- Helpers ---

def make_course_response(**kwargs) -> CourseResponse:
    return CourseResponse(
        id=kwargs.get("id", uuid.uuid4()),
        name=kwargs.get("name", "CS101"),
        code=kwargs.get("code", "CS101"),
        description=kwargs.get("description", ""),
        teacher_id=kwargs.get("teacher_id", uuid.uuid4()),
        teacher_name="Prof. Dupont",
        nb_students=kwargs.get("nb_students", 0),
        created_at=datetime.now(),
    )


@pytest.fixture
def teacher(login_as):
    return login_as(User(id=uuid.uuid4(), role="teacher", name="Prof. Dupont", email="dupont@school.be"))


@pytest.fixture
def student(login_as):
    return login_as(User(id=uuid.uuid4(), role="student", name="Alice", roll_number="R-001"))


# ============================================================
# /api/courses
# ============================================================

def test_create_course_succes(client, teacher):
    with patch("app.routers.courses.course_service.create_course") as mock:
        mock.return_value = make_course_response(teacher_id=teacher.id)
        response = client.post("/api/courses", json={"name": "CS101", "code": "CS101"})

    assert response.status_code == 201
    assert response.json()["code"] == "CS101"
    assert response.json()["teacherId"] == str(teacher.id)
    assert response.json()["nbStudents"] == 0


def test_create_course_code_duplique(client, teacher):
    with patch("app.routers.courses.course_service.create_course") as mock:
        mock.side_effect = Conflict("Un cours avec le code 'CS101' existe déjà.")
        response = client.post("/api/courses", json={"name": "CS101", "code": "CS101"})

    assert response.status_code == 409
    assert "existe déjà" in response.json()["message"]


def test_create_course_par_etudiant(client, student):
    with patch("app.routers.courses.course_service.create_course") as mock:
        mock.side_effect = Forbidden("Seuls les enseignants peuvent créer un cours.")
        response = client.post("/api/courses", json={"name": "CS101", "code": "CS101"})

    assert response.status_code == 403


def test_create_course_body_manquant(client, teacher):
    response = client.post("/api/courses")
    assert response.status_code == 400


def test_list_courses_avec_recherche(client, student):
    with patch("app.routers.courses.course_service.search_courses") as mock:
        mock.return_value = [make_course_response()]
        response = client.get("/api/courses", params={"q": "cs"})

    assert response.status_code == 200
    assert len(response.json()) == 1
    assert mock.call_args[0][1] == "cs"


def test_get_course_introuvable(client, student):
    with patch("app.routers.courses.course_service.get_course") as mock:
        mock.side_effect = NotFound("Cours introuvable.")
        response = client.get(f"/api/courses/{uuid.uuid4()}")

    assert response.status_code == 404
    assert response.json() == {"message": "Cours introuvable."}


def test_get_course_id_invalide(client, student):
    response = client.get("/api/courses/pas-un-uuid")
    assert response.status_code == 400


def test_join_course(client, student):
    course_id = uuid.uuid4()
    with patch("app.routers.courses.course_service.join_course") as mock:
        mock.return_value = make_course_response(id=course_id, nb_students=1)
        response = client.post(f"/api/courses/{course_id}/join")

    assert response.status_code == 200
    assert response.json()["nbStudents"] == 1
    assert mock.call_args[0][1] == course_id
    assert mock.call_args[0][2] is student


def test_my_courses(client, teacher):
    with patch("app.routers.courses.course_service.get_my_courses") as mock:
        mock.return_value = []
        response = client.get("/api/my-courses")

    assert response.status_code == 200
    assert response.json() == []


# ============================================================
# /api/courses/{id}/materials
# ============================================================

def test_upload_materials(client, teacher):
    course_id = uuid.uuid4()
    with patch("app.routers.courses.course_service.get_owned_course"), \
            patch("app.routers.courses.course_service.upload_materials") as mock:
        mock.return_value = [MaterialResponse(
            id=1, course_id=course_id, url="https://cdn/x.pdf", original_name="x.pdf",
            mimetype="application/pdf", size=3, uploaded_at=datetime.now(),
        )]
        response = client.post(
            f"/api/courses/{course_id}/materials",
            files=[("files", ("x.pdf", b"abc", "application/pdf"))],
        )

    assert response.status_code == 201
    assert response.json()[0]["originalName"] == "x.pdf"
    assert "publicId" not in response.json()[0]


def test_upload_materials_trop_de_fichiers(client, teacher):
    files = [("files", (f"{i}.pdf", b"abc", "application/pdf")) for i in range(6)]
    with patch("app.routers.courses.course_service.get_owned_course"), \
            patch("app.routers.courses.course_service.upload_materials") as mock:
        response = client.post(f"/api/courses/{uuid.uuid4()}/materials", files=files)

    assert response.status_code == 400
    assert "Maximum : 5" in response.json()["message"]
    mock.assert_not_called()


def test_upload_materials_droits_verifies_avant_les_limites(client, student):
    """Un non-propriétaire reçoit 403 même si l'envoi dépasse les limites d'upload."""
    files = [("files", (f"{i}.pdf", b"abc", "application/pdf")) for i in range(6)]
    with patch("app.routers.courses.course_service.upload_materials") as mock:
        response = client.post(f"/api/courses/{uuid.uuid4()}/materials", files=files)

    assert response.status_code == 403
    mock.assert_not_called()


# ============================================================
# /api/courses/{id}/messages
# ============================================================

def test_post_message(client, student):
    course_id = uuid.uuid4()
    with patch("app.routers.board.message_service.post_message") as mock:
        mock.return_value = BoardMessageResponse(
            id=1, course_id=course_id, author_id=student.id, author_name="Alice",
            author_role="student", content="Bonjour", created_at=datetime.now(),
        )
        response = client.post(f"/api/courses/{course_id}/messages", json={"content": "Bonjour"})

    assert response.status_code == 201
    assert response.json()["authorName"] == "Alice"


def test_post_message_vide(client, student):
    response = client.post(f"/api/courses/{uuid.uuid4()}/messages", json={"content": "  "})
    assert response.status_code == 400
    assert "vide" in response.json()["message"]


def test_list_messages_non_membre(client, student):
    with patch("app.routers.board.message_service.list_messages") as mock:
        mock.side_effect = Forbidden("Vous n'êtes pas membre de ce cours.")
        response = client.get(f"/api/courses/{uuid.uuid4()}/messages")

    assert response.status_code == 403


def test_list_messages_cours_inexistant(client, student):
    with patch("app.routers.board.message_service.list_messages") as mock:
        mock.side_effect = NotFound("Cours introuvable.")
        response = client.get(f"/api/courses/{uuid.uuid4()}/messages")

    assert response.status_code == 404


# ============================================================
# /api/dashboard/summary
# ============================================================

def test_dashboard_enseignant(client, teacher):
    with patch("app.routers.board.dashboard_service.get_summary") as mock:
        mock.return_value = DashboardSummary(role="teacher", my_courses_count=2, submissions_to_grade_count=0)
        response = client.get("/api/dashboard/summary")

    assert response.status_code == 200
    assert response.json() == {"role": "teacher", "myCoursesCount": 2, "submissionsToGradeCount": 0}


def test_dashboard_etudiant(client, student):
    with patch("app.routers.board.dashboard_service.get_summary") as mock:
        mock.return_value = DashboardSummary(role="student", my_courses_count=1, pending_assignments_count=3)
        response = client.get("/api/dashboard/summary")

    assert response.json() == {"role": "student", "myCoursesCount": 1, "pendingAssignmentsCount": 3}
