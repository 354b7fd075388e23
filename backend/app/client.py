"""
Client Python de l'API Campus Portal.

La session n'est pas un état global : chaque appel authentifié reçoit explicitement
une PortalSession, dont le cycle de vie suit une petite machine à états :
  LOGGED_OUT --login/signup--> LOGGED_IN --logout ou 401--> LOGGED_OUT

Exemple :
    with PortalClient("http://localhost:8000") as client:
        session = client.login("student", "R-042", "secret")
        courses = client.my_courses(session)
"""

import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

import httpx

logger = logging.getLogger(__name__)

FileSpec = Tuple[str, bytes, str]  # (nom, contenu, type MIME)


class SessionState(str, enum.Enum):
    LOGGED_OUT = "logged_out"
    LOGGED_IN = "logged_in"


class ApiError(Exception):
    """Réponse non-2xx : status HTTP et champ "message" renvoyé par le serveur."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code} {message}")
        self.status_code = status_code
        self.message = message


class SessionError(Exception):
    """Appel authentifié sur une session déconnectée."""


@dataclass
class PortalSession:
    token: Optional[str] = None
    user: Dict[str, Any] = field(default_factory=dict)
    state: SessionState = SessionState.LOGGED_OUT

    @property
    def is_authenticated(self) -> bool:
        return self.state is SessionState.LOGGED_IN

    @property
    def role(self) -> Optional[str]:
        return self.user.get("role")

    def open(self, token: str, user: Dict[str, Any]) -> None:
        self.token = token
        self.user = dict(user)
        self.state = SessionState.LOGGED_IN

    def close(self) -> None:
        self.token = None
        self.user = {}
        self.state = SessionState.LOGGED_OUT


class PortalClient:
    """
    Enveloppe httpx autour de l'API REST.
    `http` permet d'injecter un client existant (ex. fastapi.testclient.TestClient).
    """

    def __init__(self, base_url: str = "", http: Optional[httpx.Client] = None, timeout: float = 30.0):
        self._owns_http = http is None
        self.http = http or httpx.Client(base_url=base_url, timeout=timeout)

    def close(self) -> None:
        if self._owns_http:
            self.http.close()

    def __enter__(self) -> "PortalClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # --- Transport ---

    def request(
        self,
        method: str,
        path: str,
        session: Optional[PortalSession] = None,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
        files: Optional[List[Tuple[str, FileSpec]]] = None,
    ) -> Any:
        """
        Envoie la requête et retourne le JSON décodé ({} si corps vide ou illisible).
        Lève ApiError si le statut n'est pas 2xx ; un 401 ferme la session.
        """
        headers = {}
        if session is not None:
            if not session.is_authenticated:
                raise SessionError("Session déconnectée : connectez-vous d'abord.")
            headers["Authorization"] = f"Bearer {session.token}"

        response = self.http.request(method, path, json=json, params=params, files=files, headers=headers)

        try:
            data = response.json() if response.content else {}
        except ValueError:
            data = {}

        if response.is_error:
            message = data.get("message") if isinstance(data, dict) else None
            if response.status_code == 401 and session is not None:
                logger.info("Session expirée ou refusée, déconnexion.")
                session.close()
            raise ApiError(response.status_code, message or "Request failed")
        return data

    # --- Authentification ---

    def signup(self, role: str, name: str, password: str, roll_number: Optional[str] = None,
               email: Optional[str] = None, department: Optional[str] = None) -> PortalSession:
        payload = {"role": role, "name": name, "password": password}
        if roll_number is not None:
            payload["rollNumber"] = roll_number
        if email is not None:
            payload["email"] = email
        if department is not None:
            payload["department"] = department
        data = self.request("POST", "/api/signup", json=payload)
        return self._open_session(data)

    def login(self, role: str, identifier: str, password: str) -> PortalSession:
        data = self.request("POST", "/api/login", json={"role": role, "identifier": identifier, "password": password})
        return self._open_session(data)

    def logout(self, session: PortalSession) -> None:
        """Aucun appel serveur : le token n'est simplement plus utilisé."""
        session.close()

    def _open_session(self, data: Dict[str, Any]) -> PortalSession:
        session = PortalSession()
        session.open(data["token"], data["user"])
        return session

    # --- Profil ---

    def get_profile(self, session: PortalSession) -> Dict[str, Any]:
        return self.request("GET", "/api/me", session)

    def update_profile(self, session: PortalSession, **fields: Any) -> Dict[str, Any]:
        profile = self.request("PUT", "/api/me", session, json=fields)
        if "name" in profile:
            session.user["name"] = profile["name"]
        return profile

    def upload_photo(self, session: PortalSession, photo: FileSpec) -> Dict[str, Any]:
        return self.request("POST", "/api/me/photo", session, files=[("file", photo)])

    # --- Cours ---

    def list_courses(self, session: PortalSession, query: Optional[str] = None) -> List[Dict[str, Any]]:
        return self.request("GET", "/api/courses", session, params={"q": query} if query else None)

    def create_course(self, session: PortalSession, name: str, code: str, description: str = "") -> Dict[str, Any]:
        return self.request("POST", "/api/courses", session,
                            json={"name": name, "code": code, "description": description})

    def join_course(self, session: PortalSession, course_id: str) -> Dict[str, Any]:
        return self.request("POST", f"/api/courses/{course_id}/join", session)

    def my_courses(self, session: PortalSession) -> List[Dict[str, Any]]:
        return self.request("GET", "/api/my-courses", session)

    def list_materials(self, session: PortalSession, course_id: str) -> List[Dict[str, Any]]:
        return self.request("GET", f"/api/courses/{course_id}/materials", session)

    def upload_materials(self, session: PortalSession, course_id: str, files: Iterable[FileSpec]) -> List[Dict[str, Any]]:
        return self.request("POST", f"/api/courses/{course_id}/materials", session,
                            files=[("files", f) for f in files])

    # --- Devoirs ---

    def create_assignment(self, session: PortalSession, course_id: str, title: str, max_marks: Union[int, float],
                          due_date: Optional[str] = None, description: str = "") -> Dict[str, Any]:
        payload = {"courseId": course_id, "title": title, "description": description, "maxMarks": max_marks}
        if due_date is not None:
            payload["dueDate"] = due_date
        return self.request("POST", "/api/assignments", session, json=payload)

    def list_assignments(self, session: PortalSession, course_id: str) -> List[Dict[str, Any]]:
        return self.request("GET", f"/api/courses/{course_id}/assignments", session)

    def submit_files(self, session: PortalSession, assignment_id: str, files: Iterable[FileSpec]) -> Dict[str, Any]:
        return self.request("POST", f"/api/assignments/{assignment_id}/submit", session,
                            files=[("files", f) for f in files])

    def delete_file(self, session: PortalSession, assignment_id: str, file_url: str) -> Dict[str, Any]:
        return self.request("DELETE", f"/api/assignments/{assignment_id}/files", session, json={"fileUrl": file_url})

    def list_submissions(self, session: PortalSession, assignment_id: str) -> Dict[str, Any]:
        return self.request("GET", f"/api/assignments/{assignment_id}/submissions", session)

    def grade(self, session: PortalSession, assignment_id: str, student_id: str, marks: Union[int, float],
              feedback: Optional[str] = None) -> Dict[str, Any]:
        payload = {"studentId": student_id, "marks": marks}
        if feedback is not None:
            payload["feedback"] = feedback
        return self.request("POST", f"/api/assignments/{assignment_id}/grade", session, json=payload)

    # --- Discussion et tableau de bord ---

    def list_messages(self, session: PortalSession, course_id: str) -> List[Dict[str, Any]]:
        return self.request("GET", f"/api/courses/{course_id}/messages", session)

    def post_message(self, session: PortalSession, course_id: str, content: str) -> Dict[str, Any]:
        return self.request("POST", f"/api/courses/{course_id}/messages", session, json={"content": content})

    def dashboard_summary(self, session: PortalSession) -> Dict[str, Any]:
        return self.request("GET", "/api/dashboard/summary", session)
