"""
Erreurs métier du portail.
Levées par les services, converties en réponse JSON {"message": ...} par main.py.
"""


class PortalError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInput(PortalError):
    """Champ manquant ou mal formé."""
    status_code = 400


class Unauthorized(PortalError):
    """Token absent, invalide ou expiré, ou identifiants incorrects."""
    status_code = 401


class Forbidden(PortalError):
    """Utilisateur authentifié mais non autorisé sur cette ressource."""
    status_code = 403


class NotFound(PortalError):
    status_code = 404


class Conflict(PortalError):
    """Violation d'unicité (code de cours, numéro d'étudiant, email enseignant)."""
    status_code = 409


class UploadError(PortalError):
    """Échec du transfert vers le stockage distant."""
    status_code = 500


class InternalError(PortalError):
    status_code = 500
