"""
Point d'entrée principal de l'API Campus Portal.
Démarrage : uvicorn app.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

import app.models  # noqa: F401 (enregistre tous les modèles dans Base.metadata avant les routers)
from app.config import settings
from app.database import init_db
from app.exceptions import InternalError, PortalError
from app.routers import assignments, auth, board, courses, profile

logger = logging.getLogger(__name__)
logging.getLogger("app").setLevel(settings.LOG_LEVEL.upper())


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Cycle de vie de l'application : création des tables si AUTO_CREATE_TABLES est activé."""
    if settings.AUTO_CREATE_TABLES:
        init_db()
    yield


app = FastAPI(
    title="Campus Portal API",
    description="API du portail étudiants/enseignants : cours, devoirs, rendus, notes et discussions",
    version="0.1.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

# CORS : autorise tous les ports localhost en développement (à restreindre en production).
app.add_middleware(
    CORSMiddleware,
    allow_origins=[],
    allow_origin_regex=r"https?://(localhost|127\.0\.0\.1)(:\d+)?",
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["Content-Type", "Authorization", "Accept"],
)


app.include_router(auth.router)
app.include_router(profile.router)
app.include_router(courses.router)
app.include_router(assignments.router)
app.include_router(board.router)


@app.exception_handler(PortalError)
async def portal_error_handler(request: Request, exc: PortalError) -> JSONResponse:
    """Erreurs métier levées par les services → {"message": ...} avec le code HTTP associé."""
    if exc.status_code >= 500:
        logger.error("%s sur %s %s : %s", type(exc).__name__, request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Corps ou paramètres invalides → 400 avec le premier message de validation."""
    errors = exc.errors()
    message = "Requête invalide."
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        text = str(first.get("msg", "")).removeprefix("Value error, ")
        message = f"{field} : {text}" if field else text
    return JSONResponse(status_code=400, content={"message": message})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"message": str(exc.detail)}, headers=exc.headers)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Intercepte toutes les exceptions non gérées pour garantir que la réponse 500
    passe bien par CORSMiddleware (qui injecte les headers CORS).
    """
    logger.error("Exception non gérée : %s", exc, exc_info=True)
    error = InternalError("Une erreur interne est survenue.")
    return JSONResponse(status_code=error.status_code, content={"message": error.message})


@app.get("/api/health", tags=["Santé"])
def health_check():
    """Vérifie que l'API est opérationnelle."""
    return {"status": "ok", "service": "Campus Portal API", "version": "0.1.0"}
