"""
Configuration de la connexion à la base de données.
Utilise SQLAlchemy avec un moteur synchrone : une session par requête.
"""

import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.orm import sessionmaker

from app.config import settings

logger = logging.getLogger(__name__)

engine = create_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Dépendance FastAPI : fournit une session BDD et la ferme après usage."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None) -> None:
    """Crée les tables manquantes. Les modèles doivent être importés avant l'appel."""
    import app.models  # noqa: F401 (enregistre tous les modèles dans Base.metadata)

    Base.metadata.create_all(bind=bind or engine)
    logger.info("Tables de la base de données vérifiées.")
