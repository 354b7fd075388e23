"""
Configuration partagée pour tous les tests.

- `client` : BDD mockée (MagicMock), services patchés dans chaque test, aucune connexion réelle.
- `db_session` : SQLite en mémoire pour les tests de cycle de vie des services.
- `api` : client HTTP branché sur `db_session`, stockage Cloudinary simulé.
"""

import itertools
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import get_db, init_db
from app.dependencies import get_current_user
from app.main import app
from app.services.storage_service import StoredFile


@pytest.fixture
def client():
    """Client HTTP de test avec la BDD mockée."""
    mock_db = MagicMock()
    app.dependency_overrides[get_db] = lambda: mock_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def login_as():
    """Court-circuite l'authentification : les requêtes sont faites au nom de l'utilisateur donné."""
    def _login(user):
        app.dependency_overrides[get_current_user] = lambda: user
        return user
    return _login


@pytest.fixture
def db_session():
    """Session SQLite en mémoire avec toutes les tables créées."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()


@pytest.fixture
def fake_storage():
    """
    Remplace les appels Cloudinary. `uploaded` et `deleted` enregistrent les appels ;
    `fail_on` (nom de fichier) simule un échec de transfert.
    """
    counter = itertools.count(1)

    class FakeStorage:
        uploaded = []
        deleted = []
        fail_on = None
        delete_ok = True

    def fake_upload(file, folder):
        from app.exceptions import UploadError

        if file.filename == FakeStorage.fail_on:
            raise UploadError(f"Échec de l'envoi du fichier '{file.filename}'.")
        n = next(counter)
        stored = StoredFile(
            url=f"https://res.cloudinary.com/demo/raw/upload/v1/campus/{folder}/{n}-{file.filename}",
            original_name=file.filename,
            mimetype=file.content_type,
            size=file.size,
            public_id=f"campus/{folder}/{n}-{file.filename}",
            resource_type="raw",
        )
        FakeStorage.uploaded.append(stored)
        return stored

    def fake_delete(public_id, resource_type):
        FakeStorage.deleted.append(public_id)
        return FakeStorage.delete_ok

    with patch("app.services.storage_service.upload_file", side_effect=fake_upload), \
            patch("app.services.storage_service.delete_file", side_effect=fake_delete):
        FakeStorage.uploaded = []
        FakeStorage.deleted = []
        yield FakeStorage


@pytest.fixture
def api(db_session, fake_storage):
    """Client HTTP branché sur la BDD SQLite, authentification réelle par token."""
    app.dependency_overrides[get_db] = lambda: db_session
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
