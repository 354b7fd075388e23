"""
Tests unitaires du service de stockage : limites d'upload et appels Cloudinary (mockés).
"""

import io
from unittest.mock import MagicMock, patch

import pytest
from fastapi import UploadFile
from starlette.datastructures import Headers

from app.exceptions import InvalidInput, UploadError
from app.services import storage_service
from app.services.storage_service import IncomingFile


# --- Helpers ---

def make_upload(name="a.pdf", content=b"abc", content_type="application/pdf") -> UploadFile:
    return UploadFile(
        file=io.BytesIO(content),
        filename=name,
        headers=Headers({"content-type": content_type}),
    )


def read(files, max_files=None):
    return storage_service.read_upload_files(files, max_files=max_files)


# ============================================================
# read_upload_files
# ============================================================

def test_lecture_fichiers():
    incoming = read([make_upload("a.pdf", b"abc"), make_upload("b.txt", b"hello", "text/plain")])

    assert [f.filename for f in incoming] == ["a.pdf", "b.txt"]
    assert incoming[1].size == 5
    assert incoming[1].content_type == "text/plain"


def test_aucun_fichier():
    with pytest.raises(InvalidInput, match="Aucun fichier"):
        read([])


def test_trop_de_fichiers():
    with pytest.raises(InvalidInput, match="Maximum : 5"):
        read([make_upload(f"{i}.pdf") for i in range(6)])


def test_cinq_fichiers_acceptes():
    assert len(read([make_upload(f"{i}.pdf") for i in range(5)])) == 5


def test_fichier_trop_volumineux():
    big = b"0" * (20 * 1024 * 1024 + 1)
    with pytest.raises(InvalidInput, match="big.bin"):
        read([make_upload("ok.pdf"), make_upload("big.bin", big, "application/octet-stream")])


def test_taille_annoncee_refusee_sans_lecture():
    """Starlette renseigne `size` : un fichier trop gros est refusé avant d'être lu en mémoire."""
    stream = MagicMock()
    big = UploadFile(file=stream, filename="video.mp4", size=20 * 1024 * 1024 + 1)

    with pytest.raises(InvalidInput, match="video.mp4"):
        read([big])
    stream.read.assert_not_called()


def test_fichier_a_la_limite():
    exact = b"0" * (20 * 1024 * 1024)
    assert read([make_upload("exact.bin", exact)])[0].size == len(exact)


def test_max_files_personnalise():
    with pytest.raises(InvalidInput):
        read([make_upload("a.jpg"), make_upload("b.jpg")], max_files=1)


# ============================================================
# upload_file / delete_file
# ============================================================

def test_upload_succes():
    file = IncomingFile(filename="a.pdf", content_type="application/pdf", content=b"abc")
    with patch("app.services.storage_service.cloudinary.uploader.upload") as mock:
        mock.return_value = {
            "secure_url": "https://res.cloudinary.com/demo/raw/upload/v1/campus/x/a.pdf",
            "public_id": "campus/x/a.pdf",
            "resource_type": "raw",
        }
        stored = storage_service.upload_file(file, folder="x")

    assert stored.url.endswith("/a.pdf")
    assert stored.original_name == "a.pdf"
    assert stored.size == 3
    assert stored.resource_type == "raw"
    args, kwargs = mock.call_args
    assert args[0].startswith("data:application/pdf;base64,")
    assert kwargs["folder"] == "campus/x"
    assert kwargs["resource_type"] == "auto"


def test_upload_echec():
    file = IncomingFile(filename="a.pdf", content_type="application/pdf", content=b"abc")
    with patch("app.services.storage_service.cloudinary.uploader.upload") as mock:
        mock.side_effect = RuntimeError("réseau indisponible")
        with pytest.raises(UploadError, match="a.pdf"):
            storage_service.upload_file(file, folder="x")


def test_upload_files_arret_au_premier_echec():
    files = [IncomingFile(n, "application/pdf", b"x") for n in ("a.pdf", "b.pdf", "c.pdf")]
    ok = {"secure_url": "https://cdn/ok", "public_id": "ok", "resource_type": "raw"}
    with patch("app.services.storage_service.cloudinary.uploader.upload") as mock:
        mock.side_effect = [ok, RuntimeError("boom"), ok]
        with pytest.raises(UploadError, match="b.pdf"):
            storage_service.upload_files(files, folder="x")

    assert mock.call_count == 2


def test_delete_ok():
    with patch("app.services.storage_service.cloudinary.uploader.destroy") as mock:
        mock.return_value = {"result": "ok"}
        assert storage_service.delete_file("campus/x/a.pdf", "raw") is True

    mock.assert_called_once_with("campus/x/a.pdf", resource_type="raw")


def test_delete_refuse():
    with patch("app.services.storage_service.cloudinary.uploader.destroy") as mock:
        mock.return_value = {"result": "not found"}
        assert storage_service.delete_file("campus/x/a.pdf", "raw") is False


def test_delete_exception_non_propagee():
    with patch("app.services.storage_service.cloudinary.uploader.destroy") as mock:
        mock.side_effect = RuntimeError("timeout")
        assert storage_service.delete_file("campus/x/a.pdf", None) is False


def test_delete_sans_public_id():
    with patch("app.services.storage_service.cloudinary.uploader.destroy") as mock:
        assert storage_service.delete_file(None, "raw") is False
    mock.assert_not_called()
