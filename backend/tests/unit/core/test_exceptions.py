"""
Unit Tests for the exception hierarchy
"""
from drawhub.core.exceptions import (
    DrawHubError,
    AuthenticationError,
    AuthorizationError,
    ProjectNotFoundError,
    ValidationError,
    DuplicateEmailError,
    InvalidFileTypeError,
    FileTooLargeError,
    EmptyUploadError,
)


def test_status_codes():
    assert AuthenticationError().status_code == 401
    assert AuthorizationError().status_code == 403
    assert ProjectNotFoundError("p1").status_code == 404
    assert ValidationError().status_code == 400
    assert DuplicateEmailError("a@b.com").status_code == 400
    assert InvalidFileTypeError("a.png", [".dwg", ".pdf"]).status_code == 400


def test_to_dict_shape():
    payload = ProjectNotFoundError("p1").to_dict()

    assert payload == {
        "code": "PROJECT_NOT_FOUND",
        "message": "Projeto não encontrado",
        "details": {"resource_type": "Project", "resource_id": "p1"},
    }


def test_to_dict_omits_empty_details():
    assert AuthenticationError().to_dict() == {"code": "AUTH_FAILED", "message": "Não autorizado"}


def test_upload_messages():
    assert InvalidFileTypeError("a.png", [".dwg", ".pdf"]).message == "Apenas arquivos .dwg e .pdf são permitidos"
    assert "50MB" in FileTooLargeError("a.dwg", 52_428_800).message
    assert EmptyUploadError().message == "Nenhum arquivo enviado"
    assert EmptyUploadError([{"filename": "a.png"}]).message == "Nenhum arquivo válido enviado"


def test_duplicate_email_code():
    assert DuplicateEmailError("a@b.com").code == "EMAIL_ALREADY_REGISTERED"


def test_everything_is_drawhub_error():
    assert issubclass(EmptyUploadError, DrawHubError)
    assert issubclass(AuthorizationError, DrawHubError)
