"""
Custom Exceptions for DrawHub
=============================

Services raise these instead of HTTPException so they stay usable outside a
request; the API layer turns them into JSON error responses through
``drawhub_error_handler`` in ``drawhub.main``.

Usage:
    from drawhub.core.exceptions import ProjectNotFoundError

    if not project:
        raise ProjectNotFoundError(project_id)

Messages are user-facing (Portuguese), codes are for clients and logs.
"""

from typing import Optional, Any, Dict, List


class DrawHubError(Exception):
    """Base exception for all DrawHub errors"""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        payload = {
            "code": self.code,
            "message": self.message,
        }
        if self.details:
            payload["details"] = self.details
        return payload


# ============================================
# Authentication & Authorization Errors
# ============================================

class AuthenticationError(DrawHubError):
    """Caller is not authenticated (no/invalid token, closed session, bad credentials)"""

    status_code = 401

    def __init__(self, message: str = "Não autorizado", code: str = "AUTH_FAILED"):
        super().__init__(message, code=code)


class InvalidCredentialsError(AuthenticationError):
    def __init__(self):
        super().__init__("E-mail ou senha inválidos", code="INVALID_CREDENTIALS")


class InactiveUserError(AuthenticationError):
    def __init__(self):
        super().__init__("Usuário inativo", code="USER_INACTIVE")


class AuthorizationError(DrawHubError):
    """User role does not grant this action"""

    status_code = 403

    def __init__(self, message: str = "Acesso negado", action: Optional[str] = None):
        super().__init__(
            message,
            code="FORBIDDEN",
            details={"action": action} if action else None
        )


# ============================================
# Resource Errors (404-type)
# ============================================

class ResourceNotFoundError(DrawHubError):
    """Base class for not found errors"""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: str, message: str):
        super().__init__(
            message,
            code=f"{resource_type.upper()}_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": str(resource_id)}
        )


class ProjectNotFoundError(ResourceNotFoundError):
    def __init__(self, project_id: str):
        super().__init__("Project", project_id, "Projeto não encontrado")


class UserNotFoundError(ResourceNotFoundError):
    def __init__(self, user_id: str):
        super().__init__("User", user_id, "Usuário não encontrado")


class FileRecordNotFoundError(ResourceNotFoundError):
    def __init__(self, file_id: str):
        super().__init__("File", file_id, "Arquivo não encontrado")


# ============================================
# Validation Errors (400-type)
# ============================================

class ValidationError(DrawHubError):
    """Input validation failed"""

    status_code = 400

    def __init__(self, message: str = "Dados inválidos", field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class ConflictError(DrawHubError):
    """Write collided with existing data (duplicate e-mail, exhausted version retries)"""

    status_code = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="CONFLICT", details=details)


class DuplicateEmailError(ConflictError):
    def __init__(self, email: str):
        super().__init__("E-mail já cadastrado", details={"email": email})
        self.code = "EMAIL_ALREADY_REGISTERED"


# ============================================
# Upload Errors
# ============================================

class UploadRejectedError(DrawHubError):
    """An uploaded file (or a whole batch) was refused"""

    status_code = 400

    def __init__(self, message: str, code: str = "UPLOAD_REJECTED", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=code, details=details)


class InvalidFileTypeError(UploadRejectedError):
    """File extension not allowed"""

    def __init__(self, filename: str, allowed_types: List[str]):
        super().__init__(
            f"Apenas arquivos {' e '.join(allowed_types)} são permitidos",
            code="INVALID_FILE_TYPE",
            details={"filename": filename, "allowed_types": allowed_types}
        )


class FileTooLargeError(UploadRejectedError):
    """File exceeds the per-file size limit"""

    def __init__(self, filename: str, max_size: int):
        super().__init__(
            f"Arquivo excede o limite de {max_size // (1024 * 1024)}MB",
            code="FILE_TOO_LARGE",
            details={"filename": filename, "max_size": max_size}
        )


class EmptyUploadError(UploadRejectedError):
    """No acceptable file in the request"""

    def __init__(self, rejected: Optional[List[Dict[str, Any]]] = None):
        if rejected:
            message = "Nenhum arquivo válido enviado"
        else:
            message = "Nenhum arquivo enviado"
        super().__init__(
            message,
            code="EMPTY_UPLOAD",
            details={"rejected": rejected} if rejected else None
        )


# ============================================
# Helper function for API responses
# ============================================

def error_response(error: DrawHubError) -> Dict[str, Any]:
    """Convert exception to API error response body"""
    return error.to_dict()
