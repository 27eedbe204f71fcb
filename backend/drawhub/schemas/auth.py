from pydantic import BaseModel, EmailStr, Field, field_validator

from drawhub.core.config import settings
from drawhub.schemas.user import UserResponse


def email_domain(email: str) -> str:
    return email.rsplit("@", 1)[-1].lower()


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)

    @field_validator('email')
    @classmethod
    def reject_personal_domains(cls, value: str) -> str:
        """Only corporate e-mails may sign in; checked before any lookup"""
        if email_domain(value) in settings.PERSONAL_EMAIL_DOMAINS:
            raise ValueError("Use um e-mail corporativo")
        return value


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds
    user: UserResponse


class MessageResponse(BaseModel):
    message: str
