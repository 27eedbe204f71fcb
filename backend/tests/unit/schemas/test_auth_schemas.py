"""
Unit Tests for Auth and User Schemas
Tests for: corporate e-mail rule, password length, response shape
"""
import pytest
from pydantic import ValidationError
from datetime import datetime

from drawhub.models import UserRole
from drawhub.schemas.auth import LoginRequest, LoginResponse, email_domain
from drawhub.schemas.user import UserCreate, UserResponse, UserUpdate


class TestLoginRequest:

    def test_valid_corporate_login(self):
        login = LoginRequest(email="joao@axionpowert.com.br", password="senha123")

        assert login.email == "joao@axionpowert.com.br"

    @pytest.mark.parametrize("email", [
        "user@gmail.com",
        "user@hotmail.com",
        "user@yahoo.com",
        "user@outlook.com",
        "User@GMAIL.com",
    ])
    def test_personal_domains_rejected(self, email):
        with pytest.raises(ValidationError) as exc_info:
            LoginRequest(email=email, password="senha123")

        assert "corporativo" in str(exc_info.value)

    def test_short_password_rejected(self):
        with pytest.raises(ValidationError):
            LoginRequest(email="joao@axionpowert.com.br", password="12345")

    def test_invalid_email_rejected(self):
        with pytest.raises(ValidationError):
            LoginRequest(email="not-an-email", password="senha123")

    def test_email_domain_helper(self):
        assert email_domain("A@Empresa.COM.br") == "empresa.com.br"


class TestUserSchemas:

    def test_create_requires_known_role(self):
        with pytest.raises(ValidationError):
            UserCreate(name="A", email="a@axionpowert.com.br", password="senha123", role="estagiario")

    def test_create_accepts_every_role(self):
        for role in UserRole:
            user = UserCreate(name="A", email="a@axionpowert.com.br", password="senha123", role=role.value)
            assert user.role == role

    def test_update_is_partial(self):
        update = UserUpdate(is_active=False)

        assert update.model_dump(exclude_unset=True) == {"is_active": False}

    def test_response_has_no_password(self):
        fields = set(UserResponse.model_fields)

        assert "password" not in fields
        assert "hashed_password" not in fields

    def test_login_response(self):
        response = LoginResponse(
            access_token="token",
            expires_in=3600,
            user=UserResponse(
                id="u1",
                name="A",
                email="a@axionpowert.com.br",
                role=UserRole.GESTOR,
                is_active=True,
                created_at=datetime(2024, 1, 1),
            ),
        )

        assert response.token_type == "bearer"
        assert response.model_dump()["user"]["role"] == "gestor"
