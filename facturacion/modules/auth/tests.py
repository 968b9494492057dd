"""
Tests para el módulo de autenticación

- Registro y login (JSON), usuario duplicado, credenciales inválidas
- Emisión y verificación de tokens (expirado, firma inválida, rol desconocido)
- Gate de roles: 401 sin token, 403 con rol no permitido
"""

import time
from datetime import timedelta
from uuid import uuid4

import jwt
import pytest

from facturacion.common.exceptions import AuthenticationError, AuthorizationError
from facturacion.modules.auth.dependencies import authorize
from facturacion.modules.auth.schemas import Principal, Role
from facturacion.modules.auth.utils import (
    create_access_token, decode_access_token, hash_password, verify_password
)


# ===== TESTS DE UTILIDADES =====

class TestPasswordHashing:

    def test_hash_and_verify(self):
        hashed = hash_password("secreto123")
        assert hashed != "secreto123"
        assert verify_password("secreto123", hashed) is True
        assert verify_password("otra-clave", hashed) is False

    def test_verify_empty_hash(self):
        assert verify_password("secreto123", "") is False


class TestAccessToken:

    def test_round_trip_carries_user_and_role(self, settings):
        principal = Principal(user_id=uuid4(), role=Role.MANAGER)
        token = create_access_token(principal, settings)

        decoded = decode_access_token(token, settings)
        assert decoded == principal

    def test_token_expires_after_configured_minutes(self, settings):
        principal = Principal(user_id=uuid4(), role=Role.BILLER)
        token = create_access_token(principal, settings)
        payload = jwt.decode(token, settings.APP_SECRET_STRING, algorithms=[settings.ALGORITHM])
        assert settings.ACCESS_TOKEN_EXPIRE_MINUTES == 60
        assert 3500 < payload["exp"] - time.time() <= 3600
        assert payload["sub"] == str(principal.user_id)
        assert payload["role"] == "biller"

    def test_expired_token_rejected(self, settings):
        principal = Principal(user_id=uuid4(), role=Role.ADMIN)
        token = create_access_token(principal, settings, expires_delta=timedelta(seconds=-10))
        with pytest.raises(AuthenticationError, match="expirado"):
            decode_access_token(token, settings)

    def test_wrong_secret_rejected(self, settings):
        principal = Principal(user_id=uuid4(), role=Role.ADMIN)
        other = settings.model_copy(update={"APP_SECRET_STRING": "otro-secreto"})
        token = create_access_token(principal, other)
        with pytest.raises(AuthenticationError):
            decode_access_token(token, settings)

    def test_unknown_role_rejected(self, settings):
        token = jwt.encode(
            {"sub": str(uuid4()), "role": "superuser", "type": "access"},
            settings.APP_SECRET_STRING,
            algorithm=settings.ALGORITHM,
        )
        with pytest.raises(AuthenticationError):
            decode_access_token(token, settings)

    def test_token_without_subject_rejected(self, settings):
        token = jwt.encode({"role": "admin", "type": "access"}, settings.APP_SECRET_STRING, algorithm=settings.ALGORITHM)
        with pytest.raises(AuthenticationError):
            decode_access_token(token, settings)


class TestAuthorize:

    def test_allowed_role_passes(self):
        principal = Principal(user_id=uuid4(), role=Role.MANAGER)
        assert authorize(principal, [Role.MANAGER, Role.ADMIN]) is principal

    @pytest.mark.parametrize("role", [Role.BILLER, Role.MANAGER])
    def test_role_outside_set_denied(self, role):
        principal = Principal(user_id=uuid4(), role=role)
        with pytest.raises(AuthorizationError):
            authorize(principal, [Role.ADMIN])


# ===== TESTS DE ENDPOINTS =====

class TestRegisterAndLogin:

    def test_register_then_login(self, client, settings):
        response = client.post("/auth/register", json={
            "username": "maria", "password": "clave-segura", "role": "biller"
        })
        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Usuario creado"
        user_id = body["user_id"]

        response = client.post("/auth/login", json={"username": "maria", "password": "clave-segura"})
        assert response.status_code == 200
        body = response.json()
        assert body["role"] == "biller"
        assert body["token_type"] == "bearer"

        principal = decode_access_token(body["token"], settings)
        assert str(principal.user_id) == user_id
        assert principal.role == Role.BILLER

    def test_padded_username_logs_in_as_registered(self, client):
        response = client.post("/auth/register", json={
            "username": "  andres  ", "password": "clave-segura", "role": "manager"
        })
        assert response.status_code == 201

        response = client.post("/auth/login", json={"username": "  andres  ", "password": "clave-segura"})
        assert response.status_code == 200
        assert response.json()["role"] == "manager"

        response = client.post("/auth/login", json={"username": "andres", "password": "clave-segura"})
        assert response.status_code == 200

    def test_register_duplicate_username(self, client, make_user):
        make_user(Role.ADMIN, username="admin1")
        response = client.post("/auth/register", json={
            "username": "admin1", "password": "clave-segura", "role": "admin"
        })
        assert response.status_code == 400
        assert "ya existe" in response.json()["error"]

    def test_register_unknown_role(self, client):
        response = client.post("/auth/register", json={
            "username": "pedro", "password": "clave-segura", "role": "facturador-jefe"
        })
        assert response.status_code == 400
        assert "error" in response.json()

    def test_login_wrong_password(self, client, make_user):
        make_user(Role.MANAGER, username="gestor", password="correcta123")
        response = client.post("/auth/login", json={"username": "gestor", "password": "incorrecta"})
        assert response.status_code == 401
        assert response.json() == {"error": "Credenciales inválidas"}

    def test_login_unknown_user(self, client):
        response = client.post("/auth/login", json={"username": "nadie", "password": "x"})
        assert response.status_code == 401

    def test_login_inactive_user(self, client, make_user):
        make_user(Role.BILLER, username="inactivo", password="secreto123", is_active=False)
        response = client.post("/auth/login", json={"username": "inactivo", "password": "secreto123"})
        assert response.status_code == 401

    def test_me_returns_current_user(self, client, make_user, token_for):
        user = make_user(Role.ADMIN, username="root")
        response = client.get("/auth/me", headers={"Authorization": f"Bearer {token_for(user)}"})
        assert response.status_code == 200
        body = response.json()
        assert body["username"] == "root"
        assert body["role"] == "admin"


class TestBearerCredential:

    def test_missing_token_is_401(self, client):
        response = client.get("/productos")
        assert response.status_code == 401
        assert response.json() == {"error": "No se proporcionó token"}

    def test_garbage_token_is_401(self, client):
        response = client.get("/productos", headers={"Authorization": "Bearer no-es-un-jwt"})
        assert response.status_code == 401
        assert response.json() == {"error": "Token inválido"}

    def test_expired_token_is_401(self, client, make_user, settings):
        user = make_user(Role.ADMIN)
        token = create_access_token(
            Principal(user_id=user.id, role=user.role), settings, expires_delta=timedelta(minutes=-1)
        )
        response = client.get("/productos", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_token_for_deleted_user_is_401(self, client, settings):
        token = create_access_token(Principal(user_id=uuid4(), role=Role.ADMIN), settings)
        response = client.get("/productos", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
