from enum import Enum
from pydantic import BaseModel, Field, field_validator
from uuid import UUID
from datetime import datetime


class Role(str, Enum):
    BILLER = "biller"      # facturador
    MANAGER = "manager"    # gestionador
    ADMIN = "admin"


class Principal(BaseModel):
    """Identidad autenticada adjunta a cada request."""
    user_id: UUID
    role: Role


def _normalize_username(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError('El nombre de usuario no puede estar vacío')
    return v


class UserCreate(BaseModel):
    username: str = Field(..., min_length=3, max_length=100)
    password: str = Field(..., min_length=6, max_length=72)
    role: Role

    @field_validator('username')
    @classmethod
    def normalize_username(cls, v):
        return _normalize_username(v)


class UserLogin(BaseModel):
    username: str
    password: str

    # Misma normalización que en el registro
    @field_validator('username')
    @classmethod
    def normalize_username(cls, v):
        return _normalize_username(v)


class UserOut(BaseModel):
    id: UUID
    username: str
    role: Role
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class RegisterResponse(BaseModel):
    message: str
    user_id: UUID


class TokenResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    role: Role
    expires_in: int
