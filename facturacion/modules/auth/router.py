from fastapi import APIRouter, status

from facturacion.dependencies.dbDependencies import db_dependency, settings_dependency
from facturacion.dependencies.userDependencies import principal_dependency
from facturacion.modules.auth.service import AuthService
from facturacion.modules.auth.schemas import (
    UserCreate, UserLogin, UserOut, RegisterResponse, TokenResponse
)

auth_router = APIRouter()


@auth_router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(user_data: UserCreate, db: db_dependency, settings: settings_dependency):
    """
    Registrar nuevo usuario (facturador, gestionador o admin).
    """
    user = AuthService(db, settings).register(user_data)
    return RegisterResponse(message="Usuario creado", user_id=user.id)


@auth_router.post("/login", response_model=TokenResponse)
def login(credentials: UserLogin, db: db_dependency, settings: settings_dependency):
    """
    Login de usuario. Retorna un token Bearer válido por una hora.
    """
    return AuthService(db, settings).login(credentials.username, credentials.password)


@auth_router.get("/me", response_model=UserOut)
def get_current_user_info(principal: principal_dependency, db: db_dependency, settings: settings_dependency):
    """
    Obtener información del usuario actual.
    """
    return AuthService(db, settings).get_user(principal)
