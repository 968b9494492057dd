"""
Dependencias de autenticación y autorización para FastAPI.
"""
from typing import Iterable, Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import logging

from facturacion.common.exceptions import AuthenticationError, AuthorizationError
from facturacion.dependencies.dbDependencies import db_dependency, settings_dependency
from facturacion.modules.auth.models import User
from facturacion.modules.auth.schemas import Principal, Role
from facturacion.modules.auth.utils import decode_access_token

logger = logging.getLogger(__name__)

# auto_error=False: a missing header must be a 401, not the scheme's default response
security = HTTPBearer(auto_error=False)


def get_current_principal(
    db: db_dependency,
    settings: settings_dependency,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Principal:
    """
    Obtener el principal {user_id, role} desde el token Bearer.
    El usuario debe seguir existiendo y estar activo.
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("No se proporcionó token")

    principal = decode_access_token(credentials.credentials, settings)

    user = db.get(User, principal.user_id)
    if user is None or not user.is_active:
        raise AuthenticationError("No se pudieron validar las credenciales")

    return principal


def authorize(principal: Principal, allowed_roles: Iterable[Role]) -> Principal:
    """Permitir o denegar según el rol del principal."""
    allowed = frozenset(allowed_roles)
    if principal.role not in allowed:
        logger.info(f"User {principal.user_id} with role {principal.role.value} denied; requires {sorted(r.value for r in allowed)}")
        raise AuthorizationError("No autorizado")
    return principal


def require_roles(*allowed_roles: Role):
    """
    Dependencia para requerir roles específicos.
    """
    def role_checker(principal: Principal = Depends(get_current_principal)) -> Principal:
        return authorize(principal, allowed_roles)
    return role_checker
