from passlib.context import CryptContext
from datetime import datetime, timedelta, timezone
from typing import Optional
import jwt

from facturacion.core.config import Settings
from facturacion.common.exceptions import AuthenticationError
from facturacion.modules.auth.schemas import Principal, Role

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    """Verify a hashed password against a plain password."""
    if not hashed:
        return False
    return pwd_context.verify(plain, hashed)


def create_access_token(principal: Principal, settings: Settings,
                        expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token carrying the user id (``sub``) and role.
    If expires_delta is not provided, it defaults to ACCESS_TOKEN_EXPIRE_MINUTES.
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode = {
        "sub": str(principal.user_id),
        "role": principal.role.value,
        "type": "access",
        "exp": datetime.now(timezone.utc) + expires_delta,
    }
    return jwt.encode(to_encode, settings.APP_SECRET_STRING, algorithm=settings.ALGORITHM)


def decode_access_token(token: str, settings: Settings) -> Principal:
    """
    Verify a JWT token and return the principal it carries.
    """
    try:
        payload = jwt.decode(token, settings.APP_SECRET_STRING, algorithms=[settings.ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token expirado")
    except jwt.PyJWTError:
        raise AuthenticationError("Token inválido")

    if payload.get("type") != "access":
        raise AuthenticationError("Token inválido")

    user_id = payload.get("sub")
    role = payload.get("role")
    if user_id is None or role is None:
        raise AuthenticationError("Token inválido")

    try:
        return Principal(user_id=user_id, role=Role(role))
    except ValueError:
        raise AuthenticationError("Token inválido")
