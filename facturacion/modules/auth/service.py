from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
import logging

from facturacion.core.config import Settings
from facturacion.common.exceptions import AuthenticationError, DuplicateUsername, NotFoundError
from facturacion.modules.auth.models import User
from facturacion.modules.auth.schemas import UserCreate, Principal, TokenResponse
from facturacion.modules.auth.utils import hash_password, verify_password, create_access_token

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.settings = settings

    def register(self, user_data: UserCreate) -> User:
        """Registrar un nuevo usuario con su rol."""
        existing = self.db.query(User).filter(User.username == user_data.username).first()
        if existing:
            raise DuplicateUsername(user_data.username)

        user = User(
            username=user_data.username,
            password=hash_password(user_data.password),
            role=user_data.role,
            is_active=True,
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            # Concurrent registration won the unique constraint
            self.db.rollback()
            raise DuplicateUsername(user_data.username)
        self.db.refresh(user)

        logger.info(f"Registered user {user.id} ({user.username}) with role {user.role.value}")
        return user

    def login(self, username: str, password: str) -> TokenResponse:
        """Validar credenciales y emitir un token de acceso."""
        user = self.db.query(User).filter(User.username == username).first()
        if not user or not user.is_active or not verify_password(password, user.password):
            logger.info(f"Failed login for username '{username}'")
            raise AuthenticationError("Credenciales inválidas")

        principal = Principal(user_id=user.id, role=user.role)
        token = create_access_token(principal, self.settings)
        logger.info(f"User {user.id} logged in with role {user.role.value}")

        return TokenResponse(
            token=token,
            role=user.role,
            expires_in=self.settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        )

    def get_user(self, principal: Principal) -> User:
        user = self.db.get(User, principal.user_id)
        if user is None:
            raise NotFoundError("Usuario no encontrado")
        return user
