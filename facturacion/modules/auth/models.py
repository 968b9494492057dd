from sqlalchemy import Column, String, Boolean, Enum
from facturacion.database.database import Base
from facturacion.common.mixins import BaseMixin
from facturacion.modules.auth.schemas import Role


class User(Base, BaseMixin):
    __tablename__ = "users"

    username = Column(String(100), unique=True, nullable=False, index=True)
    password = Column(String, nullable=False)
    role = Column(Enum(Role, values_callable=lambda roles: [r.value for r in roles], name="user_role"), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
