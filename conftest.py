"""
Fixtures compartidos para los tests de cada módulo.

La app se construye con create_app() sobre SQLite en memoria (StaticPool),
de modo que los requests del TestClient y la sesión de los tests ven la
misma base de datos.
"""
from decimal import Decimal
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from facturacion.core.config import Settings
from facturacion.database.database import Base
from facturacion.main import create_app
from facturacion.modules.auth.models import User
from facturacion.modules.auth.schemas import Principal, Role
from facturacion.modules.auth.utils import create_access_token, hash_password
from facturacion.modules.customers.models import Customer
from facturacion.modules.products.models import Product


@pytest.fixture
def settings():
    return Settings(
        DATABASE_URL="sqlite://",
        APP_SECRET_STRING="test-secret-key",
        ENVIRONMENT="test",
        DEBUG=False,
    )


@pytest.fixture
def app(settings):
    application = create_app(settings)
    Base.metadata.create_all(bind=application.state.engine)
    yield application
    Base.metadata.drop_all(bind=application.state.engine)
    application.state.engine.dispose()


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db_session(app):
    session = app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(db_session):
    def _make_user(role: Role, username: str = None, password: str = "secreto123", is_active: bool = True) -> User:
        user = User(
            username=username or f"{role.value}-{uuid4().hex[:8]}",
            password=hash_password(password),
            role=role,
            is_active=is_active,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _make_user


@pytest.fixture
def token_for(settings):
    def _token_for(user: User) -> str:
        return create_access_token(Principal(user_id=user.id, role=user.role), settings)
    return _token_for


@pytest.fixture
def auth_headers(make_user, token_for):
    """Headers Bearer para un usuario nuevo con el rol pedido."""
    def _auth_headers(role: Role) -> dict:
        user = make_user(role)
        return {"Authorization": f"Bearer {token_for(user)}"}
    return _auth_headers


@pytest.fixture
def sample_customer(db_session) -> Customer:
    customer = Customer(
        name="Juan Pérez",
        address="Calle 10 # 5-20",
        phone="3105551234",
        email="juan.perez@example.com",
    )
    db_session.add(customer)
    db_session.commit()
    db_session.refresh(customer)
    return customer


@pytest.fixture
def make_product(db_session):
    def _make_product(name: str = "Producto", price: str = "10.00", quantity: int = 5) -> Product:
        product = Product(
            name=name,
            description=f"Descripción de {name}",
            price=Decimal(price),
            quantity=quantity,
        )
        db_session.add(product)
        db_session.commit()
        db_session.refresh(product)
        return product
    return _make_product
