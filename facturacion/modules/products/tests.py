"""
Tests para el módulo de Productos

Cubren el CRUD y el gate de roles:
- listar: facturador, gestionador, admin
- crear: gestionador, admin
- actualizar / eliminar: solo admin
"""

from decimal import Decimal
from uuid import uuid4

import pytest

from facturacion.modules.auth.schemas import Role
from facturacion.modules.products.models import Product


@pytest.fixture
def product_payload():
    return {
        "nombre": "Martillo",
        "descripcion": "Martillo de carpintero 16oz",
        "precio": 25.5,
        "cantidad": 12,
    }


class TestProductRoles:

    def test_biller_cannot_create_product(self, client, auth_headers, product_payload):
        response = client.post("/productos", json=product_payload, headers=auth_headers(Role.BILLER))
        assert response.status_code == 403
        assert response.json() == {"error": "No autorizado"}

    def test_manager_creates_product(self, client, auth_headers, product_payload, db_session):
        response = client.post("/productos", json=product_payload, headers=auth_headers(Role.MANAGER))
        assert response.status_code == 201
        body = response.json()
        assert body["nombre"] == "Martillo"
        assert Decimal(body["precio"]) == Decimal("25.50")
        assert body["cantidad"] == 12

        stored = db_session.query(Product).one()
        assert str(stored.id) == body["id"]

    @pytest.mark.parametrize("role", [Role.BILLER, Role.MANAGER, Role.ADMIN])
    def test_every_role_lists_products(self, client, auth_headers, make_product, role):
        make_product("Tornillo", "0.25", 1000)
        response = client.get("/productos", headers=auth_headers(role))
        assert response.status_code == 200
        assert [p["nombre"] for p in response.json()] == ["Tornillo"]

    @pytest.mark.parametrize("role", [Role.BILLER, Role.MANAGER])
    def test_only_admin_updates(self, client, auth_headers, make_product, role):
        product = make_product()
        response = client.put(f"/productos/{product.id}", json={"precio": 1}, headers=auth_headers(role))
        assert response.status_code == 403

    @pytest.mark.parametrize("role", [Role.BILLER, Role.MANAGER])
    def test_only_admin_deletes(self, client, auth_headers, make_product, role):
        product = make_product()
        response = client.delete(f"/productos/{product.id}", headers=auth_headers(role))
        assert response.status_code == 403


class TestProductCrud:

    def test_create_rejects_negative_stock(self, client, auth_headers, product_payload):
        product_payload["cantidad"] = -1
        response = client.post("/productos", json=product_payload, headers=auth_headers(Role.ADMIN))
        assert response.status_code == 400

    def test_create_rejects_negative_price(self, client, auth_headers, product_payload):
        product_payload["precio"] = -3
        response = client.post("/productos", json=product_payload, headers=auth_headers(Role.ADMIN))
        assert response.status_code == 400

    def test_create_rejects_stock_beyond_integer_column(self, client, auth_headers, product_payload, db_session):
        product_payload["cantidad"] = 2 ** 31
        response = client.post("/productos", json=product_payload, headers=auth_headers(Role.ADMIN))
        assert response.status_code == 400
        assert "cantidad" in response.json()["error"]
        assert db_session.query(Product).count() == 0

    def test_update_rejects_stock_beyond_integer_column(self, client, auth_headers, make_product):
        product = make_product()
        response = client.put(
            f"/productos/{product.id}",
            json={"cantidad": 2 ** 31},
            headers=auth_headers(Role.ADMIN),
        )
        assert response.status_code == 400

    def test_partial_update(self, client, auth_headers, make_product):
        product = make_product("Clavo", "0.10", 500)
        response = client.put(
            f"/productos/{product.id}",
            json={"cantidad": 450},
            headers=auth_headers(Role.ADMIN),
        )
        assert response.status_code == 200
        body = response.json()
        assert body["cantidad"] == 450
        assert body["nombre"] == "Clavo"
        assert Decimal(body["precio"]) == Decimal("0.10")

    def test_update_rejects_null_price(self, client, auth_headers, make_product):
        product = make_product()
        response = client.put(
            f"/productos/{product.id}",
            json={"precio": None},
            headers=auth_headers(Role.ADMIN),
        )
        assert response.status_code == 400

    def test_update_missing_product_is_404(self, client, auth_headers):
        response = client.put(f"/productos/{uuid4()}", json={"cantidad": 1}, headers=auth_headers(Role.ADMIN))
        assert response.status_code == 404

    def test_delete_product(self, client, auth_headers, make_product, db_session):
        product_id = make_product().id
        headers = auth_headers(Role.ADMIN)

        response = client.delete(f"/productos/{product_id}", headers=headers)
        assert response.status_code == 200
        assert response.json() == {"message": "Producto eliminado"}

        db_session.expire_all()
        assert db_session.query(Product).count() == 0

        response = client.delete(f"/productos/{product_id}", headers=headers)
        assert response.status_code == 404

    def test_get_product_by_id(self, client, auth_headers, make_product):
        product = make_product("Serrucho", "40.00", 3)
        response = client.get(f"/productos/{product.id}", headers=auth_headers(Role.BILLER))
        assert response.status_code == 200
        assert response.json()["cantidad"] == 3
