"""
Tests para el módulo de Clientes
"""

from uuid import uuid4

from facturacion.modules.auth.schemas import Role
from facturacion.modules.customers.models import Customer


class TestCustomerEndpoints:

    def test_create_customer_is_open(self, client, db_session):
        response = client.post("/clientes", json={
            "nombre": "Ferretería El Tornillo",
            "direccion": "Av. Siempre Viva 742",
            "telefono": "6012345678",
            "correo": "ventas@eltornillo.com",
        })
        assert response.status_code == 201
        body = response.json()
        assert body["nombre"] == "Ferretería El Tornillo"
        assert body["correo"] == "ventas@eltornillo.com"

        stored = db_session.query(Customer).filter(Customer.name == "Ferretería El Tornillo").one()
        assert str(stored.id) == body["id"]
        assert stored.address == "Av. Siempre Viva 742"

    def test_list_customers(self, client, sample_customer):
        response = client.get("/clientes")
        assert response.status_code == 200
        body = response.json()
        assert [c["id"] for c in body] == [str(sample_customer.id)]
        assert body[0]["nombre"] == "Juan Pérez"
        assert body[0]["telefono"] == "3105551234"

    def test_get_customer(self, client, sample_customer):
        response = client.get(f"/clientes/{sample_customer.id}")
        assert response.status_code == 200
        assert response.json()["direccion"] == "Calle 10 # 5-20"

    def test_get_missing_customer_is_404(self, client):
        response = client.get(f"/clientes/{uuid4()}")
        assert response.status_code == 404
        assert response.json() == {"error": "Cliente no encontrado"}

    def test_update_customer_requires_manager_or_admin(self, client, sample_customer, auth_headers):
        response = client.put(
            f"/clientes/{sample_customer.id}",
            json={"telefono": "3000000000"},
            headers=auth_headers(Role.BILLER),
        )
        assert response.status_code == 403

        response = client.put(
            f"/clientes/{sample_customer.id}",
            json={"telefono": "3000000000"},
            headers=auth_headers(Role.MANAGER),
        )
        assert response.status_code == 200
        body = response.json()
        assert body["telefono"] == "3000000000"
        # Campos no enviados se conservan
        assert body["nombre"] == "Juan Pérez"

    def test_update_customer_without_token_is_401(self, client, sample_customer):
        response = client.put(f"/clientes/{sample_customer.id}", json={"telefono": "1"})
        assert response.status_code == 401
