"""
Tests para el módulo de Facturación

Cubren la creación de facturas como unidad atómica:
- total = suma(precio del producto x cantidad) y descuento exacto de stock
- stock insuficiente / producto o cliente inexistente: nada cambia
- el precio enviado por el cliente se ignora
- facturas concurrentes sobre el mismo producto nunca sobrevenden
- consulta de detalle: las líneas suman el total guardado
"""

from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal
from uuid import uuid4

import pytest

from facturacion.common.exceptions import CustomerNotFound, InsufficientStock, ProductNotFound
from facturacion.core.config import Settings
from facturacion.database.database import Base, build_engine, build_session_factory
from facturacion.modules.auth.schemas import Role
from facturacion.modules.customers.models import Customer
from facturacion.modules.invoices.models import Invoice, InvoiceLineItem
from facturacion.modules.invoices.schemas import InvoiceCreate
from facturacion.modules.invoices.service import InvoiceService
from facturacion.modules.products.models import Product


def invoice_request(customer_id, *lines):
    return InvoiceCreate(
        clienteId=customer_id,
        detalles=[{"productoId": product_id, "cantidad": quantity} for product_id, quantity in lines],
    )


def stock_of(db_session, product_id) -> int:
    db_session.expire_all()
    return db_session.get(Product, product_id).quantity


# ===== TESTS DE SERVICIO =====

class TestCreateInvoice:

    def test_total_and_stock_decrement(self, db_session, sample_customer, make_product):
        hammer = make_product("Martillo", "25.50", 10)
        nails = make_product("Clavos", "0.15", 1000)

        invoice = InvoiceService(db_session).create_invoice(
            invoice_request(sample_customer.id, (hammer.id, 2), (nails.id, 100))
        )

        assert invoice.total_amount == Decimal("66.00")
        assert [line.quantity for line in invoice.line_items] == [2, 100]
        assert [line.unit_price for line in invoice.line_items] == [Decimal("25.50"), Decimal("0.15")]
        assert [line.line_total for line in invoice.line_items] == [Decimal("51.00"), Decimal("15.00")]
        assert stock_of(db_session, hammer.id) == 8
        assert stock_of(db_session, nails.id) == 900

    def test_example_sequence_insufficient_on_second_request(self, db_session, sample_customer, make_product):
        product = make_product("P", "10.00", 5)
        service = InvoiceService(db_session)

        invoice = service.create_invoice(invoice_request(sample_customer.id, (product.id, 3)))
        assert invoice.total_amount == Decimal("30.00")
        assert stock_of(db_session, product.id) == 2

        with pytest.raises(InsufficientStock) as exc_info:
            service.create_invoice(invoice_request(sample_customer.id, (product.id, 3)))
        assert exc_info.value.available == 2
        assert exc_info.value.requested == 3
        assert stock_of(db_session, product.id) == 2
        assert db_session.query(Invoice).count() == 1

    def test_insufficient_stock_rolls_back_every_line(self, db_session, sample_customer, make_product):
        plenty = make_product("Abundante", "1.00", 100)
        scarce = make_product("Escaso", "1.00", 1)

        with pytest.raises(InsufficientStock):
            InvoiceService(db_session).create_invoice(
                invoice_request(sample_customer.id, (plenty.id, 10), (scarce.id, 2))
            )

        assert stock_of(db_session, plenty.id) == 100
        assert stock_of(db_session, scarce.id) == 1
        assert db_session.query(Invoice).count() == 0
        assert db_session.query(InvoiceLineItem).count() == 0

    def test_repeated_product_lines_are_checked_together(self, db_session, sample_customer, make_product):
        product = make_product("Tuerca", "0.50", 5)

        with pytest.raises(InsufficientStock) as exc_info:
            InvoiceService(db_session).create_invoice(
                invoice_request(sample_customer.id, (product.id, 3), (product.id, 3))
            )
        assert exc_info.value.requested == 6
        assert stock_of(db_session, product.id) == 5

    def test_unknown_product_creates_nothing(self, db_session, sample_customer, make_product):
        first = make_product("Primero", "5.00", 10)
        missing_id = uuid4()

        with pytest.raises(ProductNotFound) as exc_info:
            InvoiceService(db_session).create_invoice(
                invoice_request(sample_customer.id, (first.id, 1), (missing_id, 1))
            )

        assert exc_info.value.product_id == missing_id
        assert stock_of(db_session, first.id) == 10
        assert db_session.query(Invoice).count() == 0
        assert db_session.query(InvoiceLineItem).count() == 0

    def test_unknown_customer_creates_nothing(self, db_session, make_product):
        product = make_product()

        with pytest.raises(CustomerNotFound):
            InvoiceService(db_session).create_invoice(invoice_request(uuid4(), (product.id, 1)))

        assert stock_of(db_session, product.id) == 5
        assert db_session.query(Invoice).count() == 0

    def test_client_price_is_ignored(self, db_session, sample_customer, make_product):
        product = make_product("Taladro", "120.00", 3)
        data = InvoiceCreate(
            clienteId=sample_customer.id,
            detalles=[{"productoId": product.id, "cantidad": 2, "precio": "0.01"}],
        )

        invoice = InvoiceService(db_session).create_invoice(data)

        assert invoice.total_amount == Decimal("240.00")
        assert invoice.line_items[0].unit_price == Decimal("120.00")

    def test_line_keeps_price_snapshot_after_product_changes(self, db_session, sample_customer, make_product):
        product = make_product("Pintura", "30.00", 10)
        invoice = InvoiceService(db_session).create_invoice(invoice_request(sample_customer.id, (product.id, 1)))

        product = db_session.get(Product, product.id)
        product.price = Decimal("45.00")
        product.name = "Pintura premium"
        db_session.commit()

        db_session.expire_all()
        line = db_session.query(InvoiceLineItem).filter(InvoiceLineItem.invoice_id == invoice.id).one()
        assert line.unit_price == Decimal("30.00")
        assert line.product_name == "Pintura"

    def test_storage_failure_is_reported_and_rolled_back(self, db_session, sample_customer, make_product, monkeypatch):
        from sqlalchemy.exc import OperationalError
        from facturacion.common.exceptions import StorageUnavailable

        product = make_product("Llave", "8.00", 4)
        original_commit = db_session.commit

        def failing_commit():
            raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

        monkeypatch.setattr(db_session, "commit", failing_commit)
        with pytest.raises(StorageUnavailable) as exc_info:
            InvoiceService(db_session).create_invoice(invoice_request(sample_customer.id, (product.id, 2)))
        monkeypatch.setattr(db_session, "commit", original_commit)

        assert exc_info.value.message == "Error de almacenamiento al crear la factura"
        assert isinstance(exc_info.value.cause, OperationalError)

        assert stock_of(db_session, product.id) == 4
        assert db_session.query(Invoice).count() == 0


class TestConcurrentInvoices:

    def test_concurrent_requests_never_oversell(self, tmp_path):
        settings = Settings(DATABASE_URL=f"sqlite:///{tmp_path / 'concurrency.db'}", ENVIRONMENT="test")
        engine = build_engine(settings)
        Base.metadata.create_all(bind=engine)
        session_factory = build_session_factory(engine)

        with session_factory() as session:
            customer = Customer(name="Cliente concurrente")
            product = Product(name="Último lote", price=Decimal("9.99"), quantity=5)
            session.add_all([customer, product])
            session.commit()
            customer_id, product_id = customer.id, product.id

        def buy_two(_):
            with session_factory() as session:
                try:
                    InvoiceService(session).create_invoice(invoice_request(customer_id, (product_id, 2)))
                    return "ok"
                except InsufficientStock:
                    return "insufficient"

        try:
            with ThreadPoolExecutor(max_workers=6) as pool:
                outcomes = list(pool.map(buy_two, range(6)))

            assert outcomes.count("ok") == 2
            assert outcomes.count("insufficient") == 4

            with session_factory() as session:
                assert session.get(Product, product_id).quantity == 1
                assert session.query(Invoice).count() == 2
                assert session.query(InvoiceLineItem).count() == 2
        finally:
            engine.dispose()


# ===== TESTS DE ENDPOINTS =====

class TestInvoiceEndpoints:

    def test_create_requires_token(self, client, sample_customer, make_product):
        product = make_product()
        response = client.post("/facturas", json={
            "clienteId": str(sample_customer.id),
            "detalles": [{"productoId": str(product.id), "cantidad": 1, "precio": 10}],
        })
        assert response.status_code == 401

    @pytest.mark.parametrize("role", [Role.BILLER, Role.MANAGER, Role.ADMIN])
    def test_create_invoice(self, client, auth_headers, sample_customer, make_product, db_session, role):
        product = make_product("P", "10.00", 5)
        response = client.post(
            "/facturas",
            json={
                "clienteId": str(sample_customer.id),
                "detalles": [{"productoId": str(product.id), "cantidad": 3, "precio": 10}],
            },
            headers=auth_headers(role),
        )

        assert response.status_code == 201
        body = response.json()
        assert Decimal(body["total"]) == Decimal("30.00")
        assert body["clienteId"] == str(sample_customer.id)
        assert body["creadoPor"] is not None
        assert len(body["detalles"]) == 1
        assert body["detalles"][0]["cantidad"] == 3
        assert Decimal(body["detalles"][0]["precio"]) == Decimal("10.00")
        assert stock_of(db_session, product.id) == 2

    def test_insufficient_stock_is_400(self, client, auth_headers, sample_customer, make_product, db_session):
        product = make_product("P", "10.00", 2)
        response = client.post(
            "/facturas",
            json={"clienteId": str(sample_customer.id), "detalles": [{"productoId": str(product.id), "cantidad": 3}]},
            headers=auth_headers(Role.BILLER),
        )
        assert response.status_code == 400
        assert "No hay suficiente stock para el producto P" in response.json()["error"]
        assert stock_of(db_session, product.id) == 2

    def test_unknown_product_is_400(self, client, auth_headers, sample_customer):
        missing_id = uuid4()
        response = client.post(
            "/facturas",
            json={"clienteId": str(sample_customer.id), "detalles": [{"productoId": str(missing_id), "cantidad": 1}]},
            headers=auth_headers(Role.BILLER),
        )
        assert response.status_code == 400
        assert response.json() == {"error": f"Producto no encontrado con ID {missing_id}"}

    def test_empty_lines_rejected(self, client, auth_headers, sample_customer):
        response = client.post(
            "/facturas",
            json={"clienteId": str(sample_customer.id), "detalles": []},
            headers=auth_headers(Role.BILLER),
        )
        assert response.status_code == 400

    def test_non_positive_quantity_rejected(self, client, auth_headers, sample_customer, make_product):
        product = make_product()
        response = client.post(
            "/facturas",
            json={"clienteId": str(sample_customer.id), "detalles": [{"productoId": str(product.id), "cantidad": 0}]},
            headers=auth_headers(Role.BILLER),
        )
        assert response.status_code == 400

    def test_list_invoices_embeds_customer(self, client, db_session, sample_customer, make_product):
        product = make_product()
        InvoiceService(db_session).create_invoice(invoice_request(sample_customer.id, (product.id, 1)))

        response = client.get("/facturas")
        assert response.status_code == 200
        body = response.json()
        assert len(body) == 1
        assert body[0]["cliente"]["nombre"] == "Juan Pérez"
        assert Decimal(body[0]["total"]) == Decimal("10.00")

    def test_detail_lines_sum_to_total(self, client, db_session, sample_customer, make_product):
        a = make_product("A", "3.25", 10)
        b = make_product("B", "7.10", 10)
        invoice = InvoiceService(db_session).create_invoice(
            invoice_request(sample_customer.id, (a.id, 3), (b.id, 2))
        )

        response = client.get(f"/facturas/{invoice.id}")
        assert response.status_code == 200
        body = response.json()

        factura, detalles = body["factura"], body["detalles"]
        assert factura["cliente"]["correo"] == "juan.perez@example.com"
        assert [d["producto"]["nombre"] for d in detalles] == ["A", "B"]
        line_sum = sum(Decimal(d["precio"]) * d["cantidad"] for d in detalles)
        assert line_sum == Decimal(factura["total"]) == Decimal("23.95")

    def test_detail_survives_product_deletion(self, client, db_session, auth_headers, sample_customer, make_product):
        product = make_product("Descontinuado", "4.00", 3)
        invoice = InvoiceService(db_session).create_invoice(invoice_request(sample_customer.id, (product.id, 1)))

        response = client.delete(f"/productos/{product.id}", headers=auth_headers(Role.ADMIN))
        assert response.status_code == 200

        response = client.get(f"/facturas/{invoice.id}")
        assert response.status_code == 200
        line = response.json()["detalles"][0]
        assert line["producto"] is None
        assert line["nombreProducto"] == "Descontinuado"
        assert Decimal(line["precio"]) == Decimal("4.00")

    def test_missing_invoice_is_404(self, client):
        response = client.get(f"/facturas/{uuid4()}")
        assert response.status_code == 404
        assert response.json() == {"error": "Factura no encontrada"}

    def test_storage_failure_is_500_without_internal_details(
        self, client, auth_headers, sample_customer, make_product, db_session, monkeypatch
    ):
        from sqlalchemy.exc import OperationalError
        from sqlalchemy.orm import Session

        product = make_product("Llave", "8.00", 4)
        headers = auth_headers(Role.BILLER)

        def failing_commit(self):
            raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

        monkeypatch.setattr(Session, "commit", failing_commit)
        response = client.post(
            "/facturas",
            json={"clienteId": str(sample_customer.id), "detalles": [{"productoId": str(product.id), "cantidad": 2}]},
            headers=headers,
        )
        monkeypatch.undo()

        assert response.status_code == 500
        assert response.json() == {"error": "Error de almacenamiento al crear la factura"}
        assert "SQL" not in response.text
        assert "disk I/O error" not in response.text
        assert stock_of(db_session, product.id) == 4
        assert db_session.query(Invoice).count() == 0

    def test_quantity_beyond_integer_column_is_400(self, client, auth_headers, sample_customer, make_product):
        product = make_product()
        response = client.post(
            "/facturas",
            json={"clienteId": str(sample_customer.id), "detalles": [{"productoId": str(product.id), "cantidad": 2 ** 31}]},
            headers=auth_headers(Role.BILLER),
        )
        assert response.status_code == 400
