from sqlalchemy import update, select, desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload
from decimal import Decimal
from typing import Dict, List, Optional, Tuple
from uuid import UUID
import logging

from facturacion.common.exceptions import (
    AppError, CustomerNotFound, InsufficientStock, NotFoundError, ProductNotFound, StorageUnavailable
)
from facturacion.modules.customers.models import Customer
from facturacion.modules.invoices.models import Invoice, InvoiceLineItem
from facturacion.modules.invoices.schemas import InvoiceCreate, InvoiceLineItemCreate
from facturacion.modules.products.models import Product

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


class InvoiceService:
    def __init__(self, db: Session):
        self.db = db

    def create_invoice(self, invoice_data: InvoiceCreate, created_by: Optional[UUID] = None) -> Invoice:
        """
        Crear una factura con sus líneas como una única transacción.

        Valida cliente, existencia de productos y stock; calcula el total con
        el precio del producto (nunca con el enviado por el cliente); descuenta
        stock con un UPDATE condicional por producto; inserta factura y líneas
        y hace un solo commit. Cualquier fallo revierte todo: o existen los
        descuentos, la factura y todas sus líneas, o no existe nada.
        """
        logger.info(
            f"Creating invoice for customer {invoice_data.customer_id} "
            f"with {len(invoice_data.items)} line items"
        )
        try:
            if self.db.get(Customer, invoice_data.customer_id) is None:
                raise CustomerNotFound(invoice_data.customer_id)

            products = self._load_products(invoice_data.items)
            requested = self._requested_quantities(invoice_data.items)
            self._validate_stock(products, requested)

            priced_lines = self._price_lines(invoice_data.items, products)
            total = sum((line_total for _, _, line_total in priced_lines), Decimal("0.00"))

            self._decrement_stock(products, requested)

            invoice = Invoice(
                customer_id=invoice_data.customer_id,
                created_by=created_by,
                total_amount=total,
            )
            for position, (item, unit_price, line_total) in enumerate(priced_lines):
                invoice.line_items.append(InvoiceLineItem(
                    product_id=item.product_id,
                    product_name=products[item.product_id].name,
                    position=position,
                    quantity=item.quantity,
                    unit_price=unit_price,
                    line_total=line_total,
                ))
            self.db.add(invoice)
            self.db.commit()

        except AppError as e:
            self.db.rollback()
            logger.info(f"Invoice for customer {invoice_data.customer_id} rejected, rolled back: {e.message}")
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Invoice for customer {invoice_data.customer_id} failed, rolled back: {e}")
            raise StorageUnavailable("crear la factura", e)
        except Exception:
            self.db.rollback()
            logger.exception(f"Invoice for customer {invoice_data.customer_id} aborted, rolled back")
            raise

        logger.info(f"Invoice {invoice.id} committed with total {total} ({len(priced_lines)} lines)")
        return invoice

    def _load_products(self, items: List[InvoiceLineItemCreate]) -> Dict[UUID, Product]:
        """Cargar los productos referenciados; el primero inexistente aborta."""
        ids = {item.product_id for item in items}
        products = {
            product.id: product
            for product in self.db.query(Product).filter(Product.id.in_(ids)).all()
        }
        for item in items:
            if item.product_id not in products:
                raise ProductNotFound(item.product_id)
        return products

    @staticmethod
    def _requested_quantities(items: List[InvoiceLineItemCreate]) -> Dict[UUID, int]:
        # Varias líneas pueden pedir el mismo producto
        requested: Dict[UUID, int] = {}
        for item in items:
            requested[item.product_id] = requested.get(item.product_id, 0) + item.quantity
        return requested

    @staticmethod
    def _validate_stock(products: Dict[UUID, Product], requested: Dict[UUID, int]) -> None:
        for product_id, quantity in requested.items():
            product = products[product_id]
            if product.quantity < quantity:
                raise InsufficientStock(product_id, product.name or str(product_id), product.quantity, quantity)

    @staticmethod
    def _price_lines(
        items: List[InvoiceLineItemCreate], products: Dict[UUID, Product]
    ) -> List[Tuple[InvoiceLineItemCreate, Decimal, Decimal]]:
        lines = []
        for item in items:
            product = products[item.product_id]
            unit_price = Decimal(product.price).quantize(CENTS)
            if item.unit_price is not None and Decimal(item.unit_price) != unit_price:
                logger.warning(
                    f"Ignoring client price {item.unit_price} for product {product.id}; "
                    f"using catalog price {unit_price}"
                )
            lines.append((item, unit_price, (unit_price * item.quantity).quantize(CENTS)))
        return lines

    def _decrement_stock(self, products: Dict[UUID, Product], requested: Dict[UUID, int]) -> None:
        """
        Descontar stock con compare-and-swap: solo si quantity >= solicitado.
        Orden ascendente de id para que transacciones concurrentes bloqueen
        filas siempre en el mismo orden.
        """
        for product_id in sorted(requested):
            quantity = requested[product_id]
            result = self.db.execute(
                update(Product)
                .where(Product.id == product_id, Product.quantity >= quantity)
                .values(quantity=Product.quantity - quantity)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                available = self.db.execute(
                    select(Product.quantity).where(Product.id == product_id)
                ).scalar_one_or_none()
                if available is None:
                    raise ProductNotFound(product_id)
                name = products[product_id].name or str(product_id)
                raise InsufficientStock(product_id, name, available, quantity)
            logger.debug(f"Stock for product {product_id} decremented by {quantity}")

    def get_invoices(self, limit: int = 100, offset: int = 0) -> List[Invoice]:
        """Obtener facturas con su cliente, más recientes primero."""
        return (
            self.db.query(Invoice)
            .options(selectinload(Invoice.customer))
            .order_by(desc(Invoice.issued_at), Invoice.id)
            .offset(offset)
            .limit(limit)
            .all()
        )

    def get_invoice_by_id(self, invoice_id: UUID) -> Invoice:
        """Obtener factura por ID con cliente, líneas y productos."""
        invoice = (
            self.db.query(Invoice)
            .options(
                selectinload(Invoice.customer),
                selectinload(Invoice.line_items).selectinload(InvoiceLineItem.product),
            )
            .filter(Invoice.id == invoice_id)
            .first()
        )
        if not invoice:
            raise NotFoundError("Factura no encontrada")
        return invoice

    def get_invoice_detail(self, invoice_id: UUID) -> dict:
        invoice = self.get_invoice_by_id(invoice_id)
        return {"factura": invoice, "detalles": invoice.line_items}
