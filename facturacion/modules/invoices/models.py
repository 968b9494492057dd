from facturacion.database.database import Base
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Numeric, Uuid, CheckConstraint
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from facturacion.common.mixins import BaseMixin


class Invoice(Base, BaseMixin):
    __tablename__ = "invoices"

    issued_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    customer_id = Column(Uuid(as_uuid=True), ForeignKey("customers.id"), nullable=False, index=True)
    created_by = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=True)

    # Derivado de las líneas; nunca lo fija el cliente
    total_amount = Column(Numeric(15, 2), nullable=False, default=0)

    # Relationships
    customer = relationship("Customer", back_populates="invoices")
    line_items = relationship(
        "InvoiceLineItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceLineItem.position",
    )

    __table_args__ = (
        CheckConstraint("total_amount >= 0", name="ck_invoice_total_non_negative"),
    )


class InvoiceLineItem(Base, BaseMixin):
    __tablename__ = "invoice_line_items"

    invoice_id = Column(Uuid(as_uuid=True), ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Uuid(as_uuid=True), ForeignKey("products.id", ondelete="SET NULL"), nullable=True, index=True)
    position = Column(Integer, nullable=False, default=0)

    # Snapshot (para preservar información si el producto cambia)
    product_name = Column(String(100), nullable=True)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(15, 2), nullable=False)
    line_total = Column(Numeric(15, 2), nullable=False)  # quantity * unit_price

    # Relationships
    invoice = relationship("Invoice", back_populates="line_items")
    product = relationship("Product")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_line_quantity_positive"),
        CheckConstraint("unit_price >= 0", name="ck_line_unit_price_non_negative"),
    )
