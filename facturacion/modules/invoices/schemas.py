from pydantic import BaseModel, Field
from decimal import Decimal
from typing import Optional, List
from uuid import UUID
from datetime import datetime

from facturacion.modules.customers.schemas import CustomerOut
from facturacion.modules.products.schemas import MAX_QUANTITY, ProductOut


# Invoice Line Item Schemas
class InvoiceLineItemCreate(BaseModel):
    product_id: UUID = Field(..., alias="productoId")
    quantity: int = Field(..., gt=0, le=MAX_QUANTITY, alias="cantidad", description="Cantidad debe ser mayor a 0")
    # Aceptado por compatibilidad; el precio autoritativo es el del producto
    unit_price: Optional[Decimal] = Field(None, ge=0, alias="precio")

    class Config:
        populate_by_name = True


class InvoiceLineItemOut(BaseModel):
    id: UUID
    invoice_id: UUID = Field(..., alias="facturaId")
    product_id: Optional[UUID] = Field(None, alias="productoId")
    product_name: Optional[str] = Field(None, alias="nombreProducto")
    quantity: int = Field(..., alias="cantidad")
    unit_price: Decimal = Field(..., alias="precio")
    line_total: Decimal = Field(..., alias="subtotal")

    class Config:
        from_attributes = True
        populate_by_name = True


class InvoiceLineItemDetail(InvoiceLineItemOut):
    """Línea con el producto embebido (None si el producto fue eliminado)."""
    product: Optional[ProductOut] = Field(None, alias="producto")


# Invoice Schemas
class InvoiceCreate(BaseModel):
    customer_id: UUID = Field(..., alias="clienteId")
    items: List[InvoiceLineItemCreate] = Field(..., min_length=1, alias="detalles",
                                               description="Debe incluir al menos un item")

    class Config:
        populate_by_name = True


class InvoiceOut(BaseModel):
    id: UUID
    issued_at: datetime = Field(..., alias="fecha")
    customer_id: UUID = Field(..., alias="clienteId")
    created_by: Optional[UUID] = Field(None, alias="creadoPor")
    total_amount: Decimal = Field(..., alias="total")

    class Config:
        from_attributes = True
        populate_by_name = True


class InvoiceCreated(InvoiceOut):
    line_items: List[InvoiceLineItemOut] = Field(default_factory=list, alias="detalles")


class InvoiceWithCustomer(InvoiceOut):
    customer: Optional[CustomerOut] = Field(None, alias="cliente")


class InvoiceDetail(BaseModel):
    """Factura con su cliente y todas sus líneas (cada una con su producto)."""
    invoice: InvoiceWithCustomer = Field(..., alias="factura")
    line_items: List[InvoiceLineItemDetail] = Field(..., alias="detalles")

    class Config:
        from_attributes = True
        populate_by_name = True
