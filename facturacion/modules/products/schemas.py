from pydantic import BaseModel, Field
from decimal import Decimal
from typing import Optional
from uuid import UUID

# Límite de la columna Integer de products.quantity
MAX_QUANTITY = 2_147_483_647


class ProductBase(BaseModel):
    name: Optional[str] = Field(None, max_length=100, alias="nombre")
    description: Optional[str] = Field(None, max_length=255, alias="descripcion")

    class Config:
        populate_by_name = True


class ProductCreate(ProductBase):
    price: Decimal = Field(..., ge=0, max_digits=15, decimal_places=2, alias="precio", description="Precio unitario")
    quantity: int = Field(0, ge=0, le=MAX_QUANTITY, alias="cantidad", description="Stock inicial")


class ProductUpdate(ProductBase):
    """Actualización parcial: solo se aplican los campos enviados."""
    price: Optional[Decimal] = Field(None, ge=0, max_digits=15, decimal_places=2, alias="precio")
    quantity: Optional[int] = Field(None, ge=0, le=MAX_QUANTITY, alias="cantidad")


class ProductOut(ProductBase):
    id: UUID
    price: Decimal = Field(..., alias="precio")
    quantity: int = Field(..., alias="cantidad")

    class Config:
        from_attributes = True
        populate_by_name = True


class ProductDeleted(BaseModel):
    message: str
