from sqlalchemy.orm import Session
from typing import List
from uuid import UUID
import logging

from facturacion.common.exceptions import NotFoundError, ValidationError
from facturacion.modules.products.models import Product
from facturacion.modules.products.schemas import ProductCreate, ProductUpdate

logger = logging.getLogger(__name__)


def get_all_products(db: Session, limit: int = 100, offset: int = 0) -> List[Product]:
    return (
        db.query(Product)
        .order_by(Product.created_at, Product.id)
        .offset(offset)
        .limit(limit)
        .all()
    )


def get_product_by_id(db: Session, product_id: UUID) -> Product:
    product = db.get(Product, product_id)
    if not product:
        raise NotFoundError("Producto no encontrado")
    return product


def create_product(db: Session, data: ProductCreate) -> Product:
    product = Product(**data.model_dump())
    db.add(product)
    db.commit()
    db.refresh(product)
    logger.info(f"Created product {product.id} with stock {product.quantity}")
    return product


def update_product(db: Session, product_id: UUID, data: ProductUpdate) -> Product:
    product = get_product_by_id(db, product_id)
    changes = data.model_dump(exclude_unset=True)
    for field in ("price", "quantity"):
        if field in changes and changes[field] is None:
            raise ValidationError(f"El campo {field} no puede ser nulo")
    for field, value in changes.items():
        setattr(product, field, value)
    db.commit()
    db.refresh(product)
    logger.info(f"Updated product {product.id}: {sorted(changes)}")
    return product


def delete_product(db: Session, product_id: UUID) -> None:
    """
    Eliminar un producto. Las líneas de factura históricas conservan
    nombre y precio; su referencia al producto queda en NULL.
    """
    product = get_product_by_id(db, product_id)
    db.delete(product)
    db.commit()
    logger.info(f"Deleted product {product_id}")
