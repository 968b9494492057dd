from sqlalchemy import Column, Integer, String, Numeric, CheckConstraint
from facturacion.database.database import Base
from facturacion.common.mixins import BaseMixin


class Product(Base, BaseMixin):
    __tablename__ = "products"

    name = Column(String(100), nullable=True)
    description = Column(String(255), nullable=True)
    price = Column(Numeric(15, 2), nullable=False, default=0)  # Precio unitario de venta
    quantity = Column(Integer, nullable=False, default=0)  # Stock disponible

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_product_quantity_non_negative"),
        CheckConstraint("price >= 0", name="ck_product_price_non_negative"),
    )
