from sqlalchemy import Column, String
from sqlalchemy.orm import relationship
from facturacion.database.database import Base
from facturacion.common.mixins import BaseMixin


class Customer(Base, BaseMixin):
    __tablename__ = "customers"

    name = Column(String(200), nullable=True)
    address = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    email = Column(String(100), nullable=True)

    # Relationships
    invoices = relationship("Invoice", back_populates="customer")
