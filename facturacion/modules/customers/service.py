from sqlalchemy.orm import Session
from typing import List
from uuid import UUID
import logging

from facturacion.common.exceptions import NotFoundError
from facturacion.modules.customers.models import Customer
from facturacion.modules.customers.schemas import CustomerCreate, CustomerUpdate

logger = logging.getLogger(__name__)


class CustomerService:
    def __init__(self, db: Session):
        self.db = db

    def list_customers(self, limit: int = 100, offset: int = 0) -> List[Customer]:
        return (
            self.db.query(Customer)
            .order_by(Customer.created_at, Customer.id)
            .offset(offset)
            .limit(limit)
            .all()
        )

    def get_customer(self, customer_id: UUID) -> Customer:
        customer = self.db.get(Customer, customer_id)
        if customer is None:
            raise NotFoundError("Cliente no encontrado")
        return customer

    def create_customer(self, data: CustomerCreate) -> Customer:
        customer = Customer(**data.model_dump())
        self.db.add(customer)
        self.db.commit()
        self.db.refresh(customer)
        logger.info(f"Created customer {customer.id}")
        return customer

    def update_customer(self, customer_id: UUID, data: CustomerUpdate) -> Customer:
        """Actualización parcial: solo los campos enviados."""
        customer = self.get_customer(customer_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(customer, field, value)
        self.db.commit()
        self.db.refresh(customer)
        return customer
