from fastapi import APIRouter, Depends, Query, status
from typing import List
from uuid import UUID

from facturacion.dependencies.dbDependencies import db_dependency
from facturacion.dependencies.userDependencies import manager_or_admin
from facturacion.modules.customers.service import CustomerService
from facturacion.modules.customers.schemas import CustomerCreate, CustomerUpdate, CustomerOut

router = APIRouter(prefix="/clientes", tags=["Clientes"])


@router.get("", response_model=List[CustomerOut])
def list_customers(
    db: db_dependency,
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
):
    """Listar clientes."""
    return CustomerService(db).list_customers(limit, offset)


@router.post("", response_model=CustomerOut, status_code=status.HTTP_201_CREATED)
def create_customer(customer_data: CustomerCreate, db: db_dependency):
    """Crear un nuevo cliente."""
    return CustomerService(db).create_customer(customer_data)


@router.get("/{customer_id}", response_model=CustomerOut)
def get_customer(customer_id: UUID, db: db_dependency):
    return CustomerService(db).get_customer(customer_id)


@router.put("/{customer_id}", response_model=CustomerOut, dependencies=[Depends(manager_or_admin)])
def update_customer(customer_id: UUID, customer_update: CustomerUpdate, db: db_dependency):
    """
    Actualizar datos de un cliente (gestionador o admin).
    """
    return CustomerService(db).update_customer(customer_id, customer_update)
