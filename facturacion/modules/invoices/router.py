from fastapi import APIRouter, Depends, Query, status
from typing import List
from uuid import UUID

from facturacion.dependencies.dbDependencies import db_dependency
from facturacion.dependencies.userDependencies import any_role
from facturacion.modules.auth.schemas import Principal
from facturacion.modules.invoices.service import InvoiceService
from facturacion.modules.invoices.schemas import (
    InvoiceCreate, InvoiceCreated, InvoiceWithCustomer, InvoiceDetail
)

# Router principal del módulo de facturas
router = APIRouter(prefix="/facturas", tags=["Facturas"])


@router.post("", response_model=InvoiceCreated, status_code=status.HTTP_201_CREATED)
def create_invoice(
    invoice_data: InvoiceCreate,
    db: db_dependency,
    principal: Principal = Depends(any_role),
):
    """
    Crear una nueva factura de venta.

    Requiere rol facturador, gestionador o admin. Descuenta el stock de los
    productos; si alguna línea falla no se aplica ningún cambio.
    """
    service = InvoiceService(db)
    return service.create_invoice(invoice_data, created_by=principal.user_id)


@router.get("", response_model=List[InvoiceWithCustomer])
def list_invoices(
    db: db_dependency,
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
):
    """
    Listar facturas con su cliente.
    """
    return InvoiceService(db).get_invoices(limit, offset)


@router.get("/{invoice_id}", response_model=InvoiceDetail)
def get_invoice(invoice_id: UUID, db: db_dependency):
    """
    Obtener una factura con su cliente y sus detalles (cada uno con su producto).
    """
    return InvoiceService(db).get_invoice_detail(invoice_id)
