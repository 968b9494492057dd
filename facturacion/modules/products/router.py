from fastapi import APIRouter, Depends, Query, status
from typing import List
from uuid import UUID

from facturacion.dependencies.dbDependencies import db_dependency
from facturacion.dependencies.userDependencies import any_role, manager_or_admin, admin_only
from facturacion.modules.products import service
from facturacion.modules.products.schemas import ProductCreate, ProductUpdate, ProductOut, ProductDeleted

product_router = APIRouter(prefix="/productos", tags=["Productos"])


@product_router.get("", response_model=List[ProductOut], dependencies=[Depends(any_role)])
def list_products(
    db: db_dependency,
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
):
    """Listar productos (facturador, gestionador o admin)."""
    return service.get_all_products(db, limit, offset)


@product_router.get("/{product_id}", response_model=ProductOut, dependencies=[Depends(any_role)])
def get_product(product_id: UUID, db: db_dependency):
    return service.get_product_by_id(db, product_id)


@product_router.post("", response_model=ProductOut, status_code=status.HTTP_201_CREATED,
                     dependencies=[Depends(manager_or_admin)])
def create_product(data: ProductCreate, db: db_dependency):
    """Crear un nuevo producto (gestionador o admin)."""
    return service.create_product(db, data)


@product_router.put("/{product_id}", response_model=ProductOut, dependencies=[Depends(admin_only)])
def update_product(product_id: UUID, data: ProductUpdate, db: db_dependency):
    """Actualizar un producto existente (solo admin)."""
    return service.update_product(db, product_id, data)


@product_router.delete("/{product_id}", response_model=ProductDeleted, dependencies=[Depends(admin_only)])
def delete_product(product_id: UUID, db: db_dependency):
    """Eliminar un producto (solo admin)."""
    service.delete_product(db, product_id)
    return ProductDeleted(message="Producto eliminado")
