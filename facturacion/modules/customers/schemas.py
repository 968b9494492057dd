from pydantic import BaseModel, Field
from typing import Optional
from uuid import UUID


class CustomerBase(BaseModel):
    name: Optional[str] = Field(None, max_length=200, alias="nombre")
    address: Optional[str] = Field(None, max_length=255, alias="direccion")
    phone: Optional[str] = Field(None, max_length=50, alias="telefono")
    email: Optional[str] = Field(None, max_length=100, alias="correo")

    class Config:
        populate_by_name = True


class CustomerCreate(CustomerBase):
    pass


class CustomerUpdate(CustomerBase):
    pass


class CustomerOut(CustomerBase):
    id: UUID

    class Config:
        from_attributes = True
        populate_by_name = True
