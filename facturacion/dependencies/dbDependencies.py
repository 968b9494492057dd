from fastapi import Depends, Request
from sqlalchemy.orm import Session
from typing import Annotated
from facturacion.core.config import Settings
from facturacion.database.database import get_db


def get_app_settings(request: Request) -> Settings:
    """Settings inyectados en create_app()."""
    return request.app.state.settings


db_dependency = Annotated[Session, Depends(get_db)]

settings_dependency = Annotated[Settings, Depends(get_app_settings)]
