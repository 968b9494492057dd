"""
Errores de dominio y su traducción a respuestas HTTP.

Cada servicio lanza una de estas excepciones tipadas; la capa HTTP
(`register_exception_handlers`) las convierte en `{"error": mensaje}`
con el código de estado que corresponde a su tipo:

- ValidationError     -> 400 (datos inválidos, stock insuficiente, referencia desconocida)
- AuthenticationError -> 401 (token ausente, inválido o expirado; credenciales erróneas)
- AuthorizationError  -> 403 (rol no autorizado)
- NotFoundError       -> 404 (entidad inexistente en lecturas/actualizaciones)
- StorageError        -> 500 (fallo de persistencia)
"""
import logging
from decimal import Decimal
from typing import Union
from uuid import UUID

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED


class AuthorizationError(AppError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND


class StorageError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class ProductNotFound(ValidationError):
    def __init__(self, product_id: UUID):
        super().__init__(f"Producto no encontrado con ID {product_id}")
        self.product_id = product_id


class CustomerNotFound(ValidationError):
    def __init__(self, customer_id: UUID):
        super().__init__(f"Cliente no encontrado con ID {customer_id}")
        self.customer_id = customer_id


class InsufficientStock(ValidationError):
    def __init__(self, product_id: UUID, product_name: str,
                 available: Union[int, Decimal], requested: Union[int, Decimal]):
        super().__init__(
            f"No hay suficiente stock para el producto {product_name}. "
            f"Disponible: {available}, Solicitado: {requested}"
        )
        self.product_id = product_id
        self.available = available
        self.requested = requested


class DuplicateUsername(ValidationError):
    def __init__(self, username: str):
        super().__init__(f"El usuario '{username}' ya existe")
        self.username = username


class StorageUnavailable(StorageError):
    def __init__(self, operation: str, cause: Exception):
        # La causa queda para los logs; el mensaje público no lleva SQL ni detalles del driver
        super().__init__(f"Error de almacenamiento al {operation}")
        self.operation = operation
        self.cause = cause


def _error_response(status_code: int, message: str, headers=None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
    return _error_response(exc.status_code, exc.message, headers)


async def http_exception_handler(request: Request, exc: HTTPException):
    message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return _error_response(exc.status_code, message, getattr(exc, "headers", None))


async def request_validation_handler(request: Request, exc: RequestValidationError):
    messages = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        messages.append(f"{location}: {err.get('msg')}" if location else err.get("msg", ""))
    return _error_response(status.HTTP_400_BAD_REQUEST, "; ".join(messages) or "Solicitud inválida")


async def sqlalchemy_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}", exc_info=True)
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Error de almacenamiento")


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Error interno del servidor")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
