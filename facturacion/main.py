from typing import Optional
from fastapi import FastAPI
import logging

# Import database components
from facturacion.database.database import Base, build_engine, build_session_factory

# Import middleware and error handling
from facturacion.common.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from facturacion.common.exceptions import register_exception_handlers

# Import routers
from facturacion.modules.auth.router import auth_router
from facturacion.modules.customers.router import router as customers_router
from facturacion.modules.products.router import product_router
from facturacion.modules.invoices.router import router as invoices_router

# Import models for table creation
import facturacion.modules.auth.models
import facturacion.modules.customers.models
import facturacion.modules.products.models
import facturacion.modules.invoices.models

from facturacion.core.config import Settings, get_settings

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=logging.INFO if settings.ENVIRONMENT == "production" else logging.DEBUG,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Construir la aplicación con su configuración, engine y routers."""
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="Facturación API",
        description="Clientes, productos con stock, facturas y detalles con autenticación JWT por roles",
        version="1.0.0",
        docs_url="/docs" if settings.ENVIRONMENT != "production" else None,
        redoc_url="/redoc" if settings.ENVIRONMENT != "production" else None
    )

    # Configuration and storage are injected through app.state
    app.state.settings = settings
    app.state.engine = build_engine(settings)
    app.state.session_factory = build_session_factory(app.state.engine)

    # Add middleware (order matters!)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestLoggingMiddleware)

    register_exception_handlers(app)

    # Include routers
    app.include_router(auth_router, prefix="/auth", tags=["Auth"])
    app.include_router(customers_router)
    app.include_router(product_router)
    app.include_router(invoices_router)

    @app.get("/")
    async def read_root():
        return {
            "message": "Facturación API is running",
            "version": "1.0.0",
            "environment": settings.ENVIRONMENT
        }

    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "environment": settings.ENVIRONMENT}

    @app.on_event("startup")
    async def startup_event():
        logger.info("Facturación API starting up...")
        logger.info(f"Environment: {settings.ENVIRONMENT}")
        logger.info(f"Debug mode: {settings.DEBUG}")
        if settings.uses_default_secret and settings.ENVIRONMENT not in ("development", "test"):
            logger.warning("APP_SECRET_STRING is the built-in default; set it from the environment")

        # Create database tables (only for development/test - production schema is managed externally)
        if settings.ENVIRONMENT in ("development", "test"):
            Base.metadata.create_all(bind=app.state.engine)

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("Facturación API shutting down...")
        app.state.engine.dispose()

    return app


app = create_app()
