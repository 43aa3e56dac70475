"""FieldSmart FastAPI application."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fieldsmart.api.admin import router as admin_router
from fieldsmart.api.appointments import router as appointments_router
from fieldsmart.api.chat import router as chat_router
from fieldsmart.api.customers import router as customers_router
from fieldsmart.api.estimates import router as estimates_router
from fieldsmart.api.health import router as health_router
from fieldsmart.api.invoices import router as invoices_router
from fieldsmart.api.jobs import router as jobs_router
from fieldsmart.api.responses import register_exception_handlers
from fieldsmart.api.service_requests import router as service_requests_router
from fieldsmart.api.tenants import router as tenants_router
from fieldsmart.config import Settings
from fieldsmart.database import Database
from fieldsmart.services.llm_gateway import LLMGatewayClient
from fieldsmart.utils.request_context import RequestContextFilter, RequestContextMiddleware

VERSION = "0.1.0"

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s %(tenant)s] %(message)s",
    )
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, RequestContextFilter) for f in handler.filters):
            handler.addFilter(RequestContextFilter())


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.db = Database(settings.database_url, echo=settings.log_level.upper() == "DEBUG")
        app.state.llm = LLMGatewayClient(settings.llm_gateway_url, timeout=settings.llm_timeout_seconds)
        logger.info("FieldSmart API started")
        try:
            yield
        finally:
            await app.state.llm.aclose()
            await app.state.db.dispose()
            logger.info("FieldSmart API stopped")

    app = FastAPI(
        title="FieldSmart - Field Service Management API",
        description="Multi-tenant customers, appointments, jobs and invoices",
        version=VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestContextMiddleware, header_name=settings.request_id_header)
    register_exception_handlers(app)

    app.include_router(health_router, tags=["Health"])
    app.include_router(tenants_router, prefix="/v1", tags=["Tenants"])
    app.include_router(customers_router, prefix="/v1", tags=["Customers"])
    app.include_router(service_requests_router, prefix="/v1", tags=["Service Requests"])
    app.include_router(estimates_router, prefix="/v1", tags=["Estimates"])
    app.include_router(appointments_router, prefix="/v1", tags=["Appointments"])
    app.include_router(jobs_router, prefix="/v1", tags=["Jobs"])
    app.include_router(invoices_router, prefix="/v1", tags=["Invoices"])
    app.include_router(chat_router, prefix="/v1", tags=["Chat"])
    app.include_router(admin_router, prefix="/v1", tags=["Admin"])

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {"service": "FieldSmart", "version": VERSION, "docs": "/docs"}

    return app


app = create_app()
