"""FastAPI application factory"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from debt_ledger.api.middleware import RequestIDMiddleware, MetricsMiddleware
from debt_ledger.api.v1 import debts, payments, transactions, summary
from debt_ledger.infrastructure.database.session import init_db
from debt_ledger.infrastructure.observability.logging import setup_logging
from debt_ledger.config import settings

# Setup structured logging
setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables on startup"""
    init_db()
    yield


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Debt Ledger",
        description="Personal ledger with installment debt accounting",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers; debts first so /debts/summary wins over /debts/{debt_id}
    app.include_router(debts.router, prefix="/v1", tags=["debts"])
    app.include_router(payments.router, prefix="/v1", tags=["payments"])
    app.include_router(transactions.router, prefix="/v1", tags=["transactions"])
    app.include_router(summary.router, prefix="/v1", tags=["accounts"])

    return app


app = create_app()
