"""FastAPI application factory"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sqlalchemy.engine import Engine
from starlette.responses import Response
from fiado_ledger.api.middleware import MetricsMiddleware, RequestIDMiddleware
from fiado_ledger.api.v1 import closures, customers, transactions
from fiado_ledger.config import Settings, settings as default_settings
from fiado_ledger.infrastructure.database.session import build_engine, build_session_factory, init_db
from fiado_ledger.infrastructure.observability.logging import setup_logging


def create_app(app_settings: Settings | None = None, engine: Engine | None = None) -> FastAPI:
    """
    Create and configure FastAPI application.

    One engine is built per application and shared by every request through
    app.state; pass `engine` to run against a different store.
    """
    app_settings = app_settings or default_settings
    engine = engine or build_engine(app_settings.database_url)

    setup_logging(app_settings.log_level, app_settings.service_name)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        init_db(app.state.engine)
        yield
        app.state.engine.dispose()

    app = FastAPI(
        title="Fiado Ledger",
        description="Customer credit ledger with weekly settlement closures",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": app_settings.service_name}

    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(customers.router, prefix="/api", tags=["customers"])
    app.include_router(transactions.router, prefix="/api", tags=["transactions"])
    app.include_router(closures.router, prefix="/api", tags=["closures"])

    return app


app = create_app()
