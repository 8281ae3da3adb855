import logging
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from moneyview.config import Settings
from moneyview.core.exceptions import register_exception_handlers
from moneyview.database import Base, build_engine, build_session_factory
from moneyview.income.cache import IncomeCache
from moneyview.logging_config import configure_logging

# Import all models so Base.metadata knows about them
import moneyview.auth.models  # noqa: F401
import moneyview.business.models  # noqa: F401
import moneyview.customers.models  # noqa: F401
import moneyview.ledger.models  # noqa: F401
import moneyview.income.models  # noqa: F401

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(application: FastAPI):
    settings = application.state.settings

    if settings.is_sqlite:
        db_path = settings.database_url.split("///")[-1]
        if db_path and db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    engine = build_engine(settings.database_url)

    # Auto-create tables for SQLite in development
    if settings.is_sqlite:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    application.state.engine = engine
    application.state.session_factory = build_session_factory(engine)
    application.state.income_cache = IncomeCache(settings.income_cache_ttl_seconds)
    logger.info("MoneyView started (timezone=%s)", settings.business_timezone)

    yield

    application.state.income_cache.clear()
    await engine.dispose()


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings()
    configure_logging(settings)

    fastapi_app = FastAPI(
        title="MoneyView",
        description="Customer ledger, reports and income tracking",
        version="0.1.0",
        lifespan=lifespan,
    )
    fastapi_app.state.settings = settings

    # CORS
    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register routers
    from moneyview.auth.router import router as auth_router
    from moneyview.business.router import router as business_router
    from moneyview.customers.router import router as customers_router
    from moneyview.income.router import router as income_router
    from moneyview.ledger.router import router as transactions_router
    from moneyview.reports.router import router as reports_router

    fastapi_app.include_router(auth_router, prefix="/api/auth", tags=["auth"])
    fastapi_app.include_router(business_router, prefix="/api/business", tags=["business"])
    fastapi_app.include_router(customers_router, prefix="/api/customers", tags=["customers"])
    fastapi_app.include_router(transactions_router, prefix="/api/transactions", tags=["transactions"])
    fastapi_app.include_router(reports_router, prefix="/api/reports", tags=["reports"])
    fastapi_app.include_router(income_router, prefix="/api/income", tags=["income"])

    # System endpoints
    @fastapi_app.get("/api/system/health")
    async def health():
        return {"data": {"status": "healthy"}}

    # Register exception handlers
    register_exception_handlers(fastapi_app)

    return fastapi_app


app = create_app()


def main():
    """Serve ``app`` on the configured host and port."""
    settings = app.state.settings
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
