import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from loyaltyapi import containers
from loyaltyapi.config import get_settings
from loyaltyapi.core.exception_handlers import handle_base_api_exception
from loyaltyapi.core.exceptions import BaseAPIException
from loyaltyapi.core.logging_middleware import LoggingMiddleware
from loyaltyapi.database.connection import engine, init_db
from loyaltyapi.logging_config import setup_logging
from loyaltyapi.routers import balance_router, health_router, order_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    container: containers.Container = app.container  # type: ignore[attr-defined]
    settings = container.config.config()

    try:
        init_db(engine)
    except Exception:
        logger.exception(
            f"Database initialization failed for {engine.url.render_as_string(hide_password=True)}, aborting startup"
        )
        raise

    handle = None
    if settings.ACCRUAL_SYSTEM_ADDRESS:
        handle = container.worker.worker_handle()
        handle.start()
        app.state.accrual_worker = handle
        logger.info(f"Accrual worker polling {settings.ACCRUAL_SYSTEM_ADDRESS}")
    else:
        logger.warning("Accrual system address not configured, worker not started")

    try:
        yield
    finally:
        if handle is not None:
            await handle.stop(timeout=settings.WORKER_SHUTDOWN_TIMEOUT_SEC)
            await container.worker.accrual_client().aclose()
            container.worker.session().close()
        logger.info("Application shutdown complete")


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL, json_logs=settings.LOG_JSON)

    app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
    app.container = containers.Container()  # type: ignore[attr-defined]
    app.state.accrual_worker = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(LoggingMiddleware)
    app.add_exception_handler(BaseAPIException, handle_base_api_exception)  # type: ignore[arg-type]

    app.include_router(health_router.router)
    app.include_router(order_router.router)
    app.include_router(balance_router.router)
    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    uvicorn.run(
        "loyaltyapi.main:app",
        host=settings.run_host,
        port=settings.run_port,
        log_config=None,
    )


if __name__ == "__main__":
    run()
