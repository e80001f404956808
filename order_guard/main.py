# order_guard/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from order_guard.core.config import get_settings
from order_guard.core.exceptions import (
    AlertNotFoundError,
    DatabaseError,
    IntegrationNotFoundError,
    InventoryNotFoundError,
    StorageTimeoutError,
    ValidationError,
)
from order_guard.core.logging_config import configure_logging
from order_guard.routes import alerts, blocks, health, integrations, inventory, orders
from order_guard.scheduler import start_scheduler, stop_scheduler

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if get_settings().AUTO_UNBLOCK_SWEEP_MINUTES > 0:
        await start_scheduler()
    try:
        yield
    finally:
        await stop_scheduler()


app = FastAPI(
    title="Order Guard",
    lifespan=lifespan
)


# "Your order could not be placed" is a 200 with success=false; these handlers
# cover "something went wrong" and bad input only.
@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=422, content={"error": "validation_error", "detail": str(exc)})


@app.exception_handler(InventoryNotFoundError)
@app.exception_handler(AlertNotFoundError)
@app.exception_handler(IntegrationNotFoundError)
async def not_found_handler(request: Request, exc: Exception):
    return JSONResponse(status_code=404, content={"error": "not_found", "detail": str(exc)})


@app.exception_handler(DatabaseError)
async def database_error_handler(request: Request, exc: DatabaseError):
    logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=503,
        content={
            "error": "storage_timeout" if isinstance(exc, StorageTimeoutError) else "storage_error",
            "detail": "Something went wrong, please retry",
        },
    )


app.include_router(health.router)
app.include_router(inventory.router)
app.include_router(orders.router)
app.include_router(blocks.router)
app.include_router(alerts.router)
app.include_router(integrations.router)
