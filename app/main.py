from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from app.api import router
from app.hello import router as hello_router
from datastore.sql_store import build_default_store
from logging_config import configure_logging
from services.backfill import BackfillGenerator
from services.errors import StoreError
from services.temperatures import build_default_service
from settings import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    store = build_default_store()
    try:
        store.open()
    except StoreError:
        logger.exception("Temperature store unavailable at startup", extra={"database": store.url})

    if settings.backfill_on_startup and store.is_open:
        await run_in_threadpool(BackfillGenerator(store).ensure_yesterday_filled)

    try:
        yield
    finally:
        store.close()
        build_default_service.cache_clear()
        build_default_store.cache_clear()


async def _store_error_handler(_request: Request, exc: StoreError) -> JSONResponse:
    logger.error("Store failure while serving request", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error."},
    )


async def _validation_error_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


def create_app() -> FastAPI:
    configure_logging()
    settings = get_settings()
    app = FastAPI(
        title="Temperature Log",
        description="Per-minute temperature samples with daily statistics.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(StoreError, _store_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.include_router(router)
    app.include_router(hello_router)
    return app

app = create_app()
