from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Body

from app.schemas import DataReceipt, HelloMessage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/data", tags=["hello"])


@router.get("", response_model=HelloMessage, summary="Static greeting with the server time.")
async def get_greeting() -> HelloMessage:
    return HelloMessage(
        message="Hello from FastAPI!",
        timestamp=datetime.now(timezone.utc),
    )


@router.post("", response_model=DataReceipt, summary="Echo back any JSON payload.")
async def receive_data(payload: Any = Body(None)) -> DataReceipt:
    logger.info("Received data: %r", payload)
    return DataReceipt(status="Data received!", received=payload)
