from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI

from poker_ledger.api.directory import router as directory_router
from poker_ledger.api.history import router as history_router
from poker_ledger.api.rooms import router as rooms_router
from poker_ledger.api.settlement import router as settlement_router
from poker_ledger.api.stats import router as stats_router
from poker_ledger.storage.database import init_db

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(_: FastAPI):
    init_db()
    yield


app = FastAPI(title="Poker Ledger API", lifespan=lifespan)
app.include_router(settlement_router)
app.include_router(rooms_router)
app.include_router(directory_router)
app.include_router(history_router)
app.include_router(stats_router)


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
