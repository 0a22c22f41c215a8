# main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from config import DATABASE_URL, LOG_LEVEL
from contract_routes import router as contract_router
from tx_routes import router as tx_router
from verify_routes import router as verify_router

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app):
    if DATABASE_URL:
        from migrate import run_migrations
        run_migrations()
        logger.info("Database migrations applied")
    else:
        logger.warning("DATABASE_URL not set; contract storage unavailable")
    yield


app = FastAPI(title="Contract Deploy & Verify API", version="0.1.0", lifespan=lifespan)
app.include_router(contract_router)
app.include_router(tx_router)
app.include_router(verify_router)


@app.get("/healthz")
def healthz():
    return {"ok": "true"}
