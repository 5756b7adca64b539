# Run from project root: uvicorn insightear.main:app --reload

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from insightear.api.routes import router
from insightear.core.config import SESSION_SWEEP_INTERVAL_SECONDS
from insightear.core.session_store import run_sweeper, session_store

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    sweeper = asyncio.create_task(run_sweeper(session_store, SESSION_SWEEP_INTERVAL_SECONDS))
    try:
        yield
    finally:
        sweeper.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sweeper
        logger.info("Session sweeper stopped")


app = FastAPI(title="InsightEar GPT Backend", lifespan=lifespan)
app.include_router(router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("insightear.main:app", host="0.0.0.0", port=8000)
