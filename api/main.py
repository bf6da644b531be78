"""
FastAPI application entrypoint.
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI

from api import routes

logging.basicConfig(level=routes.settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load the models in the background; always release the camera on shutdown."""
    controller = routes.controller
    load = asyncio.create_task(controller.load_models())
    try:
        yield
    finally:
        if not load.done():
            load.cancel()
        await controller.close()
        logger.debug("[api] controller closed")


app = FastAPI(title="Facial Emotion Detection", version="1.0.0", lifespan=lifespan)
app.include_router(routes.router)

@app.get("/health")
def health() -> dict:
    """
    Health check endpoint.

    Returns:
        dict: Simple status payload.
    """
    return {"status": "ok"}
