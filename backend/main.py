from dotenv import load_dotenv
load_dotenv()

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from errors import register_exception_handlers
from realtime.fanout import FanOutChannel
from realtime.registry import SubscriptionRegistry
from routes import queue, realtime, search, session
from services.song_requests import SongRequestService
from spotify.client import SpotifyCatalog
from store import SessionStore

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

HOST = os.environ.get("HOST", "0.0.0.0")
PORT = int(os.environ.get("PORT", "3000"))
CORS_ORIGINS = [o.strip() for o in os.environ.get("CORS_ORIGINS", "*").split(",") if o.strip()]


def create_app(catalog: Optional[SpotifyCatalog] = None) -> FastAPI:
    """Build the app with a fresh, empty set of sessions and subscribers."""
    if catalog is None:
        catalog = SpotifyCatalog.from_env()
        if not catalog.configured:
            logger.warning("SPOTIFY_CLIENT_ID / SPOTIFY_CLIENT_SECRET not set; search will return 503")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await app.state.catalog.aclose()

    app = FastAPI(title="VibeIn API", version="0.1.0", lifespan=lifespan)

    store = SessionStore()
    channel = FanOutChannel(store, SubscriptionRegistry())
    app.state.store = store
    app.state.channel = channel
    app.state.song_requests = SongRequestService(store, channel)
    app.state.catalog = catalog

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials="*" not in CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    app.include_router(session.router)
    app.include_router(search.router)
    app.include_router(queue.router)
    app.include_router(realtime.router)

    @app.get("/", response_class=PlainTextResponse)
    def health():
        return "VibeIn backend (REST + WebSocket) is running!"

    return app


def run() -> None:
    """Serve a fresh app; uvicorn builds it via the factory."""
    logger.info("VibeIn backend running on port %d", PORT)
    uvicorn.run("main:create_app", factory=True, host=HOST, port=PORT)


if __name__ == "__main__":
    run()
