from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .cache import InventoryCache, SnapshotStore
from .config import Settings, load_settings
from .errors import UpstreamError
from .feed_client import FeedClient
from .gemini_client import GeminiClient
from .matcher import match
from .models import ChatRequest, ChatResponse, SnapshotPayload
from .prompt_builder import PERSONA_PROMPT, load_prompt, render
from .relay import ChatRelay
from .scheduler import create_scheduler, start_scheduler, stop_scheduler

BASE_DIR = Path(__file__).resolve().parent

log_level_name = os.getenv("LOG_LEVEL", "INFO").upper()
log_level = getattr(logging, log_level_name, logging.INFO)
if not logging.getLogger().handlers:
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

logging.getLogger("style_assistant").setLevel(log_level)
logger = logging.getLogger("style_assistant.api")

ENV_PATH = BASE_DIR / ".env"
if ENV_PATH.exists():
    load_dotenv(ENV_PATH, override=True)

FALLBACK_REPLY = "Having some issues right now. Try again in a sec."


def create_app(
    settings: Optional[Settings] = None,
    feed: Any = None,
    generator: Any = None,
    store: Optional[SnapshotStore] = None,
) -> FastAPI:
    """Purpose: Build the FastAPI app with its cache, relay and scheduler wired in.
    Inputs/Outputs: Optional Settings and collaborators (feed with fetch(),
        generator with generate(), snapshot store); returns a FastAPI app.
    Side Effects / State: Reads the persona template from settings.prompts_dir.
    Dependencies: Uses FeedClient, GeminiClient, InventoryCache, ChatRelay.
    Failure Modes: Missing persona template raises FileNotFoundError at startup.
    If Removed: There is no HTTP surface for the widget.
    Testing Notes: Inject fakes for feed and generator and drive with TestClient.
    """
    settings = settings or load_settings()
    feed = feed if feed is not None else FeedClient(settings)
    generator = generator if generator is not None else GeminiClient(settings)

    cache = InventoryCache(feed, settings, store=store)
    relay = ChatRelay(generator, load_prompt(settings.prompts_dir / PERSONA_PROMPT))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Periodic refresh runs only while the app is serving.
        scheduler = None
        if settings.refresh_enabled:
            scheduler = create_scheduler(cache, settings.refresh_interval_minutes)
            start_scheduler(scheduler)
        try:
            yield
        finally:
            if scheduler is not None:
                stop_scheduler(scheduler)

    app = FastAPI(title="Style Assistant", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
        max_age=86400,
    )

    @app.get("/api/products", response_model=SnapshotPayload)
    def list_products() -> SnapshotPayload:
        """Purpose: Return the current inventory snapshot for the widget.
        Inputs/Outputs: No inputs; output is the snapshot payload.
        Side Effects / State: May refresh the cache on a miss.
        Dependencies: Uses InventoryCache.read.
        Failure Modes: None; feed failures surface as the default snapshot.
        If Removed: The widget cannot preload product data.
        Testing Notes: With a failing feed, expect the default catalogue.
        """
        return cache.read().to_payload()

    @app.post("/api/chat", response_model=ChatResponse)
    def chat(request: ChatRequest) -> Any:
        """Purpose: Relay a customer message and attach the products the reply names.
        Inputs/Outputs: Input is ChatRequest; output is ChatResponse, or the fallback
            reply with status 500 when the generation API fails.
        Side Effects / State: Reads the cache (may refresh); one upstream call.
        Dependencies: Uses render, ChatRelay.relay and matcher.match.
        Failure Modes: UpstreamError becomes the 500 fallback payload.
        If Removed: Core chat functionality is unavailable.
        Testing Notes: Mock a reply with a PRODUCT: line and check the card payload.
        """
        snapshot = cache.read()
        try:
            reply = relay.relay(request.message, render(snapshot))
        except UpstreamError:
            logger.exception("chat relay failed message_chars=%d", len(request.message))
            return JSONResponse(status_code=500, content={"reply": FALLBACK_REPLY, "products": []})

        display_text, products = match(reply, snapshot)
        logger.info("chat message_chars=%d products=%d", len(request.message), len(products))
        return ChatResponse(
            reply=display_text,
            products=[product.to_payload() for product in products],
        )

    return app


app = create_app()
