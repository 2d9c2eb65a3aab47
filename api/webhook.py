"""
Webhook FastAPI application.

Responsibilities:
- Receive Telegram updates on POST {BOT_WEBHOOK_PATH} and enqueue them for the bot
- Verify the X-Telegram-Bot-Api-Secret-Token header when a secret is configured
- Health / readiness endpoints
- Centralized exception handlers and request-id logging

Run via main.py (webhook mode); the bot application and store are injected.
"""
import logging
from contextlib import asynccontextmanager
from typing import Awaitable, Callable, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from telegram import Update
from telegram.ext import Application

from config.settings import settings
from core.exception_handlers import register_exception_handlers
from core.logging import request_logging_middleware
from core.response import error, ok
from infra.redis_client import RedisClient, redis_client
from services.store import BaseStore

logger = logging.getLogger(__name__)

SECRET_HEADER = "X-Telegram-Bot-Api-Secret-Token"

Hook = Callable[[], Awaitable[None]]


def create_app(
    store: BaseStore,
    application: Optional[Application] = None,
    cache: Optional[RedisClient] = None,
    on_startup: Optional[Hook] = None,
    on_shutdown: Optional[Hook] = None,
) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if on_startup:
            await on_startup()
        try:
            yield
        finally:
            if on_shutdown:
                await on_shutdown()

    app = FastAPI(title=settings.APP_NAME, version=settings.APP_VERSION, lifespan=lifespan)
    app.state.store = store
    app.state.application = application
    app.state.cache = cache if cache is not None else redis_client

    register_exception_handlers(app)
    app.middleware("http")(request_logging_middleware)

    @app.post(settings.BOT_WEBHOOK_PATH)
    async def telegram_webhook(request: Request):
        """Accept an update and return 200 immediately; the bot processes it from its queue."""
        if settings.BOT_WEBHOOK_SECRET and request.headers.get(SECRET_HEADER) != settings.BOT_WEBHOOK_SECRET:
            logger.warning("Rejected webhook call with a bad secret token")
            raise HTTPException(status_code=403, detail="invalid secret token")
        bot_app: Optional[Application] = request.app.state.application
        if bot_app is None:
            raise HTTPException(status_code=503, detail="bot not running")
        try:
            payload = await request.json()
        except ValueError:
            raise HTTPException(status_code=400, detail="invalid JSON body")
        update = Update.de_json(payload, bot_app.bot)
        await bot_app.update_queue.put(update)
        return ok({"queued": True})

    @app.get("/health")
    async def health():
        """Liveness only: the process is up."""
        return ok({"status": "ok", "version": settings.APP_VERSION})

    @app.get("/ready")
    async def ready(request: Request):
        """Readiness: the store must answer; Redis is reported but only degrades caching."""
        db_ok = await request.app.state.store.ping()
        redis_ok = await request.app.state.cache.ping()
        checks = {"database": db_ok, "redis": redis_ok}
        if not db_ok:
            body = error(code="db_unreachable", message="DB unavailable")
            body["data"] = checks
            return JSONResponse(status_code=503, content=body)
        return ok({"ready": True, **checks})

    return app
