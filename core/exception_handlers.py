import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from .errors import StoreError, WeatherBotError
from .response import error as resp_error

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI):
    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return JSONResponse(status_code=exc.status_code, content=resp_error(code=str(exc.status_code), message=str(exc.detail)))

    @app.exception_handler(WeatherBotError)
    async def bot_error_handler(request: Request, exc: WeatherBotError):
        status = 503 if isinstance(exc, StoreError) else 400
        logger.warning("%s on %s: %s", type(exc).__name__, request.url.path, exc)
        return JSONResponse(status_code=status, content=resp_error(code=exc.message_key, message=str(exc)))

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception on %s", request.url.path)
        return JSONResponse(status_code=500, content=resp_error(code="internal_error", message="Internal server error"))
