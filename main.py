"""AI Ekin chat gateway: FastAPI entry point."""
import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app import upstream
from app.config import get_api_key, settings
from app.errors import GatewayError, MethodNotAllowed
from app.models import ErrorBody
from app.rate_limiter import rate_limiter
from app.routers import chat

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

CLEANUP_INTERVAL_SECONDS = 300


@asynccontextmanager
async def lifespan(app: FastAPI):
    upstream.init_client()  # sync, no await
    logger.info("Completion client ready (model=%s, base_url=%s)", settings.openai_model, settings.openai_base_url)
    if not get_api_key():
        logger.warning("OPENAI_API_KEY is not set; chat requests will fail until it is")

    async def _cleanup_loop():
        while True:
            await asyncio.sleep(CLEANUP_INTERVAL_SECONDS)
            try:
                await rate_limiter.cleanup()
            except Exception:
                logger.exception("Cleanup loop iteration failed")

    cleanup_task = asyncio.create_task(_cleanup_loop())
    cleanup_task.add_done_callback(lambda t: logger.error("Cleanup task terminated: %s", t.exception()) if not t.cancelled() and t.exception() else None)

    yield

    cleanup_task.cancel()
    await upstream.close_client()


app = FastAPI(
    title=settings.app_name,
    lifespan=lifespan,
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
)


@app.exception_handler(GatewayError)
async def gateway_error_handler(request: Request, exc: GatewayError):
    return JSONResponse(status_code=exc.status_code, content=ErrorBody(error=exc.message).model_dump())


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    # Routing errors (405, 404) use the same {"error": ...} envelope as the gateway.
    if exc.status_code == MethodNotAllowed.status_code:
        message = MethodNotAllowed.message
    else:
        message = str(exc.detail)
    return JSONResponse(status_code=exc.status_code, content=ErrorBody(error=message).model_dump(), headers=getattr(exc, "headers", None))


@app.middleware("http")
async def security_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "no-referrer"
    # Replies are per-conversation; never let a proxy or browser cache them.
    response.headers["Cache-Control"] = "no-store"
    return response


app.include_router(chat.router)


@app.get("/health")
async def health():
    return {"status": "ok", "upstream_configured": get_api_key() is not None}
