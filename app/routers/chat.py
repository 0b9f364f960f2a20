"""Chat API router: the single conversational endpoint used by the site UI."""
import asyncio
import logging

from fastapi import APIRouter, Request

from app.config import settings
from app.errors import ClientDisconnected
from app.gateway import Gateway
from app.models import ChatReply
from app.rate_limiter import rate_limiter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

# How often an in-flight chat request checks whether its client went away.
DISCONNECT_POLL_SECONDS = 0.5

gateway = Gateway(rate_limiter, settings)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def client_identity(request: Request) -> str:
    """Derive the rate-limit key for a request.

    X-Forwarded-For may be a proxy chain; only its first entry is used.
    Clients with no derivable address all share the "unknown" budget.

    IMPORTANT: deploy behind a reverse proxy that overwrites X-Forwarded-For,
    otherwise clients can rotate the header to dodge the rate limit.
    """
    forwarded = request.headers.get("X-Forwarded-For", "").split(",")[0].strip()
    if forwarded:
        return forwarded
    real_ip = request.headers.get("X-Real-IP", "").strip()
    if real_ip:
        return real_ip
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


async def _wait_for_disconnect(request: Request) -> None:
    while not await request.is_disconnected():
        await asyncio.sleep(DISCONNECT_POLL_SECONDS)


async def _cancel_on_disconnect(request: Request, client_id: str, raw_body: bytes) -> str:
    """Run the gateway, cancelling the upstream call if the client hangs up."""
    work = asyncio.create_task(gateway.handle(client_id, raw_body))
    watcher = asyncio.create_task(_wait_for_disconnect(request))
    try:
        await asyncio.wait({work, watcher}, return_when=asyncio.FIRST_COMPLETED)
        if watcher.done() and not watcher.cancelled() and watcher.exception() is not None:
            # A broken watcher is not a disconnect; the client still gets its reply.
            logger.warning("Disconnect watcher failed for client %s: %r", client_id, watcher.exception())
            if not work.done():
                await asyncio.wait({work})
    finally:
        # Also covers cancellation of this coroutine itself.
        for task in (work, watcher):
            if not task.done():
                task.cancel()

    if work.done() and not work.cancelled():
        return work.result()

    logger.info("Client %s disconnected; upstream call cancelled", client_id)
    raise ClientDisconnected()


# ---------------------------------------------------------------------------
# Chat
# ---------------------------------------------------------------------------

@router.post("/chat", response_model=ChatReply)
async def chat(request: Request) -> ChatReply:
    # The body is read raw so malformed JSON degrades instead of failing validation.
    raw_body = await request.body()
    reply = await _cancel_on_disconnect(request, client_identity(request), raw_body)
    return ChatReply(reply=reply)
