"""Completion provider client: one persistent httpx client, one attempt per request."""
import logging
from typing import Any

import httpx

from app.config import settings
from app.errors import UpstreamError, UpstreamUnreachable
from app.models import CompletionRequest

logger = logging.getLogger(__name__)

COMPLETIONS_PATH = "/chat/completions"

# ---------------------------------------------------------------------------
# Persistent HTTP client
# ---------------------------------------------------------------------------
_client: httpx.AsyncClient | None = None


def _require_client() -> httpx.AsyncClient:
    """Return the persistent client, or raise if not initialized."""
    if _client is None:
        raise RuntimeError("Upstream client not initialized; call init_client() first")
    return _client


def init_client(transport: httpx.AsyncBaseTransport | None = None) -> None:
    global _client
    if _client is not None:
        return  # idempotent, don't orphan existing client
    _client = httpx.AsyncClient(
        base_url=settings.openai_base_url.rstrip("/"),
        headers={"Content-Type": "application/json"},
        timeout=settings.upstream_timeout_seconds,
        transport=transport,
    )


async def close_client() -> None:
    global _client
    if _client:
        await _client.aclose()
        _client = None


# ---------------------------------------------------------------------------
# Completions
# ---------------------------------------------------------------------------

def extract_reply(data: Any) -> str:
    """Pull choices[0].message.content out of a completion envelope, or ""."""
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return ""
    return content if isinstance(content, str) else ""


async def create_completion(request: CompletionRequest, api_key: str) -> str:
    """POST the completion request and return the generated text.

    The credential is passed per call because it is re-read from the
    environment on every request. Raises UpstreamUnreachable on transport
    failures and UpstreamError on a non-2xx status or an unreadable body.
    """
    try:
        resp = await _require_client().post(
            COMPLETIONS_PATH,
            json=request.model_dump(mode="json"),
            headers={"Authorization": f"Bearer {api_key}"},
        )
    except httpx.RequestError as exc:
        logger.error("Completion provider unreachable: %s: %s", type(exc).__name__, exc)
        raise UpstreamUnreachable() from exc

    if not resp.is_success:
        # Raw provider body stays in server logs, never in the client response.
        logger.error("Completion provider returned HTTP %d: %s", resp.status_code, resp.text)
        raise UpstreamError(resp.status_code)

    try:
        data = resp.json()
    except ValueError:
        logger.error("Completion provider returned non-JSON body (HTTP %d): %.500s", resp.status_code, resp.text)
        raise UpstreamError(resp.status_code)

    reply = extract_reply(data)
    if not reply:
        logger.warning("Completion provider response had no message content")
    return reply
