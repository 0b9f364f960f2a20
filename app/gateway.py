"""Chat gateway: admission, sanitization, context injection and upstream call.

The gateway is the only place that decides what reaches the completion
provider. Visitor input is untrusted: the body may be malformed JSON, turns
may carry a "system" role or extra fields aimed at the provider's schema.
Malformed input degrades to an empty conversation instead of a rejection.
"""
import json
import logging
from typing import Any

from app import upstream
from app.config import Settings, get_api_key
from app.errors import GatewayError, MisconfiguredServer, RateLimited, UnexpectedError
from app.models import ALLOWED_ROLES, CompletionRequest, ConversationTurn, SystemTurn
from app.persona import build_system_prompt
from app.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


def parse_conversation(raw_body: bytes | str) -> list[Any]:
    """Return the raw `messages` list from a request body, or [] if unusable."""
    try:
        body = json.loads(raw_body) if raw_body else None
    except (ValueError, UnicodeDecodeError):
        logger.info("Request body is not valid JSON; treating as empty conversation")
        return []
    if not isinstance(body, dict):
        return []
    messages = body.get("messages")
    return messages if isinstance(messages, list) else []


def sanitize_turns(messages: list[Any]) -> list[ConversationTurn]:
    """Keep only user/assistant turns, reduced to role and content."""
    turns = []
    for message in messages:
        if not isinstance(message, dict):
            continue
        role = message.get("role")
        content = message.get("content")
        if not isinstance(role, str) or role not in ALLOWED_ROLES:
            continue
        turns.append(ConversationTurn(role=role, content=content))
    return turns


def build_completion_request(turns: list[ConversationTurn], settings: Settings) -> CompletionRequest:
    return CompletionRequest(
        model=settings.openai_model,
        temperature=settings.openai_temperature,
        max_tokens=settings.openai_max_tokens,
        messages=(SystemTurn(content=build_system_prompt(settings)), *turns),
    )


class Gateway:
    def __init__(self, limiter: RateLimiter, settings: Settings) -> None:
        self._limiter = limiter
        self._settings = settings

    async def handle(self, client_id: str, raw_body: bytes | str) -> str:
        """Run one chat request through the pipeline and return the reply text.

        Raises a GatewayError subclass on every failure path.
        """
        try:
            if not await self._limiter.admit(client_id):
                logger.info("Rate limit exceeded for client %s", client_id)
                raise RateLimited()

            api_key = get_api_key()
            if not api_key:
                logger.error("OPENAI_API_KEY is not configured; refusing chat request")
                raise MisconfiguredServer()

            turns = sanitize_turns(parse_conversation(raw_body))
            request = build_completion_request(turns, self._settings)
            logger.info("Forwarding %d turn(s) from client %s", len(turns), client_id)
            return await upstream.create_completion(request, api_key)
        except GatewayError:
            raise
        except Exception as exc:
            logger.exception("Chat request failed unexpectedly")
            raise UnexpectedError(str(exc)) from exc
