"""Tests for Pydantic models and the gateway error taxonomy."""
import pytest
from pydantic import ValidationError

from app.errors import (
    ClientDisconnected,
    GatewayError,
    MethodNotAllowed,
    MisconfiguredServer,
    RateLimited,
    UnexpectedError,
    UpstreamError,
    UpstreamUnreachable,
)
from app.models import ALLOWED_ROLES, ChatReply, CompletionRequest, ConversationTurn, SystemTurn


class TestConversationTurn:
    def test_user_and_assistant_valid(self):
        for role in ("user", "assistant"):
            assert ConversationTurn(role=role, content="x").role == role

    def test_system_role_rejected(self):
        with pytest.raises(ValidationError):
            ConversationTurn(role="system", content="x")

    def test_content_required(self):
        with pytest.raises(ValidationError):
            ConversationTurn(role="user")

    def test_allowed_roles_match_model(self):
        assert ALLOWED_ROLES == {"user", "assistant"}


class TestCompletionRequest:
    def test_dump_matches_provider_schema(self):
        req = CompletionRequest(
            model="gpt-4o-mini",
            temperature=0.6,
            max_tokens=450,
            messages=(SystemTurn(content="persona"), ConversationTurn(role="user", content="hi")),
        )
        assert req.model_dump(mode="json") == {
            "model": "gpt-4o-mini",
            "temperature": 0.6,
            "max_tokens": 450,
            "messages": [
                {"role": "system", "content": "persona"},
                {"role": "user", "content": "hi"},
            ],
        }

    def test_frozen(self):
        req = CompletionRequest(model="m", temperature=0, max_tokens=1, messages=())
        with pytest.raises(ValidationError):
            req.max_tokens = 2


class TestChatReply:
    def test_shape(self):
        assert ChatReply(reply="hi").model_dump() == {"reply": "hi"}


class TestGatewayErrors:
    @pytest.mark.parametrize("error, status, message", [
        (MethodNotAllowed(), 405, "Method not allowed"),
        (RateLimited(), 429, "Rate limit exceeded. Try again soon."),
        (MisconfiguredServer(), 500, "Missing OPENAI_API_KEY"),
        (UpstreamError(502), 500, "Upstream API error"),
        (UpstreamUnreachable(), 500, "Upstream API unreachable"),
        (UnexpectedError(), 500, "Unexpected server error"),
        (UnexpectedError("disk full"), 500, "disk full"),
        (ClientDisconnected(), 499, "Client closed request"),
    ])
    def test_status_and_message(self, error, status, message):
        assert isinstance(error, GatewayError)
        assert error.status_code == status
        assert error.message == message

    def test_upstream_error_keeps_upstream_status(self):
        assert UpstreamError(503).upstream_status == 503
