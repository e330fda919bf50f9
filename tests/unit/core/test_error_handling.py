"""
Tests for error handling middleware and exception handlers.
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from pydantic import BaseModel, Field
from sqlalchemy.exc import IntegrityError, OperationalError
from redis.exceptions import ConnectionError as RedisConnectionError

from core.exceptions import (
    ForbiddenError,
    InvalidInputError,
    InvalidStateError,
    NotFoundError,
    PreconditionFailedError,
)
from core.middleware.error_handling import (
    ErrorHandlingMiddleware,
    sanitize_error_message,
    setup_error_handlers,
)


class DecisionBody(BaseModel):
    decision: str
    rating: int = Field(..., ge=1, le=5)


def make_app(debug: bool = False) -> FastAPI:
    app = FastAPI()
    setup_error_handlers(app)
    app.add_middleware(ErrorHandlingMiddleware, debug=debug)

    @app.get("/not-found")
    async def not_found():
        raise NotFoundError("Request not found")

    @app.get("/invalid-state")
    async def invalid_state():
        raise InvalidStateError(
            "Request must be in JOB_POSTED status (current status: SUBMITTED)",
            details={"currentStatus": "SUBMITTED"},
        )

    @app.get("/precondition")
    async def precondition():
        raise PreconditionFailedError("Signed LOA must be uploaded before marking as accepted")

    @app.get("/forbidden")
    async def forbidden():
        raise ForbiddenError("Only the hiring manager can make this decision")

    @app.post("/validate")
    async def validate(body: DecisionBody):
        return body

    @app.get("/integrity")
    async def integrity():
        raise IntegrityError("INSERT", {}, Exception("duplicate key"))

    @app.get("/operational")
    async def operational():
        raise OperationalError("SELECT", {}, Exception("connection refused"))

    @app.get("/redis")
    async def redis_down():
        raise RedisConnectionError("connection refused")

    @app.get("/crash")
    async def crash():
        raise RuntimeError("password=hunter2 leaked")

    return app


@pytest.fixture
def client():
    return TestClient(make_app(), raise_server_exceptions=False)


class TestAppErrors:
    """Test mapping of workflow errors to HTTP responses."""

    @pytest.mark.parametrize("path,status_code,code", [
        ("/not-found", 404, "NOT_FOUND"),
        ("/invalid-state", 400, "INVALID_STATE"),
        ("/precondition", 400, "PRECONDITION_FAILED"),
        ("/forbidden", 403, "FORBIDDEN"),
    ])
    def test_status_and_code(self, client, path, status_code, code):
        response = client.get(path)

        assert response.status_code == status_code
        body = response.json()
        assert body["status"] == "error"
        assert body["code"] == code
        assert body["message"]

    def test_details_included(self, client):
        body = client.get("/invalid-state").json()

        assert body["details"] == {"currentStatus": "SUBMITTED"}

    def test_input_error_defaults(self):
        error = InvalidInputError("Decision must be APPROVED or REJECTED")

        assert error.status_code == 400
        assert error.code == "VALIDATION_ERROR"
        assert error.details is None


class TestValidationErrors:
    """Malformed bodies are reported as 400."""

    def test_missing_field(self, client):
        response = client.post("/validate", json={"rating": 3})

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert body["message"].startswith("Invalid decision")
        assert body["details"][0]["field"] == "body.decision"

    def test_out_of_range(self, client):
        response = client.post("/validate", json={"decision": "PROCEED", "rating": 9})

        assert response.status_code == 400
        assert response.json()["details"][0]["input"] == 9


class TestInfrastructureErrors:
    """Database and cache failures never leak internals."""

    def test_integrity_error(self, client):
        response = client.get("/integrity")

        assert response.status_code == 500
        assert response.json()["code"] == "DATABASE_ERROR"
        assert "duplicate key" not in response.text

    def test_operational_error(self, client):
        response = client.get("/operational")

        assert response.json()["code"] == "DATABASE_ERROR"

    def test_redis_connection_error(self, client):
        response = client.get("/redis")

        assert response.status_code == 503
        assert response.json()["code"] == "CACHE_ERROR"

    def test_unhandled_error(self, client):
        response = client.get("/crash")

        assert response.status_code == 500
        body = response.json()
        assert body["code"] == "INTERNAL_SERVER_ERROR"
        assert "hunter2" not in response.text

    def test_request_id_echoed(self, client):
        response = client.get("/crash", headers={"x-request-id": "req-123"})

        assert response.json()["request_id"] == "req-123"


class TestSanitization:
    """Test sensitive data removal from messages."""

    @pytest.mark.parametrize("message,secret", [
        ("password=hunter2", "hunter2"),
        ('{"token": "abc.def.ghi"}', "abc.def.ghi"),
        ("api_key: sk_live_123", "sk_live_123"),
        ("SSN 123-45-6789 on file", "123-45-6789"),
        ("card 4111111111111111", "4111111111111111"),
    ])
    def test_redacts(self, message, secret):
        sanitized = sanitize_error_message(message)

        assert secret not in sanitized
        assert "[REDACTED]" in sanitized

    def test_plain_message_unchanged(self):
        message = "Request must be in JOB_POSTED status"
        assert sanitize_error_message(message) == message
