# tests/functional/core/test_errors.py

import httpx
import pytest
from fastapi import FastAPI
from pymongo.errors import DuplicateKeyError

from school_api.core import errors
from school_api.core.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
    error_body,
    register_exception_handlers,
)


@pytest.fixture
def error_app() -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/conflict")
    async def conflict():
        raise ConflictError("School with this name already exists")

    @app.get("/forbidden")
    async def forbidden():
        raise ForbiddenError()

    @app.get("/duplicate")
    async def duplicate():
        raise DuplicateKeyError("E11000 duplicate key error", code=11000)

    @app.get("/boom")
    async def boom():
        raise RuntimeError("kaboom")

    return app


async def _get(app: FastAPI, path: str) -> httpx.Response:
    # Starlette re-raises after the 500 handler has responded
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        return await client.get(path)


def test_status_codes():
    assert ValidationError.status_code == 400
    assert ConflictError.status_code == 400
    assert ForbiddenError.status_code == 403
    assert NotFoundError.status_code == 404
    assert NotFoundError().message == "Resource not found"


def test_error_body_hides_stack_in_production(mocker):
    mocker.patch.object(errors.settings, "ENVIRONMENT", "production")
    try:
        raise ValidationError("bad")
    except ValidationError as e:
        body = error_body(e.message, e)
    assert body == {"success": False, "message": "bad", "data": None}


def test_error_body_includes_stack_outside_production(mocker):
    mocker.patch.object(errors.settings, "ENVIRONMENT", "development")
    try:
        raise ValidationError("bad")
    except ValidationError as e:
        body = error_body(e.message, e)
    assert "ValidationError: bad" in body["stack"]


@pytest.mark.asyncio
async def test_api_error_is_enveloped(error_app):
    response = await _get(error_app, "/conflict")
    assert response.status_code == 400
    assert response.json()["message"] == "School with this name already exists"
    assert response.json()["success"] is False


@pytest.mark.asyncio
async def test_default_message_is_used(error_app):
    response = await _get(error_app, "/forbidden")
    assert response.status_code == 403
    assert response.json()["message"] == "Forbidden"


@pytest.mark.asyncio
async def test_escaped_duplicate_key_becomes_conflict(error_app):
    response = await _get(error_app, "/duplicate")
    assert response.status_code == 400
    assert response.json()["message"] == "Duplicate field value entered"


@pytest.mark.asyncio
async def test_unhandled_error_becomes_500(error_app, mocker):
    mocker.patch.object(errors.settings, "ENVIRONMENT", "production")
    response = await _get(error_app, "/boom")
    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "Internal server error", "data": None}


@pytest.mark.asyncio
async def test_unknown_route_message(client):
    response = await client.get("/api/nope")
    assert response.status_code == 404
    assert response.json()["message"] == "Not found - /api/nope"


@pytest.mark.asyncio
async def test_malformed_path_id(client, super_headers):
    response = await client.get("/api/schools/not-a-uuid", headers=super_headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid ID format"


@pytest.mark.asyncio
async def test_body_validation_messages_are_joined(client, super_headers):
    response = await client.post(
        "/api/schools",
        json={"name": "", "address": "1 Road", "contactEmail": "not-an-email"},
        headers=super_headers,
    )
    assert response.status_code == 400
    message = response.json()["message"]
    assert message.startswith("name: ")
    assert ", contactEmail: " in message
