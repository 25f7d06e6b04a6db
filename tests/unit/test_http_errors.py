from __future__ import annotations

import pytest
from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient
from pydantic import BaseModel

from task_intake.api.errors import register_exception_handlers
from task_intake.api.middleware import RequestIDMiddleware
from task_intake.errors import (
    IntakeError,
    NoUsableTasksError,
    ProviderTransportError,
    UnparsableResponse,
)


def _app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(RequestIDMiddleware)
    register_exception_handlers(app)
    return app


@pytest.mark.unit
def test_intake_error_payload_shape_includes_code_and_request_id():
    app = _app()

    @app.get("/boom")
    async def boom():  # pragma: no cover - exercised via request
        raise IntakeError(code="test.bad_request", message="Nope", status_code=400)

    client = TestClient(app)
    response = client.get("/boom", headers={"X-Request-ID": "req_123"})
    assert response.status_code == 400
    assert response.json() == {"detail": "Nope", "code": "test.bad_request", "request_id": "req_123"}
    assert response.headers["X-Request-ID"] == "req_123"


@pytest.mark.unit
def test_transport_error_maps_to_bad_gateway_with_service_meta():
    app = _app()

    @app.get("/upstream")
    async def upstream():  # pragma: no cover - exercised via request
        raise ProviderTransportError(service="vikunja", details="GET /projects returned 500", status_code=500)

    client = TestClient(app)
    response = client.get("/upstream", headers={"X-Request-ID": "req_502"})
    assert response.status_code == 502
    assert response.json() == {
        "detail": "External service error",
        "code": "upstream.vikunja_error",
        "request_id": "req_502",
        "meta": {"service": "vikunja", "details": "GET /projects returned 500", "upstream_status": 500},
    }


@pytest.mark.unit
def test_unparsable_response_maps_to_bad_request_with_excerpt():
    app = _app()

    @app.get("/garbled")
    async def garbled():  # pragma: no cover - exercised via request
        raise UnparsableResponse("Could not parse LLM response into tasks", raw_text="no json here")

    client = TestClient(app)
    payload = client.get("/garbled").json()
    assert payload["code"] == "llm.unparsable_response"
    assert payload["meta"] == {"raw_excerpt": "no json here"}
    # Generated when the caller sends none
    assert len(payload["request_id"]) == 16


@pytest.mark.unit
def test_no_usable_tasks_maps_to_bad_request():
    app = _app()

    @app.get("/empty")
    async def empty():  # pragma: no cover - exercised via request
        raise NoUsableTasksError()

    response = TestClient(app).get("/empty")
    assert response.status_code == 400
    assert response.json()["code"] == "pipeline.no_usable_tasks"


@pytest.mark.unit
def test_http_exception_payload_shape_preserves_detail():
    app = _app()

    @app.get("/forbidden")
    async def forbidden():  # pragma: no cover - exercised via request
        raise HTTPException(status_code=403, detail="Forbidden")

    client = TestClient(app)
    response = client.get("/forbidden", headers={"X-Request-ID": "req_999"})
    assert response.status_code == 403
    payload = response.json()
    assert payload["detail"] == "Forbidden"
    assert payload["code"] == "http.403"
    assert payload["request_id"] == "req_999"


@pytest.mark.unit
def test_request_validation_error_payload_shape_is_stable():
    app = _app()

    class Body(BaseModel):
        value: int

    @app.post("/validate")
    async def validate(body: Body):  # pragma: no cover - exercised via request
        return {"ok": True, "value": body.value}

    client = TestClient(app)
    response = client.post("/validate", json={"value": "not-an-int"})
    assert response.status_code == 422
    payload = response.json()
    assert isinstance(payload.get("detail"), list)
    assert payload.get("code") == "http.validation_error"


@pytest.mark.unit
def test_unexpected_exception_is_hidden_behind_generic_500():
    app = _app()

    @app.get("/crash")
    async def crash():  # pragma: no cover - exercised via request
        raise RuntimeError("secret internals")

    client = TestClient(app, raise_server_exceptions=False)
    response = client.get("/crash")
    assert response.status_code == 500
    payload = response.json()
    assert payload["code"] == "internal.unhandled"
    assert "secret internals" not in payload["detail"]


@pytest.mark.unit
@pytest.mark.parametrize("code", ["Bad", "bad..code", "1bad", "bad-code", ""])
def test_error_code_format_is_enforced(code):
    with pytest.raises(ValueError):
        IntakeError(code=code, message="x")


@pytest.mark.unit
def test_transport_error_str_names_service():
    err = ProviderTransportError(service="together", details="rate limited", status_code=429)

    assert str(err) == "together: rate limited"
    assert err.meta["upstream_status"] == 429


@pytest.mark.unit
def test_non_domain_error_payloads_share_request_id_shape():
    app = _app()

    @app.get("/crash")
    async def crash():  # pragma: no cover - exercised via request
        raise RuntimeError("boom")

    @app.get("/typed/{value}")
    async def typed(value: int):  # pragma: no cover - exercised via request
        return {"value": value}

    client = TestClient(app, raise_server_exceptions=False)
    crashed = client.get("/crash", headers={"X-Request-ID": "req_500"})
    invalid = client.get("/typed/abc", headers={"X-Request-ID": "req_422"})

    assert crashed.json() == {
        "detail": "Internal server error",
        "code": "internal.unhandled",
        "request_id": "req_500",
    }
    assert invalid.status_code == 422
    assert invalid.json()["request_id"] == "req_422"
    assert set(invalid.json()) == {"detail", "code", "request_id"}
