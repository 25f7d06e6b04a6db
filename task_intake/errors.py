from __future__ import annotations

import re
from typing import Any


_ERROR_CODE_RE = re.compile(r"^[a-z][a-z0-9_]*(\.[a-z][a-z0-9_]*)*$")

RAW_EXCERPT_LIMIT = 500


class IntakeError(Exception):
    """Base typed error for the intake service.

    Carries a stable dot-separated `code`, a human-readable `message`, the HTTP
    status the API surfaces it with, and an optional safe-to-expose `meta` payload.
    """

    def __init__(
        self,
        *,
        code: str,
        message: str,
        status_code: int = 500,
        meta: dict[str, Any] | None = None,
    ) -> None:
        if not _ERROR_CODE_RE.fullmatch(code):
            raise ValueError(
                "Invalid error code. Expected dot-separated lowercase tokens, "
                f"got: {code!r}"
            )
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = int(status_code)
        self.meta = dict(meta or {})

    def to_public_dict(self, *, request_id: str | None) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "detail": self.message,
            "code": self.code,
        }
        if request_id:
            payload["request_id"] = request_id
        if self.meta:
            payload["meta"] = self.meta
        return payload


class UnparsableResponse(IntakeError):
    """The LLM completion could not be turned into a usable batch of tasks."""

    def __init__(self, message: str, *, raw_text: str = ""):
        self.raw_excerpt = raw_text[:RAW_EXCERPT_LIMIT]
        super().__init__(
            code="llm.unparsable_response",
            message=message,
            status_code=400,
            meta={"raw_excerpt": self.raw_excerpt} if self.raw_excerpt else None,
        )


class NoUsableTasksError(IntakeError):
    def __init__(self, message: str = "No valid tasks could be extracted from the input"):
        super().__init__(code="pipeline.no_usable_tasks", message=message, status_code=400)


class ProviderTransportError(IntakeError):
    """Transport failure or non-2xx answer from the task store or the completion provider."""

    def __init__(
        self,
        *,
        service: str,
        details: str,
        status_code: int | None = None,
    ):
        self.service = service
        self.details = details
        self.upstream_status = status_code
        meta: dict[str, Any] = {"service": service, "details": details}
        if status_code is not None:
            meta["upstream_status"] = status_code
        super().__init__(
            code=f"upstream.{service}_error",
            message="External service error",
            status_code=502,
            meta=meta,
        )

    def __str__(self) -> str:
        return f"{self.service}: {self.details}"


class RecordCommitError(IntakeError):
    """A single record failed to commit. Never leaves the Committer."""

    def __init__(self, message: str):
        super().__init__(code="commit.record_failed", message=message, status_code=500)
