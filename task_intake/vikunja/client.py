"""
Vikunja HTTP client.

Thin async wrapper over the Vikunja v1 REST API:
- bearer-token auth on every call
- non-2xx answers and transport failures surface as ProviderTransportError
- no retries; a failed call is reported once to the caller
"""

from __future__ import annotations

from typing import Any, TypeVar

import httpx
import structlog
from pydantic import TypeAdapter

from task_intake.config import Settings, get_settings
from task_intake.errors import ProviderTransportError

from .models import Label, LabelBulkRequest, Project, Task

logger = structlog.get_logger()

T = TypeVar("T")

SERVICE_NAME = "vikunja"

_projects_adapter = TypeAdapter(list[Project] | None)
_labels_adapter = TypeAdapter(list[Label] | None)
_tasks_adapter = TypeAdapter(list[Task] | None)
_task_adapter = TypeAdapter(Task)


class VikunjaClient:
    """Async client for the task store."""

    def __init__(
        self,
        base_url: str,
        api_token: str | None = None,
        *,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        headers = {"Accept": "application/json"}
        if api_token:
            headers["Authorization"] = f"Bearer {api_token}"
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/") + "/api/v1",
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "VikunjaClient":
        settings = settings or get_settings()
        return cls(
            settings.vikunja_base_url,
            settings.vikunja_api_token,
            timeout=settings.vikunja_timeout_seconds,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "VikunjaClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def list_projects(self) -> list[Project]:
        response = await self._request("GET", "/projects")
        return self._decode(response, _projects_adapter) or []

    async def list_labels(self) -> list[Label]:
        response = await self._request("GET", "/labels")
        return self._decode(response, _labels_adapter) or []

    async def list_tasks(self, *, page: int = 1, per_page: int = 50) -> list[Task]:
        response = await self._request(
            "GET", "/tasks", params={"page": page, "per_page": per_page}
        )
        return self._decode(response, _tasks_adapter) or []

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def create_task(self, project_id: int, task: Task) -> Task:
        """Create a task under `project_id` and return it with its new id."""
        payload = task.model_dump(exclude_none=True, exclude={"id", "labels"})
        payload["project_id"] = project_id
        response = await self._request("PUT", f"/projects/{project_id}/tasks", json=payload)
        return self._decode(response, _task_adapter)

    async def bulk_add_labels(self, task_id: int, label_ids: list[int]) -> None:
        """Attach all `label_ids` to `task_id` in a single request."""
        body = LabelBulkRequest.from_ids(label_ids)
        await self._request("POST", f"/tasks/{task_id}/labels/bulk", json=body.model_dump())

    # -------------------------------------------------------------------------
    # Plumbing
    # -------------------------------------------------------------------------

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error("Vikunja request failed", method=method, path=path, error=str(e))
            raise ProviderTransportError(service=SERVICE_NAME, details=str(e)) from e

        if response.status_code >= 400:
            logger.error(
                "Vikunja returned an error status",
                method=method,
                path=path,
                status_code=response.status_code,
                body=response.text[:500],
            )
            raise ProviderTransportError(
                service=SERVICE_NAME,
                details=f"{method} {path} returned {response.status_code}: {response.text[:500]}",
                status_code=response.status_code,
            )
        return response

    @staticmethod
    def _decode(response: httpx.Response, adapter: TypeAdapter[T]) -> T:
        try:
            return adapter.validate_json(response.content)
        except ValueError as e:
            raise ProviderTransportError(
                service=SERVICE_NAME,
                details=f"Unexpected response body from {response.request.url.path}: {e}",
                status_code=response.status_code,
            ) from e


# =============================================================================
# Singleton
# =============================================================================

_vikunja_client: VikunjaClient | None = None


def get_vikunja_client() -> VikunjaClient:
    """Get the process-wide task store client."""
    global _vikunja_client
    if _vikunja_client is None:
        _vikunja_client = VikunjaClient.from_settings()
    return _vikunja_client


async def close_vikunja_client() -> None:
    global _vikunja_client
    if _vikunja_client is not None:
        await _vikunja_client.aclose()
        _vikunja_client = None
