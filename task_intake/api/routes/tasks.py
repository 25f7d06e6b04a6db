"""
Task intake endpoint.

Accepts free text, runs the extraction pipeline and reports one result per
task that reached the commit stage.
"""

import structlog
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from task_intake.api.auth import require_api_key
from task_intake.errors import IntakeError
from task_intake.llm.service import CompletionClient, get_completion_client
from task_intake.pipeline.commit import CommitResult
from task_intake.pipeline.runner import run_pipeline
from task_intake.vikunja.client import VikunjaClient, get_vikunja_client

router = APIRouter()
logger = structlog.get_logger()


class AddTaskRequest(BaseModel):
    """Request body for task intake."""

    freetext: str | None = Field(default=None, description="Free-form text describing one or more tasks")


class TaskResultResponse(BaseModel):
    title: str
    project_id: int
    task_id: int | None = None
    labels_added: int = 0
    error: str | None = None
    state: str

    @classmethod
    def from_result(cls, result: CommitResult) -> "TaskResultResponse":
        return cls(**result.to_dict())


class AddTaskResponse(BaseModel):
    """Response body for task intake."""

    message: str
    succeeded: int
    failed: int
    tasks: list[TaskResultResponse] = Field(default_factory=list)


@router.post(
    "/add-task",
    response_model=AddTaskResponse,
    dependencies=[Depends(require_api_key)],
)
async def add_task(
    request: AddTaskRequest,
    store: VikunjaClient = Depends(get_vikunja_client),
    completion: CompletionClient = Depends(get_completion_client),
) -> AddTaskResponse:
    """
    Extract tasks from free text and create them in Vikunja.

    Individual task failures are reported per item; the request only fails as a
    whole when nothing could be extracted or an upstream call failed before
    the first task was created.
    """
    if request.freetext is None or not request.freetext.strip():
        raise IntakeError(
            code="request.freetext_required",
            message="Freetext is required",
            status_code=400,
        )

    logger.info("Processing add-task request", freetext_length=len(request.freetext))

    outcome = await run_pipeline(request.freetext, store=store, completion=completion)

    logger.info(
        "Completed add-task request",
        succeeded=outcome.summary.succeeded,
        failed=outcome.summary.failed,
    )

    return AddTaskResponse(
        message=f"Created {outcome.summary.succeeded} task(s)",
        succeeded=outcome.summary.succeeded,
        failed=outcome.summary.failed,
        tasks=[TaskResultResponse.from_result(r) for r in outcome.results],
    )
