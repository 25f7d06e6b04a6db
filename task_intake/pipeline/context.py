"""
Context Builder

Fetches the reference snapshot (projects, labels, a sample of existing tasks)
from the task store and renders the extraction prompt around it.

Projects and labels are required; the existing-tasks sample only improves the
prompt, so its failure degrades to an empty sample instead of aborting the run.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import date, datetime, timezone

import structlog

from task_intake.config import get_settings
from task_intake.llm.prompts import get_task_extraction_prompt
from task_intake.vikunja.client import VikunjaClient
from task_intake.vikunja.models import Label, Project, Task

logger = structlog.get_logger()


@dataclass
class ExtractionContext:
    """Prompt messages plus the reference snapshot they were built from."""

    messages: list[dict[str, str]]
    projects: list[Project] = field(default_factory=list)
    labels: list[Label] = field(default_factory=list)
    existing_tasks: list[Task] = field(default_factory=list)


async def build_context(
    freetext: str,
    store: VikunjaClient,
    *,
    today: date | None = None,
) -> ExtractionContext:
    """Fetch the reference snapshot concurrently and build the LLM messages."""
    settings = get_settings()
    today = today or datetime.now(timezone.utc).date()

    logger.info("Preparing extraction prompt", freetext_length=len(freetext))

    projects, labels, existing_tasks = await asyncio.gather(
        store.list_projects(),
        store.list_labels(),
        store.list_tasks(page=1, per_page=settings.context_task_page_size),
        return_exceptions=True,
    )

    # Projects and labels are essential
    for result in (projects, labels):
        if isinstance(result, BaseException):
            raise result

    if isinstance(existing_tasks, BaseException):
        if not isinstance(existing_tasks, Exception):
            raise existing_tasks
        logger.warning(
            "Failed to fetch existing tasks, continuing without them",
            error=str(existing_tasks),
        )
        existing_tasks = []

    logger.info(
        "Fetched reference snapshot",
        project_count=len(projects),
        label_count=len(labels),
        task_count=len(existing_tasks),
    )

    messages = get_task_extraction_prompt(
        freetext,
        projects,
        labels,
        existing_tasks,
        today=today,
        sample_size=settings.context_task_sample_size,
    )
    return ExtractionContext(
        messages=messages,
        projects=list(projects),
        labels=list(labels),
        existing_tasks=list(existing_tasks),
    )
