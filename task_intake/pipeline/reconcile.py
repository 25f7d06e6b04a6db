"""
Candidate Reconciler

Maps normalized candidates onto the task store's live identifier space.

Rules, applied per candidate in input order:
- unknown or missing project_id -> the first reference project
- no reference projects at all  -> candidate dropped
- label_ids not in the reference labels are removed individually
- title and description are trimmed; due_date and priority pass through
"""

from dataclasses import dataclass
from typing import Sequence

import structlog

from task_intake import metrics
from task_intake.llm.schemas import ExtractionBatch, ExtractionCandidate
from task_intake.vikunja.models import Label, Project, Task

logger = structlog.get_logger()


@dataclass(frozen=True)
class PersistenceRecord:
    """A candidate that references only known project and label ids."""

    title: str
    project_id: int
    description: str | None = None
    due_date: str | None = None
    priority: int | None = None
    label_ids: tuple[int, ...] = ()

    def to_task(self) -> Task:
        return Task(
            title=self.title,
            description=self.description,
            project_id=self.project_id,
            due_date=self.due_date,
            priority=self.priority,
        )


def _filter_label_ids(candidate: ExtractionCandidate, valid_label_ids: set[int]) -> tuple[int, ...]:
    if not candidate.label_ids:
        return ()

    kept: list[int] = []
    for label_id in candidate.label_ids:
        if label_id in valid_label_ids and label_id not in kept:
            kept.append(label_id)

    invalid = [label_id for label_id in candidate.label_ids if label_id not in valid_label_ids]
    if invalid:
        logger.warning("Dropped invalid label_ids", title=candidate.title, label_ids=invalid)
    return tuple(kept)


def reconcile(
    batch: ExtractionBatch,
    projects: Sequence[Project],
    labels: Sequence[Label],
) -> list[PersistenceRecord]:
    """Resolve every candidate against the reference snapshot. Never raises."""
    valid_project_ids = {p.id for p in projects}
    valid_label_ids = {l.id for l in labels}
    default_project_id = projects[0].id if projects else None

    records: list[PersistenceRecord] = []

    for candidate in batch.tasks:
        if not candidate.has_title:
            metrics.reconcile_dropped_total.labels(reason="blank_title").inc()
            logger.warning("Skipping candidate without a title")
            continue

        project_id = candidate.project_id
        if project_id is not None and project_id not in valid_project_ids:
            logger.warning(
                "LLM returned invalid project_id, falling back to default",
                project_id=project_id,
                default_project_id=default_project_id,
            )
            project_id = default_project_id
        elif project_id is None:
            project_id = default_project_id

        if project_id is None:
            metrics.reconcile_dropped_total.labels(reason="no_project").inc()
            logger.error("No valid project found for task, skipping", title=candidate.title)
            continue

        records.append(
            PersistenceRecord(
                title=candidate.title.strip(),
                description=candidate.description.strip() if candidate.description is not None else None,
                project_id=project_id,
                due_date=candidate.due_date,
                priority=int(candidate.priority) if candidate.priority is not None else None,
                label_ids=_filter_label_ids(candidate, valid_label_ids),
            )
        )

    logger.info("Reconciled candidates", candidate_count=len(batch.tasks), record_count=len(records))
    return records
