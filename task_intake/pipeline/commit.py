"""
Committer

Persists reconciled records one at a time. Each record is created first, then
its labels are attached with a single bulk call. Any failure is captured in
that record's CommitResult and the loop moves on; a created task is never
rolled back when the label call fails.

Per-record states:
    pending -> created                      (no labels to attach)
    pending -> created -> labels_attached
    pending -> created -> label_failure     (task exists, error recorded)
    pending -> create_failure               (nothing persisted)
"""

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Sequence

import structlog

from task_intake import metrics
from task_intake.errors import RecordCommitError
from task_intake.vikunja.client import VikunjaClient

from .reconcile import PersistenceRecord

logger = structlog.get_logger()


class CommitState(str, Enum):
    PENDING = "pending"
    CREATED = "created"
    LABELS_ATTACHED = "labels_attached"
    LABEL_FAILURE = "label_failure"
    CREATE_FAILURE = "create_failure"


@dataclass
class CommitResult:
    """Outcome of one record. `task_id` and `error` are mutually exclusive."""

    title: str
    project_id: int
    task_id: int | None = None
    labels_added: int = 0
    error: str | None = None
    state: CommitState = CommitState.PENDING

    @property
    def succeeded(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["state"] = self.state.value
        return payload


@dataclass(frozen=True)
class CommitSummary:
    succeeded: int
    total: int

    @property
    def failed(self) -> int:
        return self.total - self.succeeded

    @classmethod
    def from_results(cls, results: Sequence[CommitResult]) -> "CommitSummary":
        return cls(succeeded=sum(1 for r in results if r.succeeded), total=len(results))


async def _commit_record(record: PersistenceRecord, store: VikunjaClient) -> CommitResult:
    result = CommitResult(title=record.title, project_id=record.project_id)
    created_id: int | None = None

    try:
        created = await store.create_task(record.project_id, record.to_task())
        if created.id is None:
            raise RecordCommitError("Task store did not return an id for the created task")
        created_id = created.id
        result.state = CommitState.CREATED
        logger.info(
            "Created task",
            task_id=created_id,
            title=record.title,
            project_id=record.project_id,
        )

        if record.label_ids:
            await store.bulk_add_labels(created_id, list(record.label_ids))
            result.labels_added = len(record.label_ids)
            result.state = CommitState.LABELS_ATTACHED
            logger.info("Added labels to task", task_id=created_id, label_count=len(record.label_ids))

        result.task_id = created_id

    except Exception as e:
        message = str(e) or e.__class__.__name__
        if created_id is not None:
            result.state = CommitState.LABEL_FAILURE
            result.error = f"Task {created_id} was created but adding labels failed: {message}"
        else:
            result.state = CommitState.CREATE_FAILURE
            result.error = message
        logger.error(
            "Failed to create/label task",
            title=record.title,
            state=result.state.value,
            error=message,
        )

    metrics.commit_total.labels(state=result.state.value).inc()
    return result


async def commit(records: Sequence[PersistenceRecord], store: VikunjaClient) -> list[CommitResult]:
    """Commit records strictly in order; always returns one result per record."""
    results: list[CommitResult] = []
    for record in records:
        results.append(await _commit_record(record, store))

    summary = CommitSummary.from_results(results)
    logger.info(
        "Load completed",
        succeeded=summary.succeeded,
        total=summary.total,
    )
    return results
