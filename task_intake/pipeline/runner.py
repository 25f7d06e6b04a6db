"""
Intake pipeline runner.

Chains the stages for one request:
context -> completion -> normalize -> reconcile -> commit
"""

from dataclasses import dataclass
from datetime import date

import structlog

from task_intake.errors import NoUsableTasksError
from task_intake.llm.service import CompletionClient
from task_intake.vikunja.client import VikunjaClient

from .commit import CommitResult, CommitSummary, commit
from .context import build_context
from .normalize import normalize
from .reconcile import reconcile

logger = structlog.get_logger()


@dataclass
class PipelineOutcome:
    results: list[CommitResult]
    summary: CommitSummary


async def run_pipeline(
    freetext: str,
    *,
    store: VikunjaClient,
    completion: CompletionClient,
    today: date | None = None,
) -> PipelineOutcome:
    """
    Run the full intake for one piece of free text.

    Raises:
        UnparsableResponse: The completion could not be turned into tasks
        NoUsableTasksError: Every candidate was dropped during reconciliation
        ProviderTransportError: The task store or completion provider failed
            before any record was committed
    """
    context = await build_context(freetext, store, today=today)
    raw_text = await completion.complete(context.messages)
    batch = normalize(raw_text)

    records = reconcile(batch, context.projects, context.labels)
    if not records:
        raise NoUsableTasksError()

    results = await commit(records, store)
    summary = CommitSummary.from_results(results)

    logger.info("Completed intake", succeeded=summary.succeeded, failed=summary.failed)
    return PipelineOutcome(results=results, summary=summary)
