"""
Response Normalizer

Recovers an ExtractionBatch from raw completion text. Models often ignore the
"JSON only" instruction, so a small ordered list of recovery strategies is
tried, first success wins:

1. direct   - the trimmed text is the JSON object
2. fenced   - the object sits inside a ```json fenced block
3. brace    - the object is the span between the first "{" and the last "}"

A strategy succeeds only when the text parses against the schema AND the task
list is non-empty. The accepted batch is then validated: candidates without a
usable title are discarded, and if none survive the response is rejected even
though the parse itself succeeded.
"""

import json
import re
from typing import Callable

import structlog
from pydantic import ValidationError

from task_intake import metrics
from task_intake.errors import UnparsableResponse
from task_intake.llm.schemas import ExtractionBatch

logger = structlog.get_logger()

_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?\s*```", re.DOTALL)

RecoveryStrategy = Callable[[str], ExtractionBatch | None]


def _parse_batch(text: str, strategy: str) -> ExtractionBatch | None:
    try:
        batch = ExtractionBatch.model_validate(json.loads(text))
    except (json.JSONDecodeError, RecursionError, ValidationError) as e:
        logger.warning("Recovery strategy failed", strategy=strategy, error=str(e)[:200])
        return None

    if not batch.tasks:
        logger.warning("Recovery strategy produced no tasks", strategy=strategy)
        return None
    return batch


def parse_direct(raw_text: str) -> ExtractionBatch | None:
    return _parse_batch(raw_text.strip(), "direct")


def parse_fenced(raw_text: str) -> ExtractionBatch | None:
    match = _FENCE_RE.search(raw_text)
    if not match:
        return None
    return _parse_batch(match.group(1).strip(), "fenced")


def parse_brace_bounded(raw_text: str) -> ExtractionBatch | None:
    start = raw_text.find("{")
    end = raw_text.rfind("}")
    if start < 0 or end <= start:
        return None
    return _parse_batch(raw_text[start : end + 1], "brace")


RECOVERY_STRATEGIES: tuple[tuple[str, RecoveryStrategy], ...] = (
    ("direct", parse_direct),
    ("fenced", parse_fenced),
    ("brace", parse_brace_bounded),
)


def validate_batch(batch: ExtractionBatch, raw_text: str = "") -> ExtractionBatch:
    """Drop candidates whose title is missing or blank; reject an emptied batch."""
    kept = [candidate for candidate in batch.tasks if candidate.has_title]
    if not kept:
        raise UnparsableResponse("no candidate retained a valid title", raw_text=raw_text)

    dropped = len(batch.tasks) - len(kept)
    if dropped:
        logger.warning("Discarded candidates without a title", dropped=dropped)

    logger.info("Normalized completion", task_count=len(kept))
    return ExtractionBatch(tasks=kept)


def normalize(raw_text: str) -> ExtractionBatch:
    """
    Turn raw completion text into a validated ExtractionBatch.

    Raises:
        UnparsableResponse: No strategy produced a non-empty batch, or the
            accepted batch had no candidate with a valid title.
    """
    for name, strategy in RECOVERY_STRATEGIES:
        batch = strategy(raw_text)
        if batch is None:
            continue
        try:
            validated = validate_batch(batch, raw_text)
        except UnparsableResponse:
            metrics.normalize_total.labels(strategy="failed").inc()
            raise
        metrics.normalize_total.labels(strategy=name).inc()
        return validated

    metrics.normalize_total.labels(strategy="failed").inc()
    logger.error("Could not parse completion into tasks", raw_length=len(raw_text))
    raise UnparsableResponse("Could not parse LLM response into tasks", raw_text=raw_text)
