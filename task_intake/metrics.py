"""Prometheus counters for pipeline outcomes."""

from prometheus_client import Counter

normalize_total = Counter(
    "task_intake_normalize_total",
    "LLM completions normalized, by the recovery strategy that produced the batch",
    ["strategy"],
)

reconcile_dropped_total = Counter(
    "task_intake_reconcile_dropped_total",
    "Candidates dropped during reconciliation, by reason",
    ["reason"],
)

commit_total = Counter(
    "task_intake_commit_total",
    "Committed records by terminal state",
    ["state"],
)
