"""Prometheus metrics for the routing pipeline."""

from prometheus_client import Counter, Histogram

# Counter: language model calls labeled by purpose
LLM_CALLS = Counter(
    "askdata_llm_calls_total",
    "Language model calls issued by the router.",
    labelnames=("kind",),
)

# Counter: embedding + vector index calls
RETRIEVAL_CALLS = Counter(
    "askdata_retrieval_calls_total",
    "Embedding and vector index calls.",
    labelnames=("kind",),
)

# Counter: stage failures that were routed to the next fallback tier
STAGE_FAILURES = Counter(
    "askdata_stage_failures_total",
    "Upstream failures caught at a stage boundary.",
    labelnames=("stage",),
)

# Counter: terminal routing outcomes
ROUTE_OUTCOMES = Counter(
    "askdata_route_outcomes_total",
    "Routing outcomes per query.",
    labelnames=("outcome",),
)

QUERY_LATENCY_SECONDS = Histogram(
    "askdata_query_latency_seconds",
    "End-to-end latency of process_query (seconds).",
    buckets=(0.2, 0.5, 1, 2, 3, 5, 10, 20, 40),
)

MATCH_CONFIDENCE = Histogram(
    "askdata_match_confidence",
    "Confidence attached to accepted function matches.",
    buckets=(0.5, 0.6, 0.7, 0.75, 0.8, 0.85, 0.9, 0.95, 1.0),
)


def record_stage_failure(stage: str) -> None:
    STAGE_FAILURES.labels(stage=stage).inc()


def record_outcome(outcome: str) -> None:
    ROUTE_OUTCOMES.labels(outcome=outcome).inc()
