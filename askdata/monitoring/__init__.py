"""Monitoring utilities: Prometheus instrumentation and custom metrics."""

from prometheus_fastapi_instrumentator import Instrumentator  # type: ignore

from askdata.monitoring.metrics import (  # noqa: F401 - re-exported for convenience
    LLM_CALLS,
    MATCH_CONFIDENCE,
    QUERY_LATENCY_SECONDS,
    RETRIEVAL_CALLS,
    ROUTE_OUTCOMES,
    STAGE_FAILURES,
)


def attach_instrumentator(app):  # noqa: D401
    """Attach Prometheus Instrumentator to FastAPI app and expose /metrics."""

    instrumentator = Instrumentator()
    instrumentator.instrument(app)
    instrumentator.expose(app)
    return instrumentator


__all__ = [
    "attach_instrumentator",
    "LLM_CALLS",
    "MATCH_CONFIDENCE",
    "QUERY_LATENCY_SECONDS",
    "RETRIEVAL_CALLS",
    "ROUTE_OUTCOMES",
    "STAGE_FAILURES",
]
