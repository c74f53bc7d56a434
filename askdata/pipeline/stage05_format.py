from __future__ import annotations

import json
import logging
from typing import Any, Sequence

from askdata.llm.base import LanguageModel
from askdata.models.match import RouterResult
from askdata.models.results import (
    MissingResult,
    OperationResult,
    RecordListResult,
    RecordResult,
    ScalarResult,
    classify_result,
)
from askdata.monitoring.metrics import record_stage_failure
from askdata.prompts.respond import (
    APOLOGY_FALLBACK,
    APOLOGY_PROMPT,
    EMPTY_RESULT_REPLY,
    FORMAT_PROMPT,
    MISSING_RESULT_REPLY,
)
from askdata.utils.aio import bounded

logger = logging.getLogger(__name__)


def _dumps(value: Any, *, indent: int | None = 2) -> str:
    return json.dumps(value, indent=indent, ensure_ascii=False, default=str)


def build_preview(result: OperationResult) -> str:
    """Compact rendering of a result for the formatting prompt."""

    if isinstance(result, RecordListResult):
        return f"Found {len(result.items)} results. Sample: {_dumps(result.items[:2])}"
    if isinstance(result, RecordResult):
        return _dumps(result.record)
    if isinstance(result, ScalarResult):
        return str(result.value)
    return "null"


def fallback_format(function_name: str | None, result: OperationResult) -> str:
    """Deterministic sentence used when the model cannot format the answer."""

    if isinstance(result, RecordListResult):
        return f"Found {len(result.items)} results for your query about {function_name or 'the requested function'}."
    if isinstance(result, RecordResult):
        return f"Here's the result for your query: {_dumps(result.record, indent=None)}"
    if isinstance(result, ScalarResult):
        return f"Here's the result for your query: {_dumps(result.value, indent=None)}"
    return MISSING_RESULT_REPLY


async def format_response(
    query: str,
    router_result: RouterResult,
    *,
    llm: LanguageModel,
    timeout: float | None = None,
) -> str:
    """Turn a successful routing result into prose."""

    match = router_result.match
    result = classify_result(router_result.result)
    if match is None or isinstance(result, MissingResult):
        return MISSING_RESULT_REPLY
    if isinstance(result, RecordListResult) and not result.items:
        return EMPTY_RESULT_REPLY.format(function_name=match.function_name)

    prompt = FORMAT_PROMPT.format(
        query=query,
        function_name=match.function_name,
        parameters=_dumps(match.parameters, indent=None),
        preview=build_preview(result),
    )
    try:
        reply = await bounded(llm.generate(prompt, kind="format", temperature=0.3), timeout, what="response formatting")
    except Exception as exc:  # noqa: BLE001
        logger.warning("Response formatting error: %s", exc)
        record_stage_failure("format")
        return fallback_format(match.function_name, result)
    return reply or fallback_format(match.function_name, result)


async def generate_fallback_response(
    query: str,
    categories: Sequence[str],
    *,
    llm: LanguageModel,
    timeout: float | None = None,
) -> str:
    """Apology for queries no operation could answer. Never raises."""

    joined = ", ".join(categories)
    try:
        reply = await bounded(
            llm.generate(APOLOGY_PROMPT.format(query=query, categories=joined), kind="apology", temperature=0.5),
            timeout,
            what="fallback response",
        )
    except Exception as exc:  # noqa: BLE001
        logger.warning("Fallback response generation failed: %s", exc)
        record_stage_failure("apology")
        reply = ""
    return reply or APOLOGY_FALLBACK.format(query=query, categories=joined or "our data")
