from __future__ import annotations

import logging
from typing import Any, Dict, Mapping

from askdata.catalog import OperationDefinition
from askdata.llm.base import LanguageModel
from askdata.monitoring.metrics import record_stage_failure
from askdata.monitoring.trace import trace_event
from askdata.prompts.extract import EXTRACT_PROMPT
from askdata.utils.aio import bounded
from askdata.utils.parsing import parse_json_object

logger = logging.getLogger(__name__)


def describe_parameters(definition: OperationDefinition) -> str:
    return "\n".join(
        f"- {p.name} ({p.type}): {p.description}{' [REQUIRED]' if p.required else ' [OPTIONAL]'}"
        for p in definition.parameters
    )


def apply_defaults(definition: OperationDefinition, extracted: Mapping[str, Any]) -> Dict[str, Any]:
    """Keep declared, non-null values and back-fill optional ones from their defaults.

    Required parameters are never back-filled; their absence is left for the
    executor to reject.
    """

    declared = {p.name for p in definition.parameters}
    params: Dict[str, Any] = {k: v for k, v in extracted.items() if k in declared and v is not None}
    for p in definition.parameters:
        if p.name not in params and not p.required and p.has_default:
            params[p.name] = p.default_value
    return params


async def extract_parameters(
    query: str,
    definition: OperationDefinition,
    *,
    llm: LanguageModel,
    timeout: float | None = None,
) -> Dict[str, Any]:
    """Ask the model for the operation's arguments found in ``query``.

    Operations without parameters return ``{}`` without a model call. Any
    failure to obtain or parse a reply also yields ``{}``.
    """

    if not definition.parameters:
        return {}

    prompt = EXTRACT_PROMPT.format(
        function_name=definition.name,
        query=query,
        parameters=describe_parameters(definition),
    )
    try:
        reply = await bounded(llm.generate(prompt, kind="extract"), timeout, what="parameter extraction")
    except Exception as exc:  # noqa: BLE001
        logger.warning("Parameter extraction failed for %s: %s", definition.name, exc)
        record_stage_failure("extract")
        return {}

    parsed = parse_json_object(reply)
    if not parsed.ok or parsed.value is None:
        logger.warning("Failed to parse extracted parameters for %s: %s", definition.name, parsed.error)
        record_stage_failure("extract_parse")
        return {}

    params = apply_defaults(definition, parsed.value)
    trace_event("stage03_params", "extracted", {"query": query, "raw": reply, "parameters": params},
                meta={"function": definition.name})
    return params
