from __future__ import annotations

import json
import logging
from typing import List, Sequence

from askdata.llm.base import LanguageModel
from askdata.models.match import ChatTurn
from askdata.monitoring.metrics import record_stage_failure
from askdata.monitoring.trace import trace_event
from askdata.prompts.conversation import CAPABILITIES, CONVERSATIONAL_PROMPT, DEFAULT_GREETING
from askdata.prompts.intent import INTENT_PROMPT
from askdata.utils.aio import bounded
from askdata.utils.parsing import Intent, parse_intent

logger = logging.getLogger(__name__)


def _recent_history_json(history: Sequence[ChatTurn], window: int) -> str:
    recent: List[ChatTurn] = list(history)[-window:] if window > 0 else []
    return json.dumps([t.model_dump() for t in recent], ensure_ascii=False, indent=2)


async def classify_intent(
    query: str,
    history: Sequence[ChatTurn] = (),
    *,
    llm: LanguageModel,
    history_window: int = 3,
    timeout: float | None = None,
) -> Intent:
    """Decide whether the query needs data ("data") or is small talk ("conversational").

    Anything other than a clear conversational verdict, including upstream
    failures, resolves to "data".
    """

    prompt = INTENT_PROMPT.format(history=_recent_history_json(history, history_window), query=query)
    try:
        reply = await bounded(llm.generate(prompt, kind="intent"), timeout, what="intent classification")
    except Exception as exc:  # noqa: BLE001
        logger.warning("Intent classification failed, defaulting to data: %s", exc)
        record_stage_failure("intent")
        return "data"

    parsed = parse_intent(reply)
    if not parsed.ok:
        logger.debug("Unparseable intent reply (%s); defaulting to data", parsed.error)
    intent: Intent = parsed.unwrap_or("data")
    trace_event("stage01_intent", "classified", {"query": query, "reply": reply, "intent": intent})
    return intent


async def respond_conversationally(
    query: str,
    history: Sequence[ChatTurn] = (),
    *,
    llm: LanguageModel,
    timeout: float | None = None,
) -> str:
    """Small-talk reply; falls back to a fixed greeting when the model is unavailable."""

    prompt = CONVERSATIONAL_PROMPT.format(
        history="\n".join(f"{t.sender}: {t.content}" for t in history),
        query=query,
        capabilities="\n".join(f"- {c}" for c in CAPABILITIES),
    )
    try:
        reply = await bounded(
            llm.generate(prompt, kind="conversation", temperature=0.7), timeout, what="conversational reply"
        )
    except Exception as exc:  # noqa: BLE001
        logger.warning("Conversational reply failed: %s", exc)
        record_stage_failure("conversation")
        return DEFAULT_GREETING
    return reply or DEFAULT_GREETING
