from __future__ import annotations

import logging
import time
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from askdata.catalog import OperationCatalog
from askdata.config import Settings, get_settings
from askdata.llm.base import Embedder, LanguageModel
from askdata.models.match import AIResponse, ChatTurn, RouterResult
from askdata.monitoring.metrics import QUERY_LATENCY_SECONDS
from askdata.pipeline.router import PromptRouter
from askdata.pipeline.stage01_intent import classify_intent, respond_conversationally
from askdata.pipeline.stage02_match import FunctionMatcher
from askdata.pipeline.stage05_format import format_response
from askdata.prompts.respond import GENERIC_ERROR_REPLY, MISSING_PARAMETERS_REPLY
from askdata.stores.base import VectorIndex

logger = logging.getLogger(__name__)

HistoryItem = Union[ChatTurn, Mapping[str, Any]]


def _as_turns(history: Optional[Iterable[HistoryItem]]) -> List[ChatTurn]:
    turns: List[ChatTurn] = []
    for item in history or ():
        if isinstance(item, ChatTurn):
            turns.append(item)
        else:
            turns.append(ChatTurn(sender=str(item.get("sender", "")), content=str(item.get("content", ""))))
    return turns


def _humanize(names: List[str]) -> str:
    words = []
    for name in names:
        # camelCase -> "camel case"
        spaced = "".join(" " + c.lower() if c.isupper() else c for c in name).strip()
        words.append(spaced)
    if len(words) <= 1:
        return "".join(words)
    return ", ".join(words[:-1]) + " and " + words[-1]


class AIService:
    """Answer free-form questions with catalog data or small talk.

    The service owns no state across queries besides its collaborators, so a
    single instance may serve concurrent requests.
    """

    def __init__(
        self,
        catalog: OperationCatalog,
        *,
        llm: LanguageModel,
        embedder: Embedder,
        index: VectorIndex,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.catalog = catalog
        self.llm = llm
        timeout = self.settings.call_timeout_s
        self.matcher = FunctionMatcher(
            catalog,
            embedder=embedder,
            index=index,
            llm=llm,
            certainty_floor=self.settings.match_certainty_floor,
            top_k=self.settings.match_top_k,
            fallback_threshold=self.settings.fallback_confidence_threshold,
            timeout=timeout,
        )
        self.router = PromptRouter(catalog, self.matcher, llm=llm, timeout=timeout)

    @classmethod
    def from_settings(cls, catalog: OperationCatalog, settings: Settings | None = None) -> "AIService":
        """Wire the OpenAI and Qdrant backed collaborators from configuration."""

        from askdata.llm.openai_client import OpenAIClient, OpenAIEmbedder
        from askdata.stores.qdrant_store import QdrantStore

        settings = settings or get_settings()
        return cls(
            catalog,
            llm=OpenAIClient(settings.openai_model),
            embedder=OpenAIEmbedder(settings.embedding_model, dimensions=settings.embedding_dim),
            index=QdrantStore(settings.qdrant_url, settings.pattern_collection, api_key=settings.qdrant_api_key),
            settings=settings,
        )

    async def process_query(self, query: str, history: Optional[Iterable[HistoryItem]] = None) -> AIResponse:
        """Main entry point. Never raises."""

        start = time.perf_counter()
        try:
            turns = _as_turns(history)
            intent = await classify_intent(
                query,
                turns,
                llm=self.llm,
                history_window=self.settings.history_window,
                timeout=self.settings.call_timeout_s,
            )
            if intent == "conversational":
                return await self._handle_conversational(query, turns)
            return await self._handle_data(query)
        except Exception:  # noqa: BLE001
            logger.exception("AI service error while processing %r", query)
            return AIResponse(type="error", content=GENERIC_ERROR_REPLY)
        finally:
            QUERY_LATENCY_SECONDS.observe(time.perf_counter() - start)

    async def _handle_conversational(self, query: str, turns: List[ChatTurn]) -> AIResponse:
        content = await respond_conversationally(query, turns, llm=self.llm, timeout=self.settings.call_timeout_s)
        return AIResponse(type="conversational", content=content)

    async def _handle_data(self, query: str) -> AIResponse:
        routed: RouterResult = await self.router.route_and_execute(query)

        if not routed.success:
            if routed.error_kind == "missing_parameters" and routed.match is not None:
                return AIResponse(
                    type="error",
                    content=MISSING_PARAMETERS_REPLY.format(missing=_humanize(routed.missing_parameters)),
                    function_used=routed.match.function_name,
                    confidence=routed.match.confidence,
                    reasoning=routed.match.reasoning,
                    parameters=routed.match.parameters,
                )
            return AIResponse(
                type="error",
                content=routed.fallback_response or routed.error or "I couldn't process your data request.",
            )

        content = await format_response(query, routed, llm=self.llm, timeout=self.settings.call_timeout_s)
        match = routed.match
        return AIResponse(
            type="data",
            content=content,
            function_used=match.function_name if match else None,
            data=routed.result,
            confidence=match.confidence if match else None,
            reasoning=match.reasoning if match else None,
            parameters=match.parameters if match else None,
        )

    def get_suggestions(self, category: str | None = None) -> List[str]:
        """Up to ``suggestion_limit`` example phrasings: two from each of the first five operations."""

        suggestions: List[str] = []
        for definition in self.router.available_functions(category)[:5]:
            suggestions.extend(definition.examples[:2])
        return suggestions[: self.settings.suggestion_limit]

    async def test_query(self, query: str) -> Dict[str, Any]:
        response = await self.process_query(query)
        return {"query": query, "response": response}
