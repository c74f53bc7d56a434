from __future__ import annotations

import logging
from typing import List, Optional

from askdata.catalog import OperationCatalog, OperationDefinition
from askdata.errors import MissingParametersError, UnknownOperationError
from askdata.llm.base import LanguageModel
from askdata.models.match import FunctionMatch, RouterResult
from askdata.monitoring.metrics import MATCH_CONFIDENCE, record_outcome
from askdata.monitoring.trace import trace_event
from askdata.pipeline.stage02_match import FunctionMatcher
from askdata.pipeline.stage04_execute import execute
from askdata.pipeline.stage05_format import generate_fallback_response
from askdata.utils.aio import bounded

logger = logging.getLogger(__name__)


class PromptRouter:
    """Match a query to a catalog operation and run it.

    Every failure is folded into the returned RouterResult; nothing raises.
    """

    def __init__(
        self,
        catalog: OperationCatalog,
        matcher: FunctionMatcher,
        *,
        llm: LanguageModel,
        timeout: float | None = None,
    ) -> None:
        self.catalog = catalog
        self.matcher = matcher
        self.llm = llm
        self.timeout = timeout

    async def route_and_execute(self, query: str) -> RouterResult:
        logger.info("Routing query: %r", query)
        match: Optional[FunctionMatch] = None
        try:
            match = await self.matcher.find_best_match(query)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Matcher failed unexpectedly")
            return await self._failure(query, str(exc), "handler_error")

        if match is None:
            record_outcome("no_match")
            return RouterResult(
                success=False,
                error="No matching function found",
                error_kind="no_match",
                fallback_response=await self._apology(query),
            )

        logger.info("Found match: %s (confidence: %.3f)", match.function_name, match.confidence)
        MATCH_CONFIDENCE.observe(match.confidence)

        try:
            result = await bounded(execute(match, self.catalog), self.timeout, what=f"operation {match.function_name}")
        except MissingParametersError as exc:
            record_outcome("missing_parameters")
            logger.info("Cannot run %s without %s", exc.operation, exc.missing)
            return RouterResult(
                success=False,
                match=match,
                error=str(exc),
                error_kind="missing_parameters",
                missing_parameters=exc.missing,
            )
        except UnknownOperationError as exc:
            logger.error("Catalog/index drift: matched operation %r is not in the catalog", exc.name)
            return await self._failure(query, str(exc), "unknown_operation", match=match)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Operation %s failed: %s", match.function_name, exc)
            return await self._failure(query, str(exc), "handler_error", match=match)

        record_outcome("matched" if match.source == "vector" else "fallback_matched")
        trace_event("router", "executed", {"query": query, "match": match})
        return RouterResult(success=True, match=match, result=result)

    def available_functions(self, category: str | None = None) -> List[OperationDefinition]:
        return self.catalog.available(category)

    async def _apology(self, query: str) -> str:
        return await generate_fallback_response(query, self.catalog.categories(), llm=self.llm, timeout=self.timeout)

    async def _failure(
        self,
        query: str,
        error: str,
        kind: str,
        *,
        match: FunctionMatch | None = None,
    ) -> RouterResult:
        record_outcome(kind)
        return RouterResult(
            success=False,
            match=match,
            error=error,
            error_kind=kind,  # type: ignore[arg-type]
            fallback_response=await self._apology(query),
        )
