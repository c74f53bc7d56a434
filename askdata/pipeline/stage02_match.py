from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Sequence

from pydantic import ValidationError

from askdata.catalog import OperationCatalog
from askdata.llm.base import Embedder, LanguageModel
from askdata.models.match import FunctionMatch
from askdata.models.patterns import Candidate, PhrasePattern, VectorHit
from askdata.monitoring.metrics import record_stage_failure
from askdata.monitoring.trace import trace_event
from askdata.pipeline.stage03_params import extract_parameters
from askdata.prompts.match import FALLBACK_PROMPT, RANK_PROMPT
from askdata.stores.base import VectorIndex
from askdata.utils.aio import bounded
from askdata.utils.parsing import parse_choice_index, parse_fallback_pick

logger = logging.getLogger(__name__)


def _best_by_certainty(candidates: Sequence[Candidate]) -> Candidate:
    # max() keeps the first of equal scores
    return max(candidates, key=lambda c: c.certainty)


def _to_candidates(hits: Sequence[VectorHit]) -> List[Candidate]:
    out: List[Candidate] = []
    for hit in hits:
        try:
            out.append(Candidate(pattern=PhrasePattern.model_validate(hit.payload), certainty=hit.score))
        except ValidationError as exc:
            logger.warning("Skipping malformed phrase pattern %s: %s", hit.id, exc)
    return out


class FunctionMatcher:
    """Find the catalog operation that best answers a free-text query.

    Vector search over stored phrase patterns narrows the space; the language
    model only breaks ties among the shortlist. When the shortlist is empty,
    or retrieval itself fails, a catalog-wide model search is tried instead.
    """

    def __init__(
        self,
        catalog: OperationCatalog,
        *,
        embedder: Embedder,
        index: VectorIndex,
        llm: LanguageModel,
        certainty_floor: float = 0.7,
        top_k: int = 5,
        fallback_threshold: float = 0.6,
        timeout: float | None = None,
    ) -> None:
        self.catalog = catalog
        self.embedder = embedder
        self.index = index
        self.llm = llm
        self.certainty_floor = certainty_floor
        self.top_k = top_k
        self.fallback_threshold = fallback_threshold
        self.timeout = timeout

    async def find_best_match(self, query: str) -> Optional[FunctionMatch]:
        try:
            candidates = await self.vector_candidates(query)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Vector search error, using model fallback: %s", exc)
            record_stage_failure("vector_search")
            return await self.fallback_search(query)

        if not candidates:
            logger.info("No vector matches found above certainty %.2f", self.certainty_floor)
            return await self.fallback_search(query)

        best = await self.rank_candidates(query, candidates)
        parameters = await self._extract(query, best.pattern.function_name)

        match = FunctionMatch(
            function_name=best.pattern.function_name,
            confidence=best.certainty,
            parameters=parameters,
            reasoning=f"Matched via vector search with {best.certainty * 100:.1f}% confidence",
        )
        trace_event("stage02_match", "vector_match", match, meta={"query": query, "shortlist": len(candidates)})
        return match

    async def vector_candidates(self, query: str) -> List[Candidate]:
        vector = await bounded(self.embedder.embed(query), self.timeout, what="query embedding")
        hits = await bounded(
            self.index.search(vector, limit=self.top_k, min_certainty=self.certainty_floor),
            self.timeout,
            what="vector search",
        )
        return _to_candidates([h for h in hits if h.score >= self.certainty_floor][: self.top_k])

    async def rank_candidates(self, query: str, candidates: Sequence[Candidate]) -> Candidate:
        """Let the model pick among the shortlist; default to the highest certainty."""

        if len(candidates) == 1:
            return candidates[0]

        listing = "\n".join(
            f'{i + 1}. {c.pattern.function_name} - "{c.pattern.prompt}" (certainty: {c.certainty})'
            for i, c in enumerate(candidates)
        )
        prompt = RANK_PROMPT.format(query=query, candidates=listing)
        try:
            reply = await bounded(self.llm.generate(prompt, kind="rank"), self.timeout, what="candidate ranking")
        except Exception as exc:  # noqa: BLE001
            logger.warning("Ranking error, using highest certainty: %s", exc)
            record_stage_failure("rank")
            return _best_by_certainty(candidates)

        choice = parse_choice_index(reply, len(candidates))
        if choice.ok and choice.value is not None:
            return candidates[choice.value]
        logger.debug("Ranker gave no usable pick (%s)", choice.error)
        return _best_by_certainty(candidates)

    async def fallback_search(self, query: str) -> Optional[FunctionMatch]:
        """Catalog-wide model search, accepted only above the confidence threshold."""

        logger.info("Using model fallback for function matching")
        functions = [
            {
                "name": d.name,
                "description": d.description,
                "category": d.category,
                "examples": d.examples[:2],
            }
            for d in self.catalog
        ]
        prompt = FALLBACK_PROMPT.format(query=query, functions=json.dumps(functions, indent=2, ensure_ascii=False))
        try:
            reply = await bounded(self.llm.generate(prompt, kind="fallback_match"), self.timeout, what="fallback search")
        except Exception as exc:  # noqa: BLE001
            logger.warning("Model fallback error: %s", exc)
            record_stage_failure("fallback_match")
            return None

        parsed = parse_fallback_pick(reply)
        if not parsed.ok or parsed.value is None:
            logger.warning("Failed to parse fallback match: %s", parsed.error)
            record_stage_failure("fallback_parse")
            return None

        pick = parsed.value
        if not pick.function_name or pick.confidence <= self.fallback_threshold:
            trace_event("stage02_match", "fallback_rejected", {"query": query, "reply": reply})
            return None
        if pick.function_name not in self.catalog:
            logger.warning("Model fallback proposed unknown function %r", pick.function_name)
            return None

        parameters = await self._extract(query, pick.function_name)
        match = FunctionMatch(
            function_name=pick.function_name,
            confidence=pick.confidence,
            parameters=parameters,
            reasoning=f"AI fallback match: {pick.reasoning}",
            source="fallback",
        )
        trace_event("stage02_match", "fallback_match", match, meta={"query": query})
        return match

    async def _extract(self, query: str, function_name: str) -> Dict[str, Any]:
        definition = self.catalog.get(function_name)
        if definition is None:
            return {}
        return await extract_parameters(query, definition, llm=self.llm, timeout=self.timeout)
