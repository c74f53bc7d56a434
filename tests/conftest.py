from __future__ import annotations

from typing import Any, Callable, Dict, List, Sequence, Union

import pytest

from askdata.catalog import OperationCatalog, OperationDefinition, ParameterSpec
from askdata.config import Settings
from askdata.llm.base import Embedder, LanguageModel
from askdata.models.patterns import PhrasePattern, VectorHit
from askdata.service import AIService
from askdata.stores.base import IndexRecord, VectorIndex

Reply = Union[str, Exception, Callable[[str], str]]


class ScriptedLLM(LanguageModel):
    """Replies keyed by call kind; records every prompt it receives."""

    def __init__(self, replies: Dict[str, Reply] | None = None) -> None:
        self.replies: Dict[str, Reply] = dict(replies or {})
        self.calls: List[tuple[str, str]] = []

    def kinds(self) -> List[str]:
        return [k for k, _ in self.calls]

    async def generate(self, prompt: str, *, kind: str = "generic", temperature: float = 0.0) -> str:
        self.calls.append((kind, prompt))
        reply = self.replies.get(kind, "")
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            return reply(prompt)
        return reply


class FakeEmbedder(Embedder):
    def __init__(self, error: Exception | None = None, fail_on: Sequence[str] = ()) -> None:
        self.error = error
        self.fail_on = set(fail_on)
        self.calls: List[str] = []

    async def embed(self, text: str) -> List[float]:
        self.calls.append(text)
        if self.error is not None or text in self.fail_on:
            raise self.error or RuntimeError("embedding failed")
        return [float(len(text)), 1.0, 0.0]


class FakeIndex(VectorIndex):
    def __init__(self, hits: Sequence[VectorHit] = (), error: Exception | None = None) -> None:
        self.hits = list(hits)
        self.error = error
        self.records: List[IndexRecord] = []
        self.ensured: List[tuple[int, bool]] = []
        self.searches: List[Dict[str, Any]] = []

    async def ensure_collection(self, vector_size: int, *, recreate: bool = False) -> None:
        self.ensured.append((vector_size, recreate))

    async def upsert(self, records: Sequence[IndexRecord]) -> None:
        self.records.extend(records)

    async def search(self, vector, *, limit: int = 5, min_certainty: float = 0.0) -> List[VectorHit]:  # noqa: ANN001
        self.searches.append({"limit": limit, "min_certainty": min_certainty})
        if self.error is not None:
            raise self.error
        ranked = sorted(self.hits, key=lambda h: -h.score)
        return [h for h in ranked if h.score >= min_certainty][:limit]


def pattern_hit(function_name: str, prompt: str, score: float) -> VectorHit:
    payload = PhrasePattern(prompt=prompt, function_name=function_name, category="test").model_dump(by_alias=True)
    return VectorHit(id=f"{function_name}:{prompt}", score=score, payload=payload)


class HandlerLog:
    def __init__(self) -> None:
        self.calls: List[tuple[str, tuple]] = []

    def make(self, name: str, result: Any) -> Callable[..., Any]:
        def handler(*args: Any) -> Any:
            self.calls.append((name, args))
            return result

        return handler

    def names(self) -> List[str]:
        return [n for n, _ in self.calls]


@pytest.fixture
def handler_log() -> HandlerLog:
    return HandlerLog()


@pytest.fixture
def catalog(handler_log: HandlerLog) -> OperationCatalog:
    return OperationCatalog(
        [
            OperationDefinition(
                name="getTopSellingProducts",
                description="Get the best-selling products ranked by total quantity sold",
                parameters=[
                    ParameterSpec(name="limit", type="number", description="Number of products to return", default_value=5)
                ],
                examples=["What are the top selling products?", "Show me the best sellers", "Top 10 best selling items"],
                category="products",
                handler=handler_log.make(
                    "getTopSellingProducts",
                    [{"name": "Cola", "sold": 120}, {"name": "Chips", "sold": 90}, {"name": "Tea", "sold": 40}],
                ),
            ),
            OperationDefinition(
                name="listOutOfStockProducts",
                description="Find all products that are completely out of stock (stock = 0)",
                examples=["What products are out of stock?", "Show me items with no inventory"],
                category="products",
                handler=handler_log.make("listOutOfStockProducts", []),
            ),
            OperationDefinition(
                name="getTotalSales",
                description="Get total sales revenue within a date range",
                parameters=[
                    ParameterSpec(name="startDate", description="Start date (YYYY-MM-DD format)"),
                    ParameterSpec(name="endDate", description="End date (YYYY-MM-DD format)"),
                ],
                examples=["What are total sales for January 2024?"],
                category="transactions",
                handler=handler_log.make("getTotalSales", {"total": 1234.5, "count": 12}),
            ),
            OperationDefinition(
                name="getCompaniesByCountry",
                description="Get companies from a specific country",
                parameters=[ParameterSpec(name="country", required=True, description="Country name")],
                examples=["Companies from USA", "Suppliers in China"],
                category="companies",
                handler=handler_log.make("getCompaniesByCountry", [{"name": "Acme", "country": "USA"}]),
            ),
        ]
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(call_timeout_s=5.0, trace=False)


@pytest.fixture
def make_service(catalog: OperationCatalog, settings: Settings):
    def _make(llm: ScriptedLLM, *, hits: Sequence[VectorHit] = (), index: FakeIndex | None = None,
              embedder: FakeEmbedder | None = None) -> AIService:
        return AIService(
            catalog,
            llm=llm,
            embedder=embedder or FakeEmbedder(),
            index=index or FakeIndex(hits),
            settings=settings,
        )

    return _make
