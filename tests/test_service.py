import time

import pytest

from conftest import FakeIndex, ScriptedLLM, pattern_hit

from askdata.models.match import ChatTurn
from askdata.prompts.respond import GENERIC_ERROR_REPLY


TOP_HITS = [
    pattern_hit("getTopSellingProducts", "What are the top selling products?", 0.95),
    pattern_hit("getTopSellingProducts", "Show me the best sellers", 0.9),
    pattern_hit("listOutOfStockProducts", "What products are out of stock?", 0.72),
]


@pytest.mark.asyncio
async def test_conversational_query_never_touches_handlers(make_service, handler_log):
    llm = ScriptedLLM({"intent": "conversational", "conversation": "Hi there! Ask me about sales."})
    index = FakeIndex(TOP_HITS)
    service = make_service(llm, index=index)

    response = await service.process_query("hello!")

    assert response.type == "conversational"
    assert response.content == "Hi there! Ask me about sales."
    assert response.function_used is None
    assert handler_log.calls == []
    assert index.searches == []
    assert llm.kinds() == ["intent", "conversation"]


@pytest.mark.asyncio
async def test_data_query_end_to_end(make_service, handler_log):
    llm = ScriptedLLM(
        {
            "intent": "data",
            "rank": "1",
            "extract": '{"limit": 3}',
            "format": "Here are your top 3 products.",
        }
    )
    service = make_service(llm, hits=TOP_HITS)

    response = await service.process_query("what are my top 3 products?", [{"sender": "user", "content": "hi"}])

    assert response.type == "data"
    assert response.content == "Here are your top 3 products."
    assert response.function_used == "getTopSellingProducts"
    assert response.confidence == 0.95
    assert response.parameters == {"limit": 3}
    assert len(response.data) == 3
    assert handler_log.calls == [("getTopSellingProducts", (3,))]
    assert llm.kinds() == ["intent", "rank", "extract", "format"]


@pytest.mark.asyncio
async def test_unparseable_extraction_still_runs_with_defaults(make_service, handler_log):
    llm = ScriptedLLM({"intent": "data", "rank": "1", "extract": "five", "format": "ok"})
    response = await make_service(llm, hits=TOP_HITS).process_query("best sellers")
    assert response.type == "data"
    assert response.parameters == {}
    assert handler_log.calls == [("getTopSellingProducts", (5,))]


@pytest.mark.asyncio
async def test_no_match_returns_apology(make_service, handler_log):
    llm = ScriptedLLM(
        {
            "intent": "data",
            "fallback_match": '{"functionName": "getTotalSales", "confidence": 0.4}',
            "apology": "Sorry, I can only help with sales data.",
        }
    )
    response = await make_service(llm).process_query("what's the weather in Paris?")

    assert response.type == "error"
    assert response.content == "Sorry, I can only help with sales data."
    assert response.function_used is None
    assert handler_log.calls == []


@pytest.mark.asyncio
async def test_missing_required_parameter_asks_for_it(make_service, handler_log):
    llm = ScriptedLLM({"intent": "data", "extract": '{"country": null}', "apology": "unused"})
    hits = [pattern_hit("getCompaniesByCountry", "Companies from USA", 0.86)]
    response = await make_service(llm, hits=hits).process_query("show me companies")

    assert response.type == "error"
    assert response.function_used == "getCompaniesByCountry"
    assert "country" in response.content
    assert "apology" not in llm.kinds()
    assert handler_log.calls == []


@pytest.mark.asyncio
async def test_handler_failure_is_apologised(settings):
    from conftest import FakeEmbedder

    from askdata.catalog import OperationCatalog, OperationDefinition, ParameterSpec
    from askdata.service import AIService

    def broken(startDate, endDate):  # noqa: N803
        raise ConnectionError("database unavailable")

    catalog = OperationCatalog(
        [
            OperationDefinition(
                name="getTotalSales",
                description="Get total sales revenue within a date range",
                parameters=[ParameterSpec(name="startDate"), ParameterSpec(name="endDate")],
                category="transactions",
                handler=broken,
            )
        ]
    )
    llm = ScriptedLLM({"intent": "data", "extract": "{}", "apology": "Something went wrong fetching sales."})
    service = AIService(
        catalog,
        llm=llm,
        embedder=FakeEmbedder(),
        index=FakeIndex([pattern_hit("getTotalSales", "total sales", 0.9)]),
        settings=settings,
    )

    response = await service.process_query("total sales")

    assert response.type == "error"
    assert response.content == "Something went wrong fetching sales."


@pytest.mark.asyncio
async def test_empty_result_reply(make_service):
    llm = ScriptedLLM({"intent": "data"})
    hits = [pattern_hit("listOutOfStockProducts", "What products are out of stock?", 0.97)]
    response = await make_service(llm, hits=hits).process_query("anything out of stock?")
    assert response.type == "data"
    assert response.content == "No results were found for your query about listOutOfStockProducts."
    assert response.data == []
    assert llm.kinds() == ["intent"]


@pytest.mark.asyncio
async def test_same_query_same_answer(make_service, handler_log):
    llm = ScriptedLLM({"intent": "data", "rank": "2", "extract": "{}", "format": "Top sellers listed."})
    service = make_service(llm, hits=TOP_HITS)
    first = await service.process_query("best sellers")
    second = await service.process_query("best sellers")
    assert first == second
    assert handler_log.names() == ["getTopSellingProducts", "getTopSellingProducts"]


@pytest.mark.asyncio
async def test_unexpected_failure_becomes_generic_error(make_service, monkeypatch):
    service = make_service(ScriptedLLM({"intent": "data"}))

    async def explode(query):
        raise KeyError("router bug")

    monkeypatch.setattr(service.router, "route_and_execute", explode)
    response = await service.process_query("total sales")
    assert response.type == "error"
    assert response.content == GENERIC_ERROR_REPLY


@pytest.mark.asyncio
async def test_history_turns_accepted_as_models(make_service):
    llm = ScriptedLLM({"intent": "conversational", "conversation": "You're welcome!"})
    history = [ChatTurn(sender="ai", content="Total sales were $1,234.")]
    response = await make_service(llm).process_query("thanks", history)
    assert response.content == "You're welcome!"
    assert "Total sales were $1,234." in llm.calls[0][1]


def test_suggestions_take_two_examples_per_operation(make_service):
    service = make_service(ScriptedLLM())
    assert service.get_suggestions() == [
        "What are the top selling products?",
        "Show me the best sellers",
        "What products are out of stock?",
        "Show me items with no inventory",
        "What are total sales for January 2024?",
        "Companies from USA",
        "Suppliers in China",
    ]
    assert service.get_suggestions("companies") == ["Companies from USA", "Suppliers in China"]
    assert service.get_suggestions("weather") == []


def test_suggestions_are_capped(settings):
    from conftest import FakeEmbedder

    from askdata.catalog.sales import metadata_only_catalog
    from askdata.service import AIService

    service = AIService(
        metadata_only_catalog(), llm=ScriptedLLM(), embedder=FakeEmbedder(), index=FakeIndex(), settings=settings
    )
    suggestions = service.get_suggestions()
    assert len(suggestions) == 10
    assert len(service.get_suggestions("admins")) == 4


@pytest.mark.asyncio
async def test_test_query_wraps_response(make_service):
    llm = ScriptedLLM({"intent": "conversational", "conversation": "Hello!"})
    out = await make_service(llm).test_query("hi")
    assert out["query"] == "hi"
    assert out["response"].content == "Hello!"


@pytest.mark.asyncio
async def test_slow_sync_handler_times_out():
    from conftest import FakeEmbedder

    from askdata.catalog import OperationCatalog, OperationDefinition
    from askdata.config import Settings
    from askdata.service import AIService

    def slow_report():
        time.sleep(0.5)
        return [{"week": 1}]

    catalog = OperationCatalog(
        [
            OperationDefinition(
                name="getWeeklySalesReport",
                description="Get sales report for the current week",
                category="transactions",
                handler=slow_report,
            )
        ]
    )
    llm = ScriptedLLM({"intent": "data", "apology": "That took too long, please try again."})
    service = AIService(
        catalog,
        llm=llm,
        embedder=FakeEmbedder(),
        index=FakeIndex([pattern_hit("getWeeklySalesReport", "weekly sales report", 0.9)]),
        settings=Settings(call_timeout_s=0.05, trace=False),
    )

    start = time.perf_counter()
    response = await service.process_query("weekly sales report")
    elapsed = time.perf_counter() - start

    assert response.type == "error"
    assert response.content == "That took too long, please try again."
    assert elapsed < 0.4
    assert "format" not in llm.kinds()
