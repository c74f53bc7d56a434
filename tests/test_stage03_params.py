import pytest

from conftest import ScriptedLLM

from askdata.pipeline.stage03_params import apply_defaults, extract_parameters


@pytest.mark.asyncio
async def test_zero_parameter_operation_skips_model(catalog):
    llm = ScriptedLLM({"extract": '{"anything": 1}'})
    params = await extract_parameters("what is out of stock?", catalog.require("listOutOfStockProducts"), llm=llm)
    assert params == {}
    assert llm.calls == []


@pytest.mark.asyncio
async def test_top_five_products(catalog):
    llm = ScriptedLLM({"extract": '{"limit": 5}'})
    params = await extract_parameters("top 5 products", catalog.require("getTopSellingProducts"), llm=llm)
    assert params == {"limit": 5}
    prompt = llm.calls[0][1]
    assert "- limit (number): Number of products to return [OPTIONAL]" in prompt
    assert 'from user query: "top 5 products"' in prompt


@pytest.mark.asyncio
async def test_companies_from_usa(catalog):
    llm = ScriptedLLM({"extract": '```json\n{"country": "USA"}\n```'})
    params = await extract_parameters("companies from USA", catalog.require("getCompaniesByCountry"), llm=llm)
    assert params == {"country": "USA"}
    assert "[REQUIRED]" in llm.calls[0][1]


@pytest.mark.asyncio
async def test_defaults_back_fill_optional_parameters(catalog):
    llm = ScriptedLLM({"extract": "{}"})
    params = await extract_parameters("best sellers", catalog.require("getTopSellingProducts"), llm=llm)
    assert params == {"limit": 5}


@pytest.mark.asyncio
async def test_missing_required_parameter_left_absent(catalog):
    llm = ScriptedLLM({"extract": '{"country": null}'})
    params = await extract_parameters("companies", catalog.require("getCompaniesByCountry"), llm=llm)
    assert params == {}


@pytest.mark.asyncio
async def test_parse_failure_yields_empty(catalog):
    llm = ScriptedLLM({"extract": "I think the limit is five"})
    params = await extract_parameters("top five", catalog.require("getTopSellingProducts"), llm=llm)
    assert params == {}


@pytest.mark.asyncio
async def test_model_failure_yields_empty(catalog):
    llm = ScriptedLLM({"extract": TimeoutError("slow")})
    params = await extract_parameters("top five", catalog.require("getTopSellingProducts"), llm=llm)
    assert params == {}


def test_apply_defaults_drops_undeclared_keys(catalog):
    definition = catalog.require("getTotalSales")
    params = apply_defaults(definition, {"startDate": "2024-01-01", "endDate": "2024-01-31", "region": "EU"})
    assert params == {"startDate": "2024-01-01", "endDate": "2024-01-31"}
    # no default declared, so nothing is invented
    assert apply_defaults(definition, {}) == {}
