#!/usr/bin/env python
"""Run sample queries through the full routing pipeline.

Usage::

    python scripts/router_cli.py                      # built-in sample set
    python scripts/router_cli.py "Companies from USA"  # single query

Requires OPENAI_API_KEY, QDRANT_URL and ASKDATA_HANDLERS_MODULE to be set.
"""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import time
from typing import List

from askdata.catalog.sales import build_sales_catalog, handlers_from_module
from askdata.config import get_settings
from askdata.service import AIService

SAMPLE_QUERIES: List[str] = [
    # products
    "What are the top selling products?",
    "Show me items that are out of stock",
    "Which products are running low?",
    "List all snacks",
    "What's the total value of our inventory?",
    # transactions
    "What are our total sales for January 2024?",
    "Sales in New York",
    "High value transactions over $5000",
    "Weekly sales report",
    # companies / categories / admins
    "Companies from USA",
    "How many products in each category?",
    "Show me super admins",
    # conversational
    "Hello",
    "What can you help me with?",
    # edge cases
    "Show me the purple elephants",
]


async def run(queries: List[str]) -> None:
    settings = get_settings()
    if not settings.handlers_module:
        raise SystemExit("ASKDATA_HANDLERS_MODULE is not set")
    service = AIService.from_settings(build_sales_catalog(handlers_from_module(settings.handlers_module)), settings)

    for query in queries:
        print("=" * 80)
        print(f"Query: {query!r}")
        start = time.perf_counter()
        response = await service.process_query(query)
        print(f"Response time: {(time.perf_counter() - start) * 1000:.0f}ms  type={response.type}")
        if response.function_used:
            print(f"Function: {response.function_used}  confidence={(response.confidence or 0) * 100:.1f}%")
            print(f"Reasoning: {response.reasoning}")
            print(f"Parameters: {json.dumps(response.parameters, ensure_ascii=False)}")
        print()
        print(response.content)

    print("=" * 80)
    print("Suggestions:", json.dumps(service.get_suggestions(), ensure_ascii=False))


def main() -> None:  # noqa: D401
    ap = argparse.ArgumentParser()
    ap.add_argument("queries", nargs="*", help="Queries to run (defaults to the sample set)")
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    asyncio.run(run(args.queries or SAMPLE_QUERIES))


if __name__ == "__main__":
    main()
