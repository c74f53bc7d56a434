#!/usr/bin/env python
"""Rebuild the phrase pattern collection from the sales catalog.

Usage::

    python scripts/upload_prompt_patterns.py [--keep]

Requires OPENAI_API_KEY and QDRANT_URL to be set.
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from askdata.catalog.sales import metadata_only_catalog
from askdata.config import get_settings
from askdata.indexing import upload_prompt_patterns
from askdata.llm.openai_client import OpenAIEmbedder
from askdata.stores.qdrant_store import QdrantStore


async def run(recreate: bool) -> int:
    settings = get_settings()
    catalog = metadata_only_catalog()
    embedder = OpenAIEmbedder(settings.embedding_model, dimensions=settings.embedding_dim)
    store = QdrantStore(settings.qdrant_url, settings.pattern_collection, api_key=settings.qdrant_api_key)
    return await upload_prompt_patterns(
        catalog,
        embedder=embedder,
        index=store,
        vector_size=settings.embedding_dim,
        collection=settings.pattern_collection,
        recreate=recreate,
    )


def main() -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--keep", action="store_true", help="Upsert into the existing collection instead of recreating it")
    args = ap.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger("httpx").setLevel(logging.WARNING)

    try:
        count = asyncio.run(run(recreate=not args.keep))
    except Exception as exc:  # noqa: BLE001
        logging.getLogger(__name__).error("Error setting up prompt patterns: %s", exc)
        return 1
    print(f"Prompt pattern system ready ({count} patterns)")
    return 0 if count else 2


if __name__ == "__main__":
    sys.exit(main())
