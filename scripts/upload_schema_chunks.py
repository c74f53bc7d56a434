#!/usr/bin/env python
from __future__ import annotations

import asyncio
import logging
import sys

from askdata.config import get_settings
from askdata.indexing import upload_schema_chunks
from askdata.llm.openai_client import OpenAIEmbedder
from askdata.stores.qdrant_store import QdrantStore


async def run() -> int:
    settings = get_settings()
    embedder = OpenAIEmbedder(settings.embedding_model, dimensions=settings.embedding_dim)
    store = QdrantStore(settings.qdrant_url, settings.schema_collection, api_key=settings.qdrant_api_key)
    return await upload_schema_chunks(
        embedder=embedder,
        index=store,
        vector_size=settings.embedding_dim,
        collection=settings.schema_collection,
    )


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger("httpx").setLevel(logging.WARNING)
    count = asyncio.run(run())
    print(f"Uploaded {count} schema chunks")
    return 0 if count else 1


if __name__ == "__main__":
    sys.exit(main())
