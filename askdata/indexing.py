"""Offline indexing of phrase patterns and schema descriptions."""

from __future__ import annotations

import logging
from typing import List, Sequence

from askdata.catalog import OperationCatalog, OperationDefinition
from askdata.llm.base import Embedder
from askdata.models.patterns import PhrasePattern, SchemaChunk
from askdata.stores.base import IndexRecord, VectorIndex
from askdata.stores.qdrant_store import point_id

logger = logging.getLogger(__name__)

UPSERT_BATCH = 32

# (name fragment, template, confidence)
_VARIATION_RULES = (
    ("getTop", "show me the best {category}", 0.9),
    ("getAll", "list everything in {category}", 0.9),
    ("Total", "what is the sum of {category}", 0.8),
    ("Report", "give me a summary of {category}", 0.8),
    ("Low", "what needs attention in {category}", 0.7),
    ("OutOf", "what needs attention in {category}", 0.7),
)

SCHEMA_CHUNKS: List[SchemaChunk] = [
    SchemaChunk(
        title="companies",
        content="The `companies` table holds information about global suppliers. Each company record includes its unique ID, name, country of origin, and contact details like email and phone number.",
    ),
    SchemaChunk(
        title="categories",
        content="The `categories` table organizes products into a hierarchical structure. Each category has a name, description, and may have a parent category to support subcategories (e.g., 'Snacks' under 'Food & Beverages').",
    ),
    SchemaChunk(
        title="products",
        content="The `products` table contains inventory data. Each product is linked to a company and a category. It includes fields like product name, SKU, cost and selling prices, and current stock levels.",
    ),
    SchemaChunk(
        title="admins",
        content="The `admins` table stores administrative user profiles. Each admin has a unique ID, email, username, full name, assigned role (e.g., super_admin), and their geographic location.",
    ),
    SchemaChunk(
        title="transactions",
        content="The `transactions` table logs every product sale. Each record includes a transaction ID, product sold, quantity, unit price, total amount, customer location, and transaction timestamp.",
    ),
    SchemaChunk(
        title="access_logs",
        content="The `access_logs` table tracks admin login activity. It records who logged in, their location and IP address, timestamp of login, and whether it was successful.",
    ),
    SchemaChunk(
        title="error_logs",
        content="The `error_logs` table stores error records detected by AI, such as mismatches in stock levels. Each entry includes the type of error, description, expected vs actual values, the affected product/admin, and severity.",
    ),
    SchemaChunk(
        title="notifications",
        content="The `notifications` table delivers alerts to admins, often based on error log entries. It includes a title, message body, type of alert (e.g. warning), and links to the related error if applicable.",
    ),
]


def _pattern(definition: OperationDefinition, prompt: str, confidence: float) -> PhrasePattern:
    return PhrasePattern(
        prompt=prompt,
        function_name=definition.name,
        description=definition.description,
        category=definition.category,
        parameters=definition.schema_snapshot(),
        confidence=confidence,
    )


def generate_variations(definition: OperationDefinition) -> List[PhrasePattern]:
    """Generic paraphrases derived from the operation name."""

    out: List[PhrasePattern] = []
    seen: set[str] = set()
    for fragment, template, confidence in _VARIATION_RULES:
        if fragment not in definition.name:
            continue
        prompt = template.format(category=definition.category)
        if prompt in seen:
            continue
        seen.add(prompt)
        out.append(_pattern(definition, prompt, confidence))
    return out


def generate_prompt_patterns(catalog: OperationCatalog) -> List[PhrasePattern]:
    patterns: List[PhrasePattern] = []
    for definition in catalog:
        patterns.extend(_pattern(definition, ex, 1.0) for ex in definition.examples)
        patterns.extend(generate_variations(definition))
    return patterns


async def _embed_and_upsert(
    items: Sequence[tuple[str, str, dict]],
    *,
    embedder: Embedder,
    index: VectorIndex,
) -> int:
    """Embed (id, text, payload) triples and upsert them in batches.

    Items whose embedding or batch upsert fails are logged and skipped.
    """

    uploaded = 0
    batch: List[IndexRecord] = []

    async def flush() -> int:
        if not batch:
            return 0
        try:
            await index.upsert(list(batch))
            return len(batch)
        except Exception as exc:  # noqa: BLE001
            logger.error("Failed to upsert %d records: %s", len(batch), exc)
            return 0
        finally:
            batch.clear()

    for key, text, payload in items:
        try:
            vector = await embedder.embed(text)
        except Exception as exc:  # noqa: BLE001
            logger.error("Failed to embed %r: %s", text, exc)
            continue
        batch.append(IndexRecord(id=key, vector=vector, payload=payload))
        if len(batch) >= UPSERT_BATCH:
            uploaded += await flush()
            logger.info("Uploaded %d/%d records", uploaded, len(items))
    uploaded += await flush()
    return uploaded


async def upload_prompt_patterns(
    catalog: OperationCatalog,
    *,
    embedder: Embedder,
    index: VectorIndex,
    vector_size: int,
    collection: str = "PromptPattern",
    recreate: bool = True,
) -> int:
    """Rebuild the phrase pattern collection from the catalog. Returns the upload count."""

    patterns = generate_prompt_patterns(catalog)
    logger.info("Generated %d prompt patterns", len(patterns))
    await index.ensure_collection(vector_size, recreate=recreate)
    items = [
        (point_id(collection, f"{p.function_name}/{p.prompt}"), p.prompt, p.model_dump(by_alias=True))
        for p in patterns
    ]
    uploaded = await _embed_and_upsert(items, embedder=embedder, index=index)
    logger.info("Successfully uploaded %d prompt patterns", uploaded)
    return uploaded


async def upload_schema_chunks(
    *,
    embedder: Embedder,
    index: VectorIndex,
    vector_size: int,
    chunks: Sequence[SchemaChunk] = tuple(SCHEMA_CHUNKS),
    collection: str = "SchemaChunk",
    recreate: bool = True,
) -> int:
    await index.ensure_collection(vector_size, recreate=recreate)
    items = [(point_id(collection, c.title), c.content, c.model_dump()) for c in chunks]
    uploaded = await _embed_and_upsert(items, embedder=embedder, index=index)
    logger.info("Uploaded %d schema chunks", uploaded)
    return uploaded
