from __future__ import annotations

import uuid
from typing import List, Optional, Sequence

from qdrant_client import AsyncQdrantClient
from qdrant_client.http.models import (
    Distance,
    HnswConfigDiff,
    OptimizersConfigDiff,
    PointStruct,
    VectorParams,
)

from askdata.models.patterns import VectorHit
from askdata.monitoring.metrics import RETRIEVAL_CALLS
from askdata.stores.base import IndexRecord, VectorIndex


def cosine_to_certainty(score: float) -> float:
    """Map cosine similarity [-1, 1] onto certainty [0, 1]."""
    return max(0.0, min(1.0, (1.0 + float(score)) / 2.0))


def certainty_to_cosine(certainty: float) -> float:
    return 2.0 * float(certainty) - 1.0


def point_id(collection: str, key: str) -> str:
    """Stable UUID for a record so re-indexing replaces rather than duplicates."""
    return str(uuid.uuid5(uuid.NAMESPACE_URL, f"{collection}/{key}"))


class QdrantStore(VectorIndex):
    def __init__(
        self,
        url: str,
        collection: str,
        *,
        api_key: Optional[str] = None,
        client: Optional[AsyncQdrantClient] = None,
    ) -> None:
        self.client = client or AsyncQdrantClient(url=url, api_key=api_key)
        self.collection = collection

    async def ensure_collection(self, vector_size: int, *, recreate: bool = False) -> None:
        exists = await self.client.collection_exists(self.collection)
        if exists and not recreate:
            return
        if exists:
            await self.client.delete_collection(self.collection)
        await self.client.create_collection(
            collection_name=self.collection,
            vectors_config=VectorParams(size=vector_size, distance=Distance.COSINE),
            hnsw_config=HnswConfigDiff(m=16, ef_construct=200),
            optimizers_config=OptimizersConfigDiff(indexing_threshold=10000),
        )

    async def upsert(self, records: Sequence[IndexRecord]) -> None:
        if not records:
            return
        points = [
            PointStruct(id=r.id, vector=[float(x) for x in r.vector], payload=dict(r.payload))
            for r in records
        ]
        RETRIEVAL_CALLS.labels(kind="upsert").inc()
        await self.client.upsert(collection_name=self.collection, points=points)

    async def search(self, vector: Sequence[float], *, limit: int = 5, min_certainty: float = 0.0) -> List[VectorHit]:
        RETRIEVAL_CALLS.labels(kind="search").inc()
        res = await self.client.query_points(
            collection_name=self.collection,
            query=[float(x) for x in vector],
            limit=limit,
            score_threshold=certainty_to_cosine(min_certainty),
            with_payload=True,
        )
        hits = [
            VectorHit(id=str(p.id), score=cosine_to_certainty(p.score), payload=dict(p.payload or {}))
            for p in res.points
        ]
        return [h for h in hits if h.score >= min_certainty]
