from __future__ import annotations

import abc
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

from askdata.models.patterns import VectorHit


@dataclass
class IndexRecord:
    id: str
    vector: Sequence[float]
    payload: Dict[str, Any] = field(default_factory=dict)


class VectorIndex(abc.ABC):
    """Abstract nearest-neighbour index over one collection.

    Scores are certainties in [0, 1], higher meaning closer.
    """

    @abc.abstractmethod
    async def ensure_collection(self, vector_size: int, *, recreate: bool = False) -> None:
        """Create the collection if missing (or drop and recreate it)."""

    @abc.abstractmethod
    async def upsert(self, records: Sequence[IndexRecord]) -> None:
        """Insert or replace records in bulk."""

    @abc.abstractmethod
    async def search(self, vector: Sequence[float], *, limit: int = 5, min_certainty: float = 0.0) -> List[VectorHit]:
        """Return up to ``limit`` hits whose certainty is at least ``min_certainty``, best first."""
