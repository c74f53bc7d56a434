from __future__ import annotations

from typing import List


class LanguageModel:
    """Text-in/text-out completion service used by every routing stage."""

    async def generate(self, prompt: str, *, kind: str = "generic", temperature: float = 0.0) -> str:  # pragma: no cover - interface
        raise NotImplementedError


class Embedder:
    """Maps text to a fixed-size vector matching the vector index."""

    async def embed(self, text: str) -> List[float]:  # pragma: no cover - interface
        raise NotImplementedError
