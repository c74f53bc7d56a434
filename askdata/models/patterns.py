from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class PhrasePattern(BaseModel):
    """Embeddable example phrasing tied to one catalog operation."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    prompt: str = Field(..., description="Example phrasing that gets embedded")
    function_name: str = Field(..., description="Catalog operation name")
    description: str = ""
    category: str = ""
    parameters: str = Field("[]", description="JSON snapshot of the declared parameter schema")
    confidence: float = Field(1.0, ge=0.0, le=1.0)


class SchemaChunk(BaseModel):
    """Plain-English description of one table of the data store."""

    title: str
    content: str


class VectorHit(BaseModel):
    """Nearest-neighbour hit returned by a vector index."""

    id: str
    score: float = Field(..., description="Similarity/certainty in [0, 1]")
    payload: Dict[str, Any] = Field(default_factory=dict)


class Candidate(BaseModel):
    """Shortlisted pattern with the similarity score it was retrieved at."""

    pattern: PhrasePattern
    certainty: float
