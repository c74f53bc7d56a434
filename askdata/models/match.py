from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FunctionMatch(_CamelModel):
    """Operation chosen for a query together with its extracted arguments."""

    function_name: str = Field(..., description="Catalog operation name")
    confidence: float = Field(..., ge=0.0, le=1.0)
    parameters: Dict[str, Any] = Field(default_factory=dict)
    reasoning: str = ""
    source: Literal["vector", "fallback"] = Field("vector", description="Which matching path produced this")


RouterErrorKind = Literal["no_match", "missing_parameters", "unknown_operation", "handler_error"]


class RouterResult(_CamelModel):
    """Terminal value of one routing attempt."""

    success: bool
    match: Optional[FunctionMatch] = None
    result: Any = None
    error: Optional[str] = None
    error_kind: Optional[RouterErrorKind] = None
    fallback_response: Optional[str] = None
    missing_parameters: List[str] = Field(default_factory=list)


class ChatTurn(_CamelModel):
    """One prior conversation turn."""

    sender: str
    content: str


class AIResponse(_CamelModel):
    """Reply presented to the caller of the engine."""

    type: Literal["data", "conversational", "error"]
    content: str
    function_used: Optional[str] = None
    data: Any = None
    confidence: Optional[float] = None
    reasoning: Optional[str] = None
    parameters: Optional[Dict[str, Any]] = None
