"""Shape-tagged views over raw operation results."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any, Dict, List, Literal, Union

from pydantic import BaseModel, Field


class MissingResult(BaseModel):
    kind: Literal["missing"] = "missing"


class ScalarResult(BaseModel):
    kind: Literal["scalar"] = "scalar"
    value: Any = None


class RecordResult(BaseModel):
    kind: Literal["record"] = "record"
    record: Dict[str, Any] = Field(default_factory=dict)


class RecordListResult(BaseModel):
    kind: Literal["records"] = "records"
    items: List[Any] = Field(default_factory=list)


OperationResult = Annotated[
    Union[MissingResult, ScalarResult, RecordResult, RecordListResult],
    Field(discriminator="kind"),
]


def classify_result(raw: Any) -> OperationResult:
    """Wrap a raw handler return value in its shape tag."""

    if raw is None:
        return MissingResult()
    if isinstance(raw, BaseModel):
        raw = raw.model_dump()
    if isinstance(raw, Mapping):
        return RecordResult(record=dict(raw))
    if isinstance(raw, (list, tuple)):
        return RecordListResult(items=list(raw))
    return ScalarResult(value=raw)
