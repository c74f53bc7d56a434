"""Adapters that turn raw model text into typed values.

Each adapter returns a ``ParseResult`` instead of raising so the pipeline never
inspects raw text itself.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, Generic, Literal, Optional, TypeVar

from askdata.errors import ParseError

T = TypeVar("T")

Intent = Literal["conversational", "data"]

_LEADING_INT = re.compile(r"^\D{0,12}?(\d+)")
_FENCE = re.compile(r"^```[a-zA-Z]*\s*|\s*```$")


@dataclass(frozen=True)
class ParseResult(Generic[T]):
    value: Optional[T] = None
    error: Optional[ParseError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "ParseResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, message: str) -> "ParseResult[T]":
        return cls(error=ParseError(message))

    def unwrap_or(self, default: T) -> T:
        return self.value if self.ok and self.value is not None else default


@dataclass(frozen=True)
class FallbackPick:
    function_name: Optional[str]
    confidence: float
    reasoning: str = ""


def parse_intent(text: str) -> ParseResult[Intent]:
    s = (text or "").strip().lower()
    if not s:
        return ParseResult.failure("empty classification")
    if "data" in s:
        return ParseResult.success("data")
    if "conversational" in s:
        return ParseResult.success("conversational")
    return ParseResult.failure(f"unrecognised classification: {s[:80]!r}")


def parse_choice_index(text: str, count: int) -> ParseResult[int]:
    """Parse a 1-based pick from a shortlist of ``count`` items into a 0-based index."""

    s = (text or "").strip()
    if not s or s.lower().startswith("none"):
        return ParseResult.failure("no candidate selected")
    m = _LEADING_INT.match(s)
    if not m:
        return ParseResult.failure(f"no index in reply: {s[:80]!r}")
    idx = int(m.group(1)) - 1
    if not 0 <= idx < count:
        return ParseResult.failure(f"index {idx + 1} out of range 1..{count}")
    return ParseResult.success(idx)


def extract_json_text(text: str) -> str:
    """Cut the JSON value out of a model reply.

    Markdown fences are dropped, then the reply is trimmed to the span between
    the first opening bracket and the last matching closer.
    """

    s = _FENCE.sub("", (text or "").strip())
    starts = [i for i in (s.find("{"), s.find("[")) if i != -1]
    if not starts:
        return s
    start = min(starts)
    end = s.rfind("}" if s[start] == "{" else "]")
    return s[start : end + 1] if end > start else s[start:]


def parse_json_object(text: str) -> ParseResult[Dict[str, Any]]:
    try:
        data = json.loads(extract_json_text(text))
    except (json.JSONDecodeError, ValueError) as exc:
        return ParseResult.failure(f"invalid JSON: {exc}")
    if not isinstance(data, dict):
        return ParseResult.failure(f"expected a JSON object, got {type(data).__name__}")
    return ParseResult.success(data)


def parse_fallback_pick(text: str) -> ParseResult[FallbackPick]:
    parsed = parse_json_object(text)
    if not parsed.ok or parsed.value is None:
        return ParseResult(error=parsed.error)
    data = parsed.value
    name = data.get("functionName")
    if name is not None and not isinstance(name, str):
        return ParseResult.failure("functionName must be a string or null")
    try:
        confidence = float(data.get("confidence") or 0.0)
    except (TypeError, ValueError):
        return ParseResult.failure("confidence is not a number")
    return ParseResult.success(
        FallbackPick(
            function_name=name or None,
            confidence=max(0.0, min(1.0, confidence)),
            reasoning=str(data.get("reasoning") or ""),
        )
    )
