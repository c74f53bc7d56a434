from __future__ import annotations

import json
import time
from datetime import datetime, timezone
from typing import Any, Dict

from askdata.config import get_settings


def trace_enabled() -> bool:
    return bool(get_settings().trace)


def _to_serializable(obj: Any) -> Any:
    if hasattr(obj, "model_dump"):
        return obj.model_dump(mode="json", exclude_none=True, by_alias=True)
    if isinstance(obj, dict):
        return {str(k): _to_serializable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_to_serializable(v) for v in obj]
    try:
        json.dumps(obj)
        return obj
    except (TypeError, ValueError):
        return str(obj)


def trace_event(stage: str, kind: str, payload: Dict[str, Any] | Any, *, meta: Dict[str, Any] | None = None) -> None:
    """Append one JSON line to the daily trace file when tracing is enabled."""

    if not trace_enabled():
        return

    now = datetime.now(timezone.utc)
    entry: Dict[str, Any] = {
        "ts": now.isoformat(timespec="milliseconds"),
        "epoch_ms": int(time.time() * 1000),
        "stage": stage,
        "kind": kind,
        "payload": _to_serializable(payload),
    }
    if meta:
        entry["meta"] = _to_serializable(meta)

    try:
        trace_dir = get_settings().trace_dir
        trace_dir.mkdir(parents=True, exist_ok=True)
        fname = trace_dir / ("trace_" + now.strftime("%Y%m%d") + ".log")
        with fname.open("a", encoding="utf-8") as f:
            f.write(json.dumps(entry, ensure_ascii=False) + "\n")
    except OSError:
        # tracing never fails the main flow
        pass
