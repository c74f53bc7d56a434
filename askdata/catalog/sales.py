from __future__ import annotations

import importlib
from functools import lru_cache
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping

import yaml  # type: ignore

from askdata.catalog import OperationCatalog
from askdata.errors import CatalogError

DEFAULT_CATALOG_PATH = Path(__file__).parent / "sales.yaml"


@lru_cache(maxsize=4)
def load_operation_records(path: Path = DEFAULT_CATALOG_PATH) -> tuple[Dict[str, Any], ...]:
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise CatalogError(f"catalog file {path} must contain a list of operations")
    return tuple(data)


def handler_names(path: Path = DEFAULT_CATALOG_PATH) -> List[str]:
    """Names the handler mapping must provide for the sales catalog."""

    return [str(r.get("handler") or r["name"]) for r in load_operation_records(path)]


def build_sales_catalog(
    handlers: Mapping[str, Callable[..., Any]],
    *,
    path: Path = DEFAULT_CATALOG_PATH,
) -> OperationCatalog:
    """Bind the sales dashboard operations to the given handlers."""

    return OperationCatalog.from_records(load_operation_records(path), handlers)


def handlers_from_module(dotted: str, *, path: Path = DEFAULT_CATALOG_PATH) -> Dict[str, Callable[..., Any]]:
    """Collect handler callables named after the catalog entries from a module."""

    module = importlib.import_module(dotted)
    handlers: Dict[str, Callable[..., Any]] = {}
    missing: List[str] = []
    for name in handler_names(path):
        fn = getattr(module, name, None)
        if callable(fn):
            handlers[name] = fn
        else:
            missing.append(name)
    if missing:
        raise CatalogError(f"module '{dotted}' lacks handlers: {', '.join(missing)}")
    return handlers


def _unbound(name: str) -> Callable[..., Any]:
    def handler(*_args: Any) -> Any:
        raise RuntimeError(f"operation '{name}' has no bound handler")

    handler.__name__ = name
    return handler


def metadata_only_catalog(path: Path = DEFAULT_CATALOG_PATH) -> OperationCatalog:
    """Catalog whose handlers refuse to run; enough for offline indexing."""

    return build_sales_catalog({name: _unbound(name) for name in handler_names(path)}, path=path)
