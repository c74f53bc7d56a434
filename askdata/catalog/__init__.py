from __future__ import annotations

import inspect
import json
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from askdata.errors import CatalogError, UnknownOperationError

ParamValue = Union[str, int, float, bool]


class ParameterSpec(BaseModel):
    """One positional argument of a catalog operation."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    name: str = Field(..., description="Argument name used in extracted parameter objects")
    type: str = Field("string", description="Loose type hint shown to the model (string/number/boolean)")
    required: bool = False
    description: str = ""
    default_value: Optional[ParamValue] = Field(None, description="Value used when the argument is absent")

    @property
    def has_default(self) -> bool:
        return self.default_value is not None


class OperationDefinition(BaseModel):
    """Named, parameterised data operation with metadata used for routing."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    description: str
    parameters: Tuple[ParameterSpec, ...] = ()
    examples: Tuple[str, ...] = ()
    category: str
    handler: Callable[..., Any] = Field(..., exclude=True, repr=False)

    @field_validator("parameters")
    @classmethod
    def _unique_parameter_names(cls, v: Tuple[ParameterSpec, ...]) -> Tuple[ParameterSpec, ...]:
        seen = set()
        for p in v:
            if p.name in seen:
                raise ValueError(f"duplicate parameter name '{p.name}'")
            seen.add(p.name)
        return v

    @property
    def required_parameters(self) -> List[str]:
        return [p.name for p in self.parameters if p.required]

    def schema_snapshot(self) -> str:
        """JSON rendering of the parameter schema stored alongside phrase patterns."""

        return json.dumps(
            [p.model_dump(by_alias=True, exclude_none=True) for p in self.parameters],
            ensure_ascii=False,
        )


def _check_arity(definition: OperationDefinition) -> None:
    """The handler must accept one positional argument per declared parameter."""

    try:
        signature = inspect.signature(definition.handler)
    except ValueError:
        # builtins without introspectable signatures
        return
    try:
        signature.bind(*([None] * len(definition.parameters)))
    except TypeError as exc:
        declared = ", ".join(p.name for p in definition.parameters) or "no parameters"
        raise CatalogError(
            f"handler for '{definition.name}' does not accept ({declared}): {exc}"
        ) from exc


class OperationCatalog:
    """Read-only registry of operations keyed by name."""

    def __init__(self, definitions: Iterable[OperationDefinition]) -> None:
        self._ordered: List[OperationDefinition] = []
        self._by_name: Dict[str, OperationDefinition] = {}
        for d in definitions:
            if d.name in self._by_name:
                raise CatalogError(f"duplicate operation name '{d.name}'")
            if not callable(d.handler):
                raise CatalogError(f"handler for '{d.name}' is not callable")
            _check_arity(d)
            self._by_name[d.name] = d
            self._ordered.append(d)

    @classmethod
    def from_records(
        cls,
        records: Iterable[Mapping[str, Any]],
        handlers: Mapping[str, Callable[..., Any]],
    ) -> "OperationCatalog":
        """Bind metadata records to handlers, failing on any name mismatch.

        Each record may carry a ``handler`` key naming the entry in ``handlers``;
        otherwise the operation name is used.
        """

        definitions: List[OperationDefinition] = []
        used: set[str] = set()
        for raw in records:
            record = dict(raw)
            name = str(record.get("name", ""))
            handler_key = str(record.pop("handler", None) or name)
            handler = handlers.get(handler_key)
            if handler is None:
                raise CatalogError(f"no handler '{handler_key}' for operation '{name}'")
            used.add(handler_key)
            try:
                definitions.append(OperationDefinition.model_validate({**record, "handler": handler}))
            except ValidationError as exc:
                raise CatalogError(f"invalid definition for operation '{name}': {exc}") from exc

        extra = sorted(set(handlers) - used)
        if extra:
            raise CatalogError(f"handlers without a catalog entry: {', '.join(extra)}")
        return cls(definitions)

    def __len__(self) -> int:
        return len(self._ordered)

    def __iter__(self) -> Iterator[OperationDefinition]:
        return iter(self._ordered)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def get(self, name: str) -> OperationDefinition | None:
        return self._by_name.get(name)

    def require(self, name: str) -> OperationDefinition:
        definition = self._by_name.get(name)
        if definition is None:
            raise UnknownOperationError(name)
        return definition

    def by_category(self, category: str) -> List[OperationDefinition]:
        return [d for d in self._ordered if d.category == category]

    def available(self, category: str | None = None) -> List[OperationDefinition]:
        if category:
            return self.by_category(category)
        return list(self._ordered)

    def categories(self) -> List[str]:
        """Distinct categories in first-seen order."""

        return list(dict.fromkeys(d.category for d in self._ordered))

    def search(self, keyword: str) -> List[OperationDefinition]:
        needle = keyword.lower()
        return [
            d
            for d in self._ordered
            if needle in d.name.lower()
            or needle in d.description.lower()
            or any(needle in ex.lower() for ex in d.examples)
        ]


__all__ = [
    "OperationCatalog",
    "OperationDefinition",
    "ParameterSpec",
]
