from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, List, Mapping

from askdata.catalog import OperationCatalog, OperationDefinition
from askdata.errors import MissingParametersError
from askdata.models.match import FunctionMatch

logger = logging.getLogger(__name__)


def build_arguments(definition: OperationDefinition, parameters: Mapping[str, Any]) -> List[Any]:
    """Positional arguments in declared parameter order.

    Raises MissingParametersError when a required parameter is absent or null.
    Absent optional parameters receive their default, or None.
    """

    missing = [p.name for p in definition.parameters if p.required and parameters.get(p.name) is None]
    if missing:
        raise MissingParametersError(definition.name, missing)

    args: List[Any] = []
    for p in definition.parameters:
        value = parameters.get(p.name)
        if value is None and p.has_default:
            value = p.default_value
        args.append(value)
    return args


async def execute(match: FunctionMatch, catalog: OperationCatalog) -> Any:
    """Invoke the matched operation's handler.

    Unknown names raise UnknownOperationError; handler exceptions propagate
    unchanged.
    """

    definition = catalog.require(match.function_name)
    args = build_arguments(definition, match.parameters)

    logger.info("Executing %s with parameters %s", definition.name, match.parameters)
    if inspect.iscoroutinefunction(definition.handler):
        result = await definition.handler(*args)
    else:
        # sync handlers run in a worker thread
        result = await asyncio.to_thread(definition.handler, *args)
        if inspect.isawaitable(result):
            result = await result
    logger.debug("Function %s executed successfully", definition.name)
    return result
