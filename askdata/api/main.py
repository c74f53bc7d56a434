from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Request, Response  # type: ignore
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from pydantic import BaseModel, Field

from askdata.catalog.sales import build_sales_catalog, handlers_from_module
from askdata.config import get_settings
from askdata.errors import CatalogError
from askdata.models.match import AIResponse, ChatTurn
from askdata.monitoring import attach_instrumentator
from askdata.service import AIService

logger = logging.getLogger(__name__)


class QueryRequest(BaseModel):
    query: str = Field(..., min_length=1)
    history: List[ChatTurn] = Field(default_factory=list)


def build_default_service() -> AIService:
    """Sales catalog bound to the handlers module named in configuration."""

    settings = get_settings()
    if not settings.handlers_module:
        raise CatalogError("ASKDATA_HANDLERS_MODULE is not set")
    catalog = build_sales_catalog(handlers_from_module(settings.handlers_module))
    return AIService.from_settings(catalog, settings)


def get_service(request: Request) -> AIService:
    service: Optional[AIService] = getattr(request.app.state, "service", None)
    if service is None:
        try:
            service = build_default_service()
        except CatalogError as exc:
            logger.error("Catalog failed to load: %s", exc)
            raise HTTPException(status_code=503, detail="Operation catalog unavailable")
        request.app.state.service = service
    return service


def create_app(service: AIService | None = None, *, instrument: bool = True) -> FastAPI:
    application = FastAPI(title="AskData Router")
    application.state.service = service

    @application.get("/health")
    async def health() -> dict[str, bool]:
        return {"ok": True}

    @application.post("/query", response_model=AIResponse, response_model_exclude_none=True)
    async def query(req: QueryRequest, svc: AIService = Depends(get_service)) -> AIResponse:
        return await svc.process_query(req.query, req.history)

    @application.get("/suggestions", response_model=List[str])
    async def suggestions(category: Optional[str] = None, svc: AIService = Depends(get_service)) -> List[str]:
        return svc.get_suggestions(category)

    @application.get("/categories", response_model=List[str])
    async def categories(svc: AIService = Depends(get_service)) -> List[str]:
        return svc.catalog.categories()

    if instrument:
        attach_instrumentator(application)
    else:
        @application.get("/metrics")
        async def metrics() -> Response:
            return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    return application


app = create_app()


if __name__ == "__main__":  # pragma: no cover
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run("askdata.api.main:app", host="0.0.0.0", port=8000)
