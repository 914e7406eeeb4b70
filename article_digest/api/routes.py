"""
Analysis API routes.

Provides the analyze endpoint and cache administration endpoints.
"""

from __future__ import annotations

import logging
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel, Field

from ..generation.types import GenerationConfig
from ..service import AnalysisService

logger = logging.getLogger(__name__)

router = APIRouter()


# Request/Response Models


class AnalyzeRequest(BaseModel):
    """Request model for article analysis."""

    url: str = Field(..., min_length=1, description="Source URL, used as the cache key")
    text: str = Field(..., description="Extracted article text")
    mode: Literal["about", "thesis", "telegram", "translate"]
    language: Optional[str] = Field(
        default=None, description="Target language for the translate mode"
    )
    backend: Optional[str] = Field(default=None, description="Preferred backend")
    model: Optional[str] = Field(default=None, description="Model for the preferred backend")


class AnalyzeResponse(BaseModel):
    url: str
    mode: str
    content: str
    cached: bool


class CacheKeyItem(BaseModel):
    url: str
    mode: str


class CacheStatsResponse(BaseModel):
    count: int
    keys: List[CacheKeyItem]


class CacheDeleteResponse(BaseModel):
    ok: bool
    deleted: int


def get_service(request: Request) -> AnalysisService:
    """Analysis service dependency."""
    return request.app.state.analysis_service


@router.post("/analyze", response_model=AnalyzeResponse)
async def analyze(
    body: AnalyzeRequest,
    service: AnalysisService = Depends(get_service),
):
    """Generate an artifact for the article text in the requested mode."""
    defaults = service.default_config
    config = GenerationConfig(
        backend=body.backend or defaults.backend,
        model=body.model or defaults.model,
        temperature=defaults.temperature,
        max_output_tokens=defaults.max_output_tokens,
    )

    logger.info("Analyze request", extra={"url": body.url, "mode": body.mode})
    result = await service.analyze(
        body.url, body.text, body.mode, config, language=body.language
    )
    return AnalyzeResponse(
        url=body.url, mode=body.mode, content=result.content, cached=result.cached
    )


@router.get("/cache/stats", response_model=CacheStatsResponse)
async def cache_stats(service: AnalysisService = Depends(get_service)):
    """List cached (url, mode) pairs that have not expired."""
    stats = service.cache.stats()
    return CacheStatsResponse(
        count=stats.count,
        keys=[CacheKeyItem(url=k.resource_id, mode=k.operation) for k in stats.keys],
    )


@router.delete("/cache", response_model=CacheDeleteResponse)
async def clear_cache(service: AnalysisService = Depends(get_service)):
    """Drop every cached result."""
    count = service.cache.invalidate_all()
    logger.info("Cache cleared", extra={"deleted": count})
    return CacheDeleteResponse(ok=True, deleted=count)


@router.delete("/cache/{mode}", response_model=CacheDeleteResponse)
async def invalidate_cache_entry(
    mode: str,
    url: str = Query(..., min_length=1),
    service: AnalysisService = Depends(get_service),
):
    """Drop the cached result for one (url, mode) pair."""
    deleted = service.cache.invalidate(url, mode)
    return CacheDeleteResponse(ok=True, deleted=int(deleted))
