from __future__ import annotations

import logging
from datetime import datetime

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from terms_analyzer.db.database import (
    delete_cached_analysis,
    get_cached_analysis,
    init_db,
    purge_expired,
    put_cached_analysis,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/extension/cache", tags=["cache"])


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)


class CacheStoreRequest(BaseModel):
    domain: str = Field(min_length=1)
    analysis: dict


class CacheEntry(_CamelModel):
    cached: bool
    domain: str
    analysis: dict
    cached_at: datetime
    age_seconds: float


class CacheStoreResponse(_CamelModel):
    success: bool
    cached: bool
    cached_at: datetime


class CacheDeleteResponse(BaseModel):
    success: bool
    deleted: bool
    domain: str


@router.get("", response_model=CacheEntry)
async def get_cache(domain: str = Query(min_length=1)) -> CacheEntry:
    init_db()
    entry = get_cached_analysis(domain.lower())
    if entry is None:
        raise HTTPException(status_code=404, detail=f"No cached analysis for {domain}")
    return CacheEntry(cached=True, **entry)


@router.post("", response_model=CacheStoreResponse, status_code=201)
async def store_cache(request: CacheStoreRequest) -> CacheStoreResponse:
    init_db()
    purged = purge_expired()
    if purged:
        logger.info("Purged %d stale cache entries", purged)
    cached_at = put_cached_analysis(request.domain.lower(), request.analysis)
    return CacheStoreResponse(success=True, cached=True, cached_at=cached_at)


@router.delete("", response_model=CacheDeleteResponse)
async def delete_cache(domain: str = Query(min_length=1)) -> CacheDeleteResponse:
    init_db()
    deleted = delete_cached_analysis(domain.lower())
    return CacheDeleteResponse(success=True, deleted=deleted, domain=domain.lower())
