from fastapi import APIRouter, Depends, Query, HTTPException, status
from datetime import datetime, timedelta
from sqlalchemy.orm import Session
import redis.asyncio as redis
import json
import hashlib
from app.core.config import settings
from app.core.database import get_db
from app.core.storage import ObjectStorage, get_object_storage
from app.core.tenant import TenantContext, get_tenant_context
from app.models.search import CountResponse, LocationSummary, SearchCriteria, SearchResponse
from app.modules.search.service import SearchService
from app.modules.search.store import SqlImageStore, SqlListingStore
import logging

logger = logging.getLogger(__name__)

router = APIRouter()

# Redis client for caching
redis_client = None

async def get_redis_client():
    global redis_client
    if redis_client is None:
        redis_client = redis.from_url(settings.REDIS_URL, decode_responses=True)
    return redis_client

def get_search_service(
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_object_storage),
) -> SearchService:
    return SearchService(SqlListingStore(db), SqlImageStore(db, storage))

def generate_cache_key(tenant: TenantContext, criteria: SearchCriteria) -> str:
    """Cache key for an organisation's search; set-valued criteria are sorted first"""
    canonical = {
        key: sorted(value) if isinstance(value, list) else value
        for key, value in criteria.model_dump(mode="json").items()
    }
    criteria_str = json.dumps(canonical, sort_keys=True)
    digest = hashlib.md5(criteria_str.encode()).hexdigest()
    return f"search:{tenant.organisation_id}:{digest}"

async def invalidate_search_cache(organisation_id: str):
    """Drop every cached search for an organisation after its listings change"""
    try:
        redis_conn = await get_redis_client()
        keys = [key async for key in redis_conn.scan_iter(match=f"search:{organisation_id}:*")]
        if keys:
            await redis_conn.delete(*keys)
            logger.info(f"Invalidated {len(keys)} cached searches for organisation {organisation_id}")
    except Exception as e:
        logger.warning(f"Failed to invalidate search cache: {e}")

@router.get("/locations", response_model=LocationSummary)
async def get_locations(
    tenant: TenantContext = Depends(get_tenant_context),
    search_service: SearchService = Depends(get_search_service)
):
    """
    Distinct suburbs and the total number of assets under management.

    Seeds the first step of the search wizard.
    """
    try:
        return await search_service.get_location_summary(tenant)
    except Exception as e:
        logger.error(f"Failed to load locations: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve locations"
        )

@router.post("/count", response_model=CountResponse)
async def count_matching(
    criteria: SearchCriteria,
    tenant: TenantContext = Depends(get_tenant_context),
    search_service: SearchService = Depends(get_search_service)
):
    """Number of listings matching the criteria next to the unfiltered total"""
    try:
        total = await search_service.listing_store.total_count(tenant.organisation_id)
        matching = total if criteria.is_empty else await search_service.count_matching(tenant, criteria)
        return CountResponse(matching=matching, total=total)
    except Exception as e:
        logger.error(f"Matching count failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Matching count temporarily unavailable"
        )

@router.post("/", response_model=SearchResponse)
async def search_properties(
    criteria: SearchCriteria,
    use_cache: bool = Query(True, description="Whether to use cached results"),
    tenant: TenantContext = Depends(get_tenant_context),
    search_service: SearchService = Depends(get_search_service)
):
    """
    Execute the guided search.

    Each result carries the fields of a result card and the public URL of
    the listing's primary image, or null when it has none.
    """
    cache_key = generate_cache_key(tenant, criteria)

    # Check cache first if enabled
    if use_cache:
        try:
            redis_conn = await get_redis_client()
            cached_result = await redis_conn.get(cache_key)

            if cached_result:
                logger.info(f"Cache hit for search: {cache_key}")
                return SearchResponse.model_validate(json.loads(cached_result))
        except Exception as e:
            logger.warning(f"Cache lookup failed: {e}")

    start_time = datetime.now()
    results = await search_service.search_properties(tenant, criteria)
    search_time_ms = int((datetime.now() - start_time).total_seconds() * 1000)

    response = SearchResponse(
        results=results,
        total_count=len(results),
        search_time_ms=search_time_ms,
        filters_applied=criteria
    )

    # Cache the result if caching is enabled
    if use_cache:
        try:
            redis_conn = await get_redis_client()
            await redis_conn.setex(
                cache_key,
                timedelta(seconds=settings.SEARCH_CACHE_TTL_SECONDS),
                response.model_dump_json()
            )
            logger.info(f"Cached search result: {cache_key}")
        except Exception as e:
            logger.warning(f"Failed to cache result: {e}")

    return response
