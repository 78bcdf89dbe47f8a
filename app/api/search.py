from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Optional

from config import settings
from app.models.items import Location, SearchResponse, SearchResultOut, StoreItemsResponse
from app.scripts.logging_config import get_logger
from app.services import search_service
from app.services.catalog_store import CatalogSource, FirestoreCatalog
from app.services.errors import DataAccessFailure

logger = get_logger("api.search")

router = APIRouter(tags=["search"])


def get_catalog() -> CatalogSource:
    return FirestoreCatalog()


def get_search_options() -> search_service.SearchOptions:
    return search_service.SearchOptions.from_settings()


def _requester_location(lat: Optional[float], lng: Optional[float]) -> Optional[Location]:
    if lat is None and lng is None:
        return None
    if lat is None or lng is None:
        raise HTTPException(422, "lat and lng must be provided together")
    return Location(latitude=lat, longitude=lng)


@router.get("/search", response_model=SearchResponse)
async def search(
    q: str = Query("", max_length=settings.MAX_SEARCH_QUERY_LENGTH, description="free-text item query"),
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lng: Optional[float] = Query(None, ge=-180, le=180),
    verified_only: bool = False,
    max_distance: Optional[float] = Query(None, gt=0, description="km"),
    catalog: CatalogSource = Depends(get_catalog),
    options: search_service.SearchOptions = Depends(get_search_options),
):
    location = _requester_location(lat, lng)
    try:
        if verified_only or max_distance is not None:
            results = await search_service.search_with_filters(
                q, catalog, location,
                verified_only=verified_only, max_distance_km=max_distance, options=options,
            )
        else:
            results = await search_service.search_items(q, catalog, location, options=options)
    except DataAccessFailure as e:
        raise HTTPException(503, str(e))
    return SearchResponse(
        query=q,
        count=len(results),
        results=[SearchResultOut.from_result(r) for r in results],
    )


@router.get("/stores/{store_id}/items", response_model=StoreItemsResponse)
async def store_items(
    store_id: str,
    catalog: CatalogSource = Depends(get_catalog),
    options: search_service.SearchOptions = Depends(get_search_options),
):
    try:
        items = await search_service.list_store_items(store_id, catalog, options=options)
    except DataAccessFailure as e:
        raise HTTPException(503, str(e))
    return StoreItemsResponse(store_id=store_id, count=len(items), items=items)
