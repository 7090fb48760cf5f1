"""CKAN catalog routes: dataset list/detail, datastore search, free-text search."""

from typing import Any

from fastapi import APIRouter, Depends, Query

from routes.deps import get_proxy
from services.proxy import DEFAULT_LIMIT, DEFAULT_OFFSET, DEFAULT_ROWS, OpenDataProxy

router = APIRouter(prefix="/api")


@router.get("/datasets")
async def list_datasets(proxy: OpenDataProxy = Depends(get_proxy)) -> Any:
    return await proxy.datasets()


@router.get("/dataset/{dataset_id}")
async def get_dataset(dataset_id: str, proxy: OpenDataProxy = Depends(get_proxy)) -> Any:
    return await proxy.dataset(dataset_id)


@router.get("/datastore/{resource_id}")
async def search_datastore(
    resource_id: str,
    limit: int = Query(DEFAULT_LIMIT, ge=0),
    offset: int = Query(DEFAULT_OFFSET, ge=0),
    filters: str | None = Query(None),
    proxy: OpenDataProxy = Depends(get_proxy),
) -> Any:
    """Generic datastore_search over any resource. ``filters`` is CKAN's JSON filter string."""
    return await proxy.datastore(resource_id, limit=limit, offset=offset, filters=filters)


@router.get("/search")
async def search(
    q: str | None = Query(None),
    rows: int = Query(DEFAULT_ROWS, ge=0),
    proxy: OpenDataProxy = Depends(get_proxy),
) -> Any:
    return await proxy.search(q, rows=rows)
