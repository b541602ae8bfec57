"""CRUD routes for back-office resources.

Reads go through the in-process cache; every write drops all cached reads of
the affected resource.
"""

from typing import Any, Dict, Optional, Type
from uuid import UUID

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from constants import RESOURCES, Resource, item_key, list_key, resource_prefix
from core.cache import MemoryCache
from core.container import container
from core.logging import get_logger
from middleware.rate_limit import rate_limit
from services.exceptions import RecordNotFoundError, RecordsError
from services.records import RecordsService

logger = get_logger(__name__)
router = APIRouter(prefix="/api", tags=["resources"])


def get_cache() -> MemoryCache:
    return container.cache()


def get_records() -> RecordsService:
    return container.records()


def get_resource(resource: str) -> Resource:
    found = RESOURCES.get(resource)
    if found is None:
        raise HTTPException(status_code=404, detail=f"Unknown resource: {resource}")
    return found


def invalidate_resource(cache: MemoryCache, resource: str) -> int:
    """Drop every cached list and record of ``resource``."""
    removed = cache.invalidate_by_prefix(resource_prefix(resource))
    logger.debug("Resource cache invalidated", resource=resource, removed=removed)
    return removed


def _error_response(e: RecordsError, action: str, resource: Resource) -> JSONResponse:
    if isinstance(e, RecordNotFoundError):
        return JSONResponse(status_code=404, content={"success": False, "error": str(e)})
    logger.error(f"Failed to {action} {resource.name}", error=str(e))
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": f"Failed to {action} {resource.name}"},
    )


def validate_body(model: Type[BaseModel], payload: Dict[str, Any]) -> BaseModel:
    """Validate a write body against the resource's model; 422 on failure."""
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        errors = [{**err, "loc": ("body", *err["loc"])} for err in e.errors(include_url=False)]
        raise RequestValidationError(errors) from e


@router.get("/{resource}", dependencies=[Depends(rate_limit("general"))])
async def list_resource(
    resource: Resource = Depends(get_resource),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    sort: Optional[str] = Query(default=None, pattern=r"^[A-Za-z_][A-Za-z0-9_]*$"),
    order: Optional[str] = Query(default=None, pattern=r"^(asc|desc)$"),
    status: Optional[str] = Query(default=None, max_length=64),
    cache: MemoryCache = Depends(get_cache),
    records: RecordsService = Depends(get_records),
):
    """List one page of a resource, served from cache for the resource's list TTL."""
    sort_field = sort or resource.default_sort
    sort_order = order or resource.default_order
    key = list_key(resource.name, page, limit, sort_field, sort_order, status)

    async def fetch():
        return await records.list_records(
            resource.table, page=page, limit=limit,
            sort_field=sort_field, sort_order=sort_order, status=status,
        )

    try:
        rows = await cache.cache_aside(key, fetch, ttl_ms=resource.list_ttl_ms)
    except RecordsError as e:
        return _error_response(e, "fetch", resource)

    return {"success": True, "data": rows, "page": page, "limit": limit}


@router.get("/{resource}/{record_id}", dependencies=[Depends(rate_limit("general"))])
async def get_resource_record(
    record_id: UUID,
    resource: Resource = Depends(get_resource),
    cache: MemoryCache = Depends(get_cache),
    records: RecordsService = Depends(get_records),
):
    """Fetch a single record by UUID, served from cache for the resource's item TTL."""
    record_id = str(record_id)

    async def fetch():
        return await records.get_record(resource.table, record_id)

    try:
        record = await cache.cache_aside(item_key(resource.name, record_id), fetch, ttl_ms=resource.item_ttl_ms)
    except RecordsError as e:
        return _error_response(e, "fetch", resource)

    return {"success": True, "data": record}


@router.post("/{resource}", status_code=201, dependencies=[Depends(rate_limit("sensitive"))])
async def create_resource_record(
    payload: Dict[str, Any] = Body(...),
    resource: Resource = Depends(get_resource),
    cache: MemoryCache = Depends(get_cache),
    records: RecordsService = Depends(get_records),
):
    body = validate_body(resource.create_model, payload)
    try:
        record = await records.create_record(resource.table, body.model_dump(mode="json", exclude_none=True))
    except RecordsError as e:
        return _error_response(e, "create", resource)

    invalidate_resource(cache, resource.name)
    return {"success": True, "data": record}


@router.put("/{resource}/{record_id}", dependencies=[Depends(rate_limit("sensitive"))])
async def update_resource_record(
    record_id: UUID,
    payload: Dict[str, Any] = Body(...),
    resource: Resource = Depends(get_resource),
    cache: MemoryCache = Depends(get_cache),
    records: RecordsService = Depends(get_records),
):
    body = validate_body(resource.update_model, payload)
    try:
        record = await records.update_record(
            resource.table, str(record_id), body.model_dump(mode="json", exclude_unset=True)
        )
    except RecordsError as e:
        return _error_response(e, "update", resource)

    invalidate_resource(cache, resource.name)
    return {"success": True, "data": record}


@router.delete("/{resource}/{record_id}", dependencies=[Depends(rate_limit("sensitive"))])
async def delete_resource_record(
    record_id: UUID,
    resource: Resource = Depends(get_resource),
    cache: MemoryCache = Depends(get_cache),
    records: RecordsService = Depends(get_records),
):
    try:
        await records.delete_record(resource.table, str(record_id))
    except RecordsError as e:
        return _error_response(e, "delete", resource)

    invalidate_resource(cache, resource.name)
    return {"success": True}
