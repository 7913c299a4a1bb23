from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, Query, UploadFile

from app.api.deps import (
    CurrentUser,
    get_notifier,
    get_property_service,
    require_permission,
)
from app.schemas.common import PropertyStatus, PropertyType, SuccessResponse
from app.schemas.portal import PropertyFilters
from app.schemas.property import (
    ImageDeleteRequest,
    PropertyCreate,
    PropertyListResponse,
    PropertyOut,
    PropertyResponse,
    PropertyUpdate,
    UploadResponse,
)
from app.services.notifications import EmailNotifier, send_quietly
from app.services.property_service import (
    ImageUpload,
    PropertyService,
    check_upload_count,
    check_upload_file,
)

router = APIRouter(prefix="/properties", tags=["Properties"])


@router.get("", response_model=PropertyListResponse)
async def list_properties(
    price_min: Optional[float] = Query(None, alias="priceMin", ge=0),
    price_max: Optional[float] = Query(None, alias="priceMax", ge=0),
    bedrooms: Optional[int] = Query(None, ge=0),
    status: List[PropertyStatus] = Query([]),
    type: List[PropertyType] = Query([]),
    current: CurrentUser = Depends(require_permission("properties", "view")),
    service: PropertyService = Depends(get_property_service),
) -> PropertyListResponse:
    """Tenant properties, newest first, optionally narrowed by filters."""
    filters = None
    if any(v is not None for v in (price_min, price_max, bedrooms)) or status or type:
        filters = PropertyFilters(
            price_min=price_min,
            price_max=price_max,
            bedrooms=bedrooms,
            status=status,
            type=type,
        )
    properties = await service.list_properties(current.tenant_id, filters)
    return PropertyListResponse(
        properties=[PropertyOut.model_validate(p) for p in properties]
    )


@router.post("", response_model=PropertyResponse, status_code=201)
async def create_property(
    payload: PropertyCreate,
    current: CurrentUser = Depends(require_permission("properties", "create")),
    service: PropertyService = Depends(get_property_service),
) -> PropertyResponse:
    prop = await service.create_property(payload, current.user, current.tenant_id)
    return PropertyResponse(property=PropertyOut.model_validate(prop))


# Registered before /{property_id} so "upload" is never parsed as an id


@router.post("/upload", response_model=UploadResponse)
async def upload_images(
    files: Optional[List[UploadFile]] = File(None),
    property_id: Optional[str] = Form(None, alias="propertyId"),
    current: CurrentUser = Depends(require_permission("properties", "create", "edit")),
    service: PropertyService = Depends(get_property_service),
) -> UploadResponse:
    """Store up to 10 images (5 MB each) and return their public URLs."""
    files = files or []
    # Reject on the declared size and type before reading any bodies
    check_upload_count(len(files))
    for f in files:
        check_upload_file(f.filename or "image", f.size, f.content_type)
    uploads = [
        ImageUpload(
            filename=f.filename or "image",
            content=await f.read(),
            content_type=f.content_type,
        )
        for f in files
    ]
    urls = await service.upload_images(uploads, current.tenant_id, property_id)
    return UploadResponse(urls=urls)


@router.delete("/upload", response_model=SuccessResponse)
async def delete_image(
    payload: ImageDeleteRequest,
    current: CurrentUser = Depends(require_permission("properties", "edit", "delete")),
    service: PropertyService = Depends(get_property_service),
) -> SuccessResponse:
    await service.delete_image(payload.image_url)
    return SuccessResponse()


@router.get("/{property_id}", response_model=PropertyResponse)
async def get_property(
    property_id: UUID,
    current: CurrentUser = Depends(require_permission("properties", "view")),
    service: PropertyService = Depends(get_property_service),
) -> PropertyResponse:
    prop = await service.get_owned(property_id, current.user, current.tenant_id)
    return PropertyResponse(property=PropertyOut.model_validate(prop))


@router.put("/{property_id}", response_model=PropertyResponse)
async def update_property(
    property_id: UUID,
    payload: PropertyUpdate,
    current: CurrentUser = Depends(require_permission("properties", "edit")),
    service: PropertyService = Depends(get_property_service),
) -> PropertyResponse:
    prop = await service.update_property(
        property_id, payload, current.user, current.tenant_id
    )
    return PropertyResponse(property=PropertyOut.model_validate(prop))


@router.delete("/{property_id}", response_model=SuccessResponse)
async def delete_property(
    property_id: UUID,
    background_tasks: BackgroundTasks,
    current: CurrentUser = Depends(require_permission("properties", "delete")),
    service: PropertyService = Depends(get_property_service),
    notifier: EmailNotifier = Depends(get_notifier),
) -> SuccessResponse:
    """Delete an owned property; linked leads keep their rows."""
    _, message = await service.delete_property(
        property_id, current.user, current.tenant_id
    )
    if message is not None:
        background_tasks.add_task(send_quietly, notifier, message)
    return SuccessResponse()
