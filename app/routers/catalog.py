# =============================================================================
# app/routers/catalog.py - Business Catalog Endpoints
# =============================================================================
# Load, save and limit-check a business's catalog (menu, vehicle listings or
# retail items) and gallery.
# All endpoints require authentication; the caller's user id is the storage
# owner of every image they upload.
# =============================================================================

import base64
import binascii
import logging
from typing import Annotated, Any, Literal
from uuid import UUID

from fastapi import APIRouter, Depends, Path
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from app.auth import AuthUser, get_current_user
from app.dependencies import CatalogStoreDep, ObjectStorageDep
from app.exceptions import InvalidCatalogError
from core.models.business import PlanLimits
from core.models.catalog import CatalogItem, CatalogKind, MediaAttachment, kind_spec
from core.models.submission import CatalogSubmission, SubmissionResult
from core.services.catalog_loader import CatalogLoader
from core.services.media_uploader import GALLERY_BUCKET
from core.services.plan_limits import (
    can_add_gallery_images,
    can_add_item,
    can_add_item_images,
)
from core.services.submission_service import SubmissionService
from lib.storage_paths import to_display_url

logger = logging.getLogger(__name__)

router = APIRouter()

_catalog_item_adapter = TypeAdapter(CatalogItem)

# SubmissionError.code -> HTTP status
_STATUS_BY_CODE = {
    "LIMIT_EXCEEDED": 403,
    "UPLOAD_FAILURE": 502,
    "PERSISTENCE_FAILURE": 500,
    "CASCADE_FAILURE": 500,
    "CONFLICT": 409,
    "INVALID_CATALOG": 400,
}


# =============================================================================
# Request/Response Models
# =============================================================================

class ImagePayload(BaseModel):
    """
    One staged image.

    Send `storage_path` for an image that is already stored, or `data`
    (base64) + `filename` for a new one.
    """
    local_id: str | None = Field(default=None, description="Editor-side image id")
    storage_path: str | None = Field(default=None, example="9b1d.../restaurant_menu/4f3a.../1718000000000-0-falafel.jpg")
    data: str | None = Field(default=None, description="Base64-encoded bytes of a new image")
    filename: str | None = Field(default=None, example="falafel.jpg")
    content_type: str | None = Field(default=None, example="image/jpeg")

    def to_attachment(self) -> MediaAttachment:
        if self.data is None:
            if not self.storage_path:
                raise InvalidCatalogError("An image needs either data or a storage_path", details={"local_id": self.local_id})
            return MediaAttachment.stored(self.storage_path, local_id=self.local_id)

        try:
            content = base64.b64decode(self.data, validate=True)
        except (binascii.Error, ValueError):
            raise InvalidCatalogError(
                f"Image {self.filename or self.local_id} is not valid base64",
                details={"local_id": self.local_id, "filename": self.filename},
            )
        return MediaAttachment.pending(
            content,
            filename=self.filename or "image",
            content_type=self.content_type,
            local_id=self.local_id,
        )


class ItemPayload(BaseModel):
    """A staged catalog item. Kind-specific fields are passed through."""
    model_config = ConfigDict(extra="allow")

    kind: CatalogKind
    id: str
    is_new: bool = False
    is_removed: bool = False
    images: list[ImagePayload] = Field(default_factory=list)


class CatalogSubmitRequest(BaseModel):
    """Everything the editor staged in one session."""
    category: str | None = Field(default=None, example="Food")
    subcategory: str | None = Field(default=None, example="Bakery")
    items: list[ItemPayload] = Field(default_factory=list)
    gallery: list[ImagePayload] | None = None
    expected_version: str | None = None

    model_config = {
        "json_schema_extra": {
            "example": {
                "category": "Food",
                "items": [
                    {
                        "kind": "menu",
                        "id": "4f3a2b9e-3c1d-4e5f-8a7b-1c2d3e4f5a6b",
                        "is_new": True,
                        "name": "Falafel Wrap",
                        "price": "$8.50",
                        "images": [{"data": "<base64>", "filename": "falafel.jpg", "content_type": "image/jpeg"}],
                    }
                ],
                "expected_version": "9f2c...",
            }
        }
    }

    def to_submission(self, business_id: str) -> CatalogSubmission:
        items = []
        for payload in self.items:
            data = payload.model_dump(mode="json", exclude={"images"})
            data["images"] = [image.to_attachment() for image in payload.images]
            try:
                items.append(_catalog_item_adapter.validate_python(data))
            except ValidationError as e:
                raise InvalidCatalogError(
                    f"Invalid {payload.kind.value} item {payload.id}",
                    item_id=payload.id,
                    details={"errors": e.errors(include_url=False, include_context=False, include_input=False)},
                )

        gallery = None
        if self.gallery is not None:
            gallery = [image.to_attachment() for image in self.gallery]

        return CatalogSubmission(
            business_id=business_id,
            category=self.category,
            subcategory=self.subcategory,
            items=items,
            gallery=gallery,
            expected_version=self.expected_version,
        )


class StoredImage(BaseModel):
    local_id: str | None = None
    storage_path: str
    url: str


class CatalogResponse(BaseModel):
    """A business's persisted catalog, ready for the editor."""
    business_id: str
    category: str
    subcategory: str
    kind: CatalogKind | None
    version: str
    limits: PlanLimits
    items: list[dict[str, Any]]
    gallery: list[StoredImage]


class LimitCheckRequest(BaseModel):
    """An add operation to check before staging it."""
    scope: Literal["item", "images", "gallery"]
    kind: CatalogKind | None = Field(default=None, description="Defaults to the business's active kind")
    current_count: int = Field(..., ge=0, description="Items, or images already on the item/gallery")
    incoming_count: int = Field(default=1, ge=0, description="Images being added")


class LimitCheckResponse(BaseModel):
    allowed: bool
    limit: int
    current: int
    requested: int
    message: str


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/{business_id}/catalog", response_model=CatalogResponse)
async def get_catalog(
    business_id: Annotated[UUID, Path(description="Business UUID")],
    store: CatalogStoreDep,
    user: AuthUser = Depends(get_current_user),
):
    """
    Load the catalog of the business's active kind and its gallery.

    Every image is returned as a bare storage path plus a display URL.
    Keep `version` and send it back as `expected_version` when saving.
    """
    loader = CatalogLoader(store)
    business = await loader.load_business(str(business_id))
    snapshot = await loader.load(business.id, business.active_kind)

    items = []
    for item in snapshot.items:
        bucket = kind_spec(item.kind).bucket
        data = item.model_dump(exclude={"images", "is_new", "is_removed"})
        data["images"] = [
            StoredImage(local_id=image.local_id, storage_path=image.storage_path, url=to_display_url(bucket, image.storage_path)).model_dump()
            for image in item.images
        ]
        items.append(data)

    return CatalogResponse(
        business_id=business.id,
        category=business.category,
        subcategory=business.subcategory,
        kind=snapshot.kind,
        version=snapshot.version,
        limits=business.limits,
        items=items,
        gallery=[
            StoredImage(storage_path=ref, url=to_display_url(GALLERY_BUCKET, ref))
            for ref in business.gallery
        ],
    )


@router.post("/{business_id}/catalog", response_model=SubmissionResult)
async def submit_catalog(
    business_id: Annotated[UUID, Path(description="Business UUID")],
    request: CatalogSubmitRequest,
    store: CatalogStoreDep,
    storage: ObjectStorageDep,
    user: AuthUser = Depends(get_current_user),
):
    """
    Save the staged catalog.

    Applies, in order: category change (clearing the catalog kinds the new
    category doesn't use), gallery, catalog items. New images are uploaded
    before any row is written.

    Returns 200 with the SubmissionResult on success; on failure the same
    body with `error` set and the error's status code.
    """
    submission = request.to_submission(str(business_id))
    service = SubmissionService(store, storage)
    result = await service.submit(submission, owner_id=user.owner_id)

    if result.error:
        return JSONResponse(
            status_code=_STATUS_BY_CODE.get(result.error.code, 500),
            content=result.model_dump(mode="json"),
        )
    return result


@router.post("/{business_id}/catalog/limits/check", response_model=LimitCheckResponse)
async def check_limit(
    business_id: Annotated[UUID, Path(description="Business UUID")],
    request: LimitCheckRequest,
    store: CatalogStoreDep,
    user: AuthUser = Depends(get_current_user),
):
    """
    Check an add operation against the business's plan before staging it.

    - item: can one more item be added (current_count = items staged)
    - images: can incoming_count images be added to an item
    - gallery: can incoming_count images be added to the gallery
    """
    business = await CatalogLoader(store).load_business(str(business_id))

    if request.scope == "gallery":
        check = can_add_gallery_images(request.current_count, request.incoming_count, business.limits)
    else:
        kind = request.kind or business.active_kind
        if kind is None:
            raise InvalidCatalogError(
                "This business category has no catalog",
                details={"category": business.category},
            )
        if request.scope == "item":
            check = can_add_item(kind, request.current_count, business.limits)
        else:
            check = can_add_item_images(kind, request.current_count, request.incoming_count, business.limits)

    return LimitCheckResponse(
        allowed=check.allowed,
        limit=check.limit,
        current=check.current,
        requested=check.requested,
        message=check.message,
    )
