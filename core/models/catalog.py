# =============================================================================
# core/models/catalog.py - Catalog Item and Media Schemas
# =============================================================================
# These models describe a business catalog while it is being edited:
# - CatalogKind / KindSpec: the three catalog schemas and where each persists
# - MediaAttachment: one image, either pending upload (bytes) or stored (path)
# - MenuItem / VehicleListing / RetailItem: the staged items
# - PhotoOrderRow: one row of an item's image order table
# - CatalogSnapshot: what is persisted right now, plus a version token
#
# An item's position in its `images` list IS its display order. That order is
# persisted as sort_order 0..N-1 in the photo order tables.
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Any, Literal, Union
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator, model_validator

from lib.categories import DEALERSHIP, FOOD, RETAIL, get_main_category
from lib.utils import parse_float, parse_int, require_uuid


class CatalogKind(str, Enum):
    """
    The mutually exclusive catalog schemas a business can have.

    The business category decides which one is active:
    Food -> menu, Dealership -> vehicle, Retail -> retail, anything else -> none.
    """
    MENU = "menu"
    VEHICLE = "vehicle"
    RETAIL = "retail"


@dataclass(frozen=True)
class KindSpec:
    """Where and how one catalog kind is persisted."""

    kind: CatalogKind
    table: str
    bucket: str
    folder: str
    label: str
    photo_table: str | None = None
    photo_fk: str | None = None
    primary_image_column: str | None = None
    image_list_column: str | None = None
    bucket_aliases: tuple[str, ...] = ()

    @property
    def has_photo_table(self) -> bool:
        return self.photo_table is not None


KIND_SPECS: dict[CatalogKind, KindSpec] = {
    CatalogKind.MENU: KindSpec(
        kind=CatalogKind.MENU,
        table="menu_items",
        bucket="restaurant-menu",
        bucket_aliases=("restaurant_menu",),
        folder="restaurant_menu",
        label="menu items",
        photo_table="menu_item_photos",
        photo_fk="menu_item_id",
        primary_image_column="image_url",
    ),
    CatalogKind.VEHICLE: KindSpec(
        kind=CatalogKind.VEHICLE,
        table="dealerships",
        bucket="car-listings",
        folder="car-listings",
        label="car listings",
        image_list_column="images",
    ),
    CatalogKind.RETAIL: KindSpec(
        kind=CatalogKind.RETAIL,
        table="retail_items",
        bucket="retail-items",
        bucket_aliases=("retail_items",),
        folder="retail-items",
        label="retail items",
        photo_table="retail_item_photos",
        photo_fk="retail_item_id",
        image_list_column="images",
    ),
}

_CATEGORY_KINDS: dict[str, CatalogKind] = {
    FOOD: CatalogKind.MENU,
    DEALERSHIP: CatalogKind.VEHICLE,
    RETAIL: CatalogKind.RETAIL,
}


def kind_spec(kind: CatalogKind | str) -> KindSpec:
    return KIND_SPECS[CatalogKind(kind)]


def kind_for_category(category: str | None) -> CatalogKind | None:
    """
    Resolve the active catalog kind for a business category.

    Legacy values are normalized first, so "Restaurant" -> menu and
    "Car Dealership" -> vehicle. Categories without a catalog return None.
    """
    return _CATEGORY_KINDS.get(get_main_category(category))


# =============================================================================
# Media
# =============================================================================

def _new_id() -> str:
    return str(uuid4())


class MediaAttachment(BaseModel):
    """
    One image of a catalog item (or of the business gallery).

    Exactly one content source is set:
    - `content` (+ filename/content_type): picked by the user, not uploaded yet
    - `storage_path`: already persisted, a bare path inside the kind's bucket

    `local_id` only exists so the editor can address an image (remove,
    reorder) regardless of whether it has been uploaded. It is never stored.
    """

    local_id: str = Field(
        default_factory=_new_id,
        description="UI-only identifier, stable across upload"
    )

    content: bytes | None = Field(
        default=None,
        repr=False,
        description="Raw bytes awaiting upload"
    )

    storage_path: str | None = Field(
        default=None,
        description="Stored reference (bare path; legacy rows may hold a URL)"
    )

    filename: str | None = Field(
        default=None,
        description="Original filename of a pending upload"
    )

    content_type: str | None = Field(
        default=None,
        description="MIME type of a pending upload"
    )

    @model_validator(mode="after")
    def _exactly_one_source(self) -> MediaAttachment:
        has_bytes = self.content is not None
        has_path = bool(self.storage_path)
        if has_bytes == has_path:
            raise ValueError("An image needs either pending content or a storage_path, not both")
        return self

    @property
    def is_new(self) -> bool:
        """True while the image still has bytes waiting for upload."""
        return self.content is not None

    @classmethod
    def pending(
        cls,
        content: bytes,
        filename: str,
        content_type: str | None = None,
        local_id: str | None = None,
    ) -> MediaAttachment:
        data: dict[str, Any] = {"content": content, "filename": filename, "content_type": content_type}
        if local_id:
            data["local_id"] = local_id
        return cls(**data)

    @classmethod
    def stored(cls, storage_path: str, local_id: str | None = None) -> MediaAttachment:
        if local_id:
            return cls(storage_path=storage_path, local_id=local_id)
        return cls(storage_path=storage_path)

    def as_stored(self, storage_path: str) -> MediaAttachment:
        """Same image, now persisted: the pending bytes are dropped."""
        return MediaAttachment(
            local_id=self.local_id,
            storage_path=storage_path,
            filename=self.filename,
            content_type=self.content_type,
        )


class PhotoOrderRow(BaseModel):
    """One row of menu_item_photos / retail_item_photos."""

    item_id: str
    storage_path: str
    sort_order: int = Field(..., ge=0)

    def to_db(self, fk_column: str) -> dict[str, Any]:
        return {
            fk_column: self.item_id,
            "storage_path": self.storage_path,
            "sort_order": self.sort_order,
        }

    @classmethod
    def from_db(cls, row: dict[str, Any], fk_column: str) -> PhotoOrderRow:
        return cls(
            item_id=str(row[fk_column]),
            storage_path=row["storage_path"],
            sort_order=row.get("sort_order") or 0,
        )


def photo_rows_for(item_id: str, paths: list[str]) -> list[PhotoOrderRow]:
    """Photo order rows for an item: one per path, sort_order = position."""
    return [
        PhotoOrderRow(item_id=item_id, storage_path=path, sort_order=position)
        for position, path in enumerate(paths)
    ]


# =============================================================================
# Catalog Items
# =============================================================================

def _text(value: Any) -> str:
    return "" if value is None else str(value)


class CatalogItemBase(BaseModel):
    """
    Fields shared by every catalog kind.

    `id` is generated client-side and becomes the primary key on insert, so it
    must be a UUID. `is_new` and `is_removed` are editor flags only.
    """

    id: str = Field(
        default_factory=_new_id,
        description="Client-generated UUID, reused as the row's primary key"
    )

    images: list[MediaAttachment] = Field(
        default_factory=list,
        description="Ordered images; position is the display order"
    )

    is_new: bool = Field(
        default=False,
        description="Created in this edit session, no row yet"
    )

    is_removed: bool = Field(
        default=False,
        description="Staged for hard deletion"
    )

    @field_validator("id", mode="before")
    @classmethod
    def _validate_id(cls, value: Any) -> str:
        try:
            return require_uuid(value)
        except (TypeError, ValueError):
            raise ValueError(f"Catalog item id must be a UUID, got {value!r}")

    @property
    def spec(self) -> KindSpec:
        return kind_spec(self.kind)  # type: ignore[attr-defined]

    @property
    def stored_paths(self) -> list[str]:
        """Storage paths of images that are already persisted, in order."""
        return [img.storage_path for img in self.images if img.storage_path]

    @property
    def pending_count(self) -> int:
        return sum(1 for img in self.images if img.is_new)

    def scalar_row(self) -> dict[str, Any]:
        """Kind-specific scalar columns, normalized for the database."""
        raise NotImplementedError

    def to_row(self, business_id: str, image_paths: list[str]) -> dict[str, Any]:
        """
        Full row for insert/update, including the denormalized image column.

        Args:
            business_id: Owning business
            image_paths: Final ordered stored references for this item
        """
        row = {"business_id": business_id, **self.scalar_row()}
        spec = self.spec
        if spec.primary_image_column:
            row[spec.primary_image_column] = image_paths[0] if image_paths else None
        if spec.image_list_column:
            row[spec.image_list_column] = list(image_paths)
        return row


class MenuItem(CatalogItemBase):
    """A restaurant menu entry."""

    kind: Literal["menu"] = "menu"
    name: str = ""
    description: str = ""
    price: str = ""
    category: str = ""

    def scalar_row(self) -> dict[str, Any]:
        return {
            "name": self.name or "",
            "description": self.description or "",
            "price": parse_float(self.price) or 0,
            "category": self.category or "",
        }

    @classmethod
    def from_row(cls, row: dict[str, Any], images: list[MediaAttachment]) -> MenuItem:
        return cls(
            id=row["id"],
            name=_text(row.get("name")),
            description=_text(row.get("description")),
            price=_text(row.get("price")),
            category=_text(row.get("category")),
            images=images,
        )


class VehicleListing(CatalogItemBase):
    """A dealership's vehicle listing."""

    kind: Literal["vehicle"] = "vehicle"
    title: str = ""
    price: str = ""
    year: str = ""
    mileage: str = ""
    condition: str = ""
    description: str = ""

    def scalar_row(self) -> dict[str, Any]:
        return {
            "title": self.title or "",
            "price": parse_float(self.price) or 0,
            "year": parse_int(self.year) or None,
            "mileage": parse_float(self.mileage) or None,
            "condition": self.condition or "",
            "description": self.description or "",
        }

    @classmethod
    def from_row(cls, row: dict[str, Any], images: list[MediaAttachment]) -> VehicleListing:
        return cls(
            id=row["id"],
            title=_text(row.get("title")),
            price=_text(row.get("price")),
            year=_text(row.get("year")),
            mileage=_text(row.get("mileage")),
            condition=_text(row.get("condition")),
            description=_text(row.get("description")),
            images=images,
        )


class RetailItem(CatalogItemBase):
    """A shop's retail item."""

    kind: Literal["retail"] = "retail"
    name: str = ""
    price: str = ""
    category: str = ""
    description: str = ""

    def scalar_row(self) -> dict[str, Any]:
        return {
            "name": self.name or "",
            "price": parse_float(self.price) or 0,
            "category": self.category or "",
            "description": self.description or "",
        }

    @classmethod
    def from_row(cls, row: dict[str, Any], images: list[MediaAttachment]) -> RetailItem:
        return cls(
            id=row["id"],
            name=_text(row.get("name")),
            price=_text(row.get("price")),
            category=_text(row.get("category")),
            description=_text(row.get("description")),
            images=images,
        )


CatalogItem = Annotated[
    Union[MenuItem, VehicleListing, RetailItem],
    Field(discriminator="kind"),
]

ITEM_MODELS: dict[CatalogKind, type[CatalogItemBase]] = {
    CatalogKind.MENU: MenuItem,
    CatalogKind.VEHICLE: VehicleListing,
    CatalogKind.RETAIL: RetailItem,
}


# =============================================================================
# Snapshot
# =============================================================================

class CatalogSnapshot(BaseModel):
    """
    The persisted catalog of one kind for one business, as last read.

    `version` fingerprints the item rows and photo rows. An edit session keeps
    it and sends it back on submit so concurrent edits are detected.
    """

    business_id: str
    kind: CatalogKind | None = None
    items: list[CatalogItem] = Field(default_factory=list)
    photo_rows: list[PhotoOrderRow] = Field(default_factory=list)
    version: str = ""

    @property
    def item_ids(self) -> set[str]:
        return {item.id for item in self.items}

    def paths_by_item(self) -> dict[str, list[str]]:
        return {item.id: item.stored_paths for item in self.items}
