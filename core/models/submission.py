# =============================================================================
# core/models/submission.py - Submission Request/Result Schemas
# =============================================================================
# One submission = one reconcile pass, triggered when the owner presses save.
# - CatalogSubmission: the staged state sent by the editor
# - ReconcileReport / CascadeReport / GalleryReport: what each step did
# - SubmissionResult: success signal or structured error for the UI
# =============================================================================

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from .catalog import CatalogItem, CatalogKind, MediaAttachment


class CatalogSubmission(BaseModel):
    """
    Staged state of one edit session.

    Example:
        {
            "business_id": "550e8400-...",
            "category": "Food",
            "items": [{"kind": "menu", "id": "...", "name": "Falafel", "images": [...]}],
            "expected_version": "9f2c..."
        }
    """

    business_id: str

    # None keeps the persisted category
    category: str | None = Field(
        default=None,
        description="Staged business category"
    )

    subcategory: str | None = None

    items: list[CatalogItem] = Field(
        default_factory=list,
        description="Staged catalog items of the active kind"
    )

    # None leaves the gallery untouched
    gallery: list[MediaAttachment] | None = Field(
        default=None,
        description="Staged business gallery, in display order"
    )

    expected_version: str | None = Field(
        default=None,
        description="Snapshot version the edit session started from"
    )


class ReconcileReport(BaseModel):
    """Outcome of reconciling one catalog kind."""

    kind: CatalogKind
    inserted: list[str] = Field(default_factory=list)
    updated: list[str] = Field(default_factory=list)
    deleted: list[str] = Field(default_factory=list)
    removed_media: list[str] = Field(default_factory=list)
    failed_media_removals: list[str] = Field(default_factory=list)
    items: list[CatalogItem] = Field(
        default_factory=list,
        description="Items as persisted, every image now a stored reference"
    )


class CascadeReport(BaseModel):
    """Outcome of purging abandoned catalog kinds."""

    purged: dict[str, list[str]] = Field(
        default_factory=dict,
        description="Catalog kind -> ids of deleted items"
    )
    removed_media: list[str] = Field(default_factory=list)
    failed_media_removals: list[str] = Field(default_factory=list)

    @property
    def purged_kinds(self) -> list[str]:
        return list(self.purged)


class GalleryReport(BaseModel):
    """Outcome of reconciling the business gallery."""

    paths: list[str] = Field(default_factory=list)
    removed_media: list[str] = Field(default_factory=list)
    failed_media_removals: list[str] = Field(default_factory=list)


class SubmissionError(BaseModel):
    """Structured failure returned to the UI layer."""

    code: str
    message: str
    item_id: str | None = None
    image_id: str | None = None
    suggestion: str | None = None
    details: dict[str, Any] = Field(default_factory=dict)


class SubmissionResult(BaseModel):
    """
    What one submission produced.

    Either `success` is True and the counters describe the applied writes,
    or `error` says what failed (writes already applied are not undone).
    """

    success: bool
    business_id: str
    kind: CatalogKind | None = None
    inserted: list[str] = Field(default_factory=list)
    updated: list[str] = Field(default_factory=list)
    deleted: list[str] = Field(default_factory=list)
    purged_kinds: list[str] = Field(default_factory=list)
    gallery: list[str] | None = None
    removed_media: list[str] = Field(default_factory=list)
    version: str | None = Field(
        default=None,
        description="Snapshot version after the submission"
    )
    error: SubmissionError | None = None
