# =============================================================================
# core/services/plan_limits.py - Plan Limit Gate
# =============================================================================
# Decides whether an add operation fits the business's plan BEFORE anything
# is staged, uploaded or written. The checks are pure: they return a
# LimitCheck (truthy when allowed) whose message the editor shows as-is.
#
# Usage:
#   check = can_add_item(CatalogKind.MENU, current_count=4, limits=limits)
#   if not check:
#       show_modal("Plan Limit Reached", check.message)
# =============================================================================

from dataclasses import dataclass
from typing import Sequence

from app.exceptions import LimitExceededError
from core.models.business import PlanLimits
from core.models.catalog import CatalogItemBase, CatalogKind, kind_spec


@dataclass(frozen=True)
class LimitCheck:
    """Result of one plan limit check."""

    allowed: bool
    limit: int
    current: int
    requested: int
    label: str
    scope: str = "item"

    def __bool__(self) -> bool:
        return self.allowed

    @property
    def message(self) -> str:
        if self.allowed:
            return ""
        if self.scope == "item":
            return (
                f"Your plan allows a maximum of {self.limit} {self.label}. "
                f"You currently have {self.current}. "
                f"Please upgrade your plan to add more."
            )
        return (
            f"Your plan allows a maximum of {self.limit} {self.label}. "
            f"You currently have {self.current} and are trying to add {self.requested} more, "
            f"which would exceed the limit."
        )


def can_add_item(kind: CatalogKind, current_count: int, limits: PlanLimits) -> LimitCheck:
    """
    Check whether one more item of `kind` fits the plan.

    Allowed only while current_count < limit (at the limit -> rejected).
    """
    limit = limits.max_for_kind(kind)
    return LimitCheck(
        allowed=current_count < limit,
        limit=limit,
        current=current_count,
        requested=1,
        label=kind_spec(kind).label,
        scope="item",
    )


def can_add_images(
    current_image_count: int,
    incoming_count: int,
    per_item_cap: int,
    label: str = "images per item",
) -> LimitCheck:
    """Check whether `incoming_count` more images fit on one item."""
    return LimitCheck(
        allowed=current_image_count + incoming_count <= per_item_cap,
        limit=per_item_cap,
        current=current_image_count,
        requested=incoming_count,
        label=label,
        scope="images",
    )


def can_add_item_images(
    kind: CatalogKind, current_image_count: int, incoming_count: int, limits: PlanLimits
) -> LimitCheck:
    """can_add_images with the cap that applies to `kind`."""
    singular = kind_spec(kind).label.rstrip("s")
    return can_add_images(
        current_image_count,
        incoming_count,
        limits.max_images_for_kind(kind),
        label=f"images per {singular}",
    )


def can_add_gallery_images(current_count: int, incoming_count: int, limits: PlanLimits) -> LimitCheck:
    return can_add_images(
        current_count,
        incoming_count,
        limits.max_gallery_images,
        label="gallery images",
    )


def ensure_allowed(check: LimitCheck, item_id: str | None = None) -> None:
    """
    Raise LimitExceededError for a rejected check.

    Raises:
        LimitExceededError: If the check did not pass
    """
    if not check:
        raise LimitExceededError(
            message=check.message,
            limit=check.limit,
            current=check.current,
            requested=check.requested,
            item_id=item_id,
        )


def check_catalog_limits(
    kind: CatalogKind, items: Sequence[CatalogItemBase], limits: PlanLimits
) -> None:
    """
    Validate a whole staged catalog against the plan.

    The editor gates every add as it happens; this re-check runs on submit
    so a stale or hand-crafted request cannot exceed the plan.

    Raises:
        LimitExceededError: On the first limit the catalog breaks
    """
    item_limit = limits.max_for_kind(kind)
    if len(items) > item_limit:
        ensure_allowed(
            LimitCheck(
                allowed=False,
                limit=item_limit,
                current=len(items),
                requested=0,
                label=kind_spec(kind).label,
                scope="item",
            )
        )

    for item in items:
        existing = len(item.images) - item.pending_count
        ensure_allowed(
            can_add_item_images(kind, existing, item.pending_count, limits),
            item_id=item.id,
        )
