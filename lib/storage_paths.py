# =============================================================================
# lib/storage_paths.py - Storage Reference <-> URL Resolution
# =============================================================================
# The database keeps bare storage paths ("<owner>/restaurant_menu/<item>/x.jpg").
# Older rows may hold full public URLs instead. These helpers convert between
# the two forms for a given bucket:
#
#   to_display_url("restaurant-menu", "u1/restaurant_menu/m1/1-0-a.jpg")
#     -> "https://xxx.supabase.co/storage/v1/object/public/restaurant-menu/u1/..."
#   to_bare_path("restaurant-menu", <that url>)
#     -> "u1/restaurant_menu/m1/1-0-a.jpg"
#
# Both functions are pure and never raise.
# =============================================================================

from collections.abc import Iterable

from app.config import settings

_URL_SCHEMES = ("http://", "https://")


def is_absolute_url(reference: str | None) -> bool:
    """Check whether a reference is a full http(s) URL rather than a bare path."""
    return bool(reference) and reference.lower().startswith(_URL_SCHEMES)


def public_prefix(base_url: str | None = None) -> str:
    """
    Public object URL prefix for the storage service.

    Args:
        base_url: Supabase project URL; defaults to settings.SUPABASE_URL
    """
    if base_url is None:
        return settings.storage_public_prefix
    return f"{base_url.rstrip('/')}/storage/v1/object/public/"


def to_display_url(bucket: str, reference: str | None, base_url: str | None = None) -> str:
    """
    Turn a stored reference into a URL the browser can load.

    Args:
        bucket: Storage bucket the reference lives in
        reference: Bare path or absolute URL (None/empty allowed)
        base_url: Supabase project URL override

    Returns:
        Absolute URL, or "" for an empty reference
    """
    if not reference:
        return ""
    if is_absolute_url(reference):
        return reference

    prefix = public_prefix(base_url)
    path = reference.lstrip("/")
    if path.startswith(f"{bucket}/"):
        return f"{prefix}{path}"
    return f"{prefix}{bucket}/{path}"


def to_bare_path(
    bucket: str,
    reference: str | None,
    base_url: str | None = None,
    aliases: Iterable[str] = (),
) -> str:
    """
    Extract the bare storage path from a public URL of `bucket`.

    Anything that is not a public URL of the bucket (or one of its alias
    bucket names) is returned unchanged, so bare paths pass straight through.
    Stripping repeats until nothing changes, which keeps the function
    idempotent even for URLs nested inside URLs.

    Args:
        bucket: Storage bucket name
        reference: Bare path or absolute URL (None/empty allowed)
        base_url: Supabase project URL override
        aliases: Alternative bucket names older rows were written with

    Returns:
        Bare path ("" for an empty reference)
    """
    if not reference:
        return ""

    prefix = public_prefix(base_url)
    bucket_prefixes = [f"{prefix}{name}/" for name in (bucket, *aliases)]

    path = reference
    while is_absolute_url(path):
        for bucket_prefix in bucket_prefixes:
            if path.startswith(bucket_prefix):
                path = path[len(bucket_prefix):]
                break
        else:
            break
    return path


def belongs_to_bucket(
    bucket: str,
    reference: str | None,
    base_url: str | None = None,
    aliases: Iterable[str] = (),
) -> bool:
    """
    True when the reference resolves to an object inside `bucket`.

    Bare paths are assumed to belong to the bucket they are stored against;
    absolute URLs must carry the bucket's public prefix.
    """
    if not reference:
        return False
    return not is_absolute_url(to_bare_path(bucket, reference, base_url, aliases))
