from __future__ import annotations
"""Plain-text and JSON rendering of version listings."""
from datetime import datetime

from .models import VersionListing, VersionSummary

SIZE_SUFFIXES = ("B", "KB", "MB", "GB", "TB")


def format_size(size: int | None) -> str:
    if size is None:
        return "-"
    value = float(max(size, 0))
    for suffix in SIZE_SUFFIXES:
        if value < 1024 or suffix == SIZE_SUFFIXES[-1]:
            return f"{value:.1f} {suffix}" if suffix != "B" else f"{int(value)} {suffix}"
        value /= 1024
    return f"{size} B"


def format_last_modified(last_modified: datetime | None) -> str:
    if not last_modified:
        return "-"
    return last_modified.strftime("%Y-%m-%d %H:%M:%S %Z").strip() or last_modified.isoformat()


def format_version_row(summary: VersionSummary) -> str:
    """One line per version: timestamp, size, latest flag, version id, key."""

    flag = "*" if summary.is_latest else " "
    size = "DELETE" if summary.is_delete_marker else format_size(summary.size)
    return (
        f"{format_last_modified(summary.last_modified):<23} {size:>10} "
        f"{flag} {summary.version_id:<34} {summary.key}"
    )


def format_listing(listing: VersionListing) -> list[str]:
    lines = [f"{'PRE':>34} {prefix}" for prefix in listing.common_prefixes]
    lines.extend(format_version_row(summary) for summary in listing.version_summaries)
    if listing.is_truncated:
        lines.append(
            f"More versions available: --key-marker '{listing.next_key_marker}' "
            f"--version-id-marker '{listing.next_version_id_marker or ''}'"
        )
    return lines


def summary_to_dict(summary: VersionSummary) -> dict[str, object]:
    return {
        "key": summary.key,
        "version_id": summary.version_id,
        "is_latest": summary.is_latest,
        "is_delete_marker": summary.is_delete_marker,
        "last_modified": summary.last_modified.isoformat() if summary.last_modified else None,
        "size": summary.size,
        "etag": summary.etag,
        "storage_class": summary.storage_class,
        "owner": summary.owner.display_name if summary.owner else None,
    }


def listing_to_dict(listing: VersionListing) -> dict[str, object]:
    return {
        "bucket_name": listing.bucket_name,
        "prefix": listing.prefix,
        "key_marker": listing.key_marker,
        "version_id_marker": listing.version_id_marker,
        "delimiter": listing.delimiter,
        "max_keys": listing.max_keys,
        "encoding_type": listing.encoding_type,
        "is_truncated": listing.is_truncated,
        "next_key_marker": listing.next_key_marker,
        "next_version_id_marker": listing.next_version_id_marker,
        "common_prefixes": list(listing.common_prefixes),
        "versions": [summary_to_dict(summary) for summary in listing.version_summaries],
    }
