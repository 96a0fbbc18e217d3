from __future__ import annotations
"""Conversion between ``list_object_versions`` responses and listings."""
import heapq
from typing import Any, Callable, Mapping
from urllib.parse import quote_plus, unquote_plus

from .models import DEFAULT_MAX_KEYS, ListVersionsRequest, Owner, VersionListing, VersionSummary

URL_ENCODING = "url"


class MalformedResponseError(ValueError):
    """Raised when a listing response cannot be turned into a page."""


def parse_list_versions_response(
    response: Mapping[str, Any],
    request: ListVersionsRequest | None = None,
) -> VersionListing:
    """Build a :class:`VersionListing` from a botocore response dict.

    When ``request`` is given, the echoed parameters are taken from it
    verbatim. Otherwise they are read from the response itself.

    Raises:
        MalformedResponseError: when the response breaks the listing contract.
    """

    if request is not None:
        encoding_type = request.encoding_type
        decode = _decoder(encoding_type)
        bucket_name = request.bucket_name
        prefix = request.prefix
        key_marker = request.key_marker
        version_id_marker = request.version_id_marker
        delimiter = request.delimiter
        max_keys = request.max_keys
    else:
        encoding_type = response.get("EncodingType") or ""
        decode = _decoder(encoding_type)
        bucket_name = response.get("Name") or ""
        prefix = decode(response.get("Prefix") or "")
        key_marker = decode(response.get("KeyMarker") or "")
        version_id_marker = response.get("VersionIdMarker") or ""
        delimiter = decode(response.get("Delimiter") or "")
        max_keys = _parse_max_keys(response.get("MaxKeys"))

    versions = [
        _parse_version(entry, bucket_name, decode, is_delete_marker=False)
        for entry in response.get("Versions", [])
    ]
    delete_markers = [
        _parse_version(entry, bucket_name, decode, is_delete_marker=True)
        for entry in response.get("DeleteMarkers", [])
    ]
    # botocore splits delete markers out of the version stream; both halves
    # keep the service order so a merge restores the original sequence.
    summaries = tuple(heapq.merge(versions, delete_markers, key=_service_order))

    common_prefixes: list[str] = []
    for entry in response.get("CommonPrefixes", []):
        try:
            value = decode(entry["Prefix"])
        except KeyError as exc:
            raise MalformedResponseError("Common prefix entry is missing Prefix") from exc
        if value not in common_prefixes:
            common_prefixes.append(value)
    if common_prefixes and not delimiter:
        raise MalformedResponseError("Common prefixes returned for a request without a delimiter")

    is_truncated = bool(response.get("IsTruncated", False))
    next_key_marker = None
    next_version_id_marker = None
    if is_truncated:
        raw_key_marker = response.get("NextKeyMarker")
        if not raw_key_marker:
            raise MalformedResponseError("Truncated listing did not include NextKeyMarker")
        next_key_marker = decode(raw_key_marker)
        next_version_id_marker = response.get("NextVersionIdMarker") or None

    return VersionListing(
        bucket_name=bucket_name,
        version_summaries=summaries,
        common_prefixes=tuple(common_prefixes),
        prefix=prefix,
        key_marker=key_marker,
        version_id_marker=version_id_marker,
        delimiter=delimiter,
        max_keys=max_keys,
        encoding_type=encoding_type,
        is_truncated=is_truncated,
        next_key_marker=next_key_marker,
        next_version_id_marker=next_version_id_marker,
    )


def build_list_versions_response(listing: VersionListing) -> dict[str, Any]:
    """Encode ``listing`` in the shape botocore returns for the call."""

    encode = _encoder(listing.encoding_type)
    response: dict[str, Any] = {
        "Name": listing.bucket_name,
        "Prefix": encode(listing.prefix),
        "KeyMarker": encode(listing.key_marker),
        "VersionIdMarker": listing.version_id_marker,
        "MaxKeys": listing.max_keys,
        "IsTruncated": listing.is_truncated,
    }
    if listing.delimiter:
        response["Delimiter"] = encode(listing.delimiter)
    if listing.encoding_type:
        response["EncodingType"] = listing.encoding_type
    if listing.is_truncated:
        if listing.next_key_marker is not None:
            response["NextKeyMarker"] = encode(listing.next_key_marker)
        if listing.next_version_id_marker is not None:
            response["NextVersionIdMarker"] = listing.next_version_id_marker

    versions = [
        _build_version(summary, encode)
        for summary in listing.version_summaries
        if not summary.is_delete_marker
    ]
    delete_markers = [
        _build_version(summary, encode)
        for summary in listing.version_summaries
        if summary.is_delete_marker
    ]
    if versions:
        response["Versions"] = versions
    if delete_markers:
        response["DeleteMarkers"] = delete_markers
    if listing.common_prefixes:
        response["CommonPrefixes"] = [{"Prefix": encode(value)} for value in listing.common_prefixes]
    return response


def _parse_version(
    entry: Mapping[str, Any],
    bucket_name: str,
    decode: Callable[[str], str],
    *,
    is_delete_marker: bool,
) -> VersionSummary:
    try:
        key = decode(entry["Key"])
        version_id = entry["VersionId"]
    except KeyError as exc:
        raise MalformedResponseError(f"Version entry is missing {exc.args[0]}") from exc

    owner_data = entry.get("Owner")
    owner = None
    if owner_data:
        owner = Owner(id=owner_data.get("ID", ""), display_name=owner_data.get("DisplayName", ""))

    size = 0
    if not is_delete_marker:
        try:
            size = int(entry.get("Size", 0))
        except (TypeError, ValueError) as exc:
            raise MalformedResponseError(f"Invalid size for {key!r}") from exc

    return VersionSummary(
        bucket_name=bucket_name,
        key=key,
        version_id=version_id,
        is_latest=bool(entry.get("IsLatest", False)),
        last_modified=entry.get("LastModified"),
        owner=owner,
        size=size,
        etag=entry.get("ETag"),
        storage_class=entry.get("StorageClass"),
        is_delete_marker=is_delete_marker,
    )


def _build_version(summary: VersionSummary, encode: Callable[[str], str]) -> dict[str, Any]:
    entry: dict[str, Any] = {
        "Key": encode(summary.key),
        "VersionId": summary.version_id,
        "IsLatest": summary.is_latest,
    }
    if summary.last_modified is not None:
        entry["LastModified"] = summary.last_modified
    if summary.owner is not None:
        entry["Owner"] = {"ID": summary.owner.id, "DisplayName": summary.owner.display_name}
    if not summary.is_delete_marker:
        entry["Size"] = summary.size
        if summary.etag is not None:
            entry["ETag"] = summary.etag
        if summary.storage_class is not None:
            entry["StorageClass"] = summary.storage_class
    return entry


def _service_order(summary: VersionSummary) -> tuple[str, float, bool]:
    # Keys ascend; versions of one key run newest first. Timestamps only carry
    # second precision, so the latest version wins a tie.
    timestamp = summary.last_modified.timestamp() if summary.last_modified else 0.0
    return (summary.key, -timestamp, not summary.is_latest)


def _parse_max_keys(value: object) -> int:
    if value is None:
        return DEFAULT_MAX_KEYS
    try:
        max_keys = int(value)
    except (TypeError, ValueError) as exc:
        raise MalformedResponseError(f"Invalid MaxKeys value: {value!r}") from exc
    return max_keys if max_keys > 0 else DEFAULT_MAX_KEYS


def _decoder(encoding_type: str) -> Callable[[str], str]:
    if encoding_type == URL_ENCODING:
        return unquote_plus
    return _identity


def _encoder(encoding_type: str) -> Callable[[str], str]:
    if encoding_type == URL_ENCODING:
        return _quote
    return _identity


def _quote(value: str) -> str:
    return quote_plus(value, safe="/")


def _identity(value: str) -> str:
    return value
