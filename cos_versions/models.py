from __future__ import annotations
"""Data models describing object version listings."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

# Page size the service applies when a request does not specify one.
DEFAULT_MAX_KEYS = 1000


@dataclass(frozen=True)
class Owner:
    """Owner of an object version."""

    id: str = ""
    display_name: str = ""


@dataclass(frozen=True)
class VersionSummary:
    """A single object version or delete marker within a listing."""

    bucket_name: str
    key: str
    version_id: str
    is_latest: bool = False
    last_modified: Optional[datetime] = None
    owner: Optional[Owner] = None
    size: int = 0
    etag: Optional[str] = None
    storage_class: Optional[str] = None
    is_delete_marker: bool = False


@dataclass(frozen=True)
class ListVersionsRequest:
    """Parameters of a single list object versions call."""

    bucket_name: str
    prefix: str = ""
    key_marker: str = ""
    version_id_marker: str = ""
    delimiter: str = ""
    max_keys: int = DEFAULT_MAX_KEYS
    encoding_type: str = ""

    def __post_init__(self) -> None:
        if not self.bucket_name:
            raise ValueError("bucket_name cannot be empty")
        if self.max_keys <= 0:
            raise ValueError("max_keys must be greater than zero")

    def to_params(self) -> dict[str, object]:
        """Return keyword arguments for ``client.list_object_versions``."""

        params: dict[str, object] = {"Bucket": self.bucket_name, "MaxKeys": self.max_keys}
        if self.prefix:
            params["Prefix"] = self.prefix
        if self.delimiter:
            params["Delimiter"] = self.delimiter
        if self.key_marker:
            params["KeyMarker"] = self.key_marker
        if self.version_id_marker:
            params["VersionIdMarker"] = self.version_id_marker
        if self.encoding_type:
            params["EncodingType"] = self.encoding_type
        return params


@dataclass(frozen=True)
class VersionListing:
    """One page of a list object versions call.

    The request parameters are echoed back so that callers can re-issue the
    request. ``next_key_marker`` and ``next_version_id_marker`` are only set
    when ``is_truncated`` is true.
    """

    bucket_name: str
    version_summaries: tuple[VersionSummary, ...] = field(default_factory=tuple)
    common_prefixes: tuple[str, ...] = field(default_factory=tuple)
    prefix: str = ""
    key_marker: str = ""
    version_id_marker: str = ""
    delimiter: str = ""
    max_keys: int = DEFAULT_MAX_KEYS
    encoding_type: str = ""
    is_truncated: bool = False
    next_key_marker: Optional[str] = None
    next_version_id_marker: Optional[str] = None

    def __post_init__(self) -> None:
        # Callers may hand in lists; store tuples so the page stays read-only.
        object.__setattr__(self, "version_summaries", tuple(self.version_summaries))
        object.__setattr__(self, "common_prefixes", tuple(self.common_prefixes))


@dataclass
class VersionListingResult:
    """Versions collected across several pages of a listing."""

    bucket_name: str
    version_summaries: list[VersionSummary] = field(default_factory=list)
    common_prefixes: list[str] = field(default_factory=list)
    page_count: int = 0
    has_more: bool = False
    resume_request: Optional[ListVersionsRequest] = None
