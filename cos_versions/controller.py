from __future__ import annotations
"""Controller layer between front ends and :class:`VersionListingService`."""

import logging

from .models import DEFAULT_MAX_KEYS, ListVersionsRequest, VersionListing, VersionListingResult
from .profiles import ConnectionProfile, ProfileStorage
from .services import VersionListingService, next_page_request

LOGGER = logging.getLogger(__name__)


class NotConnectedError(RuntimeError):
    """Raised when a listing is attempted before connecting."""


class VersionBrowserController:
    """Coordinates user actions with the :class:`VersionListingService`."""

    def __init__(
        self,
        service: VersionListingService | None = None,
        storage: ProfileStorage | None = None,
    ):
        self._service = service or VersionListingService()
        self._storage = storage or ProfileStorage()
        self._connection_params: dict[str, str] | None = None
        self._profiles: dict[str, ConnectionProfile] = {p.name: p for p in self._storage.load()}
        self._selected_profile: str | None = None

    @property
    def is_connected(self) -> bool:
        return self._connection_params is not None

    @property
    def selected_profile(self) -> str | None:
        return self._selected_profile

    def list_profiles(self) -> list[ConnectionProfile]:
        return list(self._profiles.values())

    def save_profile(self, profile: ConnectionProfile, *, original_name: str | None = None) -> None:
        """Add or replace ``profile``; ``original_name`` renames an existing one."""

        profiles = self._profiles_without(original_name) if original_name else dict(self._profiles)
        profiles[profile.name] = profile
        self._replace_profiles(profiles)

    def delete_profile(self, name: str) -> None:
        self.get_profile(name)
        self._replace_profiles(self._profiles_without(name))
        if self._selected_profile == name:
            self._selected_profile = None

    def get_profile(self, name: str) -> ConnectionProfile:
        try:
            return self._profiles[name]
        except KeyError:
            raise ValueError(f"Profile '{name}' does not exist") from None

    def connect_with_profile(self, name: str) -> list[str]:
        profile = self.get_profile(name)
        buckets = self.connect(**profile.connection_params())
        self._selected_profile = name
        return buckets

    def connect(self, *, endpoint_url: str, access_key: str, secret_key: str) -> list[str]:
        connection_params = {
            "endpoint_url": endpoint_url,
            "access_key": access_key,
            "secret_key": secret_key,
        }
        buckets = self._service.list_buckets(**connection_params)
        self._connection_params = connection_params
        LOGGER.info("Connected to %s (%d buckets)", endpoint_url, len(buckets))
        return buckets

    def disconnect(self) -> None:
        self._connection_params = None
        self._selected_profile = None

    def list_versions(
        self,
        *,
        bucket_name: str,
        prefix: str = "",
        delimiter: str = "",
        max_keys: int = DEFAULT_MAX_KEYS,
        key_marker: str = "",
        version_id_marker: str = "",
        encoding_type: str = "",
    ) -> VersionListing:
        params = self._require_connection()
        request = ListVersionsRequest(
            bucket_name=bucket_name,
            prefix=prefix,
            key_marker=key_marker,
            version_id_marker=version_id_marker,
            delimiter=delimiter,
            max_keys=max_keys,
            encoding_type=encoding_type,
        )
        return self._service.list_versions(request=request, **params)

    def next_page(self, listing: VersionListing) -> VersionListing:
        """Fetch the page that follows ``listing``."""

        request = next_page_request(listing)
        if request is None:
            raise ValueError(f"Listing of {listing.bucket_name} has no further pages")
        params = self._require_connection()
        return self._service.list_versions(request=request, **params)

    def list_all_versions(
        self,
        *,
        request: ListVersionsRequest,
        max_pages: int | None = None,
    ) -> VersionListingResult:
        params = self._require_connection()
        return self._service.list_all_versions(request=request, max_pages=max_pages, **params)

    def _require_connection(self) -> dict[str, str]:
        if not self._connection_params:
            raise NotConnectedError("Not connected to object storage")
        return self._connection_params

    def _profiles_without(self, name: str) -> dict[str, ConnectionProfile]:
        return {key: profile for key, profile in self._profiles.items() if key != name}

    def _replace_profiles(self, profiles: dict[str, ConnectionProfile]) -> None:
        self._storage.save(list(profiles.values()))
        self._profiles = profiles
