from __future__ import annotations
"""Business logic for listing object versions."""
from dataclasses import replace
import logging
from typing import Callable, Iterator, Optional

import boto3
from botocore.client import Config

from .codec import MalformedResponseError, parse_list_versions_response
from .models import ListVersionsRequest, VersionListing, VersionListingResult, VersionSummary

LOGGER = logging.getLogger(__name__)


def next_page_request(listing: VersionListing) -> Optional[ListVersionsRequest]:
    """Return the request for the page after ``listing``.

    Returns ``None`` when ``listing`` is the last page. The new request keeps
    every echoed parameter and only moves the two markers forward.
    """

    if not listing.is_truncated:
        return None
    return ListVersionsRequest(
        bucket_name=listing.bucket_name,
        prefix=listing.prefix,
        key_marker=listing.next_key_marker or "",
        version_id_marker=listing.next_version_id_marker or "",
        delimiter=listing.delimiter,
        max_keys=listing.max_keys,
        encoding_type=listing.encoding_type,
    )


class VersionListingService:
    """Encapsulates version listing logic independent of any front end."""

    def __init__(self, client_factory: Callable[..., object] | None = None):
        self._client_factory = client_factory or boto3.client

    def list_buckets(
        self,
        *,
        endpoint_url: str,
        access_key: str,
        secret_key: str,
        client=None,
    ) -> list[str]:
        """Return the available bucket names."""

        client = client or self._create_client(endpoint_url, access_key, secret_key)
        buckets_response = client.list_buckets()
        return [bucket["Name"] for bucket in buckets_response.get("Buckets", [])]

    def list_versions(
        self,
        *,
        endpoint_url: str,
        access_key: str,
        secret_key: str,
        request: ListVersionsRequest,
        client=None,
    ) -> VersionListing:
        """Fetch a single page of object versions.

        Raises:
            BotoCoreError | ClientError: when the call itself fails.
            MalformedResponseError: when the response cannot form a page.
        """

        client = client or self._create_client(endpoint_url, access_key, secret_key)
        LOGGER.debug(
            "Listing versions in %s (prefix=%r, key_marker=%r, version_id_marker=%r)",
            request.bucket_name,
            request.prefix,
            request.key_marker,
            request.version_id_marker,
        )
        response = client.list_object_versions(**request.to_params())
        listing = parse_list_versions_response(response, request)
        LOGGER.debug(
            "Received %d versions and %d common prefixes from %s (truncated=%s)",
            len(listing.version_summaries),
            len(listing.common_prefixes),
            request.bucket_name,
            listing.is_truncated,
        )
        return listing

    def iter_version_listings(
        self,
        *,
        endpoint_url: str,
        access_key: str,
        secret_key: str,
        request: ListVersionsRequest,
        max_pages: int | None = None,
    ) -> Iterator[VersionListing]:
        """Yield consecutive pages until the listing is exhausted.

        ``max_pages`` bounds the number of calls; ``None`` means no bound.
        """

        if max_pages is not None and max_pages <= 0:
            raise ValueError("max_pages must be greater than zero")

        client = self._create_client(endpoint_url, access_key, secret_key)
        current: ListVersionsRequest | None = request
        page_count = 0
        while current is not None:
            listing = self.list_versions(
                endpoint_url=endpoint_url,
                access_key=access_key,
                secret_key=secret_key,
                request=current,
                client=client,
            )
            page_count += 1
            yield listing

            following = next_page_request(listing)
            if following is not None and (
                following.key_marker == current.key_marker
                and following.version_id_marker == current.version_id_marker
            ):
                raise MalformedResponseError(
                    f"Listing of {current.bucket_name} did not advance past "
                    f"key marker {current.key_marker!r}"
                )
            if following is not None and max_pages is not None and page_count >= max_pages:
                LOGGER.info("Stopping listing of %s after %d pages", request.bucket_name, page_count)
                return
            current = following

    def iter_version_summaries(
        self,
        *,
        endpoint_url: str,
        access_key: str,
        secret_key: str,
        request: ListVersionsRequest,
        max_pages: int | None = None,
    ) -> Iterator[VersionSummary]:
        """Yield every version across pages in service order."""

        for listing in self.iter_version_listings(
            endpoint_url=endpoint_url,
            access_key=access_key,
            secret_key=secret_key,
            request=request,
            max_pages=max_pages,
        ):
            yield from listing.version_summaries

    def list_all_versions(
        self,
        *,
        endpoint_url: str,
        access_key: str,
        secret_key: str,
        request: ListVersionsRequest,
        max_pages: int | None = None,
    ) -> VersionListingResult:
        """Collect versions and common prefixes across pages.

        When ``max_pages`` stops the listing early the result carries the
        request that resumes it.
        """

        result = VersionListingResult(bucket_name=request.bucket_name)
        last_listing: VersionListing | None = None
        for listing in self.iter_version_listings(
            endpoint_url=endpoint_url,
            access_key=access_key,
            secret_key=secret_key,
            request=request,
            max_pages=max_pages,
        ):
            result.version_summaries.extend(listing.version_summaries)
            for prefix in listing.common_prefixes:
                if prefix not in result.common_prefixes:
                    result.common_prefixes.append(prefix)
            result.page_count += 1
            last_listing = listing

        if last_listing is not None and last_listing.is_truncated:
            return replace(result, has_more=True, resume_request=next_page_request(last_listing))
        return result

    def _create_client(self, endpoint_url: str, access_key: str, secret_key: str):
        config = Config(signature_version="s3v4")
        return self._client_factory(
            "s3",
            endpoint_url=endpoint_url,
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            config=config,
        )
