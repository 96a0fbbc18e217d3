import dataclasses
import unittest

from cos_versions.models import (
    DEFAULT_MAX_KEYS,
    ListVersionsRequest,
    VersionListing,
    VersionSummary,
)


class ListVersionsRequestTests(unittest.TestCase):
    def test_defaults_to_service_page_size(self):
        request = ListVersionsRequest(bucket_name="bucket-one")

        self.assertEqual(1000, DEFAULT_MAX_KEYS)
        self.assertEqual(DEFAULT_MAX_KEYS, request.max_keys)

    def test_to_params_omits_empty_values(self):
        request = ListVersionsRequest(bucket_name="bucket-one")

        self.assertEqual({"Bucket": "bucket-one", "MaxKeys": 1000}, request.to_params())

    def test_to_params_includes_markers_and_delimiter(self):
        request = ListVersionsRequest(
            bucket_name="bucket-one",
            prefix="foo/",
            key_marker="foo/bar",
            version_id_marker="v2",
            delimiter="/",
            max_keys=50,
            encoding_type="url",
        )

        self.assertEqual(
            {
                "Bucket": "bucket-one",
                "MaxKeys": 50,
                "Prefix": "foo/",
                "Delimiter": "/",
                "KeyMarker": "foo/bar",
                "VersionIdMarker": "v2",
                "EncodingType": "url",
            },
            request.to_params(),
        )

    def test_rejects_non_positive_max_keys(self):
        with self.assertRaises(ValueError):
            ListVersionsRequest(bucket_name="bucket-one", max_keys=0)

    def test_rejects_empty_bucket(self):
        with self.assertRaises(ValueError):
            ListVersionsRequest(bucket_name="")


class VersionListingTests(unittest.TestCase):
    def test_defaults_describe_an_empty_last_page(self):
        listing = VersionListing(bucket_name="bucket-one")

        self.assertEqual((), listing.version_summaries)
        self.assertEqual((), listing.common_prefixes)
        self.assertFalse(listing.is_truncated)
        self.assertIsNone(listing.next_key_marker)
        self.assertIsNone(listing.next_version_id_marker)
        self.assertEqual(DEFAULT_MAX_KEYS, listing.max_keys)

    def test_sequences_are_stored_as_tuples_in_given_order(self):
        summaries = [
            VersionSummary(bucket_name="bucket-one", key="b", version_id="v1"),
            VersionSummary(bucket_name="bucket-one", key="a", version_id="v1"),
        ]
        prefixes = ["z/", "a/"]

        listing = VersionListing(
            bucket_name="bucket-one",
            version_summaries=summaries,
            common_prefixes=prefixes,
            delimiter="/",
        )
        summaries.append(VersionSummary(bucket_name="bucket-one", key="c", version_id="v1"))

        self.assertEqual(("b", "a"), tuple(s.key for s in listing.version_summaries))
        self.assertEqual(("z/", "a/"), listing.common_prefixes)

    def test_listing_cannot_be_mutated(self):
        listing = VersionListing(bucket_name="bucket-one")

        with self.assertRaises(dataclasses.FrozenInstanceError):
            listing.is_truncated = True  # type: ignore[misc]


if __name__ == "__main__":
    unittest.main()
