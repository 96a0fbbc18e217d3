"""Command line entry point for listing object versions."""
import argparse
import json
import logging
import sys
from typing import Optional, Sequence, TextIO

from botocore.exceptions import BotoCoreError, ClientError

from .codec import URL_ENCODING, MalformedResponseError
from .controller import NotConnectedError, VersionBrowserController
from .formatting import format_listing, format_version_row, listing_to_dict, summary_to_dict
from .models import DEFAULT_MAX_KEYS, ListVersionsRequest, VersionListingResult
from .settings import SettingsStorage

LOGGER = logging.getLogger(__name__)


def _page_size(value: str) -> int:
    max_keys = int(value)
    if not 1 <= max_keys <= DEFAULT_MAX_KEYS:
        raise argparse.ArgumentTypeError(f"must be between 1 and {DEFAULT_MAX_KEYS}")
    return max_keys


def _page_limit(value: str) -> int:
    max_pages = int(value)
    if max_pages < 0:
        raise argparse.ArgumentTypeError("must be 0 (no limit) or greater")
    return max_pages


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cos-versions",
        description="List object versions in an S3-compatible bucket.",
    )
    parser.add_argument("bucket", help="bucket to list")
    parser.add_argument("--prefix", default="", help="only list keys starting with PREFIX")
    parser.add_argument("--delimiter", default=None, help="roll keys up into common prefixes at DELIMITER")
    parser.add_argument("--max-keys", type=_page_size, default=None, help="versions per page (1-1000)")
    parser.add_argument("--key-marker", default="", help="resume after this key")
    parser.add_argument("--version-id-marker", default="", help="resume after this version of --key-marker")
    parser.add_argument("--encoding-type", choices=[URL_ENCODING], default="", help="ask the service to URL-encode keys")
    parser.add_argument("--all", action="store_true", help="follow the listing across pages")
    parser.add_argument("--max-pages", type=_page_limit, default=None, help="stop --all after N pages, 0 for no limit")

    connection = parser.add_argument_group("connection")
    connection.add_argument("--profile", help="saved connection profile")
    connection.add_argument("--endpoint-url", help="service endpoint")
    connection.add_argument("--access-key", help="access key id")
    connection.add_argument("--secret-key", default="", help="secret access key")

    parser.add_argument("--json", action="store_true", help="print JSON instead of text")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    return parser


def _connect(controller: VersionBrowserController, args: argparse.Namespace) -> None:
    if args.profile:
        controller.connect_with_profile(args.profile)
    elif args.endpoint_url and args.access_key:
        controller.connect(
            endpoint_url=args.endpoint_url,
            access_key=args.access_key,
            secret_key=args.secret_key,
        )
    else:
        raise NotConnectedError("Either --profile or --endpoint-url and --access-key are required")


def _print_result(result: VersionListingResult, as_json: bool, stdout: TextIO) -> None:
    resume = result.resume_request
    if as_json:
        payload = {
            "bucket_name": result.bucket_name,
            "page_count": result.page_count,
            "has_more": result.has_more,
            "next_key_marker": resume.key_marker if resume else None,
            "next_version_id_marker": resume.version_id_marker if resume else None,
            "common_prefixes": result.common_prefixes,
            "versions": [summary_to_dict(summary) for summary in result.version_summaries],
        }
        print(json.dumps(payload, indent=2), file=stdout)
        return
    for prefix in result.common_prefixes:
        print(f"{'PRE':>34} {prefix}", file=stdout)
    for summary in result.version_summaries:
        print(format_version_row(summary), file=stdout)
    if resume is not None:
        print(
            f"More versions available: --key-marker '{resume.key_marker}' "
            f"--version-id-marker '{resume.version_id_marker}'",
            file=stdout,
        )


def main(
    argv: Optional[Sequence[str]] = None,
    *,
    controller: Optional[VersionBrowserController] = None,
    settings_storage: Optional[SettingsStorage] = None,
    stdout: Optional[TextIO] = None,
    stderr: Optional[TextIO] = None,
) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.max_pages is not None and not args.all:
        parser.error("--max-pages requires --all")
    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    settings = (settings_storage or SettingsStorage()).load()
    max_keys = args.max_keys if args.max_keys is not None else settings.max_keys
    delimiter = args.delimiter if args.delimiter is not None else settings.delimiter
    max_pages = (args.max_pages if args.max_pages is not None else settings.max_pages) or None

    try:
        controller = controller or VersionBrowserController()
        _connect(controller, args)
        if args.all:
            request = ListVersionsRequest(
                bucket_name=args.bucket,
                prefix=args.prefix,
                key_marker=args.key_marker,
                version_id_marker=args.version_id_marker,
                delimiter=delimiter,
                max_keys=max_keys,
                encoding_type=args.encoding_type,
            )
            result = controller.list_all_versions(request=request, max_pages=max_pages)
            _print_result(result, args.json, stdout)
        else:
            listing = controller.list_versions(
                bucket_name=args.bucket,
                prefix=args.prefix,
                delimiter=delimiter,
                max_keys=max_keys,
                key_marker=args.key_marker,
                version_id_marker=args.version_id_marker,
                encoding_type=args.encoding_type,
            )
            if args.json:
                print(json.dumps(listing_to_dict(listing), indent=2), file=stdout)
            else:
                for line in format_listing(listing):
                    print(line, file=stdout)
    except (BotoCoreError, ClientError) as exc:
        LOGGER.debug("Listing of %s failed", args.bucket, exc_info=True)
        print(f"error: {exc}", file=stderr)
        return 1
    except (NotConnectedError, MalformedResponseError, ValueError) as exc:
        print(f"error: {exc}", file=stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
