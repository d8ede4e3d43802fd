"""Per-run cache of S3 bucket names grouped by region.

Listing buckets is account-wide and slow, and resolving each bucket's
region is one extra call per bucket.  The deploy wizard lets the user bounce
between the region and bucket steps, so the cache does this work at most
once per wizard run:

1. ``list_buckets()`` once
2. ``get_bucket_location()`` for every bucket, in parallel
3. group names by normalised region, sorted

A failed listing leaves the cache unpopulated so the next visit to the
bucket step tries again.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass

from samdeploy.clients.s3 import S3Client
from samdeploy.regions import DEFAULT_REGION

logger = logging.getLogger(__name__)

# S3 reports the legacy "EU" constraint for some eu-west-1 buckets.
_LEGACY_LOCATIONS = {"EU": "eu-west-1"}

SELECTED_PREVIOUSLY = "Selected Previously"
GO_BACK_DESCRIPTION = "Go back to region selection..."


def normalize_location(location: str | None) -> str:
    """Map a raw bucket ``LocationConstraint`` to a region code.

    >>> normalize_location("")
    'us-east-1'
    >>> normalize_location("EU")
    'eu-west-1'
    """
    if not location or not location.strip():
        return DEFAULT_REGION
    return _LEGACY_LOCATIONS.get(location, location)


def bucket_access_error_message(region: str) -> str:
    return f"There was a problem accessing S3 in region {region}"


def no_buckets_message(region: str) -> str:
    return f"You do not have access to any S3 buckets in {region}"


class RegionBucketCache:
    """Bucket names keyed by region, populated lazily once.

    Parameters
    ----------
    s3_client:
        Client used for the listing and per-bucket location lookups.
    max_workers:
        Upper bound on concurrent location lookups.
    """

    def __init__(self, s3_client: S3Client, max_workers: int = 8):
        self._client = s3_client
        self._max_workers = max(1, max_workers)
        self._buckets_by_region: dict[str, list[str]] = {}
        self._populated = False

    @property
    def populated(self) -> bool:
        return self._populated

    def seed_regions(self, region_codes) -> None:
        """Ensure an (empty) entry exists for every region in *region_codes*."""
        for code in region_codes:
            self._buckets_by_region.setdefault(code, [])

    def ensure_populated(self) -> None:
        """List and group all buckets, unless that already happened.

        Raises:
            Whatever the client raises from ``list_buckets``, such as
                ``S3AccessError``.  The cache stays unpopulated.
        """
        if self._populated:
            return

        names = [name for name in self._client.list_buckets() if name]
        logger.debug("Listed %d bucket(s); resolving regions", len(names))

        for name, region in self._resolve_regions(names):
            self._buckets_by_region.setdefault(region, []).append(name)

        for buckets in self._buckets_by_region.values():
            buckets.sort()

        self._populated = True

    def buckets_for(self, region: str) -> list[str]:
        """Return the sorted bucket names for *region* (empty if none)."""
        return list(self._buckets_by_region.get(region, []))

    def _resolve_regions(self, names: list[str]) -> list[tuple[str, str]]:
        """Look up each bucket's region concurrently.

        Lookups that fail are logged and skipped; they never block the
        others.
        """
        if not names:
            return []

        resolved: list[tuple[str, str]] = []
        workers = min(self._max_workers, len(names))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {
                executor.submit(self._client.get_bucket_location, name): name
                for name in names
            }
            for future in as_completed(futures):
                name = futures[future]
                try:
                    location = future.result()
                except Exception as exc:
                    logger.warning("Skipping bucket %s: could not resolve its region (%s)", name, exc)
                    continue
                resolved.append((name, normalize_location(location)))

        return resolved


# -------------------------------------------------------------------- #
# Pick items shown by the bucket prompt
# -------------------------------------------------------------------- #


@dataclass(frozen=True)
class BucketPickItem:
    """One entry in the bucket prompt.

    ``is_message`` marks the single fallback entry shown when there are no
    buckets to choose from; picking it means "go back".
    """

    label: str
    description: str = ""
    detail: str = ""
    always_show: bool = False
    is_message: bool = False


def create_bucket_pick_items(buckets: list[str], initial_value: str | None = None) -> list[BucketPickItem]:
    """Turn bucket names into pick items sorted by label.

    The previously selected bucket is flagged so it stays visible while
    the user filters.
    """
    items = [
        BucketPickItem(
            label=name,
            always_show=name == initial_value,
            description=SELECTED_PREVIOUSLY if name == initial_value else "",
        )
        for name in buckets
    ]
    return sorted(items, key=lambda item: item.label)


def create_bucket_message_item(message: str, error_detail: str = "") -> BucketPickItem:
    """The fallback entry used when a region has no usable buckets."""
    return BucketPickItem(
        label=message,
        detail=error_detail,
        description=GO_BACK_DESCRIPTION,
        is_message=True,
    )
