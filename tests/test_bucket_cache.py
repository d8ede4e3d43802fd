"""Tests for samdeploy.wizards.bucket_cache — region normalisation, lazy
population, and pick-item construction."""

import pytest

from samdeploy.clients.s3 import S3AccessError
from samdeploy.wizards.bucket_cache import (
    GO_BACK_DESCRIPTION,
    SELECTED_PREVIOUSLY,
    RegionBucketCache,
    bucket_access_error_message,
    create_bucket_message_item,
    create_bucket_pick_items,
    no_buckets_message,
    normalize_location,
)


class TestNormalizeLocation:
    """Empty -> us-east-1, legacy EU -> eu-west-1, everything else as-is."""

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_blank_is_us_east_1(self, raw):
        assert normalize_location(raw) == "us-east-1"

    def test_legacy_eu(self):
        assert normalize_location("EU") == "eu-west-1"

    def test_regular_region_unchanged(self):
        assert normalize_location("ap-southeast-2") == "ap-southeast-2"


class TestRegionBucketCache:
    """ensure_populated() / buckets_for()."""

    def test_groups_and_sorts_by_region(self, fake_s3):
        s3 = fake_s3({
            "zeta": "",
            "alpha": None,
            "euro": "EU",
            "west": "us-west-2",
            "beta": "us-west-2",
        })
        cache = RegionBucketCache(s3, max_workers=4)
        cache.ensure_populated()

        assert cache.populated
        assert cache.buckets_for("us-east-1") == ["alpha", "zeta"]
        assert cache.buckets_for("eu-west-1") == ["euro"]
        assert cache.buckets_for("us-west-2") == ["beta", "west"]

    def test_unknown_region_is_empty(self, fake_s3):
        cache = RegionBucketCache(fake_s3({"a": ""}))
        cache.ensure_populated()
        assert cache.buckets_for("sa-east-1") == []

    def test_populate_is_idempotent(self, fake_s3):
        s3 = fake_s3({"a": "", "b": "us-west-2"})
        cache = RegionBucketCache(s3)

        cache.ensure_populated()
        cache.ensure_populated()
        cache.ensure_populated()

        assert s3.list_calls == 1
        assert sorted(s3.location_calls) == ["a", "b"]
        assert cache.buckets_for("us-east-1") == ["a"]

    def test_access_error_leaves_cache_unpopulated(self, fake_s3):
        s3 = fake_s3({"a": ""}, list_error="Access Denied")
        cache = RegionBucketCache(s3)

        with pytest.raises(S3AccessError, match="Access Denied"):
            cache.ensure_populated()
        assert not cache.populated
        assert cache.buckets_for("us-east-1") == []

        s3.list_error = None
        cache.ensure_populated()
        assert cache.populated
        assert s3.list_calls == 2
        assert cache.buckets_for("us-east-1") == ["a"]

    def test_failed_lookup_is_skipped(self, fake_s3):
        s3 = fake_s3({"good": "us-west-2", "bad": "us-west-2"}, failing_lookups={"bad"})
        cache = RegionBucketCache(s3)
        cache.ensure_populated()

        assert cache.populated
        assert cache.buckets_for("us-west-2") == ["good"]

    def test_no_buckets(self, fake_s3):
        s3 = fake_s3()
        cache = RegionBucketCache(s3)
        cache.ensure_populated()

        assert cache.populated
        assert s3.location_calls == []

    def test_seeded_regions_survive_population(self, fake_s3):
        cache = RegionBucketCache(fake_s3({"a": "us-west-2"}))
        cache.seed_regions(["us-east-1", "us-west-2"])
        cache.ensure_populated()

        assert cache.buckets_for("us-east-1") == []
        assert cache.buckets_for("us-west-2") == ["a"]

    def test_buckets_for_returns_a_copy(self, fake_s3):
        cache = RegionBucketCache(fake_s3({"a": ""}))
        cache.ensure_populated()

        cache.buckets_for("us-east-1").append("mutated")
        assert cache.buckets_for("us-east-1") == ["a"]


class TestBucketPickItems:
    """Pick items and the fallback message item."""

    def test_sorted_by_label(self):
        items = create_bucket_pick_items(["b", "c", "a"])
        assert [item.label for item in items] == ["a", "b", "c"]
        assert not any(item.is_message for item in items)

    def test_previous_selection_flagged(self):
        items = create_bucket_pick_items(["a", "b"], initial_value="b")
        by_label = {item.label: item for item in items}

        assert by_label["b"].always_show is True
        assert by_label["b"].description == SELECTED_PREVIOUSLY
        assert by_label["a"].always_show is False
        assert by_label["a"].description == ""

    def test_message_item(self):
        item = create_bucket_message_item(bucket_access_error_message("us-west-2"), "Access Denied")

        assert item.is_message
        assert item.label == "There was a problem accessing S3 in region us-west-2"
        assert item.detail == "Access Denied"
        assert item.description == GO_BACK_DESCRIPTION

    def test_no_buckets_message(self):
        assert no_buckets_message("eu-west-1") == "You do not have access to any S3 buckets in eu-west-1"
