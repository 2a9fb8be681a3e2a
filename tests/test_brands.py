"""Tests for brand extraction and the catalogue migration."""

from datetime import datetime, timedelta, timezone

import pytest

from wufi_checkout.brands import (
    DRY_RUN_LIMIT,
    MigrationOptions,
    detect_features,
    extract_brand,
    migrate_brands,
    process_product,
    product_price,
)
from wufi_checkout.errors import InvalidArgumentError

NOW = datetime(2026, 3, 1, tzinfo=timezone.utc)


def product(pid, title, price, brand=None, created_at="2024-01-01T00:00:00Z"):
    return {
        "id": pid,
        "title": title,
        "created_at": created_at,
        "metadata": {"brand": brand} if brand else {},
        "variants": [{"calculated_price": {"calculated_amount": price}}],
    }


class FakeCatalog:
    def __init__(self, products, fail_updates=(), fail_fetch_at=None):
        self.products = products
        self.fail_updates = set(fail_updates)
        self.fail_fetch_at = fail_fetch_at
        self.fetches = []
        self.updates = {}

    def list_products(self, limit, offset=0):
        self.fetches.append((limit, offset))
        if offset == self.fail_fetch_at:
            raise RuntimeError("backend down")
        return self.products[offset : offset + limit], len(self.products)

    def update_product_metadata(self, product_id, metadata):
        if product_id in self.fail_updates:
            raise RuntimeError("write rejected")
        self.updates[product_id] = dict(metadata)
        return {"id": product_id}


class TestExtractBrand:
    def test_title_prefix_and_price_in_tier(self):
        match = extract_brand("ROYAL CANIN Mini Adult 8kg", 55.0)
        assert match.brand == "royal-canin"
        assert match.method == "exact_match"
        assert match.confidence == 0.7

    def test_brand_inside_title(self):
        match = extract_brand("Koeratoit ORIJEN Original", 10.0)
        assert match.brand == "orijen"
        assert match.confidence == 0.4

    def test_apostrophe_spelling(self):
        assert extract_brand("Hill's Science Plan Adult", 60.0).brand == "hills"

    def test_sub_brand_maps_to_parent(self):
        match = extract_brand("PRO PLAN Medium Adult", 70.0)
        assert match.brand == "purina"
        assert match.confidence == 0.7

    def test_pattern_fallback(self):
        match = extract_brand("Royal delights", 5.0)
        assert match.brand == "royal-canin"
        assert match.confidence == 0.6
        assert match.method == "pattern_match"

    def test_unknown(self):
        match = extract_brand("Kassiliiv 10L", 8.0)
        assert match.brand == "unknown"
        assert match.confidence == 0.0


class TestDetectFeatures:
    def test_new_premium_product(self):
        created = (NOW - timedelta(days=10)).isoformat()
        assert detect_features(created, 55.0, "royal-canin", now=NOW) == [
            "subscription",
            "free-shipping",
            "new-arrival",
            "premium",
            "bestseller",
        ]

    def test_cheap_old_product(self):
        assert detect_features("2020-01-01T00:00:00Z", 9.0, "whiskas", now=NOW) == []

    def test_unparseable_date(self):
        assert detect_features("yesterday", 35.0, "unknown", now=NOW) == ["subscription"]


class TestProcessProduct:
    def test_product_price(self):
        assert product_price(product("p", "X", "12.50")) == 12.5
        assert product_price({"variants": []}) == 0.0

    def test_existing_brand_is_kept(self):
        result = process_product(product("p1", "ORIJEN Six Fish", 80, brand="orijen"), now=NOW)
        assert result.needs_update is False
        assert result.existing_brand == "orijen"

    def test_force_update(self):
        result = process_product(
            product("p1", "ORIJEN Six Fish", 80, brand="orijen"), force_update=True, now=NOW
        )
        assert result.needs_update is True

    def test_unknown_brand_is_updated(self):
        result = process_product(product("p1", "ORIJEN Six Fish", 80, brand="unknown"), now=NOW)
        assert result.needs_update is True

    def test_low_confidence_needs_review(self):
        result = process_product(product("p2", "Kassiliiv 10L", 8), now=NOW)
        assert result.manual_review_required is True


class TestMigrateBrands:
    def catalog(self):
        return FakeCatalog(
            [
                product("p1", "ROYAL CANIN Mini Adult 8kg", 55),
                product("p2", "Kassiliiv 10L", 8),
                product("p3", "ORIJEN Original 11.4kg", 90, brand="orijen"),
            ]
        )

    def test_dry_run_writes_nothing(self):
        catalog = self.catalog()
        report = migrate_brands(catalog, MigrationOptions(dry_run=True, batch_size=2), now=NOW)
        assert catalog.updates == {}
        assert report.total_products == 3
        assert report.processed_products == 3
        assert report.manual_review_required == 1
        assert report.successful_extractions == 2
        assert report.brand_distribution["royal-canin"] == 1
        assert catalog.fetches == [(2, 0), (2, 2), (2, 4)]

    def test_live_run_updates_confident_unbranded_products(self):
        catalog = self.catalog()
        migrate_brands(catalog, MigrationOptions(dry_run=False), now=NOW)
        assert list(catalog.updates) == ["p1"]
        assert catalog.updates["p1"]["brand"] == "royal-canin"
        assert "premium" in catalog.updates["p1"]["features"]

    def test_update_failure_is_recorded(self):
        catalog = self.catalog()
        catalog.fail_updates = {"p1"}
        report = migrate_brands(catalog, MigrationOptions(dry_run=False), now=NOW)
        assert report.failed_extractions == 1
        assert "p1" in report.errors[0]

    def test_fetch_failure_stops_run(self):
        catalog = self.catalog()
        catalog.fail_fetch_at = 2
        report = migrate_brands(catalog, MigrationOptions(batch_size=2), now=NOW)
        assert report.processed_products == 2
        assert "offset 2" in report.errors[0]

    def test_dry_run_is_capped(self):
        catalog = FakeCatalog([product(f"p{i}", "Kassiliiv", 8) for i in range(300)])
        report = migrate_brands(catalog, MigrationOptions(dry_run=True, batch_size=100), now=NOW)
        assert report.processed_products == DRY_RUN_LIMIT

    def test_rejects_non_positive_batch(self):
        with pytest.raises(InvalidArgumentError):
            migrate_brands(self.catalog(), MigrationOptions(batch_size=0))

    def test_report_dict(self):
        report = migrate_brands(self.catalog(), now=NOW)
        data = report.to_dict()
        assert data["processed_products"] == 3
        assert data["confidence_distribution"] == {"high": 0, "medium": 2, "low": 1}
        assert len(data["sample_results"]) == 3
        assert data["sample_results"][0]["product_id"] == "p1"
