"""Brand extraction and catalogue migration.

Product titles imported from suppliers carry the brand as free text
("ROYAL CANIN Mini Adult 8kg"). This job scores each title against a
known-brand dictionary, suggests catalogue feature tags and, outside dry
runs, writes brand and features back to the product metadata.
"""

import time
from collections import Counter
from collections.abc import Mapping
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional, Protocol

import structlog

from .cart import to_decimal
from .errors import InvalidArgumentError

logger = structlog.get_logger()


@dataclass(frozen=True)
class BrandMapping:
    slug: str
    confidence: float
    tier: str
    parent: Optional[str] = None


# Dictionary order matters: the first brand contained in the title wins.
BRAND_MAPPINGS: dict[str, BrandMapping] = {
    "ORIJEN": BrandMapping("orijen", 1.0, "premium"),
    "ROYAL CANIN": BrandMapping("royal-canin", 1.0, "premium"),
    "HILLS": BrandMapping("hills", 1.0, "premium"),
    "HILL'S": BrandMapping("hills", 1.0, "premium"),
    "PURINA": BrandMapping("purina", 1.0, "mainstream"),
    "CHAPPI": BrandMapping("chappi", 1.0, "budget", parent="purina"),
    "PRO PLAN": BrandMapping("purina", 0.9, "premium", parent="purina"),
    "ACANA": BrandMapping("acana", 1.0, "premium"),
    "IAMS": BrandMapping("iams", 1.0, "mainstream"),
    "WHISKAS": BrandMapping("whiskas", 1.0, "mainstream"),
    "FELIX": BrandMapping("felix", 1.0, "mainstream"),
    "SHEBA": BrandMapping("sheba", 1.0, "premium"),
}

TIER_PRICE_RANGES: dict[str, tuple[float, float]] = {
    "premium": (40, 200),
    "mainstream": (15, 80),
    "budget": (5, 40),
}
DEFAULT_PRICE_RANGE = (0, 1000)

PREMIUM_BRANDS = frozenset({"orijen", "royal-canin", "hills", "acana"})
BESTSELLER_BRANDS = frozenset({"purina", "royal-canin", "hills"})

UNKNOWN_BRAND = "unknown"
MANUAL_REVIEW_THRESHOLD = 0.7
HIGH_CONFIDENCE = 0.9
SAMPLE_SIZE = 10
DRY_RUN_LIMIT = 200
NEW_ARRIVAL_DAYS = 30


@dataclass(frozen=True)
class BrandMatch:
    brand: str
    confidence: float
    method: str


@dataclass
class MigrationOptions:
    dry_run: bool = True
    batch_size: int = 100
    force_update: bool = False


@dataclass
class BrandExtractionResult:
    product_id: str
    original_title: str
    detected_brand: str
    confidence_score: float
    extraction_method: str
    manual_review_required: bool
    suggested_features: list[str]
    price_eur: float
    existing_brand: Optional[str]
    needs_update: bool


@dataclass
class MigrationReport:
    total_products: int = 0
    processed_products: int = 0
    successful_extractions: int = 0
    manual_review_required: int = 0
    failed_extractions: int = 0
    brand_distribution: Counter = field(default_factory=Counter)
    feature_distribution: Counter = field(default_factory=Counter)
    confidence_distribution: dict[str, int] = field(
        default_factory=lambda: {"high": 0, "medium": 0, "low": 0}
    )
    processing_time_ms: int = 0
    errors: list[str] = field(default_factory=list)
    sample_results: list[BrandExtractionResult] = field(default_factory=list)

    def record(self, result: BrandExtractionResult) -> None:
        self.processed_products += 1

        if result.confidence_score >= HIGH_CONFIDENCE:
            self.confidence_distribution["high"] += 1
        elif result.confidence_score >= MANUAL_REVIEW_THRESHOLD:
            self.confidence_distribution["medium"] += 1
        else:
            self.confidence_distribution["low"] += 1

        if result.manual_review_required:
            self.manual_review_required += 1
        else:
            self.successful_extractions += 1

        self.brand_distribution[result.detected_brand] += 1
        self.feature_distribution.update(result.suggested_features)

        if len(self.sample_results) < SAMPLE_SIZE:
            self.sample_results.append(result)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_products": self.total_products,
            "processed_products": self.processed_products,
            "successful_extractions": self.successful_extractions,
            "manual_review_required": self.manual_review_required,
            "failed_extractions": self.failed_extractions,
            "brand_distribution": dict(self.brand_distribution),
            "feature_distribution": dict(self.feature_distribution),
            "confidence_distribution": dict(self.confidence_distribution),
            "processing_time_ms": self.processing_time_ms,
            "errors": list(self.errors),
            "sample_results": [asdict(r) for r in self.sample_results],
        }


class ProductCatalog(Protocol):
    """What the migration needs from the backend (StoreClient satisfies it)."""

    def list_products(self, limit: int, offset: int = 0) -> tuple[list[dict], int]: ...

    def update_product_metadata(self, product_id: str, metadata: Mapping[str, Any]) -> dict: ...


def price_range_for_tier(tier: str) -> tuple[float, float]:
    return TIER_PRICE_RANGES.get(tier, DEFAULT_PRICE_RANGE)


def extract_brand(title: str, price_eur: float) -> BrandMatch:
    """Score a product title against the brand dictionary."""
    upper_title = (title or "").upper()
    brand = UNKNOWN_BRAND
    confidence = 0.0
    method = "pattern_match"

    for brand_name, mapping in BRAND_MAPPINGS.items():
        if brand_name not in upper_title:
            continue
        brand = mapping.slug
        method = "exact_match"
        confidence += 0.4
        if upper_title.startswith(brand_name):
            confidence += 0.2
        low, high = price_range_for_tier(mapping.tier)
        if low <= price_eur <= high:
            confidence += 0.1
        break

    if brand == UNKNOWN_BRAND:
        if "PRO PLAN" in upper_title:
            brand, confidence = "purina", 0.8
        elif "SCIENCE PLAN" in upper_title or "PRESCRIPTION DIET" in upper_title:
            brand, confidence = "hills", 0.8
        elif "ROYAL" in upper_title:
            brand, confidence = "royal-canin", 0.6

    # round() keeps 0.4 + 0.2 + 0.1 from drifting below 0.7
    return BrandMatch(brand=brand, confidence=round(min(confidence, 1.0), 4), method=method)


def _parse_created_at(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        created = value
    elif isinstance(value, str) and value:
        try:
            created = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    return created


def detect_features(
    created_at: Any,
    price_eur: float,
    brand: str,
    now: Optional[datetime] = None,
) -> list[str]:
    """Suggest catalogue feature tags for a product."""
    if now is None:
        now = datetime.now(timezone.utc)
    features = []

    if price_eur >= 30 or brand in PREMIUM_BRANDS:
        features.append("subscription")
    if price_eur >= 50:
        features.append("free-shipping")

    created = _parse_created_at(created_at)
    if created is not None and (now - created).total_seconds() <= NEW_ARRIVAL_DAYS * 86400:
        features.append("new-arrival")

    if brand in PREMIUM_BRANDS or price_eur >= 50:
        features.append("premium")
    if brand in BESTSELLER_BRANDS:
        features.append("bestseller")
    return features


def product_price(product: Mapping[str, Any]) -> float:
    """Calculated price of the first variant, or 0."""
    variants = product.get("variants") or []
    if not variants:
        return 0.0
    calculated = variants[0].get("calculated_price") or {}
    return float(to_decimal(calculated.get("calculated_amount")))


def process_product(
    product: Mapping[str, Any],
    force_update: bool = False,
    now: Optional[datetime] = None,
) -> BrandExtractionResult:
    price_eur = product_price(product)
    metadata = product.get("metadata") or {}
    existing_brand = metadata.get("brand")
    title = product.get("title") or ""
    match = extract_brand(title, price_eur)

    return BrandExtractionResult(
        product_id=product.get("id") or "",
        original_title=title,
        detected_brand=match.brand,
        confidence_score=match.confidence,
        extraction_method=match.method,
        manual_review_required=match.confidence < MANUAL_REVIEW_THRESHOLD,
        suggested_features=detect_features(product.get("created_at"), price_eur, match.brand, now),
        price_eur=price_eur,
        existing_brand=existing_brand,
        needs_update=not existing_brand or existing_brand == UNKNOWN_BRAND or force_update,
    )


def _apply(catalog: ProductCatalog, result: BrandExtractionResult, report: MigrationReport) -> None:
    try:
        catalog.update_product_metadata(
            result.product_id,
            {"brand": result.detected_brand, "features": result.suggested_features},
        )
    except Exception as e:
        logger.warning("brand_update_failed", product_id=result.product_id, error=str(e))
        report.failed_extractions += 1
        report.errors.append(f"Failed to update product {result.product_id}: {e}")


def migrate_brands(
    catalog: ProductCatalog,
    options: Optional[MigrationOptions] = None,
    now: Optional[datetime] = None,
) -> MigrationReport:
    """Run brand extraction over the whole catalogue."""
    if options is None:
        options = MigrationOptions()
    if options.batch_size <= 0:
        raise InvalidArgumentError("batch size must be positive")
    started = time.monotonic()
    report = MigrationReport()
    log = logger.bind(dry_run=options.dry_run, batch_size=options.batch_size)
    log.info("brand_migration_started")

    offset = 0
    while True:
        try:
            products, count = catalog.list_products(options.batch_size, offset)
        except Exception as e:
            log.error("brand_migration_fetch_failed", offset=offset, error=str(e))
            report.errors.append(f"Error fetching batch at offset {offset}: {e}")
            break

        if not products:
            break
        report.total_products = count

        for product in products:
            try:
                result = process_product(product, options.force_update, now)
            except Exception as e:
                report.failed_extractions += 1
                report.errors.append(f"Error processing product {product.get('id')}: {e}")
                continue

            report.record(result)
            if not options.dry_run and result.needs_update and not result.manual_review_required:
                _apply(catalog, result, report)

        log.info("brand_migration_batch", offset=offset, products=len(products))
        offset += options.batch_size
        if options.dry_run and offset >= DRY_RUN_LIMIT:
            break

    report.processing_time_ms = int((time.monotonic() - started) * 1000)
    log.info(
        "brand_migration_finished",
        processed=report.processed_products,
        manual_review=report.manual_review_required,
        failed=report.failed_extractions,
    )
    return report
