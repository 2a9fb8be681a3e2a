"""Tests for autoship line-item helpers."""

import pytest

from wufi_checkout.autoship import (
    FIRST_ORDER_DISCOUNT_PERCENT,
    PURCHASE_ONE_TIME,
    PURCHASE_SUBSCRIPTION,
    autoship_eligible_items,
    has_autoship_eligible_items,
    has_pending_purchase_choice,
    has_purchase_choice,
    initial_purchase_type,
    is_autoship_eligible,
    needs_metadata_update,
    purchase_type_metadata,
)
from wufi_checkout.cart import CartSnapshot, LineItem

from .fixtures import complete_cart, subscription_item


class TestEligibility:
    def test_flag_must_be_boolean_true(self):
        assert is_autoship_eligible(subscription_item()) is True
        assert is_autoship_eligible(LineItem(product_metadata={"autoship": "true"})) is False
        assert is_autoship_eligible(LineItem()) is False

    def test_cart_level(self):
        cart = CartSnapshot(items=(subscription_item(), LineItem(id="plain")))
        assert [i.id for i in autoship_eligible_items(cart)] == ["item_sub"]
        assert has_autoship_eligible_items(cart) is True

    def test_cart_without_eligible_items(self):
        assert has_autoship_eligible_items(complete_cart()) is False
        assert has_autoship_eligible_items(None) is False


class TestPurchaseChoice:
    def test_no_choice_yet(self):
        assert has_purchase_choice(CartSnapshot(items=(subscription_item(),))) is False

    def test_choice_made(self):
        cart = CartSnapshot(items=(subscription_item(PURCHASE_ONE_TIME),))
        assert has_purchase_choice(cart) is True

    def test_no_cart(self):
        assert has_purchase_choice(None) is False

    def test_pending_choice(self):
        assert has_pending_purchase_choice(CartSnapshot(items=(subscription_item(),))) is True
        chosen = CartSnapshot(items=(subscription_item(PURCHASE_SUBSCRIPTION),))
        assert has_pending_purchase_choice(chosen) is False
        assert has_pending_purchase_choice(complete_cart()) is False


class TestInitialPurchaseType:
    def test_stored_choice_wins(self):
        assert initial_purchase_type(subscription_item(PURCHASE_SUBSCRIPTION)) == "subscription"

    @pytest.mark.parametrize("subscribe", [True, "true"])
    def test_legacy_subscribe_flag(self, subscribe):
        item = LineItem(metadata={"subscribe": subscribe})
        assert initial_purchase_type(item) == PURCHASE_SUBSCRIPTION

    def test_defaults_to_one_time(self):
        assert initial_purchase_type(LineItem()) == PURCHASE_ONE_TIME


class TestPurchaseTypeMetadata:
    def test_subscription(self):
        metadata = purchase_type_metadata(subscription_item(), PURCHASE_SUBSCRIPTION, "4w")
        assert metadata == {
            "purchase_type": "subscription",
            "subscribe": True,
            "interval": "4w",
            "subscription_discount": str(FIRST_ORDER_DISCOUNT_PERCENT),
            "is_first_order": "true",
            "autoship": "true",
        }

    def test_one_time_clears_subscription_fields(self):
        item = LineItem(metadata={"interval": "2w", "subscription_discount": "30", "note": "x"})
        metadata = purchase_type_metadata(item, PURCHASE_ONE_TIME)
        assert "interval" not in metadata
        assert "subscription_discount" not in metadata
        assert metadata["note"] == "x"
        assert metadata["subscribe"] is False
        assert metadata["autoship"] == "false"

    def test_item_metadata_is_not_mutated(self):
        item = LineItem(metadata={"interval": "2w"})
        purchase_type_metadata(item, PURCHASE_ONE_TIME)
        assert item.metadata == {"interval": "2w"}

    def test_unknown_purchase_type(self):
        with pytest.raises(ValueError):
            purchase_type_metadata(subscription_item(), "weekly")


class TestNeedsMetadataUpdate:
    def test_up_to_date(self):
        current = purchase_type_metadata(subscription_item(), PURCHASE_SUBSCRIPTION)
        assert needs_metadata_update(current, PURCHASE_SUBSCRIPTION) is False

    def test_interval_changed(self):
        current = purchase_type_metadata(subscription_item(), PURCHASE_SUBSCRIPTION)
        assert needs_metadata_update(current, PURCHASE_SUBSCRIPTION, "4w") is True

    def test_switch_to_one_time(self):
        current = purchase_type_metadata(subscription_item(), PURCHASE_SUBSCRIPTION)
        assert needs_metadata_update(current, PURCHASE_ONE_TIME) is True

    def test_empty_metadata(self):
        assert needs_metadata_update({}, PURCHASE_ONE_TIME) is True
