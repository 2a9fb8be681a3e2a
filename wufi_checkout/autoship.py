"""Autoship (subscription) line-item helpers.

A product is autoship-eligible when its admin metadata has ``autoship``
set to boolean True. Once the customer picks one-time or subscription for
an eligible item, the choice is written to the line item metadata as
``purchase_type``.
"""

from collections.abc import Mapping
from typing import Any, Optional

from .cart import CartSnapshot, LineItem

PURCHASE_ONE_TIME = "one_time"
PURCHASE_SUBSCRIPTION = "subscription"

FIRST_ORDER_DISCOUNT_PERCENT = 30
DEFAULT_INTERVAL = "2w"


def is_autoship_eligible(item: LineItem) -> bool:
    return item.product_metadata.get("autoship") is True


def autoship_eligible_items(cart: Optional[CartSnapshot]) -> list[LineItem]:
    if cart is None:
        return []
    return [item for item in cart.items if is_autoship_eligible(item)]


def has_autoship_eligible_items(cart: Optional[CartSnapshot]) -> bool:
    return bool(autoship_eligible_items(cart))


def has_purchase_choice(cart: Optional[CartSnapshot]) -> bool:
    """Return True if any line item already carries a purchase type."""
    if cart is None:
        return False
    return any(item.purchase_type for item in cart.items)


def has_pending_purchase_choice(cart: Optional[CartSnapshot]) -> bool:
    """Return True if the cart has eligible items and no purchase type yet."""
    return has_autoship_eligible_items(cart) and not has_purchase_choice(cart)


def initial_purchase_type(item: LineItem) -> str:
    """Purchase type to preselect for an item."""
    if item.purchase_type:
        return item.purchase_type
    subscribe = item.metadata.get("subscribe")
    if subscribe is True or str(subscribe) == "true":
        return PURCHASE_SUBSCRIPTION
    return PURCHASE_ONE_TIME


def purchase_type_metadata(
    item: LineItem, purchase_type: str, interval: str = DEFAULT_INTERVAL
) -> dict[str, Any]:
    """Line-item metadata after the customer picks a purchase type.

    Raises:
        ValueError: unknown purchase type
    """
    if purchase_type not in (PURCHASE_ONE_TIME, PURCHASE_SUBSCRIPTION):
        raise ValueError(f"Unknown purchase type: {purchase_type}")

    metadata: dict[str, Any] = dict(item.metadata)
    metadata["purchase_type"] = purchase_type
    metadata["subscribe"] = purchase_type == PURCHASE_SUBSCRIPTION

    if purchase_type == PURCHASE_SUBSCRIPTION:
        metadata["interval"] = interval
        metadata["subscription_discount"] = str(FIRST_ORDER_DISCOUNT_PERCENT)
        metadata["is_first_order"] = "true"
        metadata["autoship"] = "true"
    else:
        metadata.pop("interval", None)
        metadata.pop("subscription_discount", None)
        metadata["autoship"] = "false"
    return metadata


def needs_metadata_update(
    current: Mapping[str, Any], purchase_type: str, interval: str = DEFAULT_INTERVAL
) -> bool:
    """Return True if stored metadata disagrees with the chosen purchase type."""
    subscription = purchase_type == PURCHASE_SUBSCRIPTION
    if current.get("purchase_type") != purchase_type:
        return True
    if current.get("subscribe") != subscription:
        return True
    if subscription:
        return current.get("interval") != interval or current.get("autoship") != "true"
    return current.get("autoship") != "false"
