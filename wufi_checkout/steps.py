"""Checkout step resolution.

The checkout UI calls next_step() after every cart mutation and renders
whatever step it returns. Guards are checked in priority order and the
first failing one decides the step, so a partial cart always routes the
customer back to the step that supplies the missing data.
"""

from enum import Enum
from typing import Optional

from .autoship import has_purchase_choice
from .cart import CartSnapshot
from .customer import derive_customer_type
from .pakiautomaat import locker_location
from .policy import requires_full_address
from .shipping import is_pakiautomaat


class CheckoutStep(str, Enum):
    AUTOSHIP = "autoship"
    CUSTOMER_TYPE = "customer-type"
    ADDRESS = "address"
    DELIVERY = "delivery"
    PAYMENT = "payment"
    REVIEW = "review"


def _has_contact_details(cart: CartSnapshot) -> bool:
    addr = cart.shipping_address
    if not cart.email or addr is None:
        return False
    return bool(addr.first_name and addr.last_name and addr.phone)


def _has_street_address(cart: CartSnapshot) -> bool:
    addr = cart.shipping_address
    if addr is None:
        return False
    return bool(addr.address_1 and addr.city and addr.postal_code)


def next_step(
    cart: Optional[CartSnapshot], has_autoship_eligible_items: bool = False
) -> CheckoutStep:
    """Return the first checkout step the cart has not completed."""
    if cart is None:
        cart = CartSnapshot()

    if has_autoship_eligible_items and not has_purchase_choice(cart):
        return CheckoutStep.AUTOSHIP

    # Any stored value counts as chosen, recognised or not.
    if not cart.metadata.get("customer_type"):
        return CheckoutStep.CUSTOMER_TYPE

    if not cart.shipping_methods:
        return CheckoutStep.DELIVERY

    method_name = cart.first_shipping_method_name

    if not _has_contact_details(cart):
        return CheckoutStep.ADDRESS

    addr = cart.shipping_address
    if is_pakiautomaat(method_name):
        if not locker_location(addr):
            return CheckoutStep.ADDRESS
        if not (addr.city and addr.postal_code):
            return CheckoutStep.ADDRESS

    customer_type = derive_customer_type(cart)
    if requires_full_address(cart, customer_type, method_name) and not _has_street_address(cart):
        return CheckoutStep.ADDRESS

    if cart.payment_collection is None:
        return CheckoutStep.PAYMENT

    return CheckoutStep.REVIEW
