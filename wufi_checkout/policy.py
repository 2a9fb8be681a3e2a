"""Delivery-requirement policy.

Encodes the Estonian VAT record-keeping rules checkout has to follow.
Orders above SIMPLIFIED_INVOICE_THRESHOLD, business orders and courier
deliveries need a full street address; smaller private parcel-locker
orders may be invoiced with a simplified invoice.
"""

from decimal import Decimal
from typing import Optional, Union

from .cart import CartSnapshot, to_decimal
from .customer import CustomerType, has_company_name
from .shipping import is_kulleriga

SIMPLIFIED_INVOICE_THRESHOLD = Decimal("160.00")

Amount = Union[Decimal, int, float, str]


def _total(cart: Optional[CartSnapshot]) -> Decimal:
    if cart is None:
        return Decimal("0")
    return cart.total


def above_threshold(total: Amount) -> bool:
    """Return True if the total exceeds the simplified-invoice threshold."""
    return to_decimal(total) > SIMPLIFIED_INVOICE_THRESHOLD


def requires_full_address(
    cart: Optional[CartSnapshot],
    customer_type: Optional[str] = None,
    shipping_method_name: Optional[str] = None,
) -> bool:
    """Return True if the order must carry a full street address."""
    if customer_type == CustomerType.BUSINESS:
        return True
    if above_threshold(_total(cart)):
        return True
    if is_kulleriga(shipping_method_name):
        return True
    # Private parcel-locker or pickup orders at or under the threshold.
    return False


def qualifies_for_simplified_invoice(cart: Optional[CartSnapshot]) -> bool:
    """Return True if the order may use a simplified invoice.

    Business here means a company name on the shipping address, not the
    customer_type flag.
    """
    return not has_company_name(cart) and not above_threshold(_total(cart))


def should_show_shipping_method_selection(
    order_total: Amount, is_business: bool = False
) -> bool:
    if is_business:
        return True
    return above_threshold(order_total)


def should_show_courier_instructions(shipping_method_name: Optional[str]) -> bool:
    return is_kulleriga(shipping_method_name)


def shipping_method_guidance(order_total: Amount, is_business: bool = False) -> dict:
    """Guidance text shown next to each delivery mode."""
    locker_needs_address = is_business or above_threshold(order_total)
    if locker_needs_address:
        locker_description = (
            "Ärikliendid ja tellimused üle 160€ vajavad täielikku aadressi "
            "pakiautomaadi valimiseks"
        )
    else:
        locker_description = "Mugav ja odav viis oma tellimuse kättesaamiseks"

    return {
        "pakiautomaat": {
            "description": locker_description,
            "requires_address": locker_needs_address,
        },
        "kuller": {
            "description": "Kohaletoimetamine otse teie ukse taha",
            "requires_address": True,
        },
        "pickup": {
            "description": "Tasuta kättesaamine meie kauplusest",
            "requires_address": False,
        },
    }


def estonian_vat_guidance() -> dict:
    """Legal basis for asking the customer type at checkout."""
    return {
        "legal_reference": (
            "Vastavalt Käibemaksuseadus § 37(9), peame koguma ja säilitama "
            "tõendid kauba kättetoimetamise kohta Eestis."
        ),
        "description": "Selleks on vaja teada, kas tellija on eraisik või ettevõte.",
    }
