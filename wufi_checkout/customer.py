"""Customer-type derivation.

Two signals mean "business" in checkout and they are deliberately kept
apart: the explicit ``customer_type`` flag on cart metadata drives step
resolution and address requirements, while a non-blank company name on the
shipping address drives simplified-invoice eligibility.
"""

from enum import Enum
from typing import Optional

from .cart import CartSnapshot


class CustomerType(str, Enum):
    BUSINESS = "business"
    INDIVIDUAL = "individual"


def derive_customer_type(cart: Optional[CartSnapshot]) -> Optional[CustomerType]:
    """Read the customer type chosen at checkout from cart metadata.

    No inference from other fields. Missing or unrecognised values give None.
    """
    if cart is None:
        return None
    raw = cart.metadata.get("customer_type")
    try:
        return CustomerType(raw)
    except ValueError:
        return None


def has_company_name(cart: Optional[CartSnapshot]) -> bool:
    """Return True if the shipping address carries a non-blank company."""
    if cart is None or cart.shipping_address is None:
        return False
    company = cart.shipping_address.company
    return isinstance(company, str) and bool(company.strip())
