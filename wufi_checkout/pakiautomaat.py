"""Parcel-locker (pakiautomaat) addresses.

A locker order has no street address. The chosen locker's display name is
stored in ``address_1`` and city/postal code get fixed defaults, since the
locker network does the final-mile routing.
"""

from collections.abc import Mapping
from typing import Any, Optional

from .cart import Address, CartSnapshot
from .shipping import is_pakiautomaat

DEFAULT_CITY = "Tallinn"
DEFAULT_POSTAL_CODE = "10000"
DEFAULT_COUNTRY_CODE = "EE"


def materialize_pakiautomaat_address(locker_name: str) -> dict[str, str]:
    """Build the synthetic shipping address for a locker."""
    return {
        "address_1": locker_name,
        "city": DEFAULT_CITY,
        "postal_code": DEFAULT_POSTAL_CODE,
        "country_code": DEFAULT_COUNTRY_CODE,
    }


def locker_location(address: Optional[Address]) -> Optional[str]:
    """Return the locker name of a pakiautomaat shipping address."""
    if address is None:
        return None
    return address.address_1 or None


def is_pakiautomaat_address_valid(cart: Optional[CartSnapshot]) -> bool:
    """Return True if a locker order carries everything the carrier needs.

    Orders that are not shipped to a locker are always valid here.
    """
    if cart is None or cart.shipping_address is None:
        return False
    if not is_pakiautomaat(cart.first_shipping_method_name):
        return True

    addr = cart.shipping_address
    return bool(
        locker_location(addr)
        and addr.city
        and addr.postal_code
        and addr.first_name
        and addr.last_name
        and addr.phone
        and cart.email
    )


def pakiautomaat_address_update(
    locker_name: str, contact: Optional[Mapping[str, Any]] = None
) -> dict[str, Any]:
    """Shipping-address payload for the store API when a locker is picked.

    ``contact`` carries the customer's name, phone and any city/postal code
    they typed; blank city/postal code fall back to the locker defaults.
    """
    contact = dict(contact or {})
    address = {
        "first_name": contact.get("first_name") or "",
        "last_name": contact.get("last_name") or "",
        "phone": contact.get("phone") or "",
        "company": contact.get("company") or "",
        "address_2": contact.get("address_2") or "",
        "province": contact.get("province") or "",
    }
    address.update(materialize_pakiautomaat_address(locker_name))
    if contact.get("city"):
        address["city"] = contact["city"]
    if contact.get("postal_code"):
        address["postal_code"] = contact["postal_code"]
    if contact.get("country_code"):
        address["country_code"] = contact["country_code"]

    address["metadata"] = {
        "delivery_type": "pakiautomaat",
        "pakiautomaat_location": locker_name,
        "is_pakiautomaat": "true",
    }
    return address
