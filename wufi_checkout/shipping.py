"""Shipping-method classification.

Shipping methods arrive from the backend with free-text display names.
Classification lowercases the name and looks for known substrings, so a
single name can land in more than one mode ("Tarne pakiautomaati" is
both a courier and a parcel-locker match).
"""

from typing import Optional

from .cart import DeliveryMode, ShippingMethod

PAKIAUTOMAAT_KEYWORDS = ("pakiautomaat", "smartpost")
COURIER_KEYWORDS = ("kuller", "courier", "tarne")


def _matches(name: Optional[str], keywords: tuple[str, ...]) -> bool:
    if not name:
        return False
    lowered = name.lower()
    return any(keyword in lowered for keyword in keywords)


def is_pakiautomaat(name: Optional[str]) -> bool:
    """Return True if the method name is a parcel-locker delivery."""
    return _matches(name, PAKIAUTOMAAT_KEYWORDS)


def is_kulleriga(name: Optional[str]) -> bool:
    """Return True if the method name is a courier delivery."""
    return _matches(name, COURIER_KEYWORDS)


def classify(name: Optional[str]) -> frozenset[DeliveryMode]:
    """Classify a method name into delivery modes.

    Returns ``{PICKUP}`` when nothing matches.
    """
    modes = set()
    if is_pakiautomaat(name):
        modes.add(DeliveryMode.PAKIAUTOMAAT)
    if is_kulleriga(name):
        modes.add(DeliveryMode.COURIER)
    if not modes:
        modes.add(DeliveryMode.PICKUP)
    return frozenset(modes)


def delivery_modes(method: Optional[ShippingMethod]) -> frozenset[DeliveryMode]:
    """Delivery modes of a selected method, preferring its explicit tag."""
    if method is None:
        return frozenset()
    if method.delivery_mode is not None:
        return frozenset({method.delivery_mode})
    return classify(method.name)
