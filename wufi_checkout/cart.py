"""Cart snapshot model and parsing from the store API payload."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional


class DeliveryMode(str, Enum):
    """How an order reaches the customer."""

    PAKIAUTOMAAT = "pakiautomaat"
    COURIER = "courier"
    PICKUP = "pickup"


@dataclass(frozen=True)
class Address:
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    address_1: Optional[str] = None
    address_2: Optional[str] = None
    company: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None
    country_code: Optional[str] = None
    province: Optional[str] = None
    phone: Optional[str] = None
    metadata: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ShippingMethod:
    name: str = ""
    id: Optional[str] = None
    shipping_option_id: Optional[str] = None
    # Explicit tag set by the backend; None means classify by name.
    delivery_mode: Optional[DeliveryMode] = None


@dataclass(frozen=True)
class PaymentCollection:
    id: str = ""
    status: Optional[str] = None


@dataclass(frozen=True)
class LineItem:
    id: str = ""
    title: str = ""
    quantity: int = 1
    metadata: Mapping[str, Any] = field(default_factory=dict)
    product_metadata: Mapping[str, Any] = field(default_factory=dict)

    @property
    def purchase_type(self) -> Optional[str]:
        return self.metadata.get("purchase_type") or None


@dataclass(frozen=True)
class CartSnapshot:
    """Read-only view of a cart as the commerce backend last reported it."""

    id: str = ""
    total: Decimal = Decimal("0")
    email: Optional[str] = None
    shipping_address: Optional[Address] = None
    shipping_methods: tuple[ShippingMethod, ...] = ()
    payment_collection: Optional[PaymentCollection] = None
    items: tuple[LineItem, ...] = ()
    metadata: Mapping[str, Any] = field(default_factory=dict)

    @property
    def first_shipping_method(self) -> Optional[ShippingMethod]:
        if not self.shipping_methods:
            return None
        return self.shipping_methods[0]

    @property
    def first_shipping_method_name(self) -> Optional[str]:
        method = self.first_shipping_method
        if method is None:
            return None
        return method.name or None


def to_decimal(value: Any) -> Decimal:
    """Convert an API amount to Decimal, treating junk as zero.

    NaN and infinities count as junk, so comparisons never raise.
    """
    if value is None or isinstance(value, bool):
        return Decimal("0")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except InvalidOperation:
            return Decimal("0")
    if not result.is_finite():
        return Decimal("0")
    return result


def _text(value: Any) -> Optional[str]:
    """Payload string field; numbers are stringified, other shapes dropped."""
    if value is None or isinstance(value, (bool, Mapping, list)):
        return None
    if isinstance(value, str):
        return value
    return str(value)


def _metadata(raw: Any) -> Mapping[str, Any]:
    if not isinstance(raw, Mapping) or not raw:
        return {}
    return dict(raw)


def _address_from_dict(raw: Any) -> Optional[Address]:
    if not isinstance(raw, Mapping):
        return None
    return Address(
        first_name=_text(raw.get("first_name")),
        last_name=_text(raw.get("last_name")),
        address_1=_text(raw.get("address_1")),
        address_2=_text(raw.get("address_2")),
        company=_text(raw.get("company")),
        city=_text(raw.get("city")),
        postal_code=_text(raw.get("postal_code")),
        country_code=_text(raw.get("country_code")),
        province=_text(raw.get("province")),
        phone=_text(raw.get("phone")),
        metadata=_metadata(raw.get("metadata")),
    )


def _delivery_mode(raw: Any) -> Optional[DeliveryMode]:
    try:
        return DeliveryMode(raw)
    except ValueError:
        return None


def _shipping_method_from_dict(raw: Mapping[str, Any]) -> ShippingMethod:
    data = raw.get("data") if isinstance(raw.get("data"), Mapping) else {}
    return ShippingMethod(
        name=_text(raw.get("name")) or "",
        id=raw.get("id"),
        shipping_option_id=raw.get("shipping_option_id"),
        delivery_mode=_delivery_mode(data.get("delivery_mode")),
    )


def _line_item_from_dict(raw: Mapping[str, Any]) -> LineItem:
    product = raw.get("product")
    if not isinstance(product, Mapping):
        variant = raw.get("variant")
        product = variant.get("product") if isinstance(variant, Mapping) else None
    product_metadata = product.get("metadata") if isinstance(product, Mapping) else None

    return LineItem(
        id=raw.get("id") or "",
        title=_text(raw.get("title")) or "",
        quantity=int(raw.get("quantity") or 0),
        metadata=_metadata(raw.get("metadata")),
        product_metadata=_metadata(product_metadata),
    )


def cart_from_dict(payload: Mapping[str, Any]) -> CartSnapshot:
    """Build a CartSnapshot from a store API cart response.

    Accepts either the full response (``{"cart": {...}}``) or the bare cart
    object. Unknown keys are ignored and missing keys become empty.
    """
    raw = payload.get("cart", payload) if isinstance(payload, Mapping) else {}
    if not isinstance(raw, Mapping):
        raw = {}

    payment = raw.get("payment_collection")
    payment_collection = None
    if isinstance(payment, Mapping):
        payment_collection = PaymentCollection(
            id=payment.get("id") or "",
            status=payment.get("status"),
        )

    return CartSnapshot(
        id=raw.get("id") or "",
        total=to_decimal(raw.get("total")),
        email=_text(raw.get("email")),
        shipping_address=_address_from_dict(raw.get("shipping_address")),
        shipping_methods=tuple(
            _shipping_method_from_dict(m)
            for m in raw.get("shipping_methods") or ()
            if isinstance(m, Mapping)
        ),
        payment_collection=payment_collection,
        items=tuple(
            _line_item_from_dict(i)
            for i in raw.get("items") or ()
            if isinstance(i, Mapping)
        ),
        metadata=_metadata(raw.get("metadata")),
    )
