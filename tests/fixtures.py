"""Shared cart builders so every test starts from the same checkout data.

complete_cart_payload() is a cart that has finished every step; tests take
it and knock out or change the fields they care about.
"""

import copy
from decimal import Decimal

from wufi_checkout.cart import (
    Address,
    CartSnapshot,
    LineItem,
    PaymentCollection,
    ShippingMethod,
    cart_from_dict,
)

LOCKER_NAME = "Omniva Tartu mnt 1"
METHOD_LOCKER = "Omniva Pakiautomaat"
METHOD_COURIER = "DPD Kuller"
METHOD_PICKUP = "Kauplusest järele"


def complete_cart_payload(**overrides) -> dict:
    """Store API cart JSON with every checkout step done."""
    payload = {
        "id": "cart_01TEST",
        "total": 45.0,
        "email": "mari@example.ee",
        "shipping_address": {
            "first_name": "Mari",
            "last_name": "Maasikas",
            "address_1": "Pärnu mnt 10",
            "city": "Tallinn",
            "postal_code": "10148",
            "country_code": "ee",
            "phone": "+3725551234",
            "company": "",
        },
        "shipping_methods": [{"id": "sm_1", "name": METHOD_COURIER}],
        "payment_collection": {"id": "paycol_1", "status": "not_paid"},
        "items": [
            {
                "id": "item_1",
                "title": "ROYAL CANIN Mini Adult 2kg",
                "quantity": 1,
                "metadata": {},
                "variant": {"product": {"metadata": {"autoship": False}}},
            }
        ],
        "metadata": {"customer_type": "individual"},
    }
    payload.update(copy.deepcopy(overrides))
    return payload


def complete_cart(**overrides) -> CartSnapshot:
    return cart_from_dict(complete_cart_payload(**overrides))


def locker_cart(**address_overrides) -> CartSnapshot:
    """Individual 45 EUR parcel-locker order, address already filled in."""
    address = {
        "first_name": "Mari",
        "last_name": "Maasikas",
        "address_1": LOCKER_NAME,
        "city": "Tallinn",
        "postal_code": "10000",
        "phone": "+3725551234",
    }
    address.update(address_overrides)
    return complete_cart(
        shipping_address=address,
        shipping_methods=[{"id": "sm_2", "name": METHOD_LOCKER}],
    )


def snapshot(
    total="45.00",
    customer_type=None,
    method=None,
    company=None,
    **fields,
) -> CartSnapshot:
    """Small hand-built snapshot for policy tests."""
    metadata = {"customer_type": customer_type} if customer_type else {}
    methods = (ShippingMethod(name=method),) if method else ()
    address = Address(company=company) if company is not None else None
    return CartSnapshot(
        total=Decimal(total),
        metadata=metadata,
        shipping_methods=methods,
        shipping_address=fields.pop("shipping_address", address),
        **fields,
    )


def subscription_item(purchase_type=None, eligible=True) -> LineItem:
    metadata = {"purchase_type": purchase_type} if purchase_type else {}
    return LineItem(
        id="item_sub",
        title="ORIJEN Original 11.4kg",
        metadata=metadata,
        product_metadata={"autoship": eligible},
    )


PAID = PaymentCollection(id="paycol_1")
