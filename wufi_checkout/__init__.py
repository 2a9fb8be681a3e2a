"""Checkout progression and delivery-requirement rules for the Wufi storefront."""

from .cart import (
    Address,
    CartSnapshot,
    DeliveryMode,
    LineItem,
    PaymentCollection,
    ShippingMethod,
    cart_from_dict,
)
from .customer import CustomerType, derive_customer_type, has_company_name
from .shipping import classify, delivery_modes, is_kulleriga, is_pakiautomaat
from .policy import (
    SIMPLIFIED_INVOICE_THRESHOLD,
    estonian_vat_guidance,
    qualifies_for_simplified_invoice,
    requires_full_address,
    shipping_method_guidance,
    should_show_courier_instructions,
    should_show_shipping_method_selection,
)
from .pakiautomaat import (
    is_pakiautomaat_address_valid,
    locker_location,
    materialize_pakiautomaat_address,
    pakiautomaat_address_update,
)
from .steps import CheckoutStep, next_step
from .autoship import (
    autoship_eligible_items,
    has_autoship_eligible_items,
    has_pending_purchase_choice,
    initial_purchase_type,
    purchase_type_metadata,
)
from .errors import (
    StoreError,
    ConnectionError,
    TransportError,
    HTTPStatusError,
    InvalidArgumentError,
    CheckoutTimeoutError,
    OperationTimedOutError,
)
from .timeouts import TimeoutConfig, checkout_api_call, is_timeout_error, with_timeout
from .config import StoreConfig, configure_logging, load_config
from .client import StoreClient

__all__ = [
    # Cart model
    "Address",
    "CartSnapshot",
    "DeliveryMode",
    "LineItem",
    "PaymentCollection",
    "ShippingMethod",
    "cart_from_dict",
    # Rules
    "CustomerType",
    "derive_customer_type",
    "has_company_name",
    "classify",
    "delivery_modes",
    "is_kulleriga",
    "is_pakiautomaat",
    "SIMPLIFIED_INVOICE_THRESHOLD",
    "estonian_vat_guidance",
    "qualifies_for_simplified_invoice",
    "requires_full_address",
    "shipping_method_guidance",
    "should_show_courier_instructions",
    "should_show_shipping_method_selection",
    "is_pakiautomaat_address_valid",
    "locker_location",
    "materialize_pakiautomaat_address",
    "pakiautomaat_address_update",
    "CheckoutStep",
    "next_step",
    "autoship_eligible_items",
    "has_autoship_eligible_items",
    "has_pending_purchase_choice",
    "initial_purchase_type",
    "purchase_type_metadata",
    # Errors
    "StoreError",
    "ConnectionError",
    "TransportError",
    "HTTPStatusError",
    "InvalidArgumentError",
    "CheckoutTimeoutError",
    "OperationTimedOutError",
    # Backend access
    "TimeoutConfig",
    "checkout_api_call",
    "is_timeout_error",
    "with_timeout",
    "StoreConfig",
    "configure_logging",
    "load_config",
    "StoreClient",
]
