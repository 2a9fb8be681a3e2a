"""Client for the Medusa store and admin HTTP APIs."""

from collections.abc import Mapping
from typing import Any, Optional

import httpx
import structlog

from .cart import CartSnapshot, cart_from_dict
from .config import StoreConfig, load_config
from .customer import CustomerType
from .errors import (
    ConnectionError,
    HTTPStatusError,
    InvalidArgumentError,
    StoreError,
    TransportError,
    errmsg,
)
from .pakiautomaat import pakiautomaat_address_update
from .timeouts import cart_operation, validation_operation

logger = structlog.get_logger()

# Same field selection the storefront asks for, so product metadata
# (autoship eligibility) and shipping method names come back with the cart.
CART_FIELDS = (
    "*items, *region, *items.variant, *items.variant.product, "
    "+items.variant.product.metadata, *items.thumbnail, *items.metadata, "
    "+items.total, *promotions, +shipping_methods.name"
)
PRODUCT_FIELDS = "*variants.calculated_price,*metadata"


class StoreClient:
    """Synchronous client for the Medusa backend."""

    def __init__(
        self,
        base_url: str,
        publishable_key: Optional[str] = None,
        admin_token: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        headers = {"accept": "application/json"}
        if publishable_key:
            headers["x-publishable-api-key"] = publishable_key
        self._admin_token = admin_token
        self._http = httpx.Client(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def connect(cls, base_url: str, **kwargs) -> "StoreClient":
        """Create a client for the backend at base_url."""
        return cls(base_url, **kwargs)

    @classmethod
    def from_config(cls, config: StoreConfig, **kwargs) -> "StoreClient":
        return cls(
            config.backend_url,
            publishable_key=config.publishable_key,
            admin_token=config.admin_token,
            timeout=config.http_timeout,
            **kwargs,
        )

    @classmethod
    def from_env(cls, **kwargs) -> "StoreClient":
        """Create a client from MEDUSA_* environment variables."""
        return cls.from_config(load_config(), **kwargs)

    def _request(
        self,
        method: str,
        path: str,
        timeout: float,
        params: Optional[Mapping[str, Any]] = None,
        json: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> dict:
        try:
            response = self._http.request(
                method,
                path,
                params=params,
                json=json,
                headers=headers,
                timeout=timeout,
            )
        except httpx.TimeoutException:
            # Left for the retry wrapper to classify.
            raise
        except httpx.ConnectError as e:
            raise ConnectionError(str(e)) from e
        except httpx.HTTPError as e:
            raise TransportError(e) from e

        if response.is_error:
            raise HTTPStatusError(response.status_code, _error_detail(response))
        try:
            return response.json()
        except ValueError as e:
            raise TransportError(e) from e

    def _admin_headers(self) -> dict[str, str]:
        if not self._admin_token:
            raise InvalidArgumentError(errmsg.ADMIN_TOKEN_REQUIRED)
        return {"authorization": f"Bearer {self._admin_token}"}

    def retrieve_cart(self, cart_id: str) -> CartSnapshot:
        """Fetch a cart snapshot by ID."""
        if not cart_id:
            raise InvalidArgumentError(errmsg.CART_ID_REQUIRED)

        body = cart_operation(
            lambda timeout: self._request(
                "GET", f"/store/carts/{cart_id}", timeout, params={"fields": CART_FIELDS}
            ),
            "Retrieving cart",
        )
        cart = _cart_from_body(body)
        logger.info("cart_retrieved", cart_id=cart.id, items=len(cart.items))
        return cart

    def update_cart(self, cart_id: str, data: Mapping[str, Any]) -> CartSnapshot:
        """Apply a partial update to the cart and return the new snapshot."""
        if not cart_id:
            raise InvalidArgumentError(errmsg.CART_ID_REQUIRED)

        body = cart_operation(
            lambda timeout: self._request(
                "POST", f"/store/carts/{cart_id}", timeout, json=dict(data)
            ),
            "Updating cart",
        )
        cart = _cart_from_body(body)
        logger.info("cart_updated", cart_id=cart.id, fields=sorted(data))
        return cart

    def set_customer_type(self, cart_id: str, customer_type: str) -> CartSnapshot:
        """Record the customer type chosen at checkout in cart metadata."""
        try:
            chosen = CustomerType(customer_type)
        except ValueError:
            raise InvalidArgumentError(errmsg.INVALID_CUSTOMER_TYPE) from None

        current = self.retrieve_cart(cart_id)
        metadata = dict(current.metadata)
        metadata["customer_type"] = chosen.value
        return self.update_cart(cart_id, {"metadata": metadata})

    def set_pakiautomaat_location(
        self,
        cart_id: str,
        locker_name: str,
        contact: Optional[Mapping[str, Any]] = None,
        email: Optional[str] = None,
    ) -> CartSnapshot:
        """Ship the cart to a parcel locker."""
        if not locker_name:
            raise InvalidArgumentError(errmsg.LOCKER_NAME_REQUIRED)

        data: dict[str, Any] = {
            "shipping_address": pakiautomaat_address_update(locker_name, contact),
        }
        if email:
            data["email"] = email
        return self.update_cart(cart_id, data)

    def update_line_item_metadata(
        self,
        cart_id: str,
        line_id: str,
        metadata: Mapping[str, Any],
        quantity: int,
    ) -> CartSnapshot:
        """Replace a line item's metadata. The API requires the quantity too."""
        if not cart_id:
            raise InvalidArgumentError(errmsg.CART_ID_REQUIRED)
        if not line_id:
            raise InvalidArgumentError(errmsg.LINE_ID_REQUIRED)

        body = cart_operation(
            lambda timeout: self._request(
                "POST",
                f"/store/carts/{cart_id}/line-items/{line_id}",
                timeout,
                json={"metadata": dict(metadata), "quantity": quantity},
            ),
            "Updating line item",
        )
        return _cart_from_body(body)

    def list_products(self, limit: int, offset: int = 0) -> tuple[list[dict], int]:
        """Fetch one page of products with prices and metadata.

        Returns:
            Tuple of (products, total_count)
        """
        body = validation_operation(
            lambda timeout: self._request(
                "GET",
                "/store/products",
                timeout,
                params={"limit": limit, "offset": offset, "fields": PRODUCT_FIELDS},
            ),
            "Listing products",
        )
        products = body.get("products") or []
        return products, int(body.get("count") or 0)

    def update_product_metadata(self, product_id: str, metadata: Mapping[str, Any]) -> dict:
        """Write product metadata through the admin API."""
        if not product_id:
            raise InvalidArgumentError(errmsg.PRODUCT_ID_REQUIRED)
        headers = self._admin_headers()

        body = validation_operation(
            lambda timeout: self._request(
                "POST",
                f"/admin/products/{product_id}",
                timeout,
                json={"metadata": dict(metadata)},
                headers=headers,
            ),
            "Updating product",
        )
        logger.info("product_metadata_updated", product_id=product_id)
        return body.get("product") or {}

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._http.close()

    def __enter__(self) -> "StoreClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def _cart_from_body(body: Mapping[str, Any]) -> CartSnapshot:
    if not isinstance(body.get("cart"), Mapping):
        raise StoreError(errmsg.CART_NOT_IN_RESPONSE)
    return cart_from_dict(body)


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, Mapping):
        return str(body.get("message") or body.get("type") or "")
    return ""
