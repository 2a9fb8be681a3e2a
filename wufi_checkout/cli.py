"""Command-line entry point.

Usage:
    wufi-checkout next-step --cart-id cart_01H...          # resolve a live cart
    wufi-checkout next-step --cart-file cart.json          # resolve a saved payload
    wufi-checkout migrate-brands --dry-run --batch-size 50
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Optional

import structlog

from .autoship import has_autoship_eligible_items
from .brands import MigrationOptions, migrate_brands
from .cart import CartSnapshot, cart_from_dict
from .client import StoreClient
from .config import configure_logging, load_config
from .customer import derive_customer_type
from .errors import InvalidArgumentError, StoreError
from .pakiautomaat import is_pakiautomaat_address_valid
from .policy import (
    qualifies_for_simplified_invoice,
    requires_full_address,
    should_show_courier_instructions,
)
from .shipping import delivery_modes
from .steps import next_step

logger = structlog.get_logger()


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="wufi-checkout",
        description="Checkout step resolution and catalogue maintenance",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    step = sub.add_parser("next-step", help="Show the next checkout step for a cart")
    source = step.add_mutually_exclusive_group(required=True)
    source.add_argument("--cart-id", help="Cart ID to fetch from the backend")
    source.add_argument("--cart-file", type=Path, help="Saved store API cart JSON")
    step.add_argument(
        "--autoship-eligible",
        action="store_true",
        help="Treat the cart as having autoship-eligible items "
        "(default: derived from product metadata)",
    )

    migrate = sub.add_parser("migrate-brands", help="Extract brands from product titles")
    migrate.add_argument("--dry-run", action="store_true", help="Report only, write nothing")
    migrate.add_argument("--batch-size", type=int, default=100, help="Products per page")
    migrate.add_argument(
        "--force-update",
        action="store_true",
        help="Overwrite brands already set on products",
    )

    return parser.parse_args(argv)


def describe_cart(cart: CartSnapshot, autoship_eligible: bool) -> dict:
    """Resolver output plus the policy flags the checkout UI shows."""
    customer_type = derive_customer_type(cart)
    method_name = cart.first_shipping_method_name
    return {
        "cart_id": cart.id,
        "step": next_step(cart, autoship_eligible).value,
        "customer_type": customer_type.value if customer_type else None,
        "shipping_method": method_name,
        "delivery_modes": sorted(m.value for m in delivery_modes(cart.first_shipping_method)),
        "requires_full_address": requires_full_address(cart, customer_type, method_name),
        "simplified_invoice": qualifies_for_simplified_invoice(cart),
        "courier_instructions": should_show_courier_instructions(method_name),
        "pakiautomaat_address_valid": is_pakiautomaat_address_valid(cart),
    }


def _load_cart(args: argparse.Namespace) -> CartSnapshot:
    if args.cart_file is not None:
        try:
            payload = json.loads(args.cart_file.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise InvalidArgumentError(f"cannot read cart file {args.cart_file}: {e}") from e
        return cart_from_dict(payload)
    with StoreClient.from_env() as client:
        return client.retrieve_cart(args.cart_id)


def run_next_step(args: argparse.Namespace) -> int:
    cart = _load_cart(args)
    autoship = args.autoship_eligible or has_autoship_eligible_items(cart)
    print(json.dumps(describe_cart(cart, autoship), ensure_ascii=False, indent=2))
    return 0


def run_migrate_brands(args: argparse.Namespace) -> int:
    options = MigrationOptions(
        dry_run=args.dry_run,
        batch_size=args.batch_size,
        force_update=args.force_update,
    )
    with StoreClient.from_env() as client:
        report = migrate_brands(client, options)
    print(json.dumps(report.to_dict(), ensure_ascii=False, indent=2))
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    try:
        configure_logging(load_config().log_level)
        if args.command == "next-step":
            return run_next_step(args)
        return run_migrate_brands(args)
    except StoreError as e:
        logger.error("command_failed", command=args.command, error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
