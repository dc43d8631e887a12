"""vmkit CLI: query VM product catalogs from the command line.

Usage examples::

    vmkit --provider AWS --cloud EC2 --region us-east-1 --account 1234 list-products --arch I64
    vmkit --catalog ./vmproducts.json --region eu-west-1 --account 1234 get-product m1.small
    vmkit --region us-east-1 --account 1234 list-architectures

Scope options not given on the command line fall back to the ``DSN_*``
environment variables.
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any

from pydantic import ValidationError

from vmkit.base.config import validate_context
from vmkit.base.exceptions import VmkitError
from vmkit.base.models import Architecture, ProductDefinition
from vmkit.catalog.resolver import CatalogResolver


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the ``vmkit`` CLI.

    Returns:
        Configured :class:`~argparse.ArgumentParser`.
    """
    parser = argparse.ArgumentParser(
        prog="vmkit",
        description="VM product catalog queries",
    )
    parser.add_argument("--provider", "-p", help="Cloud provider name")
    parser.add_argument("--cloud", "-c", help="Cloud name within the provider")
    parser.add_argument("--region", "-r", help="Region scope")
    parser.add_argument("--account", "-a", help="Account scope")
    parser.add_argument(
        "--impl",
        help="Backend implementation name used to locate its catalog (e.g. ec2)",
    )
    parser.add_argument(
        "--catalog",
        help="Path of a catalog document overriding every other location",
    )

    sub = parser.add_subparsers(dest="operation", required=True)
    products = sub.add_parser("list-products", help="List products for an architecture")
    products.add_argument(
        "--arch",
        default=Architecture.I64.value,
        choices=[a.value for a in Architecture],
        help="CPU architecture (default I64)",
    )
    get_product = sub.add_parser("get-product", help="Show a single product")
    get_product.add_argument("product_id", help="Product identifier")
    sub.add_parser("list-architectures", help="List supported architectures")
    return parser


def _product_to_dict(product: ProductDefinition) -> dict[str, Any]:
    return {
        "id": product.product_id,
        "name": product.name,
        "description": product.description,
        "cpuCount": product.cpu_count,
        "rootVolumeSizeInGb": product.root_volume_size.quantity,
        "ramSizeInMb": product.ram_size.quantity,
        "architectures": sorted(a.value for a in product.architectures),
        "excludesRegions": sorted(product.excluded_regions),
        "standardHourlyRate": product.standard_hourly_rate,
    }


def main(argv: list[str] | None = None) -> None:
    """CLI entry point.

    Parses arguments, builds a provider context and a resolver, runs the
    requested query and prints the result as JSON.

    Args:
        argv: Optional argument list (defaults to ``sys.argv``).
    """
    parser = _build_parser()
    ns = parser.parse_args(argv)

    config: dict[str, Any] = {
        "account_number": ns.account,
        "region_id": ns.region,
        "provider_name": ns.provider,
        "cloud_name": ns.cloud,
    }
    if ns.catalog:
        config["custom_properties"] = {"vmproducts": ns.catalog}
    try:
        context = validate_context(config)
    except ValidationError as e:
        print(f"Invalid context: {e}", file=sys.stderr)
        sys.exit(1)

    resolver = CatalogResolver(implementation=ns.impl, default_context=context)

    try:
        result: Any
        if ns.operation == "list-products":
            result = [
                _product_to_dict(p)
                for p in resolver.resolve_products(Architecture(ns.arch))
            ]
        elif ns.operation == "get-product":
            product = resolver.find_product_by_id(ns.product_id)
            if product is None:
                print(f"Unknown product '{ns.product_id}'", file=sys.stderr)
                sys.exit(1)
            result = _product_to_dict(product)
        else:
            result = [a.value for a in resolver.resolve_supported_architectures()]
    except VmkitError as e:
        print(f"Operation failed: {e}", file=sys.stderr)
        sys.exit(1)

    print(json.dumps(result, indent=2))


if __name__ == "__main__":
    main()
