"""Catalog document parsing.

A catalog document is a JSON array of blocks::

    [
      {"provider": "default", "cloud": "default", "products": [...]},
      {"provider": "AWS", "cloud": "EC2", "products": [...]}
    ]

Blocks missing any of ``provider``, ``cloud`` or ``products`` are ignored.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import ValidationError

from vmkit.base.exceptions import CatalogConfigurationError
from vmkit.base.models import (
    Architecture,
    ProductDefinition,
    StorageSize,
    StorageUnit,
)

DEFAULT_SCOPE = "default"

_KNOWN_ARCHITECTURES = {a.value: a for a in Architecture}


def parse_document(text: str) -> list[dict[str, Any]]:
    """Parse catalog JSON into its list of well-formed blocks.

    Raises:
        CatalogConfigurationError: If the text is not a JSON array of objects.
    """
    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise CatalogConfigurationError(f"Malformed catalog document: {e}") from e
    if not isinstance(document, list):
        raise CatalogConfigurationError("Catalog document must be a JSON array")

    blocks: list[dict[str, Any]] = []
    for block in document:
        if not isinstance(block, dict):
            raise CatalogConfigurationError("Catalog blocks must be JSON objects")
        if not all(key in block for key in ("provider", "cloud", "products")):
            continue
        if not isinstance(block["products"], list):
            raise CatalogConfigurationError(
                f"'products' of block {block['provider']}/{block['cloud']} must be an array"
            )
        blocks.append(block)
    return blocks


def select_block(
    blocks: list[dict[str, Any]],
    provider_name: str | None,
    cloud_name: str | None,
) -> dict[str, Any] | None:
    """Pick the block for *provider_name*/*cloud_name*.

    An exact (case-insensitive) match wins, then the ``default``/``default``
    block; otherwise there is no block.
    """
    fallback = None
    for block in blocks:
        provider, cloud = str(block["provider"]), str(block["cloud"])
        if (
            provider_name is not None
            and cloud_name is not None
            and provider.lower() == provider_name.lower()
            and cloud.lower() == cloud_name.lower()
        ):
            return block
        if fallback is None and provider == DEFAULT_SCOPE and cloud == DEFAULT_SCOPE:
            fallback = block
    return fallback


def _string_list(product: dict[str, Any], key: str) -> list[str]:
    value = product.get(key, [])
    if not isinstance(value, list):
        raise CatalogConfigurationError(
            f"'{key}' of product '{product.get('id')}' must be an array"
        )
    return [str(v) for v in value]


def to_product(product: dict[str, Any]) -> ProductDefinition | None:
    """Build a product from its JSON object, or None if it has no ``id``.

    Raises:
        CatalogConfigurationError: If a field has the wrong type.
    """
    if "id" not in product:
        return None
    product_id = str(product["id"])
    name = product.get("name", product_id)
    rate = None
    rates = product.get("standardHourlyRates", [])
    if not isinstance(rates, list):
        raise CatalogConfigurationError(
            f"'standardHourlyRates' of product '{product_id}' must be an array"
        )
    for entry in rates:
        if isinstance(entry, dict) and "rate" in entry:
            rate = entry["rate"]
    architectures = {
        _KNOWN_ARCHITECTURES[a]
        for a in _string_list(product, "architectures")
        if a in _KNOWN_ARCHITECTURES
    }
    try:
        return ProductDefinition(
            product_id=product_id,
            name=name,
            description=product.get("description", name),
            cpu_count=product.get("cpuCount", 1),
            root_volume_size=StorageSize(
                quantity=product.get("rootVolumeSizeInGb", 1), unit=StorageUnit.GB
            ),
            ram_size=StorageSize(quantity=product.get("ramSizeInMb", 512), unit=StorageUnit.MB),
            architectures=frozenset(architectures),
            standard_hourly_rate=rate,
            excluded_regions=frozenset(_string_list(product, "excludesRegions")),
        )
    except ValidationError as e:
        raise CatalogConfigurationError(f"Invalid catalog product '{product_id}'") from e


def products_for(
    block: dict[str, Any],
    architecture: Architecture,
    region_id: str | None,
) -> list[ProductDefinition]:
    """Return the products of *block* visible for *architecture* in *region_id*.

    Architecture and region filtering happen on the raw JSON, so products
    never offered for *architecture* are not validated.
    """
    result: list[ProductDefinition] = []
    for product in block["products"]:
        if not isinstance(product, dict):
            raise CatalogConfigurationError("Catalog products must be JSON objects")
        if architecture.value not in _string_list(product, "architectures"):
            continue
        if region_id is not None and region_id in _string_list(product, "excludesRegions"):
            continue
        prd = to_product(product)
        if prd is not None:
            result.append(prd)
    return result
