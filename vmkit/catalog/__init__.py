"""VM product catalog resolution from layered JSON documents."""

from .resolver import ARCHITECTURES_TTL, PRODUCTS_TTL, CatalogResolver

__all__ = [
    "ARCHITECTURES_TTL",
    "PRODUCTS_TTL",
    "CatalogResolver",
]
