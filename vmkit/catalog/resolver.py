"""VM product catalog resolution."""

from __future__ import annotations

import os
from typing import Mapping

from vmkit.base.backend import BackendAccessor
from vmkit.base.cache import TTLCache
from vmkit.base.config import ProviderContext
from vmkit.base.exceptions import ContextError
from vmkit.base.logger import vm_logger
from vmkit.base.models import Architecture, ProductDefinition
from vmkit.catalog.locator import candidate_locations, read_first
from vmkit.catalog.parser import parse_document, products_for, select_block

DAY = 24 * 60 * 60.0
WEEK = 7 * DAY

PRODUCTS_TTL = DAY
ARCHITECTURES_TTL = WEEK


class CatalogResolver:
    """Resolves the VM products a cloud offers for an architecture and region.

    Resolved lists are cached per ``(account, region, architecture)`` for
    :data:`PRODUCTS_TTL`; a live entry is returned without re-reading the
    catalog document. Cache keys are prefixed with the implementation,
    provider and cloud, so one cache store can be shared by resolvers of
    different backends.

    Attributes:
        implementation: Short backend implementation name used to locate
            backend-specific catalogs (e.g. ``ec2``), or None.
        package: Importable package of the backend, searched for its own
            ``vmproducts.json``, or None.
        cache: Cache store holding resolved lists.
    """

    def __init__(
        self,
        implementation: str | None = None,
        cache: TTLCache | None = None,
        properties: Mapping[str, str] | None = None,
        default_context: ProviderContext | None = None,
        package: str | None = None,
    ) -> None:
        """Create a resolver.

        Args:
            implementation: Backend implementation name.
            cache: Cache store; a private one is created when omitted.
            properties: System-level properties consulted for
                ``dasein.vmproducts.<implementation>``. Defaults to
                :data:`os.environ`.
            default_context: Context used when a call passes none.
            package: Backend package shipping a ``vmproducts.json``.
        """
        self.implementation = implementation
        self.package = package
        self.cache = cache if cache is not None else TTLCache()
        self._properties = properties if properties is not None else os.environ
        self._default_context = default_context

    @classmethod
    def for_backend(
        cls,
        backend: BackendAccessor,
        cache: TTLCache | None = None,
        properties: Mapping[str, str] | None = None,
    ) -> CatalogResolver:
        """Create a resolver bound to *backend*'s implementation, package and context."""
        return cls(
            implementation=backend.implementation_name(),
            cache=cache,
            properties=properties,
            default_context=backend.context_info(),
            package=backend.implementation_package(),
        )

    def _context(self, context: ProviderContext | None) -> ProviderContext:
        ctx = context or self._default_context
        if ctx is None:
            raise ContextError("No context was defined for this request")
        return ctx

    def _key(self, ctx: ProviderContext, item: object) -> tuple:
        return (
            self.implementation,
            ctx.provider_name,
            ctx.cloud_name,
            ctx.account_number,
            ctx.region_id,
            item,
        )

    def resolve_products(
        self,
        architecture: Architecture,
        context: ProviderContext | None = None,
    ) -> list[ProductDefinition]:
        """Return the products offered for *architecture* in the context's scope.

        Args:
            architecture: CPU architecture to filter on.
            context: Request scope; defaults to the resolver's bound context.

        Returns:
            The matching products, in catalog order. Empty if no catalog
            document or no matching block exists.

        Raises:
            ContextError: If no context is available.
            CatalogConfigurationError: If the located document is unreadable
                or malformed.
        """
        if architecture is None:
            raise ValueError("architecture is required")
        ctx = self._context(context)
        key = self._key(ctx, architecture)
        cached = self.cache.get(key)
        if cached is not None:
            return list(cached)

        found = read_first(
            candidate_locations(ctx, self.implementation, self._properties, self.package)
        )
        if found is None:
            vm_logger.debug(
                "No catalog document found",
                provider=ctx.provider_name,
                cloud=ctx.cloud_name,
                operation="resolve_products",
            )
            return []
        location, text = found
        vm_logger.debug(
            f"Loading catalog from {location.source} location {location.path}",
            provider=ctx.provider_name,
            cloud=ctx.cloud_name,
            operation="resolve_products",
        )

        block = select_block(parse_document(text), ctx.provider_name, ctx.cloud_name)
        products = products_for(block, architecture, ctx.region_id) if block else []
        self.cache.put(key, tuple(products), PRODUCTS_TTL)
        vm_logger.debug(
            f"Resolved {len(products)} {architecture.value} products",
            provider=ctx.provider_name,
            cloud=ctx.cloud_name,
            region=ctx.region_id,
            account=ctx.account_number,
            operation="resolve_products",
        )
        return products

    def resolve_supported_architectures(
        self, context: ProviderContext | None = None
    ) -> list[Architecture]:
        """Return the architectures supported in the context's scope.

        Every known architecture is supported at this layer; the list is
        cached per ``(account, region)`` for :data:`ARCHITECTURES_TTL`.
        """
        ctx = self._context(context)
        architectures = self.cache.get_or_create(
            self._key(ctx, "architectures"),
            ARCHITECTURES_TTL,
            lambda: tuple(Architecture),
        )
        return list(architectures)

    def find_product_by_id(
        self, product_id: str, context: ProviderContext | None = None
    ) -> ProductDefinition | None:
        """Return the product with *product_id* under any architecture, or None."""
        for architecture in Architecture:
            for product in self.resolve_products(architecture, context):
                if product.product_id == product_id:
                    return product
        return None

    def invalidate(self) -> None:
        """Drop every cached resolution so the next call re-reads the catalog."""
        self.cache.clear()
