"""vmkit: VM product catalogs and lifecycle control for any cloud backend.

Implement :class:`BackendAccessor` for your cloud, then::

    from vmkit import CatalogResolver, LifecycleController, Architecture

    products = CatalogResolver.for_backend(backend).resolve_products(Architecture.I64)
    LifecycleController(backend).reboot("vm-1234")
"""

from .base import (
    Architecture,
    BackendAccessor,
    Capability,
    LifecycleSettings,
    ProductDefinition,
    ProviderContext,
    VmHandle,
    VmState,
)
from .catalog import CatalogResolver
from .lifecycle import LifecycleController, LifecycleOutcome

__all__ = [
    "Architecture",
    "BackendAccessor",
    "Capability",
    "LifecycleSettings",
    "ProductDefinition",
    "ProviderContext",
    "VmHandle",
    "VmState",
    "CatalogResolver",
    "LifecycleController",
    "LifecycleOutcome",
]
