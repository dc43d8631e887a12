"""Shared building blocks: backend blueprint, models, config and utilities.

Import :class:`BackendAccessor` to plug a cloud backend into the catalog
and lifecycle components.
"""

from .backend import BackendAccessor, Capability
from .cache import TTLCache
from .config import LifecycleSettings, ProviderContext, validate_context
from .models import (
    Architecture,
    ProductDefinition,
    StorageSize,
    StorageUnit,
    VmHandle,
    VmState,
)


__all__ = [
    "BackendAccessor",
    "Capability",
    "TTLCache",
    "LifecycleSettings",
    "ProviderContext",
    "validate_context",
    "Architecture",
    "ProductDefinition",
    "StorageSize",
    "StorageUnit",
    "VmHandle",
    "VmState",
]
