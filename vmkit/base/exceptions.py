"""
vmkit exception hierarchy.

Every component has a top-level error that inherits from
:class:`VmkitError` and sub-exceptions for the failure modes
callers are expected to handle (not-found, not-supported, etc.).
"""


# ── Base ──────────────────────────────────────────────────────────────
class VmkitError(Exception):
    """Root exception for all vmkit errors."""


class ContextError(VmkitError):
    """No usable provider context was defined for the request."""


# ── Catalog ───────────────────────────────────────────────────────────
class CatalogError(VmkitError):
    """Base exception for product catalog operations."""


class CatalogConfigurationError(CatalogError):
    """A located catalog document could not be read or parsed."""


# ── Compute ───────────────────────────────────────────────────────────
class ComputeError(VmkitError):
    """Base exception for compute/VM operations."""


class VirtualMachineNotFoundError(ComputeError):
    """VM identifier does not resolve to any known resource."""


class OperationNotSupportedError(ComputeError):
    """The backend lacks the requested capability."""
