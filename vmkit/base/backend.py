"""Backend accessor blueprint."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum

from vmkit.base.config import ProviderContext
from vmkit.base.exceptions import OperationNotSupportedError
from vmkit.base.models import VmHandle, VmState


class Capability(str, Enum):
    """Raw control primitives a backend may declare support for."""

    START = "start"
    STOP = "stop"


class BackendAccessor(ABC):
    """Abstract interface the integration layer implements for one cloud backend.

    A backend declares which raw primitives it supports through
    :attr:`capabilities`; callers check :meth:`supports` instead of
    relying on a primitive raising. Only the primitives a backend
    declares need to be overridden.
    """

    capabilities: frozenset[Capability] = frozenset()

    def supports(self, capability: Capability) -> bool:
        """Return True if the backend declares *capability*."""
        return capability in self.capabilities

    @abstractmethod
    def context_info(self) -> ProviderContext:
        """Return the account/region/provider scope this backend is bound to."""

    @abstractmethod
    def list_vms(self) -> list[VmHandle]:
        """List every VM visible in the current scope."""

    def get_vm_state(self, vm_id: str) -> VmState | None:
        """Return the current state of *vm_id*, or None if it no longer exists.

        The default scans :meth:`list_vms`; backends with a direct lookup
        should override it. May raise on transient backend errors.
        """
        for vm in self.list_vms():
            if vm.vm_id == vm_id:
                return vm.state
        return None

    def list_vm_status(self) -> dict[str, VmState]:
        """Map every visible VM identifier to its current state."""
        return {vm.vm_id: vm.state for vm in self.list_vms()}

    def raw_start(self, vm_id: str) -> None:
        """Request that *vm_id* be started. Returns before the VM is running.

        Raises:
            OperationNotSupportedError: If the backend cannot start VMs.
        """
        raise OperationNotSupportedError(
            f"{type(self).__name__} does not support starting virtual machines"
        )

    def raw_stop(self, vm_id: str, force: bool = False) -> None:
        """Request that *vm_id* be stopped. Returns before the VM is stopped.

        Args:
            vm_id: Backend VM identifier.
            force: Ask the backend for an immediate, non-graceful stop.

        Raises:
            OperationNotSupportedError: If the backend cannot stop VMs.
        """
        raise OperationNotSupportedError(
            f"{type(self).__name__} does not support stopping virtual machines"
        )

    @classmethod
    def implementation_package(cls) -> str | None:
        """Dotted package holding this backend, or None for a top-level module.

        ``acme.clouds.ec2.accessor.Ec2Backend`` yields ``acme.clouds.ec2``.
        """
        return cls.__module__.rpartition(".")[0] or None

    @classmethod
    def implementation_name(cls) -> str:
        """Short name of the package implementing this backend.

        ``acme.clouds.ec2.accessor.Ec2Backend`` yields ``ec2``.
        """
        package = cls.implementation_package() or cls.__module__
        return package.rsplit(".", 1)[-1]
