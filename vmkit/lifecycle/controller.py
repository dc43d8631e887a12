"""Synchronous stop/reboot on top of fire-and-forget backend primitives.

Backends only *request* state transitions; the controller confirms them
by re-reading the VM state until it converges or a wait budget runs out.
Running out of budget is not an error: :meth:`LifecycleController.stop`
escalates to a forced stop and :meth:`LifecycleController.reboot` gives
up without starting the VM. The returned :class:`LifecycleOutcome` tells
the two apart.
"""

from __future__ import annotations

import time
from enum import Enum
from typing import Callable

from vmkit.base.async_support import async_wrap
from vmkit.base.backend import BackendAccessor, Capability
from vmkit.base.config import LifecycleSettings
from vmkit.base.exceptions import OperationNotSupportedError, VirtualMachineNotFoundError
from vmkit.base.logger import vm_logger
from vmkit.base.models import VmState

_STOPPED_STATES = (VmState.STOPPED, VmState.TERMINATED)


class LifecycleOutcome(str, Enum):
    """How a stop or reboot completed."""

    STOPPED = "stopped"
    GONE = "gone"
    FORCED = "forced"
    RESTARTED = "restarted"
    GAVE_UP = "gave_up"


class LifecycleController:
    """Drives stop/reboot for the VMs of one backend.

    Calls block the caller for up to their wait budget (a reboot can take
    ``stop_timeout + reboot_timeout``). Operations on different VMs are
    independent; concurrent operations on the same VM must be serialized
    by the caller.

    Attributes:
        backend: Accessor providing state lookup and raw primitives.
        settings: Wait budgets and poll intervals.
    """

    def __init__(
        self,
        backend: BackendAccessor,
        settings: LifecycleSettings | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.backend = backend
        self.settings = settings or LifecycleSettings()
        self._clock = clock
        self._sleep = sleep

    def _require(self, capability: Capability) -> None:
        if not self.backend.supports(capability):
            raise OperationNotSupportedError(
                f"{type(self.backend).__name__} does not support '{capability.value}'"
            )

    def _observe(self, vm_id: str, operation: str) -> VmState | None:
        """Read the VM state; lookup failures count as no new information."""
        try:
            return self.backend.get_vm_state(vm_id)
        except Exception:
            vm_logger.debug(
                "State lookup failed, retrying on next poll",
                operation=operation,
                vm_id=vm_id,
                exc_info=True,
            )
            return VmState.UNKNOWN

    def start(self, vm_id: str) -> None:
        """Request that *vm_id* be started. Does not wait for it to run.

        Raises:
            OperationNotSupportedError: If the backend cannot start VMs.
        """
        self._require(Capability.START)
        self.backend.raw_start(vm_id)

    def stop(self, vm_id: str, force: bool = False) -> LifecycleOutcome:
        """Stop *vm_id* and wait for the backend to report it stopped.

        The state is polled every ``stop_poll_interval`` seconds for up to
        ``stop_timeout`` seconds. If the VM has not stopped by then, a
        forced stop is requested once and the call returns without waiting
        for it.

        Args:
            vm_id: Backend VM identifier.
            force: Passed through to the initial stop request.

        Returns:
            ``STOPPED``, ``GONE`` if the VM disappeared, or ``FORCED`` if
            the wait budget ran out.

        Raises:
            OperationNotSupportedError: If the backend cannot stop VMs.
        """
        self._require(Capability.STOP)
        vm_logger.info("Stopping virtual machine", operation="stop", vm_id=vm_id)
        self.backend.raw_stop(vm_id, force)

        deadline = self._clock() + self.settings.stop_timeout
        while self._clock() < deadline:
            self._sleep(self.settings.stop_poll_interval)
            state = self._observe(vm_id, "stop")
            if state is None:
                return LifecycleOutcome.GONE
            if state in _STOPPED_STATES:
                return LifecycleOutcome.STOPPED

        vm_logger.warning(
            f"Virtual machine did not stop within {self.settings.stop_timeout:.0f}s, forcing",
            operation="stop",
            vm_id=vm_id,
        )
        self.backend.raw_stop(vm_id, True)
        return LifecycleOutcome.FORCED

    def reboot(self, vm_id: str) -> LifecycleOutcome:
        """Reboot *vm_id* by stopping it, waiting for STOPPED, then starting it.

        Returns:
            ``RESTARTED`` once the start request was issued, ``GONE`` if the
            VM disappeared, or ``GAVE_UP`` if STOPPED was never observed
            within ``reboot_timeout`` (the VM is then left as it is).

        Raises:
            VirtualMachineNotFoundError: If *vm_id* does not exist.
            OperationNotSupportedError: If the backend cannot stop or start VMs.
        """
        if self.backend.get_vm_state(vm_id) is None:
            raise VirtualMachineNotFoundError(f"No such virtual machine: {vm_id}")
        self._require(Capability.STOP)
        self._require(Capability.START)

        if self.stop(vm_id) is LifecycleOutcome.GONE:
            return LifecycleOutcome.GONE

        deadline = self._clock() + self.settings.reboot_timeout
        while self._clock() < deadline:
            state = self._observe(vm_id, "reboot")
            if state is None:
                return LifecycleOutcome.GONE
            if state is VmState.STOPPED:
                self.backend.raw_start(vm_id)
                vm_logger.info("Virtual machine restarted", operation="reboot", vm_id=vm_id)
                return LifecycleOutcome.RESTARTED
            self._sleep(self.settings.reboot_poll_interval)

        vm_logger.warning(
            "Virtual machine never reached STOPPED, not starting it",
            operation="reboot",
            vm_id=vm_id,
        )
        return LifecycleOutcome.GAVE_UP

    astart = async_wrap(start)
    astop = async_wrap(stop)
    areboot = async_wrap(reboot)
