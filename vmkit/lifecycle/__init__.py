"""Synchronous VM lifecycle control over request-and-poll backends."""

from .controller import LifecycleController, LifecycleOutcome

__all__ = ["LifecycleController", "LifecycleOutcome"]
