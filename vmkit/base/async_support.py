"""
Async support for vmkit.

Lifecycle operations block their caller for minutes while they poll the
backend. ``async_wrap`` turns such a method into a coroutine that runs
it via :func:`asyncio.to_thread`, so async callers can await it, or race
it against their own timeout, without stalling the event loop.

Usage::

    class LifecycleController:
        def stop(self, vm_id: str) -> LifecycleOutcome: ...

        astop = async_wrap(stop)

    outcome = await asyncio.wait_for(controller.astop("vm-1"), 600)

Cancelling the awaiting task abandons the result; the worker thread keeps
polling until its own wait budget runs out.
"""

from __future__ import annotations

import asyncio
import functools
from typing import Any, Callable, Coroutine, TypeVar

T = TypeVar("T")


def async_wrap(
    fn: Callable[..., T],
) -> Callable[..., Coroutine[Any, Any, T]]:
    """Return an awaitable variant of *fn* that runs it in a worker thread.

    The wrapper keeps the name and docstring of *fn*.
    """

    @functools.wraps(fn)
    async def _wrapper(*args: Any, **kwargs: Any) -> T:
        return await asyncio.to_thread(fn, *args, **kwargs)

    return _wrapper
