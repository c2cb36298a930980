"""
Blocking entry points for callers that do not run an event loop.

Usage:
    # Instead of this async code:
    await run_dashboard(config, once=True)

    # Use this sync code:
    from canalwatch.sync import run_dashboard_sync
    controller = run_dashboard_sync(config, once=True)
"""

import asyncio
from typing import Any, Awaitable, Callable, Optional, TypeVar

from .config import DashboardConfig
from .controller import DashboardController, run_dashboard

R = TypeVar("R")


def run_async(async_fn: Callable[..., Awaitable[R]], *args: Any, **kwargs: Any) -> R:
    """Run an async function to completion in a fresh event loop.

    Raises:
        RuntimeError: If called from within a running event loop
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        pass
    else:
        raise RuntimeError(
            "Cannot use sync version from within an existing asyncio event loop. "
            "Use the async version instead."
        )

    return asyncio.run(async_fn(*args, **kwargs))


def run_dashboard_sync(
    config: Optional[DashboardConfig] = None,
    chart_dir: Optional[str] = None,
    once: bool = False,
    on_error: Optional[Callable[[str], None]] = None,
) -> DashboardController:
    """Synchronous version of :func:`canalwatch.controller.run_dashboard`."""
    return run_async(
        run_dashboard, config, chart_dir=chart_dir, once=once, on_error=on_error
    )
