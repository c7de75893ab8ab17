"""
Detached Background Tasks

Post-commit work (package locking, mail delivery) must outlive the request that
scheduled it: a client disconnect cancels the request task, not these.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)


class BackgroundTaskSupervisor:
    """Spawns detached tasks with their own deadline and drains them on shutdown."""

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def spawn(
        self,
        factory: Callable[[], Awaitable[object]],
        *,
        name: str,
        timeout: float,
    ) -> asyncio.Task[None]:
        """Run factory() in a new task bounded by timeout seconds.

        Failures are logged and never propagate to the caller.
        """
        task = asyncio.create_task(self._run(factory, name=name, timeout=timeout), name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(
        self,
        factory: Callable[[], Awaitable[object]],
        *,
        name: str,
        timeout: float,
    ) -> None:
        try:
            async with asyncio.timeout(timeout):
                await factory()
        except TimeoutError:
            logger.error(f"Background task {name} timed out after {timeout}s")
        except asyncio.CancelledError:
            logger.warning(f"Background task {name} cancelled")
            raise
        except Exception as e:
            logger.error(f"Background task {name} failed: {e}", exc_info=True)
        else:
            logger.debug(f"Background task {name} finished")

    async def drain(self, timeout: float) -> None:
        """Wait up to timeout seconds for pending tasks, then cancel the rest."""
        if not self._tasks:
            return

        logger.info(f"Waiting for {len(self._tasks)} background task(s)")
        _, still_pending = await asyncio.wait(set(self._tasks), timeout=timeout)

        for task in still_pending:
            task.cancel()
        if still_pending:
            logger.warning(f"Cancelled {len(still_pending)} background task(s) at shutdown")
            await asyncio.gather(*still_pending, return_exceptions=True)
