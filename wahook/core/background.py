"""
Fire-and-forget task tracking.

Detached work (webhook delivery, delayed presence updates) must not block the
caller's response, but the event loop only keeps weak references to tasks.
"""

import asyncio

from wahook.core.logging.logger import get_logger


class BackgroundTasks:
    """Keeps strong references to fire-and-forget tasks until they finish."""

    def __init__(self):
        self._tasks: set[asyncio.Task] = set()
        self.logger = get_logger(__name__)

    def spawn(self, coro, name: str | None = None) -> asyncio.Task:
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            self.logger.error(
                f"Background task {task.get_name()} failed: {error}", exc_info=error
            )

    async def drain(self) -> None:
        """Wait for every pending task, used on shutdown and in tests."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def cancel_all(self) -> None:
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    def __len__(self) -> int:
        return len(self._tasks)
