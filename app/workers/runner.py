import asyncio
import logging
from typing import Any, Callable

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import async_session_maker

logger = logging.getLogger(__name__)


class Worker:
    """
    In-process job queue for side effects that must not hold up a request.

    Producers call `enqueue_job` and return immediately; a single consumer
    task runs each job with its own database session. Job failures are logged
    and never reach the producer.
    """

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession] = async_session_maker,
        maxsize: int = settings.WORKER_QUEUE_MAXSIZE,
    ):
        self.session_factory = session_factory
        self.queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self.is_running = False
        self._task: asyncio.Task | None = None

    async def start(self) -> None:
        """Starts the worker loop."""
        if self.is_running:
            return
        self.is_running = True
        self._task = asyncio.create_task(self._process_queue())
        logger.info("[Worker] Started.")

    async def stop(self) -> None:
        """Stops the worker loop."""
        self.is_running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("[Worker] Stopped.")

    def enqueue_job(self, task_name: str, **kwargs: Any) -> bool:
        """Adds a job to the queue without waiting. Returns False if the queue is full."""
        try:
            self.queue.put_nowait((task_name, kwargs))
        except asyncio.QueueFull:
            logger.error(f"[Worker] Queue full, dropping job: {task_name} | Args: {kwargs}")
            return False
        logger.info(f"[Worker] Enqueued job: {task_name} | Args: {kwargs}")
        return True

    async def run_job(self, task_name: str, kwargs: dict[str, Any]) -> None:
        """Run one job in a fresh session."""
        # Imported here so services can import the worker without a cycle
        from app.workers.jobs import JOB_HANDLERS

        handler = JOB_HANDLERS.get(task_name)
        if handler is None:
            logger.warning(f"[Worker] Unknown job: {task_name}")
            return

        async with self.session_factory() as db:
            await handler(db, **kwargs)

    async def drain(self) -> int:
        """Process every queued job now. Returns the number of jobs run."""
        processed = 0
        while not self.queue.empty():
            task_name, kwargs = self.queue.get_nowait()
            try:
                await self.run_job(task_name, kwargs)
            except Exception as e:
                logger.error(f"[Worker] Job Failed: {task_name}: {e}", exc_info=True)
            finally:
                self.queue.task_done()
                processed += 1
        return processed

    async def _process_queue(self) -> None:
        """Main loop consuming jobs."""
        while self.is_running:
            try:
                task_name, kwargs = await self.queue.get()

                logger.info(f"[Worker] Processing: {task_name}")

                try:
                    await self.run_job(task_name, kwargs)
                except Exception as e:
                    logger.error(f"[Worker] Job Failed: {task_name}: {e}", exc_info=True)
                finally:
                    self.queue.task_done()

            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"[Worker] Loop Error: {e}")
                await asyncio.sleep(1)


# Global Worker Instance
worker = Worker()
