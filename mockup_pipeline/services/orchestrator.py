"""Provider task orchestrator - submit a mockup job and poll it to a terminal state."""

import asyncio
import logging
import time
from typing import Callable, Protocol

from ..config import PollingConfig, default_polling
from ..errors import MockupTimeout, ProviderError, ProviderRejected
from ..models import MockupResult, MockupTask, TaskPoll, TaskStatus

logger = logging.getLogger(__name__)

UNKNOWN_ERROR = "unknown error"


class RenderingProvider(Protocol):
    """The two-call submit/poll contract of a rendering provider."""

    def create_task(self, variant_ids: list[int], design_url: str, format: str = "jpg") -> str: ...

    def poll_task(self, task_key: str) -> TaskPoll: ...


class MockupOrchestrator:
    """
    Drive one provider render job to completion per call.

    submitted -> polling -> completed | failed | timed out. Transitions are
    driven only by poll responses; the attempt ceiling is the only built-in
    cancellation. Callers wanting N renders run N calls.
    """

    def __init__(
        self,
        client: RenderingProvider,
        polling: PollingConfig | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.client = client
        self.polling = polling or default_polling()
        self._sleep = sleep

    def submit(self, variant_ids: list[int], design_url: str) -> MockupTask:
        """Create the provider task. Refusal by the provider raises ProviderRejected."""
        try:
            task_key = self.client.create_task(variant_ids, design_url, format=self.polling.format)
        except ProviderError as e:
            raise ProviderRejected(str(e)) from e
        logger.info(f"Submitted mockup task {task_key} for variants {variant_ids}")
        return MockupTask(task_key=task_key, variant_ids=list(variant_ids), design_url=design_url)

    def generate_mockup(self, variant_id: int, design_url: str) -> MockupResult:
        """
        Render the authoritative provider mockup for one variant.

        Raises:
            ProviderRejected: provider failed the job (or refused the submission)
            MockupTimeout: no terminal status within max_attempts polls
        """
        task = self.submit([variant_id], design_url)
        return self.wait(task)

    def wait(self, task: MockupTask) -> MockupResult:
        """Poll a submitted task until it reaches a terminal state (blocking)."""
        while True:
            self._apply(task, self._poll_once(task))
            if task.is_terminal:
                return self._finish(task)
            if task.attempts >= self.polling.max_attempts:
                raise self._timeout(task)
            self._sleep(self.polling.poll_interval)

    async def generate_mockup_async(self, variant_id: int, design_url: str) -> MockupResult:
        """Awaitable generate_mockup. Cancel the awaiting task to abandon polling."""
        task = await asyncio.to_thread(self.submit, [variant_id], design_url)
        return await self.wait_async(task)

    async def wait_async(self, task: MockupTask) -> MockupResult:
        """Awaitable wait; blocking client calls run in a worker thread."""
        while True:
            self._apply(task, await asyncio.to_thread(self._poll_once, task))
            if task.is_terminal:
                return self._finish(task)
            if task.attempts >= self.polling.max_attempts:
                raise self._timeout(task)
            await asyncio.sleep(self.polling.poll_interval)

    def _poll_once(self, task: MockupTask) -> TaskPoll | None:
        """One poll round-trip. Transient failures are logged and return None."""
        task.attempts += 1
        try:
            return self.client.poll_task(task.task_key)
        except ProviderError as e:
            logger.warning(f"Poll {task.attempts} for task {task.task_key} failed, will retry: {e}")
            return None

    @staticmethod
    def _apply(task: MockupTask, poll: TaskPoll | None):
        """Advance the task from a poll response."""
        if poll is None:
            return
        if poll.status == TaskStatus.COMPLETED.value:
            task.status = TaskStatus.COMPLETED
            task.mockups = list(poll.mockups)
        elif poll.status == TaskStatus.FAILED.value:
            task.status = TaskStatus.FAILED
            task.error = poll.error or UNKNOWN_ERROR
        else:
            logger.debug(f"Task {task.task_key} still {poll.status} after {task.attempts} polls")

    @staticmethod
    def _finish(task: MockupTask) -> MockupResult:
        if task.status == TaskStatus.FAILED:
            logger.warning(f"Mockup task {task.task_key} failed: {task.error}")
            raise ProviderRejected(task.error or UNKNOWN_ERROR, task_key=task.task_key)

        logger.info(f"Mockup task {task.task_key} completed after {task.attempts} polls")
        return MockupResult(
            task_key=task.task_key,
            variant_ids=list(task.variant_ids),
            mockups=list(task.mockups),
            attempts=task.attempts,
        )

    @staticmethod
    def _timeout(task: MockupTask) -> MockupTimeout:
        logger.warning(f"Mockup task {task.task_key} timed out after {task.attempts} polls")
        return MockupTimeout(task.task_key, task.attempts)
