"""
In-process reference transport.

Keeps messages in memory and drives a worker over them. It shows what
a real adapter is responsible for: assigning ids, tracking status and
deciding when a message counts as done.
"""

import itertools
import threading
from collections import deque

from jobworker.constants import LOG_MESSAGE_PUSHED, JobStatus
from jobworker.observability.logging import BoundLogger, get_logger
from jobworker.types.message import Message
from jobworker.worker.main import Worker


class InMemoryQueue:
    """FIFO queue living in the current process."""

    def __init__(self, logger: BoundLogger | None = None):
        self._logger = logger or get_logger(__name__)
        self._waiting: deque[Message] = deque()
        self._statuses: dict[str, JobStatus] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._waiting)

    def push(self, message: Message) -> Message:
        """
        Enqueue a message, assigning its id and status.

        Returns:
            The same message instance.
        """
        with self._lock:
            message.id = str(next(self._ids))
            message.status = JobStatus.waiting()
            self._statuses[message.id] = message.status
            self._waiting.append(message)

        self._logger.debug(LOG_MESSAGE_PUSHED, message=message.id, handler=message.handler_name)
        return message

    def status(self, message_id: str) -> JobStatus:
        """
        Raises:
            KeyError: If the queue never saw a message with this id.
        """
        return self._statuses[message_id]

    def run(self, worker: Worker, max_jobs: int = 0) -> int:
        """
        Process waiting messages with the given worker.

        A message is marked done once the worker returns or raises;
        a `JobFailure` is propagated after that.

        Args:
            worker: The worker to process messages with.
            max_jobs: Stop after this many messages; 0 drains the queue,
                including messages pushed back while running.

        Returns:
            Number of messages processed.
        """
        processed = 0
        while max_jobs <= 0 or processed < max_jobs:
            message = self._reserve()
            if message is None:
                break
            processed += 1
            try:
                worker.process(message, self)
            finally:
                self._set_status(message, JobStatus.done())
        return processed

    def _reserve(self) -> Message | None:
        with self._lock:
            if not self._waiting:
                return None
            message = self._waiting.popleft()
            message.status = JobStatus.reserved()
            self._statuses[message.id] = message.status
            return message

    def _set_status(self, message: Message, status: JobStatus) -> None:
        with self._lock:
            message.status = status
            self._statuses[message.id] = status
