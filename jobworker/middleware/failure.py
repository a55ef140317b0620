"""
Failure pipeline: decides what happens to an error raised while
consuming a message.

Middleware may swallow the error, replace it, send the message again
or pass it along. If it reaches the end of the chain the terminal step
raises `JobFailure`.
"""

from collections.abc import Callable
from typing import Any

from jobworker.config import get_settings
from jobworker.constants import (
    LOG_MESSAGE_SENT_AGAIN,
    SEND_AGAIN_ATTEMPTS_KEY,
    SEND_AGAIN_MIDDLEWARE_ID,
)
from jobworker.exceptions import JobFailure
from jobworker.middleware.base import MiddlewarePipeline
from jobworker.observability.logging import BoundLogger, get_logger
from jobworker.types.message import Message
from jobworker.types.protocols import Queue

# call_next(message, queue, error)
FailureNext = Callable[[Message, Queue, Exception], Any]
# middleware(message, queue, error, call_next)
FailureMiddleware = Callable[[Message, Queue, Exception, FailureNext], Any]


def raise_job_failure(message: Message, queue: Queue, error: Exception) -> None:
    """Terminal step of the failure pipeline."""
    raise JobFailure(message, error) from error


class FailureMiddlewarePipeline(MiddlewarePipeline):
    """Runs failure middleware in declaration order, then `raise_job_failure`."""

    def dispatch(self, message: Message, queue: Queue, error: Exception) -> None:
        """
        Handle a processing error.

        Returns normally when some middleware absorbed the error.

        Raises:
            JobFailure: When the error reached the terminal step.
        """
        self._call(0, raise_job_failure, (message, queue, error))


class SendAgainMiddleware:
    """
    Pushes a failed message back to its queue a limited number of times.

    The attempt counter lives in the message metadata, keyed by the
    middleware id so that several instances can be stacked.
    """

    def __init__(
        self,
        max_attempts: int | None = None,
        middleware_id: str = SEND_AGAIN_MIDDLEWARE_ID,
        logger: BoundLogger | None = None,
    ):
        if max_attempts is None:
            max_attempts = get_settings().send_again_max_attempts
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.middleware_id = middleware_id
        self._logger = logger or get_logger(__name__)

    @property
    def metadata_key(self) -> str:
        return f"{SEND_AGAIN_ATTEMPTS_KEY}-{self.middleware_id}"

    def attempts(self, message: Message) -> int:
        return int(message.metadata.get(self.metadata_key, 0))

    def process_failure(
        self,
        message: Message,
        queue: Queue,
        error: Exception,
        call_next: FailureNext,
    ) -> None:
        attempt = self.attempts(message) + 1
        if attempt > self.max_attempts:
            call_next(message, queue, error)
            return

        retry = message.model_copy(
            update={
                "id": None,
                "status": None,
                "metadata": {**message.metadata, self.metadata_key: attempt},
            }
        )
        queue.push(retry)
        self._logger.warning(
            LOG_MESSAGE_SENT_AGAIN,
            message=message.display_id,
            attempt=attempt,
            max_attempts=self.max_attempts,
            error=str(error),
        )

    __call__ = process_failure
