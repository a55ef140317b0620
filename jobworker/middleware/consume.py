"""
Consume pipeline: middleware around the handler call.
"""

from collections.abc import Callable
from typing import Any

from jobworker.middleware.base import MiddlewarePipeline
from jobworker.types.message import Message
from jobworker.types.protocols import Queue

# call_next(message, queue)
ConsumeNext = Callable[[Message, Queue], Any]
# middleware(message, queue, call_next)
ConsumeMiddleware = Callable[[Message, Queue, ConsumeNext], Any]


class ConsumeMiddlewarePipeline(MiddlewarePipeline):
    """
    Runs consume middleware in declaration order, then the terminal step.

    Errors raised inside the chain travel out through every enclosing
    middleware; catching them is up to the middleware, not the pipeline.
    """

    def dispatch(self, message: Message, queue: Queue, terminal: ConsumeNext) -> None:
        """
        Process a message through the chain.

        Args:
            message: The message being consumed.
            queue: The queue it came from, handed to middleware untouched.
            terminal: Innermost step, normally handler resolution and call.
        """
        self._call(0, terminal, (message, queue))
