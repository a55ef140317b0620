"""
Worker for processing queue messages.

The worker receives a message from a transport, runs it through the
consume pipeline down to its handler, and on error hands it to the
failure pipeline, which decides whether the error is fatal.
"""

import time

from opentelemetry.trace import Tracer

from jobworker.config import get_settings
from jobworker.constants import (
    LOG_PROCESSING_MESSAGE,
    LOG_PROCESSING_STOPPED,
    OUTCOME_FAILED,
    OUTCOME_SUCCEEDED,
    OUTCOME_SUPPRESSED,
    SPAN_PROCESS_MESSAGE,
)
from jobworker.container import SimpleContainer
from jobworker.middleware.base import MiddlewareFactory
from jobworker.middleware.consume import ConsumeMiddlewarePipeline
from jobworker.middleware.failure import FailureMiddlewarePipeline
from jobworker.observability.logging import BoundLogger, get_logger
from jobworker.observability.metrics import MetricsCollector, get_metrics
from jobworker.observability.tracing import get_tracer
from jobworker.types.message import Message
from jobworker.types.protocols import Queue
from jobworker.worker.handlers import HandlerRegistry


class Worker:
    """
    Processes one message at a time.

    `process` is synchronous and not reentrant; run one worker per
    thread to process messages concurrently. The registry and the
    pipelines hold no per-call state and may be shared between workers.
    """

    def __init__(
        self,
        handlers: HandlerRegistry,
        logger: BoundLogger | None = None,
        consume_pipeline: ConsumeMiddlewarePipeline | None = None,
        failure_pipeline: FailureMiddlewarePipeline | None = None,
        metrics: MetricsCollector | None = None,
        tracer: Tracer | None = None,
    ):
        """
        Initialize the worker.

        Args:
            handlers: Registry resolving handler names.
            logger: Logger for the processing trace. Defaults to this module's.
            consume_pipeline: Middleware around handler calls. Defaults to none.
            failure_pipeline: Middleware deciding on errors. Defaults to none,
                so every error becomes a `JobFailure`.
            metrics: Metrics collector. Defaults to the global one.
            tracer: Tracer for processing spans.
        """
        settings = get_settings()

        self.handlers = handlers
        self._logger = logger or get_logger(__name__)
        if consume_pipeline is None:
            consume_pipeline = ConsumeMiddlewarePipeline(
                MiddlewareFactory(SimpleContainer(), settings.consume_middleware_method)
            )
        if failure_pipeline is None:
            failure_pipeline = FailureMiddlewarePipeline(
                MiddlewareFactory(SimpleContainer(), settings.failure_middleware_method)
            )
        self._consume_pipeline = consume_pipeline
        self._failure_pipeline = failure_pipeline
        self._metrics = metrics or get_metrics()
        self._tracer = tracer or get_tracer(__name__)

    def process(self, message: Message, queue: Queue) -> None:
        """
        Process a single message.

        Handles the full lifecycle:
        1. Run the consume pipeline down to the handler
        2. On error, log it and run the failure pipeline
        3. Surface `JobFailure` unless some failure middleware absorbed it

        Acknowledging the message is left to the transport.

        Args:
            message: The message to process.
            queue: The queue the message came from.

        Raises:
            JobFailure: If processing failed and the failure pipeline
                did not suppress the error.
        """
        start_time = time.monotonic()
        outcome = OUTCOME_FAILED

        self._logger.info(LOG_PROCESSING_MESSAGE, message=message.display_id)

        with self._tracer.start_as_current_span(SPAN_PROCESS_MESSAGE) as span:
            span.set_attribute("message.id", message.display_id)
            span.set_attribute("message.handler", message.handler_name)

            try:
                self._consume_pipeline.dispatch(message, queue, self._handle)
                outcome = OUTCOME_SUCCEEDED
            except Exception as e:
                self._logger.error(LOG_PROCESSING_STOPPED, message=message.display_id, error=str(e))
                self._failure_pipeline.dispatch(message, queue, e)
                outcome = OUTCOME_SUPPRESSED
            finally:
                span.set_attribute("message.outcome", outcome)
                self._metrics.record_message_processed(
                    handler=message.handler_name,
                    outcome=outcome,
                    duration_seconds=time.monotonic() - start_time,
                )

    def _handle(self, message: Message, queue: Queue) -> None:
        """Terminal step of the consume pipeline."""
        handler = self.handlers.resolve(message.handler_name)
        handler(message)
