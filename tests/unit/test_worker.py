"""
Unit tests for Worker.process.
"""

from typing import Any

import pytest

from jobworker.constants import DEFAULT_FAILURE_MIDDLEWARE_METHOD, LOG_PROCESSING_STOPPED
from jobworker.container import SimpleContainer
from jobworker.exceptions import HandlerNotFound, JobFailure
from jobworker.middleware import (
    ConsumeMiddlewarePipeline,
    FailureMiddlewarePipeline,
    MiddlewareFactory,
)
from jobworker.observability.logging import render_placeholders
from jobworker.observability.metrics import MetricsCollector
from jobworker.types.message import Message
from jobworker.worker.handlers import HandlerRegistry
from jobworker.worker.main import Worker
from tests.support import FakeHandler, RecordingQueue, SuppressingFailureMiddleware

FAILURE_TEXT = "Processing of message #null is stopped because of an exception:\nTest exception."


class TestWorker:
    """Tests for Worker."""

    @pytest.fixture
    def make_worker(
        self,
        consume_pipeline: ConsumeMiddlewarePipeline,
        failure_pipeline: FailureMiddlewarePipeline,
        metrics: MetricsCollector,
    ):
        def factory(handlers: dict[str, Any], container: SimpleContainer, **kwargs: Any) -> Worker:
            kwargs.setdefault("consume_pipeline", consume_pipeline)
            kwargs.setdefault("failure_pipeline", failure_pipeline)
            return Worker(HandlerRegistry(container, handlers), metrics=metrics, **kwargs)
        return factory

    def test_job_executed_with_callable_handler(self, make_worker, message: Message, queue: RecordingQueue, log_events):
        handled = []
        worker = make_worker({"simple": handled.append}, SimpleContainer())

        worker.process(message, queue)

        assert len(handled) == 1
        assert handled[0] is message
        assert message.data == ["test-data"]
        assert log_events[0]["event"] == "Processing message #{message}."
        assert log_events[0]["message"] == "null"
        assert log_events[0]["log_level"] == "info"

    def test_job_executed_with_type_only_handler(
        self, make_worker, container: SimpleContainer, fake_handler: FakeHandler, message: Message, queue: RecordingQueue
    ):
        worker = make_worker({"simple": FakeHandler}, container)

        worker.process(message, queue)

        assert fake_handler.processed_messages == [message]

    def test_job_executed_with_type_method_handler(
        self, make_worker, container: SimpleContainer, fake_handler: FakeHandler, message: Message, queue: RecordingQueue
    ):
        worker = make_worker({"simple": (FakeHandler, "execute")}, container)

        worker.process(message, queue)

        assert fake_handler.processed_messages == [message]

    def test_job_executed_with_service_id_in_container(
        self, make_worker, fake_handler: FakeHandler, message: Message, queue: RecordingQueue
    ):
        container = SimpleContainer({"not-found-class-name": fake_handler})
        worker = make_worker({"simple": ("not-found-class-name", "execute")}, container)

        worker.process(message, queue)

        assert fake_handler.processed_messages == [message]

    def test_job_executed_with_static_method_handler(
        self, make_worker, container: SimpleContainer, message: Message, queue: RecordingQueue
    ):
        worker = make_worker({"simple": (FakeHandler, "static_execute")}, container)

        worker.process(message, queue)

        assert len(FakeHandler.static_processed_messages) == 1
        assert FakeHandler.static_processed_messages[0] is message

    def test_job_fail_with_undefined_method(
        self, make_worker, container: SimpleContainer, message: Message, queue: RecordingQueue
    ):
        worker = make_worker({"simple": (FakeHandler, "undefined_method")}, container)

        with pytest.raises(JobFailure, match="Queue handler with name simple doesn't exist") as exc_info:
            worker.process(message, queue)

        assert isinstance(exc_info.value.cause, HandlerNotFound)

    def test_job_fail_with_undefined_class(
        self, make_worker, container: SimpleContainer, message: Message, queue: RecordingQueue, log_events
    ):
        worker = make_worker({"simple": ("UndefinedClass", "handle")}, container)

        with pytest.raises(JobFailure, match="Queue handler with name simple doesn't exist"):
            worker.process(message, queue)

        assert log_events[1]["handler"] == "simple"
        assert "UndefinedClass doesn't exist." in log_events[1]["cause"]

    def test_job_fail_with_class_not_in_container(self, make_worker, message: Message, queue: RecordingQueue):
        worker = make_worker({"simple": (FakeHandler, "execute")}, SimpleContainer())

        with pytest.raises(JobFailure, match="Queue handler with name simple doesn't exist"):
            worker.process(message, queue)

    def test_job_fail_with_unknown_handler_name(self, make_worker, container: SimpleContainer, queue: RecordingQueue):
        worker = make_worker({}, container)

        with pytest.raises(JobFailure) as exc_info:
            worker.process(Message(handler_name="unknown"), queue)

        assert exc_info.value.cause.handler_name == "unknown"

    def test_job_fail_with_handler_exception(
        self, make_worker, container: SimpleContainer, message: Message, queue: RecordingQueue, log_events
    ):
        worker = make_worker({"simple": (FakeHandler, "execute_with_exception")}, container)

        with pytest.raises(JobFailure) as exc_info:
            worker.process(message, queue)

        assert str(exc_info.value) == FAILURE_TEXT
        assert exc_info.value.queue_message.data == ["test-data"]
        assert isinstance(exc_info.value.cause, RuntimeError)
        assert log_events[1]["log_level"] == "error"
        assert log_events[1]["event"] == LOG_PROCESSING_STOPPED
        assert log_events[1]["message"] == "null"
        assert log_events[1]["error"] == "Test exception."
        assert render_placeholders(None, "error", dict(log_events[1]))["event"] == FAILURE_TEXT

    def test_failure_text_uses_assigned_id(self, make_worker, container: SimpleContainer, queue: RecordingQueue):
        worker = make_worker({"simple": (FakeHandler, "execute_with_exception")}, container)

        with pytest.raises(JobFailure, match="Processing of message #42 is stopped"):
            worker.process(Message(handler_name="simple", id="42"), queue)

    def test_failure_pipeline_receives_original_error(
        self, make_worker, container: SimpleContainer, message: Message, queue: RecordingQueue
    ):
        """Test a suppressed error makes process return normally."""
        middleware = SuppressingFailureMiddleware()
        failure_pipeline = FailureMiddlewarePipeline(
            MiddlewareFactory(SimpleContainer({"suppress": middleware}), DEFAULT_FAILURE_MIDDLEWARE_METHOD),
            ["suppress"],
        )
        worker = make_worker(
            {"simple": (FakeHandler, "execute_with_exception")},
            container,
            failure_pipeline=failure_pipeline,
        )

        worker.process(message, queue)

        assert len(middleware.errors) == 1
        assert str(middleware.errors[0]) == "Test exception."

    def test_resolution_errors_go_through_failure_pipeline(
        self, make_worker, container: SimpleContainer, message: Message, queue: RecordingQueue
    ):
        errors = []
        failure_pipeline = FailureMiddlewarePipeline(
            MiddlewareFactory(SimpleContainer(), DEFAULT_FAILURE_MIDDLEWARE_METHOD),
            [lambda m, q, e, call_next: errors.append(e)],
        )
        worker = make_worker({}, container, failure_pipeline=failure_pipeline)

        worker.process(message, queue)

        assert isinstance(errors[0], HandlerNotFound)

    def test_consume_middleware_short_circuit(
        self, make_worker, consume_pipeline: ConsumeMiddlewarePipeline, message: Message, queue: RecordingQueue
    ):
        handled = []
        worker = make_worker(
            {"simple": handled.append},
            SimpleContainer(),
            consume_pipeline=consume_pipeline.with_middlewares(lambda m, q, call_next: None),
        )

        worker.process(message, queue)

        assert handled == []

    def test_base_exceptions_bypass_failure_pipeline(
        self, make_worker, message: Message, queue: RecordingQueue
    ):
        def interrupt(message: Message) -> None:
            raise KeyboardInterrupt

        worker = make_worker({"simple": interrupt}, SimpleContainer())

        with pytest.raises(KeyboardInterrupt):
            worker.process(message, queue)

    def test_metrics_recorded_per_outcome(
        self, make_worker, container: SimpleContainer, metrics: MetricsCollector, queue: RecordingQueue
    ):
        worker = make_worker(
            {"ok": FakeHandler, "broken": (FakeHandler, "execute_with_exception")},
            container,
        )

        worker.process(Message(handler_name="ok"), queue)
        with pytest.raises(JobFailure):
            worker.process(Message(handler_name="broken"), queue)

        exposition = metrics.get_metrics().decode()
        assert 'messages_processed_total{handler="ok",outcome="succeeded"} 1.0' in exposition
        assert 'messages_processed_total{handler="broken",outcome="failed"} 1.0' in exposition

    def test_failure_log_keeps_braces_in_cause_text(
        self, make_worker, message: Message, queue: RecordingQueue, log_events
    ):
        """Test placeholders inside the handler's error text reach the log verbatim."""
        def handler(message: Message) -> None:
            raise ValueError("missing key {message} in template")

        worker = make_worker({"simple": handler}, SimpleContainer())

        with pytest.raises(JobFailure):
            worker.process(message, queue)

        entry = log_events[1]
        assert entry["error"] == "missing key {message} in template"
        assert render_placeholders(None, "error", dict(entry))["event"] == (
            "Processing of message #null is stopped because of an exception:\n"
            "missing key {message} in template"
        )
