"""
Pytest configuration and shared fixtures.
"""

from collections.abc import Generator
from typing import Any

import pytest
import structlog
from prometheus_client import CollectorRegistry

from jobworker.constants import (
    DEFAULT_CONSUME_MIDDLEWARE_METHOD,
    DEFAULT_FAILURE_MIDDLEWARE_METHOD,
)
from jobworker.container import SimpleContainer
from jobworker.middleware import (
    ConsumeMiddlewarePipeline,
    FailureMiddlewarePipeline,
    MiddlewareFactory,
)
from jobworker.observability.metrics import MetricsCollector
from jobworker.types.message import Message
from tests.support import FakeHandler, RecordingQueue


@pytest.fixture
def log_events() -> Generator[list[dict[str, Any]], None, None]:
    """Capture structlog events emitted during the test."""
    with structlog.testing.capture_logs() as events:
        yield events


@pytest.fixture
def metrics() -> MetricsCollector:
    """Metrics collector on a private registry."""
    return MetricsCollector(registry=CollectorRegistry())


@pytest.fixture
def fake_handler() -> Generator[FakeHandler, None, None]:
    FakeHandler.static_processed_messages.clear()
    yield FakeHandler()
    FakeHandler.static_processed_messages.clear()


@pytest.fixture
def container(fake_handler: FakeHandler) -> SimpleContainer:
    """Resolver knowing only `FakeHandler`."""
    return SimpleContainer({FakeHandler: fake_handler})


@pytest.fixture
def queue() -> RecordingQueue:
    return RecordingQueue()


@pytest.fixture
def message() -> Message:
    """Message as it looks before a transport assigned an id."""
    return Message(handler_name="simple", data=["test-data"])


@pytest.fixture
def consume_pipeline() -> ConsumeMiddlewarePipeline:
    """Consume pipeline without middleware."""
    return ConsumeMiddlewarePipeline(
        MiddlewareFactory(SimpleContainer(), DEFAULT_CONSUME_MIDDLEWARE_METHOD)
    )


@pytest.fixture
def failure_pipeline() -> FailureMiddlewarePipeline:
    """Failure pipeline without middleware."""
    return FailureMiddlewarePipeline(
        MiddlewareFactory(SimpleContainer(), DEFAULT_FAILURE_MIDDLEWARE_METHOD)
    )
