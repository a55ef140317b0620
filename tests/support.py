"""
Test doubles shared by the test suite.
"""

from typing import Any, ClassVar

from jobworker.types.message import Message


class FakeHandler:
    """Handler object recording the messages it was called with."""

    static_processed_messages: ClassVar[list[Message]] = []

    def __init__(self) -> None:
        self.processed_messages: list[Message] = []

    def execute(self, message: Message) -> None:
        self.processed_messages.append(message)

    def execute_with_exception(self, message: Message) -> None:
        raise RuntimeError("Test exception.")

    @staticmethod
    def static_execute(message: Message) -> Message:
        FakeHandler.static_processed_messages.append(message)
        return message


class StaticOnlyHandler:
    """Handler object without the default `execute` method."""

    @staticmethod
    def static_execute(message: Message) -> Message:
        return message


class RecordingQueue:
    """Queue double keeping pushed messages in a list."""

    def __init__(self) -> None:
        self.pushed: list[Message] = []

    def push(self, message: Message) -> Message:
        self.pushed.append(message)
        return message


class RecordingMiddleware:
    """Consume middleware appending its name to a shared journal."""

    def __init__(self, name: str, journal: list[str], call_next: bool = True) -> None:
        self.name = name
        self.journal = journal
        self.call_next = call_next

    def process_consume(self, message: Message, queue: Any, call_next: Any) -> None:
        self.journal.append(f"{self.name}:before")
        if self.call_next:
            call_next(message, queue)
        self.journal.append(f"{self.name}:after")


class SuppressingFailureMiddleware:
    """Failure middleware that swallows every error it sees."""

    def __init__(self) -> None:
        self.errors: list[Exception] = []

    def process_failure(self, message: Message, queue: Any, error: Exception, call_next: Any) -> None:
        self.errors.append(error)
