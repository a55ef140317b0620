"""
Worker error taxonomy.

Resolution failures and handler errors travel through the failure
pipeline before anything leaves the worker; `JobFailure` is the only
error a caller of `Worker.process` sees for a failed message.
"""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from jobworker.types.message import Message


class JobWorkerError(Exception):
    """Base class for all worker errors."""


class InvalidStatus(JobWorkerError):
    """A job status was built from a tag outside the valid set."""

    name = "Invalid job status provided"

    def __init__(self, status: Any, valid_names: dict[str, int]):
        self.status = status
        self.valid_names = valid_names
        super().__init__(f"{self.name}: {status!r}")

    @property
    def solution(self) -> str:
        choices = ", ".join(f"{name} ({tag})" for name, tag in self.valid_names.items())
        return f"Status must be one of {choices}. {self.status!r} given."


class HandlerNotFound(JobWorkerError):
    """A handler name could not be turned into something callable."""

    def __init__(self, handler_name: str):
        self.handler_name = handler_name
        super().__init__(f"Queue handler with name {handler_name} doesn't exist")


class InvalidDeclaration(JobWorkerError):
    """A handler or middleware declaration has none of the supported shapes."""

    def __init__(self, declaration: Any):
        self.declaration = declaration
        super().__init__(f"Unsupported declaration: {declaration!r}")


class InvalidMiddlewareDefinition(JobWorkerError):
    """A middleware declaration could not be resolved to a callable."""

    def __init__(self, declaration: Any):
        self.declaration = declaration
        super().__init__(f"Middleware can not be created from {declaration!r}")


class MiddlewareError(JobWorkerError):
    """A middleware broke the dispatch contract."""


class ServiceNotFound(JobWorkerError, LookupError):
    """A resolver has nothing registered under the requested reference."""

    def __init__(self, reference: Any):
        self.reference = reference
        name = getattr(reference, "__qualname__", reference)
        super().__init__(f"{name} doesn't exist.")


class JobFailure(JobWorkerError):
    """
    Processing of a message failed and no failure middleware absorbed it.

    Carries the original message so callers can inspect its payload
    or dead-letter it.
    """

    def __init__(self, message: "Message", cause: BaseException):
        self.message = message
        self.cause = cause
        super().__init__(
            f"Processing of message #{message.display_id} is stopped "
            f"because of an exception:\n{cause}"
        )

    @property
    def queue_message(self) -> "Message":
        return self.message
