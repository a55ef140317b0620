"""
Collaborator interfaces the worker core depends on.

Implementations live outside the core: transports provide a `Queue`,
the host application provides a `Resolver` (see `SimpleContainer`
for the bundled one).
"""

from typing import Any, Protocol, runtime_checkable

from jobworker.types.message import Message


@runtime_checkable
class Resolver(Protocol):
    """Maps a type or service reference to a live instance."""

    def get(self, reference: Any) -> Any:
        """Return the instance, raising `ServiceNotFound` if there is none."""
        ...


@runtime_checkable
class Queue(Protocol):
    """
    The part of a transport middleware may talk to.

    The worker itself never calls it.
    """

    def push(self, message: Message) -> Message:
        ...
