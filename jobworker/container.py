"""
Dictionary-backed resolver.

Good enough for tests and small deployments; larger applications plug
their own dependency container in through the `Resolver` protocol.
"""

from collections.abc import Callable, Mapping
from typing import Any

from jobworker.exceptions import ServiceNotFound


class SimpleContainer:
    """
    Resolver over a fixed mapping of references to instances.

    A factory, when given, is asked for references missing from the
    mapping and may raise `ServiceNotFound` itself.
    """

    def __init__(
        self,
        definitions: Mapping[Any, Any] | None = None,
        factory: Callable[[Any], Any] | None = None,
    ):
        self._definitions = dict(definitions or {})
        self._factory = factory

    def get(self, reference: Any) -> Any:
        try:
            return self._definitions[reference]
        except KeyError:
            pass
        if self._factory is None:
            raise ServiceNotFound(reference)
        return self._factory(reference)

    def has(self, reference: Any) -> bool:
        return reference in self._definitions
