"""
Shared machinery of the consume and failure pipelines.

Both pipelines are an ordered tuple of middleware callables ending in a
terminal step. Each middleware receives the pipeline arguments plus a
`call_next` callable; returning without calling it ends the chain
early, which is allowed.
"""

from collections.abc import Callable, Iterable
from typing import Any

from jobworker.exceptions import (
    InvalidDeclaration,
    InvalidMiddlewareDefinition,
    MiddlewareError,
)
from jobworker.types.protocols import Resolver
from jobworker.types.declarations import parse_declaration


class MiddlewareFactory:
    """Builds middleware callables from declarations."""

    def __init__(self, resolver: Resolver, default_method: str):
        """
        Args:
            resolver: Turns type references into middleware instances.
            default_method: Method called on bare type references.
        """
        self._resolver = resolver
        self._default_method = default_method

    def create(self, declaration: Any) -> Callable[..., Any]:
        """
        Raises:
            InvalidMiddlewareDefinition: If the declaration can not be resolved.
        """
        try:
            return parse_declaration(declaration, self._default_method).bind(self._resolver)
        except (InvalidDeclaration, LookupError, AttributeError) as e:
            raise InvalidMiddlewareDefinition(declaration) from e


class MiddlewarePipeline:
    """
    Ordered middleware chain, outermost first.

    Declarations are resolved once, at construction; the resulting tuple
    is never modified, so a pipeline can be shared between workers.
    """

    def __init__(self, factory: MiddlewareFactory, declarations: Iterable[Any] = ()):
        self._factory = factory
        self._declarations = tuple(declarations)
        self._middlewares = tuple(factory.create(d) for d in self._declarations)

    def __len__(self) -> int:
        return len(self._middlewares)

    def with_middlewares(self, *declarations: Any) -> "MiddlewarePipeline":
        """Return a pipeline with the given middlewares; this one is left as is."""
        return type(self)(self._factory, declarations)

    def _call(self, index: int, terminal: Callable[..., Any], args: tuple[Any, ...]) -> Any:
        if index == len(self._middlewares):
            return terminal(*args)

        called = False

        def call_next(*next_args: Any) -> Any:
            nonlocal called
            if called:
                raise MiddlewareError(
                    f"Middleware #{index} {self._middlewares[index]!r} called the next step twice"
                )
            called = True
            return self._call(index + 1, terminal, next_args)

        return self._middlewares[index](*args, call_next)
