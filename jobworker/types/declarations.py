"""
Handler and middleware declarations.

A declaration says how to obtain something callable: either it is the
callable itself, or it names a type (or service id) the resolver turns
into an instance plus the method to call on that instance.
"""

import inspect
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from typing import Any

from jobworker.exceptions import InvalidDeclaration
from jobworker.types.protocols import Resolver


@dataclass(frozen=True)
class InlineDeclaration:
    """A ready-made callable."""

    target: Callable[..., Any]

    def bind(self, resolver: Resolver) -> Callable[..., Any]:
        return self.target


@dataclass(frozen=True)
class TypeMethodDeclaration:
    """A reference resolved to an instance, and a method to call on it."""

    reference: Any
    method_name: str

    def bind(self, resolver: Resolver) -> Callable[..., Any]:
        """
        Resolve the instance and return its bound method.

        Raises:
            LookupError: If the resolver has no instance for the reference.
            AttributeError: If the instance has no callable `method_name`.
        """
        instance = resolver.get(self.reference)
        method = getattr(instance, self.method_name, None)
        if not callable(method):
            raise AttributeError(
                f"{type(instance).__qualname__}.{self.method_name} is not callable"
            )
        return method


@dataclass(frozen=True)
class TypeOnlyDeclaration(TypeMethodDeclaration):
    """A bare reference; the method name is the conventional default."""


Declaration = InlineDeclaration | TypeMethodDeclaration | TypeOnlyDeclaration


def parse_declaration(raw: Any, default_method: str) -> Declaration:
    """
    Normalize a raw config value into a declaration.

    Accepted shapes:
    - a declaration instance, returned unchanged
    - a `(reference, method_name)` tuple or list
    - a class, or a hashable service id such as a string
    - any other callable

    Args:
        raw: The value from the handler or middleware mapping.
        default_method: Method used for bare references.

    Raises:
        InvalidDeclaration: If the value has none of the shapes above.
    """
    if isinstance(raw, (InlineDeclaration, TypeMethodDeclaration)):
        return raw

    if isinstance(raw, (tuple, list)):
        if len(raw) != 2 or not isinstance(raw[1], str) or not raw[1]:
            raise InvalidDeclaration(raw)
        return TypeMethodDeclaration(reference=raw[0], method_name=raw[1])

    if inspect.isclass(raw):
        return TypeOnlyDeclaration(reference=raw, method_name=default_method)

    if callable(raw):
        return InlineDeclaration(target=raw)

    if isinstance(raw, Hashable) and raw is not None:
        return TypeOnlyDeclaration(reference=raw, method_name=default_method)

    raise InvalidDeclaration(raw)
