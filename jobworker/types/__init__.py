"""
Type definitions for the worker core.
"""

from jobworker.types.declarations import (
    Declaration,
    InlineDeclaration,
    TypeMethodDeclaration,
    TypeOnlyDeclaration,
    parse_declaration,
)
from jobworker.types.message import Message
from jobworker.types.protocols import Queue, Resolver

__all__ = [
    "Message",
    "Queue",
    "Resolver",
    # Declaration types
    "Declaration",
    "InlineDeclaration",
    "TypeMethodDeclaration",
    "TypeOnlyDeclaration",
    "parse_declaration",
]
