"""
Job handlers registry.

Maps handler names to declarations and turns a name into a callable
taking the message. Handlers may be executed more than once for the
same message when a failure middleware sends it again, so they should
be idempotent.
"""

from collections.abc import Callable, Mapping
from typing import Any

from jobworker.config import get_settings
from jobworker.constants import LOG_HANDLER_NOT_RESOLVED
from jobworker.exceptions import HandlerNotFound
from jobworker.observability.logging import BoundLogger, get_logger
from jobworker.types.message import Message
from jobworker.types.protocols import Resolver
from jobworker.types.declarations import Declaration, parse_declaration

# Type alias for resolved handlers
MessageHandler = Callable[[Message], Any]


class HandlerRegistry:
    """
    Handler declarations keyed by name.

    The mapping is filled once at startup and only read afterwards, so
    one registry can be shared by workers running on several threads.
    """

    def __init__(
        self,
        resolver: Resolver,
        handlers: Mapping[str, Any] | None = None,
        logger: BoundLogger | None = None,
        default_method: str | None = None,
    ):
        """
        Initialize the registry.

        Args:
            resolver: Turns type references into handler instances.
            handlers: Raw declarations by handler name, see `parse_declaration`.
            logger: Logger for resolution failures.
            default_method: Method called on bare type references.
                Defaults to `Settings.default_handler_method`.
        """
        self._resolver = resolver
        self._logger = logger or get_logger(__name__)
        self._default_method = default_method or get_settings().default_handler_method
        self._declarations: dict[str, Declaration] = {}

        for name, raw in (handlers or {}).items():
            self.add(name, raw)

    def add(self, name: str, declaration: Any) -> None:
        """
        Register a declaration under a unique name.

        Raises:
            ValueError: If the name is empty or already taken.
            InvalidDeclaration: If the declaration shape is unsupported.
        """
        if not name:
            raise ValueError("Handler name must not be empty")
        if name in self._declarations:
            raise ValueError(f"Handler {name} is already registered")
        self._declarations[name] = parse_declaration(declaration, self._default_method)

    def register(self, name: str) -> Callable[[MessageHandler], MessageHandler]:
        """
        Decorator to register an inline handler.

        Example:
            @registry.register("send_email")
            def handle_send_email(message: Message) -> None:
                ...
        """
        def decorator(handler: MessageHandler) -> MessageHandler:
            self.add(name, handler)
            return handler
        return decorator

    def has(self, name: str) -> bool:
        return name in self._declarations

    def names(self) -> list[str]:
        """List all registered handler names."""
        return list(self._declarations)

    def resolve(self, name: str) -> MessageHandler:
        """
        Get the callable for a handler name.

        Args:
            name: The handler name carried by the message.

        Returns:
            A callable taking the message. Errors raised by it belong to
            the handler and are not translated.

        Raises:
            HandlerNotFound: If the name is unknown, its reference can not
                be resolved or the resolved instance lacks the method.
        """
        declaration = self._declarations.get(name)
        if declaration is None:
            self._log_failure(name, f"no handler is registered under {name}")
            raise HandlerNotFound(name)

        try:
            return declaration.bind(self._resolver)
        except (LookupError, AttributeError) as e:
            self._log_failure(name, str(e))
            raise HandlerNotFound(name) from e

    def _log_failure(self, name: str, cause: str) -> None:
        self._logger.error(LOG_HANDLER_NOT_RESOLVED, handler=name, cause=cause)

