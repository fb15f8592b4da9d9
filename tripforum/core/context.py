"""Operation context management using contextvars.

Each user interaction (a click on Like, a report submit, a comment save) runs
under its own operation ID, optionally tagged with the viewer's email and a
correlation ID. The values are picked up by the logging processors so every
log entry emitted while handling the interaction carries them, without
threading them through every call.
"""

import functools
from collections.abc import Awaitable, Callable
from contextvars import ContextVar
from typing import Any, TypeVar
from uuid import uuid4


operation_id_var: ContextVar[str] = ContextVar("operation_id", default="")
viewer_var: ContextVar[str | None] = ContextVar("viewer", default=None)
correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)


def generate_operation_id() -> str:
    """Generate a new unique operation ID."""
    return str(uuid4())


def get_operation_id() -> str:
    """Get the current operation ID."""
    return operation_id_var.get()


def get_viewer() -> str | None:
    """Get the current viewer email."""
    return viewer_var.get()


def get_correlation_id() -> str | None:
    """Get the current correlation ID."""
    return correlation_id_var.get()


def get_context() -> dict[str, Any]:
    """Get all context variables as a dictionary.

    Returns:
        Dictionary with operation_id, viewer and correlation_id when set.
    """
    context: dict[str, Any] = {}

    operation_id = get_operation_id()
    if operation_id:
        context["operation_id"] = operation_id

    viewer = get_viewer()
    if viewer:
        context["viewer"] = viewer

    correlation_id = get_correlation_id()
    if correlation_id:
        context["correlation_id"] = correlation_id

    return context


class OperationContext:
    """Context manager for one user interaction.

    Usage:
        with OperationContext(viewer="ana@example.com"):
            await store.set_reaction(ReactionKind.LIKE)  # logs carry operation_id
    """

    def __init__(
        self,
        operation_id: str | None = None,
        viewer: str | None = None,
        correlation_id: str | None = None,
    ) -> None:
        self.operation_id = operation_id
        self.viewer = viewer
        self.correlation_id = correlation_id
        self._tokens: dict[str, Any] = {}

    def __enter__(self) -> "OperationContext":
        """Enter context and set variables."""
        self._tokens["operation_id"] = operation_id_var.set(
            self.operation_id or generate_operation_id()
        )
        if self.viewer is not None:
            self._tokens["viewer"] = viewer_var.set(self.viewer)
        if self.correlation_id is not None:
            self._tokens["correlation_id"] = correlation_id_var.set(
                self.correlation_id
            )
        return self

    def __exit__(self, *_: object) -> None:
        """Exit context and restore previous values."""
        for var_name, token in self._tokens.items():
            if var_name == "operation_id":
                operation_id_var.reset(token)
            elif var_name == "viewer":
                viewer_var.reset(token)
            elif var_name == "correlation_id":
                correlation_id_var.reset(token)


T = TypeVar("T")


def interaction(
    method: Callable[..., Awaitable[T]],
) -> Callable[..., Awaitable[T]]:
    """Run an async method as one user interaction.

    The owning object must expose a ``session`` (``ViewerSession``). A fresh
    operation_id is set for the call, tagged with the viewer's email. Calls
    made while an operation is already active keep the outer operation_id.
    """

    @functools.wraps(method)
    async def wrapper(self: Any, *args: Any, **kwargs: Any) -> T:
        if get_operation_id():
            return await method(self, *args, **kwargs)
        viewer = self.session.current()
        with OperationContext(viewer=viewer.email if viewer else None):
            return await method(self, *args, **kwargs)

    return wrapper
