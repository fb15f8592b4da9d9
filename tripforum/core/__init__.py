# Core infrastructure
from tripforum.core.context import (
    OperationContext,
    get_context,
    get_correlation_id,
    get_operation_id,
    get_viewer,
    interaction,
)
from tripforum.core.logging import configure_structlog, get_logger


__all__ = [
    "OperationContext",
    "configure_structlog",
    "get_context",
    "get_correlation_id",
    "get_logger",
    "get_operation_id",
    "get_viewer",
    "interaction",
]
