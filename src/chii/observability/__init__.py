"""Logging setup for chii processes."""

from chii.observability.logging import LogContext, configure_logging

__all__ = ["LogContext", "configure_logging"]
