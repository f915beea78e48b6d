"""
Logging configuration and utilities for the market data client.
"""
from .config import (
    configure_logging,
    get_logger,
    get_session_logger,
    log_state_transition,
    use_stderr_by_default,
)

__all__ = [
    "configure_logging",
    "get_logger",
    "get_session_logger",
    "log_state_transition",
    "use_stderr_by_default",
]
