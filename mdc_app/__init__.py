"""
MDC App - Gap-Healing Market Data Client

A TCP client that requests a stream of fixed-size binary market data packets,
reassembles them into an ordered, gap-free set keyed by sequence number,
re-requests any missing sequences and exports the verified dataset.
"""

__version__ = "0.1.0"
__author__ = "MDC Team"

from .logging.config import use_stderr_by_default

use_stderr_by_default()
