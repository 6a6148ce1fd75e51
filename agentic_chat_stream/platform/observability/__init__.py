"""Observability infrastructure module.

This module provides monitoring and error tracking:
- Structured logging with correlation IDs
- Prometheus metrics
- Bugsnag error reporting
"""

from agentic_chat_stream.platform.observability.errors import initialize_bugsnag
from agentic_chat_stream.platform.observability.logging import (
    configure_logging,
    correlation_id_ctx,
)
from agentic_chat_stream.platform.observability.metrics import (
    BUCKETS,
    metrics,
    prometheus_middleware,
)

__all__ = [
    "BUCKETS",
    "configure_logging",
    "correlation_id_ctx",
    "initialize_bugsnag",
    "metrics",
    "prometheus_middleware",
]
