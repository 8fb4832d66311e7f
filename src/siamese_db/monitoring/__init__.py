from siamese_db.monitoring.logging import (
    ContextAdapter,
    ContextFormatter,
    JsonFormatter,
    configure_logging,
    context_logger,
)

__all__ = [
    "configure_logging",
    "context_logger",
    "ContextAdapter",
    "ContextFormatter",
    "JsonFormatter",
]
