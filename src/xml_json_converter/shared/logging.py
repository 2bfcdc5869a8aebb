"""Structured logging utilities for XML to JSON conversion.

Every record emitted through :class:`CorrelationLogger` carries the component
name and the correlation ID of the conversion that produced it, so a single
document can be followed through the builder, projector and serializer.
"""

import logging
import uuid
from typing import Any, MutableMapping, Optional, Tuple


def new_correlation_id() -> str:
    """Generate a short correlation ID for a conversion request."""
    return uuid.uuid4().hex[:12]


class CorrelationLogger(logging.LoggerAdapter):
    """Logger adapter tagging every record with a component and correlation ID.

    Per-call ``extra`` mappings are merged over the adapter's own fields
    instead of replacing them.

    Example:
        >>> logger = get_logger(__name__, "3f2a9c", "xml_tree_builder")
        >>> logger.info("Tree building completed", extra={"element_count": 4})
    """

    def __init__(
        self,
        logger: logging.Logger,
        component: str,
        correlation_id: Optional[str] = None
    ) -> None:
        super().__init__(logger, {"component": component, "correlation_id": correlation_id})

    @property
    def component(self) -> str:
        return self.extra["component"]

    @property
    def correlation_id(self) -> Optional[str]:
        return self.extra["correlation_id"]

    def process(
        self,
        msg: Any,
        kwargs: MutableMapping[str, Any]
    ) -> Tuple[Any, MutableMapping[str, Any]]:
        kwargs["extra"] = {**self.extra, **(kwargs.get("extra") or {})}
        return msg, kwargs

    def bind(self, correlation_id: Optional[str]) -> "CorrelationLogger":
        """Return a logger for the same component tagged with another correlation ID."""
        return CorrelationLogger(self.logger, self.component, correlation_id)


def get_logger(
    name: str,
    correlation_id: Optional[str] = None,
    component: Optional[str] = None
) -> CorrelationLogger:
    """Get a correlation-aware logger.

    Args:
        name: Logger name (typically __name__)
        correlation_id: Optional correlation ID for request tracking
        component: Component name; defaults to the last segment of ``name``
    """
    return CorrelationLogger(
        logging.getLogger(name),
        component or name.rsplit(".", 1)[-1],
        correlation_id,
    )
