"""Diagnostic and metric types shared by the conversion stages."""

import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Optional


class DiagnosticSeverity(Enum):
    """Severity levels for diagnostic entries."""

    DEBUG = auto()
    INFO = auto()
    WARNING = auto()
    ERROR = auto()      # Error conditions that were absorbed
    CRITICAL = auto()


@dataclass
class DiagnosticEntry:
    """Single diagnostic entry with context information."""

    severity: DiagnosticSeverity
    message: str
    component: str
    position: Optional[Dict[str, int]] = None
    details: Optional[Dict[str, Any]] = None
    timestamp: float = field(default_factory=time.time)
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate diagnostic entry."""
        if not self.message:
            raise ValueError("Diagnostic message cannot be empty")
        if not self.component:
            raise ValueError("Diagnostic component cannot be empty")

    def to_dict(self) -> Dict[str, Any]:
        """Convert diagnostic to a JSON-friendly dictionary."""
        result: Dict[str, Any] = {
            "severity": self.severity.name,
            "message": self.message,
            "component": self.component,
        }
        if self.position:
            result["position"] = dict(self.position)
        if self.details:
            result["details"] = dict(self.details)
        return result


@dataclass
class PerformanceMetrics:
    """Performance metrics for a tree building operation."""

    processing_time_ms: float = 0.0
    bytes_processed: int = 0
    elements_created: int = 0
    text_runs: int = 0

    @property
    def bytes_per_second(self) -> float:
        """Calculate input bytes processed per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.bytes_processed * 1000.0) / self.processing_time_ms

    @property
    def elements_per_second(self) -> float:
        """Calculate elements created per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.elements_created * 1000.0) / self.processing_time_ms
