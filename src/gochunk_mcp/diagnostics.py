"""Structured diagnostics collected during a run."""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class Diagnostic:
    """One reported condition."""
    severity: str                   # "info" | "warning" | "error"
    message: str
    source: str = ""                # Reporting component (logger name)
    context: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "severity": self.severity,
            "message": self.message,
            "source": self.source,
            "context": self.context,
        }


_LEVELS = {
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class Diagnostics:
    """Collector threaded through the loader and extractor.

    Every report is kept in order and also forwarded to the logger of the
    reporting component, so the caller decides whether to read the collected
    records, the log stream, or both.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.records: list[Diagnostic] = []
        self._default_logger = logger or logging.getLogger(__name__)

    def report(
        self,
        severity: str,
        message: str,
        logger: Optional[logging.Logger] = None,
        **context: Any,
    ) -> Diagnostic:
        log = logger or self._default_logger
        diag = Diagnostic(severity=severity, message=message, source=log.name, context=context)
        self.records.append(diag)
        log.log(_LEVELS.get(severity, logging.WARNING), message)
        return diag

    def info(self, message: str, logger: Optional[logging.Logger] = None, **context: Any) -> Diagnostic:
        return self.report("info", message, logger, **context)

    def warning(self, message: str, logger: Optional[logging.Logger] = None, **context: Any) -> Diagnostic:
        return self.report("warning", message, logger, **context)

    def error(self, message: str, logger: Optional[logging.Logger] = None, **context: Any) -> Diagnostic:
        return self.report("error", message, logger, **context)

    @property
    def warnings(self) -> list[Diagnostic]:
        """Records at warning severity or above."""
        return [d for d in self.records if d.severity in ("warning", "error")]

    def messages(self, min_severity: str = "warning") -> list[str]:
        threshold = _LEVELS.get(min_severity, logging.WARNING)
        return [d.message for d in self.records if _LEVELS.get(d.severity, logging.WARNING) >= threshold]

    def __len__(self) -> int:
        return len(self.records)
