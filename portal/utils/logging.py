"""Logging setup and structured logging for API calls."""

import logging
from typing import Any

logger = logging.getLogger(__name__)

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once for scripts and the UI."""
    logging.basicConfig(level=level.upper(), format=_LOG_FORMAT)


class StructuredRequestLogger:
    """Structured logger for outbound API requests."""

    def log_request(
        self,
        method: str,
        path: str,
        outcome: str,
        latency_ms: float,
        status_code: int | None = None,
        error_reason: str | None = None,
    ) -> None:
        """Log one API request with structured data."""
        log_data: dict[str, Any] = {
            "method": method,
            "path": path,
            "outcome": outcome,
            "latency_ms": round(latency_ms, 2),
        }

        if status_code is not None:
            log_data["status_code"] = status_code
        if error_reason:
            log_data["error_reason"] = error_reason

        log_msg = f"API request: {method} {path} - {outcome}"

        if outcome == "success":
            logger.info(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})
