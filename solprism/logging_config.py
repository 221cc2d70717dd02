"""
Logging configuration for SOLPRISM Shield.

Provides structured JSON logging for commitment audit trails. The library
only emits records; handlers are installed by ``configure_logging``, which
the CLI calls and applications may call.
"""

import json
import logging
import sys
import time
from typing import Any, Dict, List, Optional


class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs one JSON object per record, suitable for log aggregation
    systems.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": time.strftime('%Y-%m-%dT%H:%M:%SZ', time.gmtime(record.created)),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, 'extra_fields'):
            log_data.update(record.extra_fields)

        return json.dumps(log_data, ensure_ascii=False)


class CommitmentLogger:
    """
    Specialized logger for commitment events.

    Every commit and every verification leaves an observability record
    carrying the agent name, the action type, the decision and a truncated
    hash.
    """

    def __init__(self, name: str = "solprism.commitments"):
        self._logger = logging.getLogger(name)

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def _log(self, level: int, event_type: str, message: str, **kwargs) -> None:
        """Internal logging method with extra fields."""
        if not self._logger.isEnabledFor(level):
            return

        record = self._logger.makeRecord(
            self._logger.name,
            level,
            "",
            0,
            message,
            (),
            None
        )
        record.extra_fields = {"event_type": event_type, **kwargs}
        self._logger.handle(record)

    def commitment_recorded(
        self,
        agent: str,
        action_type: str,
        decision: str,
        confidence: Any,
        hash_prefix: str,
        signed: bool = False
    ) -> None:
        """Log a new commitment."""
        self._log(
            logging.INFO,
            "COMMITMENT_RECORDED",
            f"Reasoning committed: {action_type} | decision={decision} | "
            f"confidence={confidence}% | hash={hash_prefix}",
            agent=agent,
            action_type=action_type,
            decision=decision,
            confidence=confidence,
            hash=hash_prefix,
            signed=signed,
        )

    def verification_result(
        self,
        agent: str,
        matched: bool,
        hash_prefix: str,
        reason: Optional[str] = None
    ) -> None:
        """Log a verification; mismatches are warnings."""
        outcome = "MATCH" if matched else "MISMATCH"
        self._log(
            logging.INFO if matched else logging.WARNING,
            "VERIFICATION",
            f"Verification: {outcome}" + (f" ({reason})" if reason else ""),
            agent=agent,
            outcome=outcome,
            hash=hash_prefix,
            reason=reason,
        )

    def audit_summary(self, total: int, failures: int) -> None:
        """Log the result of auditing a commitment history."""
        self._log(
            logging.INFO if failures == 0 else logging.WARNING,
            "AUDIT_SUMMARY",
            f"Audit complete: {total - failures}/{total} commitments verified",
            total=total,
            failures=failures,
        )


def configure_logging(
    level: str = "INFO",
    json_format: bool = True,
    log_file: Optional[str] = None
) -> None:
    """
    Route SOLPRISM log records to stderr and, optionally, a file.

    Replaces any handlers already on the root logger so repeated calls
    (one per CLI invocation) never duplicate lines. Stdout is left to the
    CLI's own command output.

    Args:
        level: Name of the minimum level to emit, e.g. "DEBUG" or "WARNING"
        json_format: One StructuredFormatter object per line instead of text
        log_file: Also append records to this path
    """
    formatter = (
        StructuredFormatter()
        if json_format
        else logging.Formatter('%(asctime)s %(levelname)s [%(name)s] %(message)s')
    )

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.setLevel(level.upper())
