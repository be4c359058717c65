"""Audit trail for security- and business-relevant events.

The sink is constructed once by the container and passed into every
component that needs it; nothing reaches for a module-level audit logger.
"""
from __future__ import annotations

import json
import logging
from datetime import date, datetime, time
from enum import Enum
from typing import Any, Optional, Protocol

from ..common.datetime_utils import now_utc
from ..core.constants import REDACTED_KEY_PREFIX

AUDIT_LOGGER_NAME = "adms_attendance.audit"


class AuditSink(Protocol):
    def record(self, action: str, *, actor: Optional[str] = None, level: int = logging.INFO, **details: Any) -> None:
        raise NotImplementedError


def redact_credential(value: Optional[str]) -> Optional[str]:
    """Keep only a short prefix of a secret so log lines stay correlatable."""

    if not value:
        return None
    return value[:REDACTED_KEY_PREFIX] + "..."


def _json_default(value: Any):
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return str(value)


class LoggingAuditSink(AuditSink):
    """Writes one JSON document per audit event to the audit logger."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._logger = logger or logging.getLogger(AUDIT_LOGGER_NAME)

    def record(self, action: str, *, actor: Optional[str] = None, level: int = logging.INFO, **details: Any) -> None:
        entry = {
            "action": action,
            "actor": actor,
            "timestamp": now_utc().isoformat(),
            **details,
        }
        self._logger.log(level, json.dumps(entry, default=_json_default, sort_keys=True, ensure_ascii=False))
