"""Severity classification of provisioning output."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum


class Severity(Enum):
    """Severity of one line of provisioning output."""
    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    DEBUG = "debug"

    @property
    def log_level(self) -> int:
        return _LOG_LEVELS[self]


_LOG_LEVELS = {
    Severity.ERROR: logging.ERROR,
    Severity.WARN: logging.WARNING,
    Severity.INFO: logging.INFO,
    Severity.DEBUG: logging.DEBUG,
}

# First match wins
_PREFIXES = [
    (re.compile(r"^(?:Error|Err):\s*(.*)", re.IGNORECASE | re.DOTALL), Severity.ERROR),
    (re.compile(r"^(?:Warning|Notice):\s*(.*)", re.IGNORECASE | re.DOTALL), Severity.WARN),
    (re.compile(r"^Info:\s*(.*)", re.IGNORECASE | re.DOTALL), Severity.INFO),
    (re.compile(r"^Debug:\s*(.*)", re.IGNORECASE | re.DOTALL), Severity.DEBUG),
]


@dataclass(frozen=True)
class ClassifiedLine:
    severity: Severity
    message: str


def classify_line(line: str) -> ClassifiedLine:
    """Classify a line by its prefix and strip the prefix.

    Lines without a known prefix are INFO and kept whole. Trailing line
    endings are removed in both cases.
    """
    for pattern, severity in _PREFIXES:
        match = pattern.match(line)
        if match:
            return ClassifiedLine(severity, match.group(1).rstrip("\r\n"))
    return ClassifiedLine(Severity.INFO, line.rstrip("\r\n"))
