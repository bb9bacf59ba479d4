"""Provisioning process execution."""

from .child import ChildProcess, ReapResult, ReapState
from .classify import ClassifiedLine, Severity, classify_line
from .command import ProvisioningCommand, PROVISIONING_FLAGS, SUCCESS_EXIT_CODES
from .progress import NullProgress, ProgressSink, RichProgressBar
from .runner import ProcessRunner, RunResult

__all__ = [
    "ChildProcess",
    "ReapResult",
    "ReapState",
    "ClassifiedLine",
    "Severity",
    "classify_line",
    "ProvisioningCommand",
    "PROVISIONING_FLAGS",
    "SUCCESS_EXIT_CODES",
    "NullProgress",
    "ProgressSink",
    "RichProgressBar",
    "ProcessRunner",
    "RunResult",
]
