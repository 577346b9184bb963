"""Log admission and the simulated log stream."""

from envlab.core.logs.admission import (
    SeverityAdmissionFilter,
    admit,
    count_admitted_by_level,
)
from envlab.core.logs.stream import SAMPLE_LOGS, LogEntry, LogStream

__all__ = [
    "LogEntry",
    "LogStream",
    "SAMPLE_LOGS",
    "SeverityAdmissionFilter",
    "admit",
    "count_admitted_by_level",
]
