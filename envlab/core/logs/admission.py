"""Log admission filtering.

An event is visible in an environment when its severity ranks at or above
the environment's minimum severity. Raising the minimum can only shrink the
admitted set.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Dict, Iterable, Union

from envlab.core.severity import SEVERITY_ORDER, Severity
from envlab.utils.metrics import log_admissions_total

if TYPE_CHECKING:
    from envlab.core.environment.resolver import EnvironmentConfig


def admit(severity: Union[Severity, str], config: "EnvironmentConfig") -> bool:
    """Return True if an event of ``severity`` is visible under ``config``."""
    return Severity.parse(severity).rank >= config.min_severity.rank


def count_admitted_by_level(
    events: Iterable[Union[Severity, str]],
    config: "EnvironmentConfig",
) -> Dict[Severity, int]:
    """Count admitted events per severity.

    Every severity appears in the result; levels below the minimum stay 0.
    """
    counts = {severity: 0 for severity in SEVERITY_ORDER}
    for event in events:
        severity = Severity.parse(event)
        if admit(severity, config):
            counts[severity] += 1
    return counts


class SeverityAdmissionFilter(logging.Filter):
    """``logging.Filter`` that applies an environment's minimum severity.

    Attach it to a handler to make stdlib logging honour the same admission
    rule as the simulated log stream.
    """

    def __init__(self, config: "EnvironmentConfig", name: str = ""):
        super().__init__(name)
        self.config = config

    def filter(self, record: logging.LogRecord) -> bool:
        if not super().filter(record):
            return False
        severity = Severity.from_logging_level(record.levelno)
        admitted = admit(severity, self.config)
        log_admissions_total.labels(
            severity=severity.value,
            decision="admitted" if admitted else "dropped",
        ).inc()
        return admitted
