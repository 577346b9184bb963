"""Simulated application log stream.

Generates sample log entries from a fixed catalog, keeps a bounded window of
the most recent ones, and exposes the subset visible in an environment.
"""

from __future__ import annotations

import uuid
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Deque, Dict, List, Optional, Tuple, Union

from envlab.core.config import get_settings
from envlab.core.logs.admission import admit, count_admitted_by_level
from envlab.core.random_source import RandomSource, index_draw
from envlab.core.severity import Severity

if TYPE_CHECKING:
    from envlab.core.environment.resolver import EnvironmentConfig


@dataclass(frozen=True)
class LogEntry:
    """A single log event."""

    severity: Severity
    message: str
    source: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "severity": self.severity.value,
            "message": self.message,
            "source": self.source,
        }


# (severity, message, source)
SAMPLE_LOGS: Tuple[Tuple[Severity, str, str], ...] = (
    (Severity.DEBUG, "Component mounted: UserProfile", "React"),
    (Severity.DEBUG, "Fetching user data...", "API"),
    (Severity.INFO, "User session started", "Auth"),
    (Severity.DEBUG, "Cache hit for /api/products", "Cache"),
    (Severity.INFO, 'Feature flag "dark_mode" evaluated: true', "FeatureFlags"),
    (Severity.WARN, "API response time exceeded 500ms", "Performance"),
    (Severity.DEBUG, "Redux action dispatched: SET_USER", "Redux"),
    (Severity.INFO, "Payment intent created", "Stripe"),
    (Severity.ERROR, "Failed to load user preferences", "API"),
    (Severity.WARN, "Deprecated API endpoint used: /v1/users", "API"),
    (Severity.DEBUG, "WebSocket connection established", "Socket"),
    (Severity.INFO, "A/B test variant assigned: checkout-v2", "Experiments"),
    (Severity.ERROR, "Database connection timeout", "Database"),
    (Severity.DEBUG, "Render cycle completed in 12ms", "React"),
    (Severity.WARN, "Memory usage above 80%", "System"),
    (Severity.INFO, "User clicked CTA button", "Analytics"),
    (Severity.DEBUG, "Image lazy-loaded: hero-banner.jpg", "Performance"),
    (Severity.ERROR, "Unhandled promise rejection in checkout", "JavaScript"),
    (Severity.INFO, "Email notification queued", "Notifications"),
    (Severity.WARN, "Rate limit approaching: 80/100 requests", "API"),
)


class LogStream:
    """Bounded buffer of recent log entries."""

    def __init__(self, rng: RandomSource, capacity: Optional[int] = None):
        if capacity is None:
            capacity = get_settings().LOG_STREAM_CAPACITY
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._rng = rng
        self._entries: Deque[LogEntry] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._entries.maxlen or 0

    def append(self, entry: LogEntry) -> LogEntry:
        self._entries.append(entry)
        return entry

    def emit_random(self) -> LogEntry:
        """Append an entry drawn uniformly from the sample catalog."""
        severity, message, source = SAMPLE_LOGS[index_draw(self._rng, len(SAMPLE_LOGS))]
        return self.append(LogEntry(severity=severity, message=message, source=source))

    def clear(self) -> None:
        self._entries.clear()

    def entries(self) -> List[LogEntry]:
        return list(self._entries)

    def visible(
        self,
        config: "EnvironmentConfig",
        level_filter: Optional[Union[Severity, str]] = None,
    ) -> List[LogEntry]:
        """Entries admitted by ``config``, optionally narrowed to one level."""
        wanted = Severity.parse(level_filter) if level_filter is not None else None
        return [
            entry
            for entry in self._entries
            if admit(entry.severity, config) and (wanted is None or entry.severity == wanted)
        ]

    def summary(self, config: "EnvironmentConfig") -> Dict[Severity, int]:
        return count_admitted_by_level((e.severity for e in self._entries), config)
