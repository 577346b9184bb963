"""Structured logging configuration.

Features:
- JSON formatted logs tagged with service and environment
- Environment-aware admission: records below the environment's minimum
  severity are dropped at the handler
- Context fields for the active experiment
"""

from __future__ import annotations

import json
import logging
import sys
import traceback
from contextvars import ContextVar
from datetime import datetime
from typing import Any, Dict, Optional

from envlab.core.config import Settings, get_settings
from envlab.core.environment.resolver import Environment, detect_environment, resolve
from envlab.core.logs.admission import SeverityAdmissionFilter

experiment_id_var: ContextVar[Optional[str]] = ContextVar("experiment_id", default=None)


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def __init__(
        self,
        service_name: str = "envlab",
        environment: str = Environment.DEVELOPMENT.value,
        include_stack_trace: bool = True,
    ):
        super().__init__()
        self.service_name = service_name
        self.environment = environment
        self.include_stack_trace = include_stack_trace

    def format(self, record: logging.LogRecord) -> str:
        log_entry: Dict[str, Any] = {
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service_name,
            "environment": self.environment,
        }

        if experiment_id := experiment_id_var.get():
            log_entry["experiment_id"] = experiment_id

        if hasattr(record, "extra_fields"):
            log_entry["extra"] = record.extra_fields

        if record.exc_info and self.include_stack_trace:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "stacktrace": traceback.format_exception(*record.exc_info),
            }

        return json.dumps(log_entry, default=str)


def setup_structured_logging(
    settings: Optional[Settings] = None,
    environment: Optional[Environment] = None,
    stream: Any = None,
) -> logging.Handler:
    """Configure root logging for the selected environment.

    The handler filters records with the environment's minimum severity, so
    production only emits errors regardless of ``LOG_LEVEL``.
    """
    settings = settings or get_settings()
    environment = environment or detect_environment(settings)
    level = logging.getLevelName(settings.LOG_LEVEL.upper())
    if not isinstance(level, int):
        level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(stream or sys.stdout)
    console_handler.setLevel(level)
    console_handler.addFilter(SeverityAdmissionFilter(resolve(environment)))

    if settings.LOG_JSON:
        formatter: logging.Formatter = StructuredFormatter(
            service_name=settings.SERVICE_NAME,
            environment=environment.value,
        )
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)
    return console_handler


def set_experiment_context(experiment_id: Optional[str]) -> None:
    experiment_id_var.set(experiment_id)
