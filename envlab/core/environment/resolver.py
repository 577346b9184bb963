"""Environment configuration resolver.

Each deployment environment maps to exactly one immutable
``EnvironmentConfig``. The table is fixed at import time: configuration is
data, not state. Every other component reads environment-dependent settings
through ``resolve``.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Union

from envlab.core.config import Settings, get_settings
from envlab.core.errors import UnknownEnvironmentError
from envlab.core.severity import Severity

logger = logging.getLogger(__name__)


class Environment(str, Enum):
    """Deployment environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"

    @classmethod
    def parse(cls, value: Union["Environment", str]) -> "Environment":
        if isinstance(value, Environment):
            return value
        try:
            return cls(value.strip().lower())
        except ValueError as exc:
            raise UnknownEnvironmentError(f"Unknown environment: {value!r}") from exc


@dataclass(frozen=True)
class EnvironmentFeatures:
    """Platform features toggled per environment."""

    analytics: bool
    error_reporting: bool
    experimental_features: bool


@dataclass(frozen=True)
class EnvironmentConfig:
    """Settings bundle for one environment."""

    name: Environment
    display_name: str
    api_url: str
    debug_mode: bool
    min_severity: Severity
    features: EnvironmentFeatures

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["name"] = self.name.value
        data["min_severity"] = self.min_severity.value
        return data


_CONFIGS: Mapping[Environment, EnvironmentConfig] = MappingProxyType(
    {
        Environment.DEVELOPMENT: EnvironmentConfig(
            name=Environment.DEVELOPMENT,
            display_name="Development",
            api_url="http://localhost:3000/api",
            debug_mode=True,
            min_severity=Severity.DEBUG,
            features=EnvironmentFeatures(
                analytics=False,
                error_reporting=False,
                experimental_features=True,
            ),
        ),
        Environment.STAGING: EnvironmentConfig(
            name=Environment.STAGING,
            display_name="Staging",
            api_url="https://staging-api.example.com",
            debug_mode=True,
            min_severity=Severity.INFO,
            features=EnvironmentFeatures(
                analytics=True,
                error_reporting=True,
                experimental_features=True,
            ),
        ),
        Environment.PRODUCTION: EnvironmentConfig(
            name=Environment.PRODUCTION,
            display_name="Production",
            api_url="https://api.example.com",
            debug_mode=False,
            min_severity=Severity.ERROR,
            features=EnvironmentFeatures(
                analytics=True,
                error_reporting=True,
                experimental_features=False,
            ),
        ),
    }
)


def resolve(env: Union[Environment, str]) -> EnvironmentConfig:
    """Return the config for an environment."""
    return _CONFIGS[Environment.parse(env)]


def all_configs() -> Mapping[Environment, EnvironmentConfig]:
    return _CONFIGS


def detect_environment(settings: Optional[Settings] = None) -> Environment:
    """Detect the current environment from process settings.

    ``APP_ENV`` of staging or production takes precedence; otherwise a
    ``MODE`` of production selects production and anything else falls back
    to development.
    """
    settings = settings or get_settings()
    custom = (settings.APP_ENV or "").strip().lower()
    if custom == Environment.STAGING.value:
        return Environment.STAGING
    if custom == Environment.PRODUCTION.value:
        return Environment.PRODUCTION
    if settings.MODE.strip().lower() == Environment.PRODUCTION.value:
        return Environment.PRODUCTION
    return Environment.DEVELOPMENT


class EnvironmentContext:
    """Currently selected environment.

    Normally fixed by ``detect_environment``; ``set_environment`` overrides
    it at runtime for simulation and marks the context as simulated.
    """

    def __init__(self, environment: Optional[Environment] = None):
        self._current = environment or detect_environment()
        self._simulated = False

    @property
    def current(self) -> Environment:
        return self._current

    @property
    def config(self) -> EnvironmentConfig:
        return resolve(self._current)

    @property
    def is_simulated(self) -> bool:
        return self._simulated

    def set_environment(self, env: Union[Environment, str]) -> EnvironmentConfig:
        previous = self._current
        self._current = Environment.parse(env)
        self._simulated = True
        logger.info(f"Environment switched: {previous.value} -> {self._current.value}")
        return self.config
