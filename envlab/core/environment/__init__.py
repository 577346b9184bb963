"""Environment resolution.

Provides:
- The closed set of deployment environments
- One immutable config bundle per environment
- Detection from process settings and runtime override for simulation
"""

from envlab.core.environment.resolver import (
    Environment,
    EnvironmentConfig,
    EnvironmentContext,
    EnvironmentFeatures,
    all_configs,
    detect_environment,
    resolve,
)

__all__ = [
    "Environment",
    "EnvironmentConfig",
    "EnvironmentContext",
    "EnvironmentFeatures",
    "all_configs",
    "detect_environment",
    "resolve",
]
