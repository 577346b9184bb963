"""Feature Flag Registry and Evaluator.

Evaluation order:
- Unknown flags fail closed
- The per-environment switch is the first, authoritative gate
- A rollout percentage below 100 narrows exposure with a fresh uniform draw

The rollout draw is deliberately not sticky: two evaluations for the same
conceptual user may disagree. ``list_flags`` reports the configured
(environment gate only) state, which can differ from a single evaluation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from envlab.core.environment.resolver import Environment
from envlab.core.errors import DuplicateFlagError, ErrorCode, validate_rollout_percentage
from envlab.core.random_source import RandomSource, default_random_source, percent_draw
from envlab.utils.metrics import flag_evaluations_total, flag_not_found_total

logger = logging.getLogger(__name__)


class EvaluationReason(str, Enum):
    """Why an evaluation produced its result."""

    FLAG_NOT_FOUND = ErrorCode.FLAG_NOT_FOUND.value
    ENVIRONMENT_DISABLED = "ENVIRONMENT_DISABLED"
    FULL_ROLLOUT = "FULL_ROLLOUT"
    ROLLOUT_INCLUDED = "ROLLOUT_INCLUDED"
    ROLLOUT_EXCLUDED = "ROLLOUT_EXCLUDED"


@dataclass(frozen=True)
class FlagMetadata:
    """Ownership and lifecycle information."""

    owner: str
    created_at: date
    expires_at: Optional[date] = None
    ticket: Optional[str] = None

    def is_expired(self, today: Optional[date] = None) -> bool:
        if self.expires_at is None:
            return False
        return (today or date.today()) > self.expires_at


@dataclass(frozen=True)
class FeatureFlag:
    """Feature flag definition."""

    id: str
    name: str
    enabled_by_environment: Mapping[Environment, bool]
    description: str = ""
    rollout_percentage: Optional[float] = None
    metadata: Optional[FlagMetadata] = None

    def __post_init__(self) -> None:
        if self.rollout_percentage is not None:
            validate_rollout_percentage(self.rollout_percentage)
        # Missing environments are disabled; freeze the mapping
        normalized = {env: bool(self.enabled_by_environment.get(env, False)) for env in Environment}
        object.__setattr__(self, "enabled_by_environment", MappingProxyType(normalized))

    def enabled_in(self, env: Environment) -> bool:
        return self.enabled_by_environment[env]

    @property
    def is_partial_rollout(self) -> bool:
        return self.rollout_percentage is not None and self.rollout_percentage < 100

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "enabled": {env.value: on for env, on in self.enabled_by_environment.items()},
            "rollout_percentage": self.rollout_percentage,
            "metadata": {
                "owner": self.metadata.owner,
                "created_at": self.metadata.created_at.isoformat(),
                "expires_at": self.metadata.expires_at.isoformat() if self.metadata.expires_at else None,
                "ticket": self.metadata.ticket,
            }
            if self.metadata
            else None,
        }


@dataclass(frozen=True)
class FlagEvaluation:
    """Result of one stochastic evaluation."""

    flag_id: str
    environment: Environment
    enabled: bool
    reason: EvaluationReason
    draw: Optional[float] = None


@dataclass(frozen=True)
class FlagState:
    """Configured state of a flag in one environment."""

    flag: FeatureFlag
    currently_enabled: bool


class FeatureFlagRegistry:
    """Immutable catalog of flag definitions keyed by id."""

    def __init__(self, flags: Iterable[FeatureFlag] = ()):
        catalog: Dict[str, FeatureFlag] = {}
        for flag in flags:
            if flag.id in catalog:
                raise DuplicateFlagError(f"Duplicate feature flag id: {flag.id}")
            catalog[flag.id] = flag
        self._flags: Mapping[str, FeatureFlag] = MappingProxyType(catalog)

    def get(self, flag_id: str) -> Optional[FeatureFlag]:
        return self._flags.get(flag_id)

    def __contains__(self, flag_id: object) -> bool:
        return flag_id in self._flags

    def __len__(self) -> int:
        return len(self._flags)

    def flags(self) -> List[FeatureFlag]:
        """Flags in definition order."""
        return list(self._flags.values())


class FeatureFlagEvaluator:
    """Stateless decision function over a registry."""

    def __init__(
        self,
        registry: FeatureFlagRegistry,
        rng: Optional[RandomSource] = None,
    ):
        """Initialize evaluator.

        Args:
            registry: Flag catalog to evaluate against
            rng: Default random source for rollout draws
        """
        self.registry = registry
        self.rng = rng or default_random_source()

    def evaluate(
        self,
        flag_id: str,
        env: Union[Environment, str],
        rng: Optional[RandomSource] = None,
    ) -> FlagEvaluation:
        """Evaluate a flag and report why."""
        env = Environment.parse(env)
        flag = self.registry.get(flag_id)

        if flag is None:
            logger.warning(f"Feature flag not found: {flag_id}")
            flag_not_found_total.labels(flag=flag_id).inc()
            result = FlagEvaluation(flag_id, env, False, EvaluationReason.FLAG_NOT_FOUND)
        elif not flag.enabled_in(env):
            result = FlagEvaluation(flag_id, env, False, EvaluationReason.ENVIRONMENT_DISABLED)
        elif not flag.is_partial_rollout:
            result = FlagEvaluation(flag_id, env, True, EvaluationReason.FULL_ROLLOUT)
        else:
            draw = percent_draw(rng or self.rng)
            included = draw < flag.rollout_percentage
            result = FlagEvaluation(
                flag_id,
                env,
                included,
                EvaluationReason.ROLLOUT_INCLUDED if included else EvaluationReason.ROLLOUT_EXCLUDED,
                draw=draw,
            )

        flag_evaluations_total.labels(
            flag=flag_id,
            environment=env.value,
            result="on" if result.enabled else "off",
        ).inc()
        logger.debug(f"Feature flag {flag_id} in {env.value}: {result.enabled} ({result.reason.value})")
        return result

    def is_enabled(
        self,
        flag_id: str,
        env: Union[Environment, str],
        rng: Optional[RandomSource] = None,
    ) -> bool:
        """Check if a feature flag is enabled for this evaluation."""
        return self.evaluate(flag_id, env, rng).enabled

    def list_flags(self, env: Union[Environment, str]) -> List[FlagState]:
        """All flags with their environment-gate state."""
        env = Environment.parse(env)
        return [FlagState(flag=flag, currently_enabled=flag.enabled_in(env)) for flag in self.registry.flags()]


def _envs(development: bool, staging: bool, production: bool) -> Dict[Environment, bool]:
    return {
        Environment.DEVELOPMENT: development,
        Environment.STAGING: staging,
        Environment.PRODUCTION: production,
    }


PREDEFINED_FLAGS = (
    FeatureFlag(
        id="dark_mode_v2",
        name="Dark Mode V2",
        description="New dark theme with improved contrast and accessibility",
        enabled_by_environment=_envs(True, True, False),
        rollout_percentage=100,
        metadata=FlagMetadata(owner="Team UI/UX", created_at=date(2024, 1, 15), ticket="UI-1234"),
    ),
    FeatureFlag(
        id="new_dashboard",
        name="New Dashboard Layout",
        description="Redesigned dashboard with drag-and-drop widgets",
        enabled_by_environment=_envs(True, True, True),
        rollout_percentage=50,
        metadata=FlagMetadata(owner="Team Product", created_at=date(2024, 2, 1), ticket="DASH-567"),
    ),
    FeatureFlag(
        id="ai_suggestions",
        name="AI-Powered Suggestions",
        description="Machine-learning based suggestions",
        enabled_by_environment=_envs(True, False, False),
        metadata=FlagMetadata(
            owner="Team ML",
            created_at=date(2024, 3, 1),
            expires_at=date(2024, 12, 31),
        ),
    ),
    FeatureFlag(
        id="beta_api_v2",
        name="API V2 Beta",
        description="New API version with improved performance",
        enabled_by_environment=_envs(True, True, False),
        rollout_percentage=25,
        metadata=FlagMetadata(owner="Team Backend", created_at=date(2024, 2, 15), ticket="API-890"),
    ),
    FeatureFlag(
        id="export_pdf",
        name="PDF Export",
        description="Export reports as PDF",
        enabled_by_environment=_envs(True, True, True),
        rollout_percentage=100,
        metadata=FlagMetadata(owner="Team Reports", created_at=date(2023, 12, 1)),
    ),
)


# Global evaluator instance
_evaluator: Optional[FeatureFlagEvaluator] = None


def get_flag_evaluator() -> FeatureFlagEvaluator:
    """Get global evaluator over the predefined flags."""
    global _evaluator
    if _evaluator is None:
        _evaluator = FeatureFlagEvaluator(FeatureFlagRegistry(PREDEFINED_FLAGS))
    return _evaluator


def is_enabled(
    flag_id: str,
    env: Union[Environment, str],
    rng: Optional[RandomSource] = None,
) -> bool:
    """Check if a feature flag is enabled (convenience function)."""
    return get_flag_evaluator().is_enabled(flag_id, env, rng)


def list_all(env: Union[Environment, str]) -> List[FlagState]:
    """List predefined flags with their configured state (convenience function)."""
    return get_flag_evaluator().list_flags(env)
