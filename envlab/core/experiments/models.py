"""Experiment definitions and per-variant result counters."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from envlab.core.errors import ErrorCode, validate_rollout_percentage


class ExperimentStatus(str, Enum):
    """Declared lifecycle annotation of an experiment.

    Not driven by the simulator, which keeps its own ``SimulatorState``.
    """

    DRAFT = "draft"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"


class SimulatorState(str, Enum):
    """Simulator run state."""

    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"


@dataclass(frozen=True)
class Variant:
    """Experiment variant with a base conversion rate in percent."""

    id: str
    name: str
    base_conversion_rate: float
    description: str = ""

    def __post_init__(self) -> None:
        if not (0 <= self.base_conversion_rate <= 100):
            raise ValueError(
                f"Base conversion rate must be within [0, 100], got {self.base_conversion_rate}"
            )


@dataclass(frozen=True)
class Experiment:
    """A/B experiment definition."""

    id: str
    name: str
    rollout_percentage: float
    variants: Tuple[Variant, ...]
    description: str = ""
    status: ExperimentStatus = ExperimentStatus.DRAFT

    def __post_init__(self) -> None:
        validate_rollout_percentage(self.rollout_percentage)
        object.__setattr__(self, "variants", tuple(self.variants))
        if not self.variants:
            raise ValueError("Experiment must have at least one variant")
        ids = [v.id for v in self.variants]
        if len(ids) != len(set(ids)):
            raise ValueError("Variant ids must be unique")

    def get_variant(self, variant_id: str) -> Optional[Variant]:
        for v in self.variants:
            if v.id == variant_id:
                return v
        return None


@dataclass
class ExperimentResult:
    """Running counters for one variant."""

    variant_id: str
    users_seen: int = 0
    conversions: int = 0

    @property
    def conversion_rate(self) -> float:
        if self.users_seen == 0:
            return 0.0
        return self.conversions / self.users_seen

    @property
    def conversion_rate_percent(self) -> float:
        return self.conversion_rate * 100

    def record(self, converted: bool) -> None:
        self.users_seen += 1
        if converted:
            self.conversions += 1

    def reset(self) -> None:
        self.users_seen = 0
        self.conversions = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "variant_id": self.variant_id,
            "users_seen": self.users_seen,
            "conversions": self.conversions,
            "conversion_rate": self.conversion_rate,
        }


@dataclass(frozen=True)
class LeadingVariant:
    """Leading variant verdict; ``variant`` is None when undetermined."""

    variant: Optional[Variant]
    conversion_rate: float = 0.0
    reason: Optional[ErrorCode] = None

    @property
    def is_determined(self) -> bool:
        return self.variant is not None


@dataclass(frozen=True)
class SimulatedUser:
    """Outcome of one admitted simulated user."""

    variant_id: str
    converted: bool
    adjusted_rate: float


@dataclass(frozen=True)
class SimulatorSnapshot:
    """Read model published after every step."""

    experiment_id: str
    state: SimulatorState
    rollout_percentage: float
    total_users: int
    results: Tuple[ExperimentResult, ...]
    leading: LeadingVariant
    total_conversions: int = 0

    @property
    def overall_conversion_rate(self) -> float:
        if self.total_users == 0:
            return 0.0
        return self.total_conversions / self.total_users

    def to_dict(self) -> Dict[str, Any]:
        return {
            "experiment_id": self.experiment_id,
            "state": self.state.value,
            "rollout_percentage": self.rollout_percentage,
            "total_users": self.total_users,
            "total_conversions": self.total_conversions,
            "overall_conversion_rate": self.overall_conversion_rate,
            "results": [r.to_dict() for r in self.results],
            "leading_variant": self.leading.variant.id if self.leading.variant else None,
        }


PREDEFINED_EXPERIMENTS: Tuple[Experiment, ...] = (
    Experiment(
        id="checkout-button",
        name="Checkout Button Color",
        description="Checkout button color test to lift conversions",
        rollout_percentage=50,
        status=ExperimentStatus.RUNNING,
        variants=(
            Variant(id="control", name="Control (Green)", description="Current green button", base_conversion_rate=3.2),
            Variant(id="variant-a", name="Variant A (Blue)", description="Primary blue button", base_conversion_rate=3.8),
        ),
    ),
    Experiment(
        id="pricing-display",
        name="Pricing Page Layout",
        description="Pricing page layout: cards versus table",
        rollout_percentage=25,
        status=ExperimentStatus.RUNNING,
        variants=(
            Variant(id="control", name="Cards Layout", description="Vertical cards", base_conversion_rate=2.1),
            Variant(id="variant-a", name="Table Layout", description="Comparison table", base_conversion_rate=2.8),
            Variant(id="variant-b", name="Horizontal Cards", description="Horizontal cards", base_conversion_rate=2.4),
        ),
    ),
)
