"""A/B experiment simulator.

Owns the mutable result counters of the active experiment and advances them
one simulated user at a time:

1. Rollout gate: a draw in [0, 100) at or above the rollout excludes the user
2. Uniform variant assignment (equal weight regardless of variant count)
3. Conversion draw against the base rate plus +/-0.25 uniform jitter
4. Counter update

All counter mutations and reads go through one lock so a snapshot never
observes a half-applied step.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Sequence

from envlab.core.errors import (
    ErrorCode,
    ExperimentNotFoundError,
    InvalidStateTransitionError,
    validate_rollout_percentage,
)
from envlab.core.experiments.models import (
    PREDEFINED_EXPERIMENTS,
    Experiment,
    ExperimentResult,
    LeadingVariant,
    SimulatedUser,
    SimulatorSnapshot,
    SimulatorState,
    Variant,
)
from envlab.core.logging.structured import set_experiment_context
from envlab.core.random_source import RandomSource, default_random_source, index_draw, percent_draw
from envlab.utils.metrics import (
    experiment_total_users,
    experiment_users_excluded_total,
    experiment_users_total,
)

logger = logging.getLogger(__name__)

MIN_SAMPLE_SIZE = 100
JITTER_SPAN = 0.5  # total width of the symmetric jitter around the base rate


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def simulate_one_user(
    experiment: Experiment,
    rollout_percentage: float,
    results: Dict[str, ExperimentResult],
    rng: RandomSource,
) -> Optional[SimulatedUser]:
    """Simulate one user against ``results``.

    Returns None when the user falls outside the rollout. Draw order for an
    admitted user is fixed: admission, variant, jitter, conversion.
    """
    if percent_draw(rng) >= rollout_percentage:
        return None

    variant = experiment.variants[index_draw(rng, len(experiment.variants))]
    jitter = (rng.random() - 0.5) * JITTER_SPAN
    adjusted_rate = _clamp(variant.base_conversion_rate + jitter, 0.0, 100.0)
    converted = percent_draw(rng) < adjusted_rate

    results[variant.id].record(converted)
    return SimulatedUser(variant_id=variant.id, converted=converted, adjusted_rate=adjusted_rate)


def leading_variant(
    variants: Sequence[Variant],
    results: Iterable[ExperimentResult],
    total_users: int,
    min_sample_size: int = MIN_SAMPLE_SIZE,
) -> LeadingVariant:
    """Variant with the strictly greatest conversion rate.

    Undetermined below ``min_sample_size`` total users. Ties keep the
    earliest variant.
    """
    if total_users < min_sample_size:
        return LeadingVariant(variant=None, reason=ErrorCode.INSUFFICIENT_SAMPLE)

    by_id = {r.variant_id: r for r in results}
    best: Optional[Variant] = None
    best_rate = 0.0
    for variant in variants:
        rate = by_id[variant.id].conversion_rate if variant.id in by_id else 0.0
        if best is None or rate > best_rate:
            best = variant
            best_rate = rate
    return LeadingVariant(variant=best, conversion_rate=best_rate)


class ExperimentSimulator:
    """
    Single-writer simulator for one active experiment at a time.

    Handles:
    - Experiment selection (resets counters)
    - Rollout override
    - idle/running/paused state machine
    - Batched stepping and the read model
    """

    def __init__(
        self,
        experiments: Iterable[Experiment] = PREDEFINED_EXPERIMENTS,
        rng: Optional[RandomSource] = None,
        experiment_id: Optional[str] = None,
    ):
        """
        Initialize simulator.

        Args:
            experiments: Selectable experiment catalog
            rng: Random source for all simulation draws
            experiment_id: Initially active experiment (defaults to the first)
        """
        self._experiments: Dict[str, Experiment] = {}
        for experiment in experiments:
            self._experiments[experiment.id] = experiment
        if not self._experiments:
            raise ValueError("Simulator needs at least one experiment")

        self._rng = rng or default_random_source()
        self._lock = threading.RLock()
        self._state = SimulatorState.IDLE
        self._total_users = 0
        self._results: Dict[str, ExperimentResult] = {}

        initial = experiment_id or next(iter(self._experiments))
        self._experiment = self._lookup(initial)
        self._rollout = self._experiment.rollout_percentage
        self._init_results()

    def _lookup(self, experiment_id: str) -> Experiment:
        experiment = self._experiments.get(experiment_id)
        if experiment is None:
            raise ExperimentNotFoundError(f"Experiment not found: {experiment_id}")
        return experiment

    def _init_results(self) -> None:
        self._results = {v.id: ExperimentResult(variant_id=v.id) for v in self._experiment.variants}
        self._total_users = 0
        experiment_total_users.labels(experiment=self._experiment.id).set(0)

    @property
    def experiment(self) -> Experiment:
        return self._experiment

    @property
    def experiments(self) -> List[Experiment]:
        return list(self._experiments.values())

    @property
    def state(self) -> SimulatorState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state == SimulatorState.RUNNING

    @property
    def rollout_percentage(self) -> float:
        return self._rollout

    @property
    def total_users(self) -> int:
        with self._lock:
            return self._total_users

    def select_experiment(self, experiment_id: str) -> Experiment:
        """Switch the active experiment; forces idle and zeroes counters."""
        with self._lock:
            experiment = self._lookup(experiment_id)
            self._experiment = experiment
            self._rollout = experiment.rollout_percentage
            self._state = SimulatorState.IDLE
            self._init_results()
            set_experiment_context(experiment.id)
            logger.info(f"Selected experiment: {experiment.name} ({experiment.id})")
            return experiment

    def set_rollout_percentage(self, percentage: float) -> None:
        """Override the rollout gate for subsequent users."""
        validate_rollout_percentage(percentage)
        with self._lock:
            self._rollout = percentage
            logger.info(f"Rollout for {self._experiment.id} set to {percentage}%")

    def start(self) -> None:
        with self._lock:
            if self._state != SimulatorState.IDLE:
                raise InvalidStateTransitionError(f"Cannot start from state {self._state.value}")
            self._state = SimulatorState.RUNNING
            logger.info(f"Started simulation: {self._experiment.id}")

    def pause(self) -> None:
        with self._lock:
            if self._state != SimulatorState.RUNNING:
                raise InvalidStateTransitionError(f"Cannot pause from state {self._state.value}")
            self._state = SimulatorState.PAUSED
            logger.info(f"Paused simulation: {self._experiment.id}")

    def resume(self) -> None:
        with self._lock:
            if self._state != SimulatorState.PAUSED:
                raise InvalidStateTransitionError(f"Cannot resume from state {self._state.value}")
            self._state = SimulatorState.RUNNING
            logger.info(f"Resumed simulation: {self._experiment.id}")

    def reset(self) -> None:
        """Return to idle with all counters zeroed. Idempotent."""
        with self._lock:
            self._state = SimulatorState.IDLE
            self._init_results()
            logger.info(f"Reset simulation: {self._experiment.id}")

    def simulate_one_user(self) -> Optional[SimulatedUser]:
        """Simulate one user regardless of run state."""
        with self._lock:
            user = simulate_one_user(self._experiment, self._rollout, self._results, self._rng)
            if user is None:
                experiment_users_excluded_total.labels(experiment=self._experiment.id).inc()
                return None
            self._total_users += 1
            experiment_users_total.labels(
                experiment=self._experiment.id,
                variant=user.variant_id,
                converted=str(user.converted).lower(),
            ).inc()
            experiment_total_users.labels(experiment=self._experiment.id).set(self._total_users)
            return user

    def step(self, batch_size: int = 1) -> int:
        """Run one tick of ``batch_size`` users if running.

        Returns:
            Number of users admitted into the experiment
        """
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        with self._lock:
            if not self.is_running:
                return 0
            admitted = 0
            for _ in range(batch_size):
                if self.simulate_one_user() is not None:
                    admitted += 1
            return admitted

    def results(self) -> List[ExperimentResult]:
        """Copies of the per-variant counters in variant order."""
        with self._lock:
            return [replace(self._results[v.id]) for v in self._experiment.variants]

    def leading_variant(self) -> LeadingVariant:
        with self._lock:
            verdict = leading_variant(
                self._experiment.variants,
                self._results.values(),
                self._total_users,
            )
            if not verdict.is_determined:
                logger.debug(
                    f"Leading variant undetermined for {self._experiment.id}: "
                    f"{self._total_users}/{MIN_SAMPLE_SIZE} users"
                )
            return verdict

    def snapshot(self) -> SimulatorSnapshot:
        with self._lock:
            results = tuple(self.results())
            return SimulatorSnapshot(
                experiment_id=self._experiment.id,
                state=self._state,
                rollout_percentage=self._rollout,
                total_users=self._total_users,
                total_conversions=sum(r.conversions for r in results),
                results=results,
                leading=self.leading_variant(),
            )
