"""A/B experiment simulation.

Provides:
- Experiment and variant definitions
- A single-writer simulator with an idle/running/paused state machine
- Leading-variant detection behind a minimum sample size
- An asyncio timer that steps the simulator in batches
"""

from envlab.core.experiments.models import (
    PREDEFINED_EXPERIMENTS,
    Experiment,
    ExperimentResult,
    ExperimentStatus,
    LeadingVariant,
    SimulatedUser,
    SimulatorSnapshot,
    SimulatorState,
    Variant,
)
from envlab.core.experiments.runner import SimulationRunner
from envlab.core.experiments.simulator import (
    MIN_SAMPLE_SIZE,
    ExperimentSimulator,
    leading_variant,
    simulate_one_user,
)

__all__ = [
    "MIN_SAMPLE_SIZE",
    "PREDEFINED_EXPERIMENTS",
    "Experiment",
    "ExperimentResult",
    "ExperimentSimulator",
    "ExperimentStatus",
    "LeadingVariant",
    "SimulatedUser",
    "SimulationRunner",
    "SimulatorSnapshot",
    "SimulatorState",
    "Variant",
    "leading_variant",
    "simulate_one_user",
]
