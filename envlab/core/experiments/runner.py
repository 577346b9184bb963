"""Periodic driver for the experiment simulator.

Each tick runs one batch through ``ExperimentSimulator.step``. A step runs
synchronously under the simulator lock, so stopping the loop never abandons
a half-applied batch.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from envlab.core.config import get_settings
from envlab.core.experiments.models import SimulatorState
from envlab.core.experiments.simulator import ExperimentSimulator
from envlab.core.logging.structured import set_experiment_context

logger = logging.getLogger(__name__)


class SimulationRunner:
    """asyncio timer loop stepping a simulator while it is running."""

    def __init__(
        self,
        simulator: ExperimentSimulator,
        tick_interval_ms: Optional[int] = None,
        batch_size: Optional[int] = None,
    ):
        settings = get_settings()
        self.simulator = simulator
        self.tick_interval_ms = (
            settings.SIMULATION_TICK_MS if tick_interval_ms is None else tick_interval_ms
        )
        self.batch_size = settings.SIMULATION_BATCH_SIZE if batch_size is None else batch_size
        if self.tick_interval_ms <= 0:
            raise ValueError("tick_interval_ms must be positive")
        if self.batch_size < 1:
            raise ValueError("batch_size must be at least 1")

        self._running = False
        self._task: Optional[asyncio.Task] = None
        self._ticks = 0

    @property
    def ticks(self) -> int:
        return self._ticks

    @property
    def is_active(self) -> bool:
        return self._task is not None and not self._task.done()

    def tick(self) -> int:
        """Run a single batch now."""
        admitted = self.simulator.step(self.batch_size)
        self._ticks += 1
        return admitted

    def run_ticks(self, count: int) -> int:
        """Run ``count`` batches synchronously; returns admitted users."""
        return sum(self.tick() for _ in range(count))

    async def start(self) -> None:
        """Start the simulation and the timer loop."""
        if self.is_active:
            return

        # Caller's context; the loop task copies it on creation
        set_experiment_context(self.simulator.experiment.id)
        if not self.simulator.is_running:
            if self.simulator.state == SimulatorState.PAUSED:
                self.simulator.resume()
            else:
                self.simulator.start()

        self._running = True
        self._task = asyncio.create_task(self._run_loop())
        logger.info(
            f"Simulation runner started: {self.batch_size} users every {self.tick_interval_ms}ms"
        )

    async def stop(self) -> None:
        """Stop the timer loop and pause the simulator."""
        self._running = False

        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        if self.simulator.is_running:
            self.simulator.pause()

        snapshot = self.simulator.snapshot()
        logger.info(
            f"Simulation runner stopped after {self._ticks} ticks",
            extra={"extra_fields": {"experiment_id": snapshot.experiment_id, "total_users": snapshot.total_users}},
        )

    async def _run_loop(self) -> None:
        """Main timer loop."""
        interval = self.tick_interval_ms / 1000
        while self._running:
            try:
                await asyncio.sleep(interval)
                # Checked again after sleeping: a pause issued meanwhile wins
                if not self._running or not self.simulator.is_running:
                    break
                admitted = self.tick()
                logger.debug(
                    f"Tick {self._ticks}: {admitted} users admitted, "
                    f"{self.simulator.total_users} total"
                )
            except asyncio.CancelledError:
                break
