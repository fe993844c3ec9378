"""
Progress reporting and state snapshots.

Writing trajectories to files is left to the caller: observers registered
with ``Simulation.add_observer`` receive read-only copies of the requested
components every ``interval`` steps, after that step's commands have been
applied.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Sequence

from .atom import Atom
from .ecs import System
from .integrator import Step, Timestep

logger = logging.getLogger(__name__)


class ConsoleOutputSystem(System):
    """Log the step number, simulated time and atom count every ``interval`` steps."""

    reads = (Step, Timestep, Atom)

    def __init__(self, interval: int = 1000):
        self.interval = int(interval)

    def setup(self, world):
        self._started = time.perf_counter()

    def run(self, world):
        step = world.resource(Step).n
        if self.interval <= 0 or step % self.interval != 0:
            return
        elapsed = time.perf_counter() - self._started
        sim_time = step * world.resource(Timestep).delta
        logger.info(
            f"Step {step}: t = {sim_time:.3e} s, {world.count(Atom)} atoms, "
            f"{elapsed:.1f} s wall time"
        )


@dataclass
class Observer:
    """
    Parameters
    ----------
    callback : callable
        Called as ``callback(step, snapshot)``, see ``World.snapshot``.
    components : sequence of type
        Component types that must all be present; their data is copied out.
    interval : int
        Call every ``interval`` steps.
    without : sequence of type
        Skip entities holding any of these.
    """

    callback: Callable
    components: Sequence[type]
    interval: int = 1
    without: Sequence[type] = field(default_factory=tuple)

    def __post_init__(self):
        if self.interval < 1:
            raise ValueError(f"Observer interval must be >= 1, got {self.interval}")

    def notify(self, world):
        step = world.resource(Step).n
        if step % self.interval == 0:
            self.callback(step, world.snapshot(*self.components, without=tuple(self.without)))
