"""
Early-timestep optimisation.

Right after a source starts emitting, freshly created atoms cross strong
field gradients and see large accelerations. The optional
``EarlyTimestepOptimization`` resource runs the first ``early_steps`` frames
with a shorter timestep and then restores the nominal one. The number of
frames, and therefore the output cadence, is unchanged.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .ecs import Resource, System
from .integrator import Step, Timestep

logger = logging.getLogger(__name__)


@dataclass
class EarlyTimestepOptimization(Resource):
    """
    Parameters
    ----------
    early_timestep : float
        Timestep used for the first ``early_steps`` frames [s].
    early_steps : int
        Number of frames run with the early timestep.
    """

    early_timestep: float
    early_steps: int
    nominal_timestep: Optional[float] = None

    def __post_init__(self):
        if self.early_timestep <= 0:
            raise ValueError(f"early_timestep must be positive, got {self.early_timestep}")
        if self.early_steps < 0:
            raise ValueError(f"early_steps must be non-negative, got {self.early_steps}")


class TimestepOptimizationSystem(System):
    """Switch ``Timestep`` between the early and the nominal value."""

    reads = (Step, EarlyTimestepOptimization)
    writes = (Timestep,)
    optional = (EarlyTimestepOptimization,)

    def run(self, world):
        options = world.try_resource(EarlyTimestepOptimization)
        if options is None:
            return
        timestep = world.resource(Timestep)
        if options.nominal_timestep is None:
            options.nominal_timestep = timestep.delta

        if world.resource(Step).n < options.early_steps:
            timestep.delta = options.early_timestep
        elif timestep.delta != options.nominal_timestep:
            timestep.delta = options.nominal_timestep
            logger.debug(f"Restored nominal timestep {timestep.delta:.3e} s")
