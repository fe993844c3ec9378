from ..atom import Atom
from ..ecs import System
from ..initiate import NewlyCreated
from .detuning import LaserDetuningSamplers
from .intensity import LaserIntensitySamplers
from .photons_scattered import (
    ActualPhotonsScatteredVector,
    ExpectedPhotonsScatteredVector,
    TotalPhotonsScattered,
)
from .rate import RateCoefficients
from .twolevel import TwoLevelPopulation

LASER_SAMPLE_COMPONENTS = (
    LaserIntensitySamplers,
    LaserDetuningSamplers,
    RateCoefficients,
    TwoLevelPopulation,
    TotalPhotonsScattered,
    ExpectedPhotonsScatteredVector,
    ActualPhotonsScatteredVector,
)


class AttachLaserComponentsToNewlyCreatedAtomsSystem(System):
    """Give new atoms the per-beam sample arrays used by the cooling kernels."""

    reads = (Atom, NewlyCreated)
    writes = LASER_SAMPLE_COMPONENTS

    def run(self, world):
        for row in world.join(Atom, NewlyCreated):
            entity = world.entity(row)
            for component_type in LASER_SAMPLE_COMPONENTS:
                world.commands.insert(entity, component_type())
