from dataclasses import dataclass, field

import numpy as np

from ..atom import Atom, Position
from ..ecs import Component, StorageKind, System, dense_field, par_for_each
from .cooling import CoolingLight, CoolingLightIndex
from .gaussian import (
    CircularMask,
    GaussianBeam,
    GaussianRayleighRange,
    GaussianReferenceFrame,
    get_gaussian_beam_intensity,
)
from .index import COOLING_BEAM_LIMIT


@dataclass
class LaserIntensitySamplers(Component):
    """Intensity of each cooling beam at the atom [W/m²], by beam slot. NaN means no beam."""

    storage = StorageKind.DENSE
    layout = {"contents": dense_field((COOLING_BEAM_LIMIT,), fill=np.nan)}

    contents: np.ndarray = field(default_factory=lambda: np.full(COOLING_BEAM_LIMIT, np.nan))


class InitialiseLaserIntensitySamplersSystem(System):
    writes = (LaserIntensitySamplers,)

    def run(self, world):
        store = world.storage(LaserIntensitySamplers)
        store["contents"][store.mask] = np.nan


def cooling_beams(world):
    """
    Every indexed cooling beam with its optional modifiers.

    Yields
    ------
    (int, CoolingLight, GaussianBeam, entity)
    """
    for entity, light, index, beam in world.query(CoolingLight, CoolingLightIndex, GaussianBeam):
        if index.initiated:
            yield index.index, light, beam, entity


class SampleLaserIntensitySystem(System):
    reads = (
        Position, Atom, CoolingLight, CoolingLightIndex, GaussianBeam,
        CircularMask, GaussianRayleighRange, GaussianReferenceFrame,
    )
    writes = (LaserIntensitySamplers,)

    def run(self, world):
        rows = world.join(Atom, Position, LaserIntensitySamplers)
        beams = [
            (
                slot,
                beam,
                world.get(entity, CircularMask),
                world.get(entity, GaussianRayleighRange),
                world.get(entity, GaussianReferenceFrame),
            )
            for slot, _, beam, entity in cooling_beams(world)
        ]
        if len(rows) == 0 or not beams:
            return
        positions = world.storage(Position)["vec"]
        samplers = world.storage(LaserIntensitySamplers)["contents"]

        def kernel(chunk):
            for slot, beam, mask, rayleigh, frame in beams:
                samplers[chunk, slot] = get_gaussian_beam_intensity(
                    beam, positions[chunk], mask, rayleigh, frame
                )

        par_for_each(world, rows, kernel)
