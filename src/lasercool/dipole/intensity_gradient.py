from dataclasses import dataclass, field

import numpy as np

from ..atom import Atom, Position
from ..ecs import Component, StorageKind, System, dense_field, par_for_each
from ..initiate import NewlyCreated
from ..laser.gaussian import (
    GaussianBeam,
    GaussianRayleighRange,
    GaussianReferenceFrame,
    get_gaussian_beam_intensity_gradient,
)
from .dipole_beam import DIPOLE_BEAM_LIMIT, DipoleLight, DipoleLightIndex


@dataclass
class LaserIntensityGradientSamplers(Component):
    """Intensity gradient of each dipole beam at the atom [W/m³], by slot. NaN means no beam."""

    storage = StorageKind.DENSE
    layout = {"contents": dense_field((DIPOLE_BEAM_LIMIT, 3), fill=np.nan)}

    contents: np.ndarray = field(default_factory=lambda: np.full((DIPOLE_BEAM_LIMIT, 3), np.nan))


def dipole_beams(world):
    """Yield ``(slot, DipoleLight, GaussianBeam, entity)`` for every indexed dipole beam."""
    for entity, light, index, beam in world.query(DipoleLight, DipoleLightIndex, GaussianBeam):
        if index.initiated:
            yield index.index, light, beam, entity


class InitialiseLaserIntensityGradientSamplersSystem(System):
    writes = (LaserIntensityGradientSamplers,)

    def run(self, world):
        store = world.storage(LaserIntensityGradientSamplers)
        store["contents"][store.mask] = np.nan


class SampleLaserIntensityGradientSystem(System):
    reads = (
        Position, Atom, DipoleLight, DipoleLightIndex, GaussianBeam,
        GaussianRayleighRange, GaussianReferenceFrame,
    )
    writes = (LaserIntensityGradientSamplers,)

    def run(self, world):
        rows = world.join(Atom, Position, LaserIntensityGradientSamplers)
        beams = [
            (
                slot,
                beam,
                world.get(entity, GaussianRayleighRange),
                world.get(entity, GaussianReferenceFrame),
            )
            for slot, _, beam, entity in dipole_beams(world)
        ]
        if len(rows) == 0 or not beams:
            return
        positions = world.storage(Position)["vec"]
        samplers = world.storage(LaserIntensityGradientSamplers)["contents"]

        def kernel(chunk):
            for slot, beam, rayleigh, frame in beams:
                samplers[chunk, slot, :] = get_gaussian_beam_intensity_gradient(
                    beam, positions[chunk], rayleigh, frame
                )

        par_for_each(world, rows, kernel)


class AttachDipoleComponentsToNewlyCreatedAtomsSystem(System):
    reads = (Atom, NewlyCreated)
    writes = (LaserIntensityGradientSamplers,)

    def run(self, world):
        for row in world.join(Atom, NewlyCreated, without=(LaserIntensityGradientSamplers,)):
            world.commands.insert(world.entity(row), LaserIntensityGradientSamplers())
