from dataclasses import dataclass

import numpy as np

from ..constants import C
from ..ecs import Component
from ..laser.index import AttachIndexSystem, IndexLightsSystem

DIPOLE_BEAM_LIMIT = 16


@dataclass
class DipoleLight(Component):
    """Far-detuned trapping light of the given vacuum wavelength [m]."""

    wavelength: float

    @property
    def frequency(self) -> float:
        return C / self.wavelength

    @property
    def angular_frequency(self) -> float:
        return 2.0 * np.pi * self.frequency


@dataclass
class DipoleLightIndex(Component):
    """Slot of a dipole beam in the per-atom gradient arrays."""

    index: int = 0
    initiated: bool = False


class AttachIndexToDipoleLightSystem(AttachIndexSystem):
    light_type = DipoleLight
    index_type = DipoleLightIndex


class IndexDipoleLightsSystem(IndexLightsSystem):
    light_type = DipoleLight
    index_type = DipoleLightIndex
    limit = DIPOLE_BEAM_LIMIT
