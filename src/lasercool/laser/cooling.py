"""
Cooling light.

A cooling beam is an entity with a ``GaussianBeam`` (geometry and power) and
a ``CoolingLight`` (wavelength and circular polarization). The polarization
is given as +1 or -1: circular σ+ or σ- defined with respect to the beam's own
propagation direction. A ``Polarization`` component on the beam entity takes
precedence over this.
"""

import warnings
from dataclasses import dataclass

import numpy as np

from ..atom import AtomicTransition
from ..constants import C
from ..ecs import Component
from .polarization import sigma_minus, sigma_plus


@dataclass
class CoolingLight(Component):
    """
    Parameters
    ----------
    wavelength : float
        Vacuum wavelength [m].
    polarization : int
        +1 for σ+ or -1 for σ- relative to the beam direction.
    """

    wavelength: float
    polarization: int = 1

    def __post_init__(self):
        if self.polarization not in (1, -1):
            raise ValueError(f"Polarization must be +1 or -1, got {self.polarization}")

    @property
    def frequency(self) -> float:
        return C / self.wavelength

    @property
    def wavenumber(self) -> float:
        return 2.0 * np.pi / self.wavelength

    def polarization_vector(self, direction) -> np.ndarray:
        if self.polarization == 1:
            return sigma_plus(direction)
        return sigma_minus(direction)

    @classmethod
    def for_species(cls, species, detuning: float, polarization: int = 1) -> "CoolingLight":
        """
        Create cooling light detuned from a species' transition.

        Parameters
        ----------
        species : AtomicTransition or Species or str
            Transition to detune from.
        detuning : float
            Laser frequency minus transition frequency [MHz].
        polarization : int
            +1 or -1.
        """
        transition = species if isinstance(species, AtomicTransition) else AtomicTransition.for_species(species)
        if detuning > 0:
            warnings.warn(
                f"Cooling light is blue detuned by {detuning} MHz from {transition.species.name}; "
                f"it will heat rather than cool.",
                UserWarning,
            )
        frequency = transition.frequency + detuning * 1.0e6
        return cls(wavelength=C / frequency, polarization=polarization)


@dataclass
class CoolingLightIndex(Component):
    """Slot of a cooling beam in the per-atom sample arrays."""

    index: int = 0
    initiated: bool = False
