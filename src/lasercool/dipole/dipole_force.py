"""
Optical dipole force.

A far-detuned beam of angular frequency ω induces a dipole in an atom whose
dominant transition has angular frequency ω0 and linewidth Γ. The resulting
potential is ``U = -(3πc²Γ/2ω0³)·(1/(ω0-ω) + 1/(ω0+ω))·I`` (Grimm et al.),
so the force is

    F = (3πc²Γ / 2ω0³)·(1/(ω0 - ω) + 1/(ω0 + ω))·∇I

Red-detuned light (ω < ω0) pulls atoms towards high intensity. Contributions
of all dipole beams are summed.

References
----------
[1] Grimm, Weidemüller, Ovchinnikov, Adv. At. Mol. Opt. Phys. 42, 95 (2000)
"""

import numpy as np

from ..atom import Atom, AtomicDipoleTransition, Force
from ..constants import C
from ..ecs import System
from .dipole_beam import DipoleLight, DipoleLightIndex
from .intensity_gradient import LaserIntensityGradientSamplers, dipole_beams


def dipole_force_prefactor(transition_frequency, transition_linewidth, light_angular_frequency):
    """
    Coefficient multiplying ∇I in the dipole force [m·s].

    Parameters
    ----------
    transition_frequency : float or np.ndarray
        Atomic resonance frequency [Hz].
    transition_linewidth : float or np.ndarray
        Natural linewidth Γ/2π [Hz].
    light_angular_frequency : float
        Angular frequency of the trapping light [rad/s].
    """
    omega0 = 2.0 * np.pi * np.asarray(transition_frequency)
    gamma = 2.0 * np.pi * np.asarray(transition_linewidth)
    omega = light_angular_frequency
    return 3.0 * np.pi * C**2 * gamma / (2.0 * omega0**3) * (1.0 / (omega0 - omega) + 1.0 / (omega0 + omega))


class ApplyDipoleForceSystem(System):
    reads = (Atom, AtomicDipoleTransition, LaserIntensityGradientSamplers, DipoleLight, DipoleLightIndex)
    writes = (Force,)

    def run(self, world):
        rows = world.join(Atom, Force, AtomicDipoleTransition, LaserIntensityGradientSamplers)
        beams = list(dipole_beams(world))
        if len(rows) == 0 or not beams:
            return
        transition = world.storage(AtomicDipoleTransition)
        gradients = world.storage(LaserIntensityGradientSamplers)["contents"]
        force = world.storage(Force)["vec"]
        for slot, light, _, _ in beams:
            prefactor = dipole_force_prefactor(
                transition["frequency"][rows], transition["linewidth"][rows], light.angular_frequency
            )
            force[rows] += prefactor[:, None] * gradients[rows, slot, :]
