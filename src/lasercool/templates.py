"""
Setup helpers.

Functions that create the source entities of common experiments on an
already registered world (see ``Simulation.from_config``). Each returns the
handles it created so callers can attach further components or delete them
later.

    sim = Simulation.from_config(SimulationConfig(timestep=2e-5, seed=3))
    transition = AtomicTransition.strontium_red()
    add_quadrupole(sim.world, 1.0)
    add_six_beam_mot(sim.world, transition, detuning=-0.12, total_power=0.01,
                     e_radius=1e-2 / (2 * np.sqrt(2)), gradient=1.0)
    add_central_source(sim.world, transition, n_atoms=1000, size=1e-5, speed=0.1)
"""

from typing import List, Optional

import numpy as np

from .atom import AtomicTransition, Position
from .atom_database import get_species_data
from .atom_sources import AtomNumberToEmit, CentralCreator, EmitOnce, MassDistribution
from .dipole import DipoleLight
from .laser import CoolingLight, GaussianBeam, make_gaussian_rayleigh_range
from .magnetic import QuadrupoleField3D

Z_AXIS = np.array([0.0, 0.0, 1.0])


def add_quadrupole(world, gradient: float, centre=(0.0, 0.0, 0.0), direction=Z_AXIS):
    """Quadrupole coils with radial gradient ``gradient`` [G/cm]."""
    return world.create_entity(
        Position(np.asarray(centre, dtype=float)),
        QuadrupoleField3D.gauss_per_cm(gradient, direction),
    )


def add_cooling_beam(
    world,
    transition: AtomicTransition,
    detuning: float,
    power: float,
    e_radius: float,
    direction,
    polarization: int,
    intersection=(0.0, 0.0, 0.0),
    rayleigh_range: bool = False,
):
    """
    One cooling beam.

    Parameters
    ----------
    transition : AtomicTransition
        Transition the beam is detuned from.
    detuning : float
        Laser minus atomic frequency [MHz].
    power : float
        Beam power [W].
    e_radius : float
        1/e intensity radius [m].
    direction : array_like
        Propagation direction.
    polarization : int
        +1 or -1, circular polarization about ``direction``.
    intersection : array_like
        Waist position [m].
    rayleigh_range : bool
        Give the beam a finite Rayleigh range instead of treating it as
        collimated.
    """
    light = CoolingLight.for_species(transition, detuning, polarization)
    beam = GaussianBeam(
        intersection=np.asarray(intersection, dtype=float),
        direction=np.asarray(direction, dtype=float),
        e_radius=e_radius,
        power=power,
    )
    components = [light, beam]
    if rayleigh_range:
        components.append(make_gaussian_rayleigh_range(light.wavelength, beam))
    return world.create_entity(*components)


def add_six_beam_mot(
    world,
    transition: AtomicTransition,
    detuning: float,
    total_power: float,
    e_radius: float,
    gradient: float = 1.0,
    intersection=(0.0, 0.0, 0.0),
) -> List:
    """
    Three pairs of counter-propagating beams along x, y and z.

    Power is shared equally between the six beams. For a quadrupole along z
    with positive gradient and a transition with ``mup > 0`` the restoring
    configuration has the z beams σ- and the x and y beams σ+ about their
    own directions; a negative gradient swaps both.
    """
    sign = 1 if gradient >= 0 else -1
    axes = [
        (np.array([1.0, 0.0, 0.0]), sign),
        (np.array([0.0, 1.0, 0.0]), sign),
        (Z_AXIS, -sign),
    ]
    beams = []
    for axis, polarization in axes:
        for direction in (axis, -axis):
            beams.append(
                add_cooling_beam(
                    world,
                    transition,
                    detuning,
                    total_power / 6.0,
                    e_radius,
                    direction,
                    polarization,
                    intersection=intersection,
                )
            )
    return beams


def add_central_source(
    world,
    transition: AtomicTransition,
    n_atoms: int,
    size: float,
    speed: float,
    centre=(0.0, 0.0, 0.0),
    mass: Optional[float] = None,
):
    """
    Emit ``n_atoms`` once, uniformly in a cube of side ``size`` [m], with
    speeds uniform in [0.5, 1.5]·``speed`` and isotropic directions.

    ``mass`` is in atomic mass units and defaults to the species' mass.
    """
    if mass is None:
        mass = get_species_data(transition.species)["mass_amu"]
    return world.create_entity(
        Position(np.asarray(centre, dtype=float)),
        CentralCreator.new_uniform_cubic(size, speed),
        transition,
        MassDistribution.single(mass),
        AtomNumberToEmit(int(n_atoms)),
        EmitOnce(),
    )


def add_dipole_beam(
    world,
    wavelength: float,
    power: float,
    e_radius: float,
    direction,
    intersection=(0.0, 0.0, 0.0),
):
    """A focused far-detuned trapping beam with its Rayleigh range."""
    beam = GaussianBeam(
        intersection=np.asarray(intersection, dtype=float),
        direction=np.asarray(direction, dtype=float),
        e_radius=e_radius,
        power=power,
    )
    return world.create_entity(
        DipoleLight(wavelength),
        beam,
        make_gaussian_rayleigh_range(wavelength, beam),
    )
