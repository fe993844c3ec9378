"""
Particle components.

An atom is an entity carrying ``Position``, ``Velocity``, ``Force``, ``Mass``,
``AtomicTransition`` and the ``Atom`` marker. All of these are dense, so
kernels read and write them as numpy columns indexed by entity id.
"""

from dataclasses import dataclass, field

import numpy as np

from .atom_database import Species, get_species_data, resolve_species
from .constants import C
from .ecs import Component, StorageKind, System, dense_field


def _zero_vector():
    return np.zeros(3)


@dataclass
class Position(Component):
    """Position in metres."""

    storage = StorageKind.DENSE
    layout = {"vec": dense_field((3,))}

    vec: np.ndarray = field(default_factory=_zero_vector)

    def __post_init__(self):
        self.vec = np.asarray(self.vec, dtype=float)


@dataclass
class Velocity(Component):
    """Velocity in metres per second."""

    storage = StorageKind.DENSE
    layout = {"vec": dense_field((3,))}

    vec: np.ndarray = field(default_factory=_zero_vector)

    def __post_init__(self):
        self.vec = np.asarray(self.vec, dtype=float)


@dataclass
class InitialVelocity(Component):
    """Velocity an atom was created with. Never updated."""

    storage = StorageKind.DENSE
    layout = {"vec": dense_field((3,))}

    vec: np.ndarray = field(default_factory=_zero_vector)

    def __post_init__(self):
        self.vec = np.asarray(self.vec, dtype=float)


@dataclass
class Force(Component):
    """Force accumulator in newtons. Zeroed at the start of every step."""

    storage = StorageKind.DENSE
    layout = {"vec": dense_field((3,))}

    vec: np.ndarray = field(default_factory=_zero_vector)

    def __post_init__(self):
        self.vec = np.asarray(self.vec, dtype=float)


@dataclass
class Mass(Component):
    """Mass in kilograms."""

    storage = StorageKind.DENSE
    layout = {"value": dense_field()}

    value: float = 0.0


class Atom(Component):
    """Marks an entity as a simulated particle."""

    storage = StorageKind.MARKER


@dataclass
class AtomicTransition(Component):
    """
    Cooling transition of an atom.

    Attributes
    ----------
    species : Species
        Which member of the closed species set this is.
    frequency : float
        Resonance frequency [Hz].
    linewidth : float
        Natural linewidth Γ/2π [Hz].
    saturation_intensity : float
        Saturation intensity [W/m²].
    mup, mum, muz : float
        Magnetic moments of the σ+, σ- and π components [J/T].
    """

    storage = StorageKind.DENSE
    layout = {
        "species": dense_field(dtype=np.int64, fill=-1),
        "frequency": dense_field(),
        "linewidth": dense_field(),
        "saturation_intensity": dense_field(),
        "mup": dense_field(),
        "mum": dense_field(),
        "muz": dense_field(),
    }

    species: Species
    frequency: float
    linewidth: float
    saturation_intensity: float
    mup: float
    mum: float
    muz: float

    def __post_init__(self):
        self.species = Species(self.species)

    @classmethod
    def for_species(cls, species) -> "AtomicTransition":
        member = resolve_species(species)
        data = get_species_data(member)
        return cls(
            species=member,
            frequency=data["frequency"],
            linewidth=data["linewidth"],
            saturation_intensity=data["saturation_intensity"],
            mup=data["mup"],
            mum=data["mum"],
            muz=data["muz"],
        )

    @classmethod
    def rubidium(cls):
        return cls.for_species(Species.RUBIDIUM)

    @classmethod
    def strontium(cls):
        return cls.for_species(Species.STRONTIUM)

    @classmethod
    def strontium_red(cls):
        return cls.for_species(Species.STRONTIUM_RED)

    @classmethod
    def erbium(cls):
        return cls.for_species(Species.ERBIUM)

    @classmethod
    def erbium_401(cls):
        return cls.for_species(Species.ERBIUM_401)

    @property
    def wavelength(self) -> float:
        return C / self.frequency

    @property
    def gamma(self) -> float:
        """Natural linewidth as an angular rate Γ [rad/s]."""
        return 2.0 * np.pi * self.linewidth


class ClearForceSystem(System):
    """Zero the force accumulator of every atom."""

    writes = (Force,)

    def run(self, world):
        store = world.storage(Force)
        store["vec"][store.mask] = 0.0


class Dark(Component):
    """Marks an atom that has decayed into a state the cooling light does not address."""

    storage = StorageKind.MARKER


@dataclass
class AtomicDipoleTransition(Component):
    """
    Transition dominating an atom's far-off-resonant polarizability.

    Only atoms carrying this component feel dipole forces.

    Attributes
    ----------
    frequency : float
        Resonance frequency [Hz].
    linewidth : float
        Natural linewidth Γ/2π [Hz].
    """

    storage = StorageKind.DENSE
    layout = {"frequency": dense_field(), "linewidth": dense_field()}

    frequency: float
    linewidth: float

    @classmethod
    def for_species(cls, species) -> "AtomicDipoleTransition":
        data = get_species_data(species)
        return cls(frequency=data["dipole_frequency"], linewidth=data["dipole_linewidth"])
