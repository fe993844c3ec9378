"""
Atomic Species Database
=======================

Transition data for the closed set of species the simulation supports.

Each species is described by the cooling transition its MOT beams address,
and by the broad transition that dominates its far-off-resonant polarizability
(used for dipole trapping):

| Species      | Cooling line | Γ/2π      | I_sat       | μ (μB)  | Dipole line |
|--------------|--------------|-----------|-------------|---------|-------------|
| Rubidium     | 780.0 nm     | 6.065 MHz | 16.69 W/m²  | ±1      | 780 nm      |
| Strontium    | 460.7 nm     | 32 MHz    | 430 W/m²    | ±1      | 461 nm      |
| StrontiumRed | 689.4 nm     | 7.5 kHz   | 0.0295 W/m² | ±1.5    | 461 nm      |
| Erbium       | 582.8 nm     | 190 kHz   | 1.3 W/m²    | ±1.195  | 401 nm      |
| Erbium401    | 400.9 nm     | 29.7 MHz  | 560 W/m²    | ±1.160  | 401 nm      |

MAGNETIC MOMENTS
----------------

The σ+, σ- and π components of a transition are Zeeman shifted by
``μ·|B|/ħ`` with moments ``mup``, ``mum`` and ``muz``. For the J=0 → J'=1
lines used here ``mum = -mup`` and the π component is unshifted.

References
----------
[1] Steck, "Rubidium 87 D Line Data" (2021)
[2] Katori et al., PRL 82, 1116 (1999) - Sr narrow-line MOT
[3] Frisch et al., PRA 85, 051401 (2012) - Er narrow-line MOT
"""

import enum

from .constants import BOHRMAG, C


class Species(enum.IntEnum):
    RUBIDIUM = 0
    STRONTIUM = 1
    STRONTIUM_RED = 2
    ERBIUM = 3
    ERBIUM_401 = 4


SPECIES_DB = {
    Species.RUBIDIUM: {
        "name": "Rubidium",
        "frequency": C / 780.0e-9,          # Hz
        "linewidth": 6.065e6,               # Hz
        "saturation_intensity": 16.69,      # W/m²
        "mup": BOHRMAG,
        "mum": -BOHRMAG,
        "muz": 0.0,
        "mass_amu": 87.0,
        "dipole_frequency": C / 780.0e-9,
        "dipole_linewidth": 6.065e6,
    },
    Species.STRONTIUM: {
        "name": "Strontium",
        "frequency": C / 460.7e-9,
        "linewidth": 32e6,
        "saturation_intensity": 430.0,
        "mup": BOHRMAG,
        "mum": -BOHRMAG,
        "muz": 0.0,
        "mass_amu": 88.0,
        "dipole_frequency": C / 460.7e-9,
        "dipole_linewidth": 32e6,
    },
    Species.STRONTIUM_RED: {
        "name": "StrontiumRed",
        "frequency": C / 689.4491e-9,
        "linewidth": 7.5e3,
        "saturation_intensity": 0.0295,
        "mup": 1.5 * BOHRMAG,
        "mum": -1.5 * BOHRMAG,
        "muz": 0.0,
        "mass_amu": 88.0,
        "dipole_frequency": C / 460.7e-9,
        "dipole_linewidth": 32e6,
    },
    Species.ERBIUM: {
        "name": "Erbium",
        "frequency": C / 582.84e-9,
        "linewidth": 0.19e6,
        "saturation_intensity": 1.3,
        "mup": 1.195 * BOHRMAG,
        "mum": -1.195 * BOHRMAG,
        "muz": 0.0,
        "mass_amu": 168.0,
        "dipole_frequency": C / 400.91e-9,
        "dipole_linewidth": 29.7e6,
    },
    Species.ERBIUM_401: {
        "name": "Erbium401",
        "frequency": C / 400.91e-9,
        "linewidth": 29.7e6,
        "saturation_intensity": 560.0,
        "mup": 1.160 * BOHRMAG,
        "mum": -1.160 * BOHRMAG,
        "muz": 0.0,
        "mass_amu": 168.0,
        "dipole_frequency": C / 400.91e-9,
        "dipole_linewidth": 29.7e6,
    },
}


def resolve_species(species) -> Species:
    """
    Normalise a species given as an enum member, its integer value, or its
    name (``"StrontiumRed"`` and ``"STRONTIUM_RED"`` are both accepted).
    """
    if isinstance(species, Species):
        return species
    if isinstance(species, str):
        for member in Species:
            if species in (member.name, SPECIES_DB[member]["name"]):
                return member
        raise ValueError(f"Unknown species: {species}. "
                         f"Available: {[d['name'] for d in SPECIES_DB.values()]}")
    return Species(species)


def get_species_data(species) -> dict:
    """Transition data (SI units) for a species, see ``resolve_species``."""
    return SPECIES_DB[resolve_species(species)]
