"""
Physical Constants
==================

All values are in SI units and taken from ``scipy.constants`` (CODATA 2018),
so the simulation and any analysis code built on scipy agree to the last digit.

**ℏ (HBAR)** sets the photon momentum ℏk delivered per scattering event and
converts Zeeman energies to angular detunings (μB·|B|/ℏ).

**c (C)** converts wavelengths to frequencies and wavevectors.

**kB (BOLTZCONST)** sets the thermal speed distribution of oven sources.

**μB (BOHRMAG)** is the scale of the magnetic moments of the cooling
transitions.

**amu (AMU)** converts atomic mass numbers to kilograms.

**g (EXP_G)** is standard gravity.
"""

import numpy as np
from scipy import constants as _sc

HBAR = _sc.hbar  # Reduced Planck constant [J·s]

C = _sc.c  # Speed of light [m/s]

BOLTZCONST = _sc.k  # Boltzmann constant [J/K]

BOHRMAG = _sc.physical_constants["Bohr magneton"][0]  # [J/T]

AMU = _sc.physical_constants["atomic mass constant"][0]  # [kg]

EXP_G = _sc.g  # Standard gravity [m/s²]

MACHINE_EPSILON = np.finfo(float).eps
"""
Double precision machine epsilon.

Magnetic fields with ``|B|² < 10·MACHINE_EPSILON`` are treated as zero when
choosing a quantization axis.
"""

GAUSS_PER_CM = 1e-2
"""One gauss per centimetre expressed in tesla per metre."""
