# Magnetic Fields
#
# Per-atom magnetic field sampling. Every step each atom's
# MagneticFieldSampler is zeroed, every field source adds its contribution
# (superposition), and the magnitude is computed once all sources are in.
#
# Sources:
#   - QuadrupoleField3D: linear quadrupole of a MOT coil pair
#   - MagneticWireField: finite straight current-carrying wire
#   - UniformMagneticField: homogeneous bias field

from .sampler import (
    AttachFieldSamplersToNewlyCreatedAtomsSystem,
    CalculateMagneticFieldMagnitudeSystem,
    ClearMagneticFieldSamplerSystem,
    MagneticFieldSampler,
)
from .quadrupole import QuadrupoleField3D, Sample3DQuadrupoleFieldSystem
from .wire import MagneticWireField, SampleMagneticWireFieldSystem
from .uniform import UniformMagneticField, UniformMagneticFieldSystem

__all__ = [
    "AttachFieldSamplersToNewlyCreatedAtomsSystem",
    "CalculateMagneticFieldMagnitudeSystem",
    "ClearMagneticFieldSamplerSystem",
    "MagneticFieldSampler",
    "MagneticWireField",
    "QuadrupoleField3D",
    "Sample3DQuadrupoleFieldSystem",
    "SampleMagneticWireFieldSystem",
    "UniformMagneticField",
    "UniformMagneticFieldSystem",
]
