# Atom Sources
#
# Emitter entities that create atoms each step.
#
#   - emit: how many atoms an emitter creates per step (fixed number,
#     fixed rate, once) and the shared spawning path with the velocity cap
#   - mass: isotope mass distributions
#   - oven: effusive thermal source through an aperture
#   - central_creator: volumetric source with closed sets of position,
#     speed and direction distributions
#
# An emitter carries Position, AtomicTransition (copied onto every atom it
# creates), MassDistribution, AtomNumberToEmit and one source component.

from .emit import (
    AtomNumberToEmit,
    DestroyEmitOnceSourcesSystem,
    EmitFixedRate,
    EmitFixedRateSystem,
    EmitNumberPerFrame,
    EmitNumberPerFrameSystem,
    EmitOnce,
    VelocityCap,
    spawn_atoms,
)
from .mass import MassDistribution, MassRatio
from .oven import CircularAperture, CubicAperture, Oven, OvenCreateAtomsSystem
from .central_creator import (
    CentralCreator,
    CentralCreatorCreateAtomsSystem,
    PositionDensityDistribution,
    SpatialSpeedDistribution,
    SpatialVectorDistribution,
    SpeedDensityDistribution,
    VectorDensityDistribution,
)
