# Laser Cooling
#
# Per-step pipeline for cooling beams, in dependency order:
#
#   1. index:             assign each cooling beam a slot 0..N-1
#   2. intensity:         Gaussian beam intensity at each atom, per slot
#   3. detuning:          laser/Doppler/Zeeman detuning of σ+, σ-, π
#   4. rate:              polarization-resolved scattering rate per slot
#   5. twolevel:          steady-state excited population
#   6. photons_scattered: mean, expected-per-beam and actual photon counts
#   7. force:             absorption force and spontaneous-emission kicks
#   8. repump:            optional loss to dark states
#
# Beam geometry lives in gaussian; polarization algebra in polarization.

from .attach import AttachLaserComponentsToNewlyCreatedAtomsSystem
from .cooling import CoolingLight, CoolingLightIndex
from .detuning import (
    CalculateLaserDetuningSystem,
    InitialiseLaserDetuningSamplersSystem,
    LaserDetuningSamplers,
)
from .force import ApplyEmissionForceSystem, CalculateCoolingForcesSystem, EmissionForceOption
from .gaussian import (
    CircularMask,
    GaussianBeam,
    GaussianRayleighRange,
    GaussianReferenceFrame,
    get_gaussian_beam_intensity,
    get_gaussian_beam_intensity_gradient,
    make_gaussian_rayleigh_range,
)
from .index import (
    COOLING_BEAM_LIMIT,
    AttachIndexToCoolingLightSystem,
    IndexCoolingLightsSystem,
)
from .intensity import (
    InitialiseLaserIntensitySamplersSystem,
    LaserIntensitySamplers,
    SampleLaserIntensitySystem,
)
from .photons_scattered import (
    ActualPhotonsScatteredVector,
    CalculateActualPhotonsScatteredSystem,
    CalculateExpectedPhotonsScatteredSystem,
    CalculateMeanTotalPhotonsScatteredSystem,
    ExpectedPhotonsScatteredVector,
    ScatteringFluctuationsOption,
    TotalPhotonsScattered,
)
from .polarization import Polarization
from .rate import CalculateRateCoefficientsSystem, InitialiseRateCoefficientsSystem, RateCoefficients
from .repump import RepumpLoss, RepumpSystem
from .twolevel import CalculateTwoLevelPopulationSystem, TwoLevelPopulation
