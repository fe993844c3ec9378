# Dipole Trapping
#
# Far-off-resonant beams trap atoms through the gradient of their intensity.
#
#   - dipole_beam: DipoleLight, slot indices (DIPOLE_BEAM_LIMIT slots)
#   - intensity_gradient: per-atom, per-slot intensity gradients
#   - dipole_force: optical dipole force from the sampled gradients
#   - transition_switcher: engage dipole trapping, switch off MOT beams

from .dipole_beam import (
    DIPOLE_BEAM_LIMIT,
    AttachIndexToDipoleLightSystem,
    DipoleLight,
    DipoleLightIndex,
    IndexDipoleLightsSystem,
)
from .intensity_gradient import (
    AttachDipoleComponentsToNewlyCreatedAtomsSystem,
    InitialiseLaserIntensityGradientSamplersSystem,
    LaserIntensityGradientSamplers,
    SampleLaserIntensityGradientSystem,
)
from .dipole_force import ApplyDipoleForceSystem, dipole_force_prefactor
from .transition_switcher import AttachAtomicDipoleTransitionToAtomsSystem, DisableMOTBeamsSystem
