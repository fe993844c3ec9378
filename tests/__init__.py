# Tests for lasercool
#
# Test organization mirrors source structure:
#   - test_ecs/: population store, command buffer, scheduler, parallel helpers
#   - test_magnetic/: field sources and samplers
#   - test_laser/: beams, detuning, scattering rates, radiation forces
#   - test_dipole/: dipole beams, gradients and forces
#   - test_atom_sources/: ovens, central creators, emission policies
#   - top level: lifecycle, integration and end-to-end MOT behaviour
#
# Running tests:
#   pytest tests/
#   pytest tests/test_laser/ -v
#   pytest tests/ -m "not slow"
