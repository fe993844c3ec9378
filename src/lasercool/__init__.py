# lasercool: Entity/Component Simulation of Laser-Cooled Atoms
#
# Simulates the motion of neutral atoms under magnetic, optical and
# gravitational forces in magneto-optical traps, atomic beams and dipole
# traps.
#
# Architecture:
#   ecs:           population store, deferred commands, staged scheduler
#   magnetic:      field sources sampled at each atom
#   laser:         cooling beams, scattering rates, radiation pressure
#   dipole:        far-detuned trapping beams
#   atom_sources:  ovens and volumetric creators
#   simulation:    registration, standard step graph, driver loop

__version__ = "0.1.0"

from .simulation import (
    Simulation,
    SimulationConfig,
    create_simulation_dispatcher_builder,
    register_components,
    register_resources,
)
from .utils.logging_utils import setup_logger
