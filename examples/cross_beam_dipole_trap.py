#!/usr/bin/env python3
"""
Crossed Dipole Trap Loaded From the Centre
==========================================

Two orthogonal 1064 nm beams of 10 W cross at the origin. A cold Sr cloud
is released inside them; atoms that leave a 1 mm box are discarded.
Reports how many atoms stay trapped.
"""

import logging

import numpy as np

from lasercool import Simulation, SimulationConfig, setup_logger
from lasercool.atom import Atom, AtomicTransition, Position
from lasercool.shapes import Cuboid
from lasercool.sim_region import SimulationVolume, VolumeType
from lasercool.templates import add_central_source, add_dipole_beam


def main():
    logger = setup_logger("lasercool", logging.INFO)

    config = SimulationConfig(timestep=1e-5, seed=7, console_interval=10_000)
    with Simulation.from_config(config) as sim:
        e_radius = 60e-6 / np.sqrt(2)
        for direction in ([1.0, 0.0, 0.0], [0.0, 1.0, 0.0]):
            add_dipole_beam(sim.world, wavelength=1064e-9, power=10.0, e_radius=e_radius, direction=direction)

        add_central_source(sim.world, AtomicTransition.strontium(), n_atoms=100, size=5e-5, speed=0.05)
        sim.world.create_entity(
            Position(np.zeros(3)),
            SimulationVolume(Cuboid([5e-4, 5e-4, 5e-4]), VolumeType.INCLUSIVE),
        )
        sim.run(50_000)
        logger.info(f"{sim.world.count(Atom)} of 100 atoms trapped")


if __name__ == "__main__":
    main()
