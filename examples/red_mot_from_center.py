#!/usr/bin/env python3
"""
Strontium Red MOT Loaded From the Centre
========================================

Releases 1000 slow Sr atoms at the centre of a six-beam MOT on the 689 nm
intercombination line and records the cloud every 100 steps.

Writes ``red_mot_positions.npz`` with one (n, 3) array per recorded step.
"""

import logging

import numpy as np

from lasercool import Simulation, SimulationConfig, setup_logger
from lasercool.atom import Atom, AtomicTransition, Position
from lasercool.destructor import SimulationBounds
from lasercool.templates import add_central_source, add_quadrupole, add_six_beam_mot

N_ATOMS = 1000
N_STEPS = 100_000


def main():
    logger = setup_logger("lasercool", logging.INFO)

    config = SimulationConfig(timestep=1e-6, seed=2024, workers=2, console_interval=10_000)
    frames = {}

    with Simulation.from_config(config) as sim:
        transition = AtomicTransition.strontium_red()
        add_quadrupole(sim.world, gradient=1.0)
        add_six_beam_mot(
            sim.world,
            transition,
            detuning=-0.12,
            total_power=0.01,
            e_radius=1e-2 / (2 * np.sqrt(2)),
            gradient=1.0,
        )
        add_central_source(sim.world, transition, n_atoms=N_ATOMS, size=1e-5, speed=0.1)
        sim.world.insert_resource(SimulationBounds([1e-2, 1e-2, 1e-2]))

        def record(step, snapshot):
            frames[f"step_{step}"] = snapshot["Position"]["vec"]

        sim.add_observer(record, [Atom, Position], interval=100)
        sim.run(N_STEPS)

        positions = sim.world.snapshot(Atom, Position)["Position"]["vec"]
        rms = np.sqrt(np.mean(np.sum(positions**2, axis=1)))
        logger.info(f"{len(positions)} atoms remain, rms radius {rms * 1e3:.3f} mm")

    np.savez_compressed("red_mot_positions.npz", **frames)


if __name__ == "__main__":
    main()
