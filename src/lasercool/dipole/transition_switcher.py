"""
Switching from MOT to dipole trap.

``AttachAtomicDipoleTransitionToAtomsSystem`` runs every step: once any
dipole beam exists, atoms without an ``AtomicDipoleTransition`` receive the
one belonging to their species, together with gradient samplers, and from
then on feel dipole forces.

``DisableMOTBeamsSystem`` is run once by the driver (``run_now``) at the
moment of transfer; it deletes every cooling beam that is not also a dipole
beam.
"""

import logging

import numpy as np

from ..atom import Atom, AtomicDipoleTransition, AtomicTransition
from ..atom_database import Species
from ..ecs import System
from ..laser.cooling import CoolingLight
from .dipole_beam import DipoleLight
from .intensity_gradient import LaserIntensityGradientSamplers

logger = logging.getLogger(__name__)


class AttachAtomicDipoleTransitionToAtomsSystem(System):
    reads = (Atom, AtomicTransition, DipoleLight)
    writes = (AtomicDipoleTransition, LaserIntensityGradientSamplers)

    def run(self, world):
        if world.count(DipoleLight) == 0:
            return
        rows = world.join(Atom, AtomicTransition, without=(AtomicDipoleTransition,))
        if len(rows) == 0:
            return
        species = world.storage(AtomicTransition)["species"][rows]
        gradient_store = world.storage(LaserIntensityGradientSamplers)
        for code in np.unique(species):
            transition = AtomicDipoleTransition.for_species(Species(int(code)))
            for row in rows[species == code]:
                entity = world.entity(row)
                world.commands.insert(entity, transition)
                if not gradient_store.mask[row]:
                    world.commands.insert(entity, LaserIntensityGradientSamplers())


class DisableMOTBeamsSystem(System):
    reads = (CoolingLight, DipoleLight)

    def run(self, world):
        beams = world.join(CoolingLight, without=(DipoleLight,))
        for row in beams:
            world.commands.delete(world.entity(row))
        logger.info(f"Disabled {len(beams)} MOT beams")
