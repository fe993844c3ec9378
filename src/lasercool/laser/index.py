"""
Beam slot assignment.

Atoms keep per-beam samples (intensity, detuning, rate...) in fixed-size
arrays, so every beam needs a small integer slot. Beams get an uninitiated
index component when they appear; whenever any index of a beam kind is
uninitiated, the indices of every beam of that kind are reassigned to
``0..N-1`` in entity order.

Reassignment does not preserve earlier slots. Slots only address samples
that are recomputed each step, but an atom's samples from before the
reassignment are not remapped, so beams should be created before atoms.
A reassignment while atoms past their first step exist is logged as a
warning.
"""

import logging

from ..atom import Atom
from ..ecs import System
from ..initiate import NewlyCreated
from ..errors import BeamCapacityError
from .cooling import CoolingLight, CoolingLightIndex

logger = logging.getLogger(__name__)

COOLING_BEAM_LIMIT = 16


def check_beam_capacity(world, light_type, limit: int):
    count = world.count(light_type)
    if count > limit:
        raise BeamCapacityError(
            f"{count} {light_type.__name__} beams exceed the limit of {limit} per-atom slots"
        )


def assign_beam_indices(world, light_type, index_type, limit: int) -> bool:
    """
    Reassign all indices of one beam kind if any is uninitiated.

    Returns
    -------
    bool
        True if indices were reassigned.
    """
    check_beam_capacity(world, light_type, limit)
    storage = world.storage(index_type)
    rows = world.join(light_type, index_type)
    indices = [storage.get(row) for row in rows]
    if all(index.initiated for index in indices):
        return False

    for slot, index in enumerate(indices):
        index.index = slot
        index.initiated = True

    n_atoms = world.count(Atom, without=(NewlyCreated,))
    if n_atoms:
        logger.warning(
            f"Reassigned {len(indices)} {light_type.__name__} indices while {n_atoms} atoms exist; "
            f"their per-beam samples from earlier steps no longer match the new slots"
        )
    else:
        logger.info(f"Assigned {len(indices)} {light_type.__name__} indices")
    return True


class AttachIndexSystem(System):
    """Give every beam of a kind an uninitiated index component."""

    light_type = CoolingLight
    index_type = CoolingLightIndex

    def __init__(self):
        self.reads = (self.light_type,)
        self.writes = (self.index_type,)

    def run(self, world):
        for row in world.join(self.light_type, without=(self.index_type,)):
            world.commands.insert(world.entity(row), self.index_type())


class IndexLightsSystem(System):
    light_type = CoolingLight
    index_type = CoolingLightIndex
    limit = COOLING_BEAM_LIMIT

    def __init__(self):
        self.reads = (self.light_type, Atom, NewlyCreated)
        self.writes = (self.index_type,)

    def setup(self, world):
        check_beam_capacity(world, self.light_type, self.limit)

    def run(self, world):
        assign_beam_indices(world, self.light_type, self.index_type, self.limit)


class AttachIndexToCoolingLightSystem(AttachIndexSystem):
    pass


class IndexCoolingLightsSystem(IndexLightsSystem):
    pass
