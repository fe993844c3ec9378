"""
Simulation volumes.

Volume entities carry a ``Position`` (the centre) and a ``SimulationVolume``.
An atom survives the region test if it lies inside at least one inclusive
volume (when any exist) and inside no exclusive volume; all other atoms are
marked ``ToBeDestroyed``.
"""

import enum
from dataclasses import dataclass
from typing import Union

import numpy as np

from .atom import Atom, Position
from .destructor import ToBeDestroyed
from .ecs import Component, System
from .shapes import Cuboid, Cylinder, Sphere


class VolumeType(enum.Enum):
    INCLUSIVE = "inclusive"
    EXCLUSIVE = "exclusive"


@dataclass
class SimulationVolume(Component):
    shape: Union[Cuboid, Sphere, Cylinder]
    volume_type: VolumeType = VolumeType.INCLUSIVE


class RegionTestSystem(System):
    reads = (Position, SimulationVolume, Atom)
    writes = (ToBeDestroyed,)

    def run(self, world):
        rows = world.join(Atom, Position, without=(ToBeDestroyed,))
        volumes = list(world.query(Position, SimulationVolume))
        if len(rows) == 0 or not volumes:
            return
        positions = world.storage(Position)["vec"][rows]

        any_inclusive = False
        inside_inclusive = np.zeros(len(rows), dtype=bool)
        inside_exclusive = np.zeros(len(rows), dtype=bool)
        for _, centre, volume in volumes:
            inside = volume.shape.contains(centre.vec, positions)
            if volume.volume_type is VolumeType.INCLUSIVE:
                any_inclusive = True
                inside_inclusive |= inside
            else:
                inside_exclusive |= inside

        failed = inside_exclusive | (~inside_inclusive if any_inclusive else False)
        for index in rows[failed]:
            world.commands.insert(world.entity(index), ToBeDestroyed())
