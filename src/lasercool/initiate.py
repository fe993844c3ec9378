"""
Creation marker.

Atom sources attach ``NewlyCreated`` to every atom they spawn. The marker is
present during the first step after the atom materialises, which lets
systems attach per-atom components (field samplers, dipole transitions) to
new atoms only; ``DeflagNewAtomsSystem`` then queues its removal.
"""

from .ecs import Component, StorageKind, System


class NewlyCreated(Component):
    storage = StorageKind.MARKER


class DeflagNewAtomsSystem(System):
    writes = (NewlyCreated,)

    def run(self, world):
        for index in world.join(NewlyCreated):
            world.commands.remove(world.entity(index), NewlyCreated)
