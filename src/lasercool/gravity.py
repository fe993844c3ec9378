from dataclasses import dataclass

from .atom import Force, Mass
from .constants import EXP_G
from .ecs import Resource, System


@dataclass
class ApplyGravityOption(Resource):
    """Switch gravity on or off. Gravity is on when the resource is absent."""

    enabled: bool = True


class ApplyGravitationalForceSystem(System):
    """Add ``-g·m`` along z to every atom's force."""

    reads = (Mass, ApplyGravityOption)
    writes = (Force,)
    optional = (ApplyGravityOption,)

    def run(self, world):
        option = world.try_resource(ApplyGravityOption)
        if option is not None and not option.enabled:
            return
        rows = world.join(Force, Mass)
        if len(rows):
            world.storage(Force)["vec"][rows, 2] -= EXP_G * world.storage(Mass)["value"][rows]
