"""
Exception hierarchy.

Configuration problems (missing registrations, too many beams, a malformed
schedule, an unimplemented spawn distribution) are raised while the
dispatcher is being built or set up, before the first step runs.
"""


class SimulationError(Exception):
    """Base class for all errors raised by the simulation."""


class ConfigurationError(SimulationError):
    """The simulation was assembled incorrectly."""


class UnregisteredComponentError(ConfigurationError, KeyError):
    """A component type was used without being registered with the world."""

    def __init__(self, component_type):
        self.component_type = component_type
        super().__init__(f"Component type {component_type.__name__} is not registered")

    def __str__(self):
        return self.args[0]


class UnregisteredResourceError(ConfigurationError, KeyError):
    """A resource was requested that has not been inserted into the world."""

    def __init__(self, resource_type):
        self.resource_type = resource_type
        super().__init__(f"Resource {resource_type.__name__} has not been inserted")

    def __str__(self):
        return self.args[0]


class BeamCapacityError(ConfigurationError):
    """More beams of one kind exist than there are per-atom sample slots."""


class ScheduleError(ConfigurationError):
    """The system graph refers to unknown or duplicate system names."""


class DeadEntityError(SimulationError, LookupError):
    """An entity handle refers to an entity that no longer exists."""


class UnimplementedDistributionError(ConfigurationError, NotImplementedError):
    """A spawn distribution variant is declared but has no sampling law."""
