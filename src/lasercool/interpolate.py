"""
Keyframe ramps for source components.

A ``Ramp`` attached to an entity holds a sorted list of times and a
keyframe value (a component instance) for each. Every step the matching
``RampSystem`` replaces the entity's component with one whose numeric
fields are linearly interpolated between the keyframes bracketing the
current simulation time ``Step.n·Timestep.delta``. Before the first and
after the last keyframe the end values are held. Integer and non-numeric
fields are taken from the earlier keyframe.

    ramp = Ramp(GaussianBeam, [0.0, 0.01], [beam_at_start, beam_at_end])
    world.insert(beam_entity, ramp)
    builder.add(RampSystem(GaussianBeam), "ramp_beam")
"""

import dataclasses
import numbers
from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from .ecs import Component, System
from .integrator import Step, Timestep


def lerp(a, b, fraction: float):
    """Interpolate every numeric field between two instances of the same dataclass."""
    values = {}
    for f in dataclasses.fields(a):
        if not f.init:
            continue
        va, vb = getattr(a, f.name), getattr(b, f.name)
        if isinstance(va, np.ndarray) or (isinstance(va, numbers.Real) and not isinstance(va, numbers.Integral)):
            values[f.name] = va + (vb - va) * fraction
        else:
            values[f.name] = va
    return dataclasses.replace(a, **values)


@dataclass
class Ramp(Component):
    component_type: type
    times: Sequence[float]
    keyframes: List[Component]

    def __post_init__(self):
        if len(self.times) != len(self.keyframes) or not self.keyframes:
            raise ValueError("A ramp needs one keyframe per time, and at least one keyframe")
        if any(not isinstance(k, self.component_type) for k in self.keyframes):
            raise TypeError(f"All keyframes must be {self.component_type.__name__} instances")
        if np.any(np.diff(self.times) <= 0):
            raise ValueError("Keyframe times must be strictly increasing")
        self.times = np.asarray(self.times, dtype=float)

    def value_at(self, time: float):
        if time <= self.times[0]:
            return self.keyframes[0]
        if time >= self.times[-1]:
            return self.keyframes[-1]
        i = int(np.searchsorted(self.times, time, side="right")) - 1
        fraction = (time - self.times[i]) / (self.times[i + 1] - self.times[i])
        return lerp(self.keyframes[i], self.keyframes[i + 1], fraction)


class RampSystem(System):
    """Apply every ``Ramp`` of one component type."""

    def __init__(self, component_type: type):
        self.component_type = component_type
        self.reads = (Ramp, Step, Timestep)
        self.writes = (component_type,)

    def run(self, world):
        time = world.resource(Step).n * world.resource(Timestep).delta
        storage = world.storage(self.component_type)
        for entity, ramp, _ in world.query(Ramp, self.component_type):
            if ramp.component_type is self.component_type:
                storage.insert(entity.id, ramp.value_at(time))
