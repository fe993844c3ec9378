"""
Staged System Scheduler
=======================

A simulation step is a fixed graph of systems. The graph is split into
stages by explicit barriers: no system of a stage starts before every system
of the previous stage has returned. Inside a stage, systems are ordered by
their declared dependencies and by their declared data access:

- ``deps`` names systems (added earlier) that must finish first;
- two systems whose ``writes`` overlap the other's ``reads`` or ``writes``
  are never run concurrently, the later-added one waits for the earlier.

This yields a list of waves per stage. The systems of one wave touch
disjoint data and are run in parallel on a thread pool when the dispatcher
is built with more than one worker.

    builder = DispatcherBuilder()
    builder.add(ClearForceSystem(), "clear")
    builder.add_barrier()
    builder.add(ApplyGravitationalForceSystem(), "gravity")
    builder.add(EulerIntegrationSystem(), "integrator", deps=["gravity"])
    dispatcher = builder.build(workers=4)
    dispatcher.setup(world)       # raises on missing registrations
    dispatcher.dispatch(world)    # one step
    world.maintain()              # apply deferred commands
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from ..errors import ConfigurationError, ScheduleError, UnregisteredComponentError, UnregisteredResourceError
from .world import Resource, World

logger = logging.getLogger(__name__)


class System:
    """
    A unit of per-step work.

    Class attributes declare the data the system touches. ``reads`` and
    ``writes`` list component and resource types; every one of them must be
    registered (components) or inserted (resources) before setup, except the
    types also listed in ``optional``.
    """

    reads: Tuple[type, ...] = ()
    writes: Tuple[type, ...] = ()
    optional: Tuple[type, ...] = ()

    _initialized = False

    def setup(self, world: World):
        """Prepare per-run state. Called once, after validation."""

    def run(self, world: World):
        raise NotImplementedError

    def run_now(self, world: World):
        """Run the system once outside of a dispatcher, setting it up first if needed."""
        if not self._initialized:
            initialize_system(self, world)
        self.run(world)


def validate_system(system: System, world: World):
    """Raise if a type the system declares is unavailable in ``world``."""
    for declared in tuple(system.reads) + tuple(system.writes):
        if declared in system.optional:
            continue
        if issubclass(declared, Resource):
            if not world.has_resource(declared):
                raise UnregisteredResourceError(declared)
        elif not world.is_registered(declared):
            raise UnregisteredComponentError(declared)


def initialize_system(system: System, world: World):
    validate_system(system, world)
    system.setup(world)
    system._initialized = True


def conflicts(a: System, b: System) -> bool:
    writes_a, writes_b = set(a.writes), set(b.writes)
    touched_a = writes_a | set(a.reads)
    touched_b = writes_b | set(b.reads)
    return bool(writes_a & touched_b or writes_b & touched_a)


@dataclass
class _Node:
    name: str
    system: System
    deps: Tuple[str, ...]


class DispatcherBuilder:
    """Collects systems and barriers, then freezes them into a ``Dispatcher``."""

    def __init__(self):
        self._stages: List[List[_Node]] = [[]]
        self._stage_of: Dict[str, int] = {}

    def add(self, system: System, name: str, deps: Sequence[str] = ()):
        if name in self._stage_of:
            raise ScheduleError(f"Duplicate system name '{name}'")
        for dep in deps:
            if dep not in self._stage_of:
                raise ScheduleError(
                    f"System '{name}' depends on '{dep}', which has not been added before it"
                )
        self._stages[-1].append(_Node(name, system, tuple(deps)))
        self._stage_of[name] = len(self._stages) - 1
        return self

    def add_barrier(self):
        if self._stages[-1]:
            self._stages.append([])
        return self

    def names(self) -> List[str]:
        return [node.name for stage in self._stages for node in stage]

    def build(self, workers: int = 1) -> "Dispatcher":
        stages = []
        for nodes in self._stages:
            if nodes:
                stages.append(self._waves(nodes))
        return Dispatcher(stages, workers)

    @staticmethod
    def _waves(nodes: List[_Node]) -> List[List[_Node]]:
        wave_of: Dict[str, int] = {}
        for i, node in enumerate(nodes):
            wave = 0
            for dep in node.deps:
                if dep in wave_of:
                    wave = max(wave, wave_of[dep] + 1)
            for earlier in nodes[:i]:
                if conflicts(earlier.system, node.system):
                    wave = max(wave, wave_of[earlier.name] + 1)
            wave_of[node.name] = wave

        waves: List[List[_Node]] = [[] for _ in range(max(wave_of.values()) + 1)]
        for node in nodes:
            waves[wave_of[node.name]].append(node)
        return waves


class Dispatcher:
    """
    Runs a frozen system graph once per call to ``dispatch``.

    Parameters
    ----------
    stages : list
        Stages, each a list of waves, each a list of nodes.
    workers : int
        Number of threads used to run the systems of one wave. ``1`` runs
        everything on the calling thread.
    """

    def __init__(self, stages: List[List[List[_Node]]], workers: int = 1):
        self.stages = stages
        self.workers = max(1, int(workers))
        self._executor = (
            ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="lasercool-dispatch")
            if self.workers > 1 else None
        )

    @property
    def systems(self) -> List[Tuple[str, System]]:
        return [(node.name, node.system) for stage in self.stages for wave in stage for node in wave]

    def system(self, name: str) -> System:
        for node_name, system in self.systems:
            if node_name == name:
                return system
        raise KeyError(name)

    def setup(self, world: World):
        """Validate and set up every system, in schedule order."""
        for name, system in self.systems:
            try:
                initialize_system(system, world)
            except ConfigurationError as e:
                logger.error(f"Setup of system '{name}' failed: {e}")
                raise
        for i, stage in enumerate(self.stages):
            plan = " | ".join(", ".join(node.name for node in wave) for wave in stage)
            logger.debug(f"Stage {i}: {plan}")

    def dispatch(self, world: World):
        for stage in self.stages:
            for wave in stage:
                if self._executor is None or len(wave) == 1:
                    for node in wave:
                        node.system.run(world)
                else:
                    futures = [self._executor.submit(node.system.run, world) for node in wave]
                    for future in futures:
                        future.result()

    def close(self):
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False
