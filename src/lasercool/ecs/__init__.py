# Entity/Component Engine
#
# Storage, deferred mutation and scheduling primitives the simulation is
# built on.
#
#   - world: entity handles, typed component storages, resources
#   - commands: deferred create/insert/remove/destroy queue
#   - dispatcher: staged, dependency-ordered system schedule
#   - parallel: worker pool and chunked fan-out for per-atom kernels

from .world import (
    Component,
    Entity,
    Resource,
    StorageKind,
    World,
    dense_field,
)
from .commands import Command, CommandBuffer, CommandKind
from .dispatcher import Dispatcher, DispatcherBuilder, System
from .parallel import RandomSource, WorkerPool, par_for_each

__all__ = [
    "Command",
    "CommandBuffer",
    "CommandKind",
    "Component",
    "Dispatcher",
    "DispatcherBuilder",
    "Entity",
    "RandomSource",
    "Resource",
    "StorageKind",
    "System",
    "WorkerPool",
    "World",
    "dense_field",
    "par_for_each",
]
