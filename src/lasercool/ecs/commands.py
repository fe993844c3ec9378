"""
Deferred population mutation.

Systems never add or delete entities directly while a step is running, since
other systems may be iterating the same storages in parallel. Instead they
append tagged commands to the world's ``CommandBuffer``; the buffer is
replayed single-threaded, in append order, by ``World.maintain()`` once every
system of the step has finished.

A handle returned by ``create_entity`` is valid immediately, so further
commands can target the entity before it exists. Commands addressed to an
entity that has been deleted by the time they are replayed (for example two
systems both destroying the same atom) are skipped.
"""

import enum
import logging
import threading
from dataclasses import dataclass
from typing import Any, List

logger = logging.getLogger(__name__)


class CommandKind(enum.Enum):
    CREATE = "create"
    INSERT = "insert"
    REMOVE = "remove"
    DESTROY = "destroy"


@dataclass(frozen=True)
class Command:
    kind: CommandKind
    entity: Any
    payload: Any = None


class CommandBuffer:
    """Thread-safe queue of pending create/insert/remove/destroy operations."""

    def __init__(self, world):
        self._world = world
        self._lock = threading.Lock()
        self._queue: List[Command] = []

    def __len__(self):
        with self._lock:
            return len(self._queue)

    def _push(self, command: Command):
        with self._lock:
            self._queue.append(command)

    def create_entity(self, *components):
        """Queue creation of an entity carrying ``components``; return its handle."""
        entity = self._world.reserve_entity()
        self._push(Command(CommandKind.CREATE, entity, tuple(components)))
        return entity

    def insert(self, entity, component):
        self._push(Command(CommandKind.INSERT, entity, component))

    def remove(self, entity, component_type):
        self._push(Command(CommandKind.REMOVE, entity, component_type))

    def delete(self, entity):
        self._push(Command(CommandKind.DESTROY, entity))

    def flush(self) -> int:
        with self._lock:
            queue, self._queue = self._queue, []

        world = self._world
        for command in queue:
            if command.kind is CommandKind.CREATE:
                world.spawn(command.entity)
                for component in command.payload:
                    world.insert(command.entity, component)
                continue

            if not world.is_alive(command.entity):
                logger.debug(f"Skipping {command.kind.value} on dead entity {command.entity}")
                continue

            if command.kind is CommandKind.INSERT:
                world.insert(command.entity, command.payload)
            elif command.kind is CommandKind.REMOVE:
                world.remove(command.entity, command.payload)
            elif command.kind is CommandKind.DESTROY:
                world.delete_entity(command.entity)
        return len(queue)
