"""
Population Store
================

The world owns every entity, the typed component tables attached to them and
the process-wide resources.

ENTITIES
--------

An entity is a ``(id, generation)`` handle with no payload. Ids are small
integers recycled after deletion; the generation of an id is bumped whenever
the entity using it is deleted, so a handle kept past its entity's deletion is
detected instead of silently addressing the id's next owner.

COMPONENT STORAGE
-----------------

Each registered component type gets one storage, chosen by the type's
``storage`` class attribute:

- ``DENSE``: a structure of numpy arrays, one column per field declared in
  the type's ``layout``, indexed directly by entity id. Used for particle
  state that vectorised kernels touch every step (position, velocity,
  samplers...).
- ``SPARSE``: a dict of Python objects. Used for the handful of source
  entities (beams, coils, emitters) and anything holding nested data.
- ``MARKER``: no data at all, only presence.

Every storage keeps a boolean presence mask over the id space, so selecting
"all entities with A and B but not C" is a mask intersection:

    rows = world.join(Position, Velocity, without=(Dark,))
    world.storage(Position)["vec"][rows] += ...

Mutation of the population during a step goes through ``world.commands``
(see ``commands.py``) and is applied by ``maintain()``.
"""

import enum
import logging
import threading
from collections import namedtuple
from typing import Any, Dict, Iterator, List, NamedTuple, Optional, Tuple, Type

import numpy as np

from ..errors import DeadEntityError, UnregisteredComponentError, UnregisteredResourceError
from .commands import CommandBuffer

logger = logging.getLogger(__name__)


class StorageKind(enum.Enum):
    DENSE = "dense"
    SPARSE = "sparse"
    MARKER = "marker"


FieldSpec = namedtuple("FieldSpec", ["shape", "dtype", "fill"])


def dense_field(shape: Tuple[int, ...] = (), dtype=float, fill=0.0) -> FieldSpec:
    """Declare one column of a dense component."""
    return FieldSpec(tuple(shape), np.dtype(dtype), fill)


class Component:
    """
    Base class for component types.

    Subclasses are usually dataclasses. Dense components must also declare a
    ``layout`` mapping each dataclass field name to a ``dense_field``.
    """

    storage = StorageKind.SPARSE
    layout: Dict[str, FieldSpec] = {}


class Resource:
    """Base class for process-wide singletons stored on the world."""


class Entity(NamedTuple):
    id: int
    generation: int


# =============================================================================
# STORAGES
# =============================================================================

class DenseStorage:
    kind = StorageKind.DENSE

    def __init__(self, component_type: Type[Component], capacity: int):
        if not component_type.layout:
            raise TypeError(f"Dense component {component_type.__name__} declares no layout")
        self.component_type = component_type
        self.layout = component_type.layout
        self.mask = np.zeros(capacity, dtype=bool)
        self.columns = {
            name: np.full((capacity,) + spec.shape, spec.fill, dtype=spec.dtype)
            for name, spec in self.layout.items()
        }

    def __getitem__(self, name: str) -> np.ndarray:
        return self.columns[name]

    def resize(self, capacity: int):
        old = len(self.mask)
        self.mask = np.concatenate([self.mask, np.zeros(capacity - old, dtype=bool)])
        for name, spec in self.layout.items():
            grown = np.full((capacity,) + spec.shape, spec.fill, dtype=spec.dtype)
            grown[:old] = self.columns[name]
            self.columns[name] = grown

    def insert(self, index: int, component: Component):
        for name in self.layout:
            self.columns[name][index] = getattr(component, name)
        self.mask[index] = True

    def remove(self, index: int):
        self.mask[index] = False
        for name, spec in self.layout.items():
            self.columns[name][index] = spec.fill

    def get(self, index: int) -> Component:
        values = {}
        for name, column in self.columns.items():
            value = column[index]
            values[name] = value.item() if column.ndim == 1 else value.copy()
        return self.component_type(**values)


class SparseStorage:
    kind = StorageKind.SPARSE

    def __init__(self, component_type: Type[Component], capacity: int):
        self.component_type = component_type
        self.mask = np.zeros(capacity, dtype=bool)
        self.items: Dict[int, Component] = {}

    def resize(self, capacity: int):
        self.mask = np.concatenate([self.mask, np.zeros(capacity - len(self.mask), dtype=bool)])

    def insert(self, index: int, component: Component):
        self.items[index] = component
        self.mask[index] = True

    def remove(self, index: int):
        self.mask[index] = False
        self.items.pop(index, None)

    def get(self, index: int) -> Component:
        return self.items[index]


class MarkerStorage:
    kind = StorageKind.MARKER

    def __init__(self, component_type: Type[Component], capacity: int):
        self.component_type = component_type
        self.mask = np.zeros(capacity, dtype=bool)

    def resize(self, capacity: int):
        self.mask = np.concatenate([self.mask, np.zeros(capacity - len(self.mask), dtype=bool)])

    def insert(self, index: int, component: Component):
        self.mask[index] = True

    def remove(self, index: int):
        self.mask[index] = False

    def get(self, index: int) -> Component:
        return self.component_type()


_STORAGE_CLASSES = {
    StorageKind.DENSE: DenseStorage,
    StorageKind.SPARSE: SparseStorage,
    StorageKind.MARKER: MarkerStorage,
}


# =============================================================================
# WORLD
# =============================================================================

class World:
    """
    Entities, component storages and resources of one simulation.

    Parameters
    ----------
    capacity : int
        Initial size of the id space. Storages grow automatically.
    """

    def __init__(self, capacity: int = 256):
        self._capacity = int(capacity)
        self._alive = np.zeros(self._capacity, dtype=bool)
        self._generations: List[int] = []
        self._free: List[int] = []
        self._reserve_lock = threading.Lock()
        self._storages: Dict[type, Any] = {}
        self._resources: Dict[type, Resource] = {}
        self.commands = CommandBuffer(self)

    # -------------------------------------------------------------------------
    # Registration and resources
    # -------------------------------------------------------------------------

    def register(self, *component_types: Type[Component]):
        for component_type in component_types:
            if component_type in self._storages:
                continue
            storage_cls = _STORAGE_CLASSES[component_type.storage]
            self._storages[component_type] = storage_cls(component_type, self._capacity)

    def is_registered(self, component_type: Type[Component]) -> bool:
        return component_type in self._storages

    def storage(self, component_type: Type[Component]):
        try:
            return self._storages[component_type]
        except KeyError:
            raise UnregisteredComponentError(component_type) from None

    def insert_resource(self, resource: Resource):
        self._resources[type(resource)] = resource

    def remove_resource(self, resource_type: type) -> Optional[Resource]:
        return self._resources.pop(resource_type, None)

    def has_resource(self, resource_type: type) -> bool:
        return resource_type in self._resources

    def resource(self, resource_type: type):
        try:
            return self._resources[resource_type]
        except KeyError:
            raise UnregisteredResourceError(resource_type) from None

    def try_resource(self, resource_type: type):
        return self._resources.get(resource_type)

    # -------------------------------------------------------------------------
    # Entity lifecycle
    # -------------------------------------------------------------------------

    def reserve_entity(self) -> Entity:
        """
        Allocate a handle for an entity that will be spawned later.

        Safe to call from several systems at once. The entity does not exist
        (``is_alive`` is False) until it is spawned by the command buffer.
        """
        with self._reserve_lock:
            if self._free:
                index = self._free.pop()
            else:
                index = len(self._generations)
                self._generations.append(0)
            return Entity(index, self._generations[index])

    def spawn(self, entity: Entity):
        self._ensure_capacity(entity.id)
        if self._generations[entity.id] != entity.generation:
            raise DeadEntityError(f"Cannot spawn stale handle {entity}")
        self._alive[entity.id] = True

    def create_entity(self, *components: Component) -> Entity:
        """Create an entity immediately. Use only outside of a running step."""
        entity = self.reserve_entity()
        self.spawn(entity)
        for component in components:
            self.insert(entity, component)
        return entity

    def is_alive(self, entity: Entity) -> bool:
        return (
            entity.id < self._capacity
            and bool(self._alive[entity.id])
            and self._generations[entity.id] == entity.generation
        )

    def _check_alive(self, entity: Entity):
        if not self.is_alive(entity):
            raise DeadEntityError(f"Entity {entity} does not exist")

    def delete_entity(self, entity: Entity):
        self._check_alive(entity)
        for storage in self._storages.values():
            if storage.mask[entity.id]:
                storage.remove(entity.id)
        self._alive[entity.id] = False
        self._generations[entity.id] += 1
        self._free.append(entity.id)

    def _ensure_capacity(self, index: int):
        if index < self._capacity:
            return
        capacity = max(2 * self._capacity, index + 1)
        self._alive = np.concatenate([self._alive, np.zeros(capacity - self._capacity, dtype=bool)])
        for storage in self._storages.values():
            storage.resize(capacity)
        logger.debug(f"Grew entity capacity {self._capacity} -> {capacity}")
        self._capacity = capacity

    # -------------------------------------------------------------------------
    # Component access
    # -------------------------------------------------------------------------

    def insert(self, entity: Entity, component: Component):
        self._check_alive(entity)
        self.storage(type(component)).insert(entity.id, component)

    def remove(self, entity: Entity, component_type: Type[Component]):
        self._check_alive(entity)
        storage = self.storage(component_type)
        if storage.mask[entity.id]:
            storage.remove(entity.id)

    def has(self, entity: Entity, component_type: Type[Component]) -> bool:
        self._check_alive(entity)
        return bool(self.storage(component_type).mask[entity.id])

    def get(self, entity: Entity, component_type: Type[Component]):
        """
        The entity's component of the given type, or None if it has none.

        Dense components are returned as copies; sparse components are the
        stored objects themselves.
        """
        self._check_alive(entity)
        storage = self.storage(component_type)
        if not storage.mask[entity.id]:
            return None
        return storage.get(entity.id)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def join(self, *component_types: Type[Component], without=()) -> np.ndarray:
        """Ids of living entities holding every type in ``component_types`` and none in ``without``."""
        mask = self._alive.copy()
        for component_type in component_types:
            mask &= self.storage(component_type).mask
        for component_type in without:
            mask &= ~self.storage(component_type).mask
        return np.flatnonzero(mask)

    def entity(self, index: int) -> Entity:
        index = int(index)
        if index >= self._capacity or not self._alive[index]:
            raise DeadEntityError(f"No living entity with id {index}")
        return Entity(index, self._generations[index])

    def entities(self, *component_types: Type[Component], without=()) -> List[Entity]:
        return [self.entity(i) for i in self.join(*component_types, without=without)]

    def query(self, *component_types: Type[Component], without=()) -> Iterator[tuple]:
        """Yield ``(entity, component, ...)`` for every matching entity, in id order."""
        storages = [self.storage(t) for t in component_types]
        for index in self.join(*component_types, without=without):
            yield (self.entity(index),) + tuple(s.get(index) for s in storages)

    def count(self, *component_types: Type[Component], without=()) -> int:
        return len(self.join(*component_types, without=without))

    def snapshot(self, *component_types: Type[Component], without=()) -> Dict[str, Any]:
        """
        Copy out the state of every entity holding all of ``component_types``.

        Returns
        -------
        dict
            ``"entities"`` maps to the list of handles; each dense type maps
            to ``{field: array}`` and each sparse type to a list of objects,
            row-aligned with the entities.
        """
        rows = self.join(*component_types, without=without)
        result: Dict[Any, Any] = {"entities": [self.entity(i) for i in rows]}
        for component_type in component_types:
            storage = self.storage(component_type)
            if storage.kind is StorageKind.DENSE:
                result[component_type.__name__] = {
                    name: column[rows].copy() for name, column in storage.columns.items()
                }
            elif storage.kind is StorageKind.SPARSE:
                result[component_type.__name__] = [storage.get(i) for i in rows]
        return result

    def maintain(self) -> int:
        """Apply every queued command. Returns the number of commands applied."""
        return self.commands.flush()
