"""
Test Suite: Population Store
============================

Entity handles, typed storages, joins and resources.
"""

from dataclasses import dataclass

import numpy as np
import pytest

from lasercool.atom import Atom, Mass, Position, Velocity
from lasercool.ecs import Component, Resource, StorageKind, World, dense_field
from lasercool.errors import DeadEntityError, UnregisteredComponentError, UnregisteredResourceError


@dataclass
class Label(Component):
    text: str


class Flag(Component):
    storage = StorageKind.MARKER


@dataclass
class Gain(Resource):
    value: float = 1.0


@pytest.fixture
def small_world():
    w = World(capacity=2)
    w.register(Position, Velocity, Mass, Atom, Label, Flag)
    return w


class TestEntities:

    def test_create_entity_is_alive_immediately(self, small_world):
        entity = small_world.create_entity(Position([1.0, 2.0, 3.0]))
        assert small_world.is_alive(entity)
        assert small_world.has(entity, Position)
        assert not small_world.has(entity, Velocity)

    def test_deleted_handle_is_stale(self, small_world):
        entity = small_world.create_entity(Position())
        small_world.delete_entity(entity)

        assert not small_world.is_alive(entity)
        with pytest.raises(DeadEntityError):
            small_world.get(entity, Position)
        with pytest.raises(DeadEntityError):
            small_world.delete_entity(entity)

    def test_ids_are_recycled_with_new_generation(self, small_world):
        first = small_world.create_entity(Position())
        small_world.delete_entity(first)
        second = small_world.create_entity(Position())

        assert second.id == first.id
        assert second.generation == first.generation + 1
        assert not small_world.is_alive(first), "Old handle must not address the id's new owner"

    def test_delete_clears_all_components(self, small_world):
        entity = small_world.create_entity(Position([1.0, 0.0, 0.0]), Flag(), Label("a"))
        small_world.delete_entity(entity)
        assert small_world.count(Position) == 0
        assert small_world.count(Flag) == 0
        assert small_world.count(Label) == 0

    def test_capacity_grows_and_keeps_data(self, small_world):
        entities = [small_world.create_entity(Position([i, 0.0, 0.0]), Mass(float(i))) for i in range(10)]

        for i, entity in enumerate(entities):
            assert small_world.get(entity, Position).vec[0] == i
            assert small_world.get(entity, Mass).value == float(i)


class TestComponentAccess:

    def test_dense_get_returns_copy(self, small_world):
        entity = small_world.create_entity(Position([1.0, 2.0, 3.0]))
        position = small_world.get(entity, Position)
        position.vec[0] = 100.0

        assert small_world.storage(Position)["vec"][entity.id, 0] == 1.0

    def test_sparse_get_returns_stored_object(self, small_world):
        label = Label("beam")
        entity = small_world.create_entity(label)
        assert small_world.get(entity, Label) is label

    def test_get_absent_component_is_none(self, small_world):
        entity = small_world.create_entity(Position())
        assert small_world.get(entity, Velocity) is None

    def test_remove_component(self, small_world):
        entity = small_world.create_entity(Position([1.0, 1.0, 1.0]), Flag())
        small_world.remove(entity, Flag)
        small_world.remove(entity, Flag)
        assert not small_world.has(entity, Flag)

    def test_unregistered_component_raises(self, small_world):
        @dataclass
        class Unknown(Component):
            value: int = 0

        entity = small_world.create_entity()
        with pytest.raises(UnregisteredComponentError) as excinfo:
            small_world.insert(entity, Unknown())
        assert isinstance(excinfo.value, KeyError)
        assert "Unknown" in str(excinfo.value)

    def test_dense_component_requires_layout(self):
        @dataclass
        class NoLayout(Component):
            storage = StorageKind.DENSE
            value: float = 0.0

        with pytest.raises(TypeError):
            World().register(NoLayout)

    def test_dense_field_fill_value(self):
        @dataclass
        class Sample(Component):
            storage = StorageKind.DENSE
            layout = {"values": dense_field((4,), fill=np.nan)}
            values: np.ndarray = None

        w = World(capacity=4)
        w.register(Sample)
        assert np.all(np.isnan(w.storage(Sample)["values"]))


class TestQueries:

    def test_join_with_and_without(self, small_world):
        a = small_world.create_entity(Position(), Velocity(), Atom())
        b = small_world.create_entity(Position(), Atom(), Flag())
        small_world.create_entity(Position())

        assert list(small_world.join(Position, Atom)) == [a.id, b.id]
        assert list(small_world.join(Position, Atom, without=(Flag,))) == [a.id]
        assert small_world.count(Position) == 3

    def test_query_yields_components_in_id_order(self, small_world):
        small_world.create_entity(Label("x"), Position([1.0, 0.0, 0.0]))
        small_world.create_entity(Label("y"), Position([2.0, 0.0, 0.0]))

        rows = list(small_world.query(Label, Position))
        assert [label.text for _, label, _ in rows] == ["x", "y"]
        assert [position.vec[0] for _, _, position in rows] == [1.0, 2.0]

    def test_snapshot_copies_state(self, small_world):
        small_world.create_entity(Position([1.0, 0.0, 0.0]), Velocity([0.0, 1.0, 0.0]), Atom())
        small_world.create_entity(Position([5.0, 0.0, 0.0]))

        snapshot = small_world.snapshot(Atom, Position, Velocity)
        assert len(snapshot["entities"]) == 1
        np.testing.assert_array_equal(snapshot["Position"]["vec"], [[1.0, 0.0, 0.0]])

        snapshot["Position"]["vec"][0, 0] = 9.0
        assert small_world.storage(Position)["vec"][0, 0] == 1.0

    def test_entity_lookup_of_dead_id_raises(self, small_world):
        with pytest.raises(DeadEntityError):
            small_world.entity(1)


class TestResources:

    def test_insert_and_fetch(self, small_world):
        small_world.insert_resource(Gain(2.0))
        assert small_world.resource(Gain).value == 2.0
        assert small_world.has_resource(Gain)

    def test_missing_resource_raises(self, small_world):
        with pytest.raises(UnregisteredResourceError):
            small_world.resource(Gain)
        assert small_world.try_resource(Gain) is None

    def test_remove_resource(self, small_world):
        small_world.insert_resource(Gain())
        removed = small_world.remove_resource(Gain)
        assert isinstance(removed, Gain)
        assert not small_world.has_resource(Gain)
