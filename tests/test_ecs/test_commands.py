"""
Test Suite: Deferred Commands
=============================

Commands queued during a step only take effect on flush, in order, and
commands addressed to entities deleted earlier in the same flush are
skipped.
"""

from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from lasercool.atom import Atom, Position, Velocity
from lasercool.ecs import CommandKind, World


@pytest.fixture
def small_world():
    w = World(capacity=4)
    w.register(Position, Velocity, Atom)
    return w


class TestCommandBuffer:

    def test_created_entity_exists_only_after_flush(self, small_world):
        entity = small_world.commands.create_entity(Position([1.0, 2.0, 3.0]), Atom())
        assert not small_world.is_alive(entity)
        assert small_world.count(Atom) == 0

        applied = small_world.maintain()

        assert applied == 1
        assert small_world.is_alive(entity)
        np.testing.assert_array_equal(small_world.get(entity, Position).vec, [1.0, 2.0, 3.0])

    def test_commands_can_target_reserved_entity(self, small_world):
        entity = small_world.commands.create_entity(Position())
        small_world.commands.insert(entity, Velocity([0.0, 0.0, 1.0]))
        small_world.maintain()
        assert small_world.has(entity, Velocity)

    def test_commands_replay_in_order(self, small_world):
        entity = small_world.create_entity(Position())
        small_world.commands.insert(entity, Atom())
        small_world.commands.remove(entity, Atom)
        small_world.maintain()
        assert not small_world.has(entity, Atom), "Remove queued after insert must win"

    def test_double_delete_is_skipped(self, small_world):
        entity = small_world.create_entity(Position(), Atom())
        small_world.commands.delete(entity)
        small_world.commands.delete(entity)

        applied = small_world.maintain()

        assert applied == 2
        assert not small_world.is_alive(entity)

    def test_insert_after_delete_is_skipped(self, small_world):
        entity = small_world.create_entity(Position())
        small_world.commands.delete(entity)
        small_world.commands.insert(entity, Atom())
        small_world.maintain()

        assert small_world.count(Atom) == 0

    def test_flush_empties_queue(self, small_world):
        small_world.commands.create_entity(Atom())
        assert len(small_world.commands) == 1
        small_world.maintain()
        assert len(small_world.commands) == 0
        assert small_world.maintain() == 0

    def test_concurrent_reservations_are_unique(self, small_world):
        def spawn_many(_):
            return [small_world.commands.create_entity(Atom()) for _ in range(100)]

        with ThreadPoolExecutor(max_workers=8) as pool:
            batches = list(pool.map(spawn_many, range(8)))

        handles = [entity for batch in batches for entity in batch]
        assert len({entity.id for entity in handles}) == 800

        small_world.maintain()
        assert small_world.count(Atom) == 800

    def test_command_kinds(self, small_world):
        entity = small_world.create_entity()
        small_world.commands.delete(entity)
        kinds = [command.kind for command in small_world.commands._queue]
        assert kinds == [CommandKind.DESTROY]
