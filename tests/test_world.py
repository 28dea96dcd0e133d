import pytest

from omega.world import (
    Direction,
    GRID_SIZE,
    MAX_HEALTH,
    NOT_ALIGNED,
    Tank,
    clamp,
    line_of_sight,
    make_initial_world,
)


def test_direction_turns_cyclically():
    assert Direction.UP.turned(1) == Direction.RIGHT
    assert Direction.LEFT.turned(1) == Direction.UP
    assert Direction.UP.turned(-1) == Direction.LEFT
    assert Direction.DOWN.turned(-1) == Direction.RIGHT
    assert Direction.RIGHT.turned(4) == Direction.RIGHT


def test_direction_vectors_use_screen_coordinates():
    assert Direction.UP.vector == (0, -1)
    assert Direction.RIGHT.vector == (1, 0)
    assert Direction.DOWN.vector == (0, 1)
    assert Direction.LEFT.vector == (-1, 0)


def test_initial_world_layout():
    world = make_initial_world()

    assert (world.actor.x, world.actor.y, world.actor.facing) == (2, GRID_SIZE - 3, Direction.UP)
    assert (world.opponent.x, world.opponent.y, world.opponent.facing) == (GRID_SIZE - 3, 2, Direction.DOWN)
    assert world.actor.health == world.opponent.health == MAX_HEALTH
    assert world.tick == 0
    assert world.message == ""


def test_take_damage_clamps_at_zero():
    tank = Tank(x=0, y=0, health=30)
    tank.take_damage(40)
    assert tank.health == 0
    assert tank.is_destroyed
    tank.take_damage(40)
    assert tank.health == 0


def test_world_to_dict_uses_direction_names():
    data = make_initial_world().to_dict()
    assert data["actor"] == {"x": 2, "y": 17, "facing": "UP", "health": 100}
    assert data["opponent"]["facing"] == "DOWN"
    assert data["tick"] == 0


def test_clamp():
    assert clamp(-1, 0, 19) == 0
    assert clamp(25, 0, 19) == 19
    assert clamp(7, 0, 19) == 7


@pytest.mark.parametrize("observer, target, expected", [
    # Same column, target above, facing up
    (Tank(5, 10, Direction.UP), Tank(5, 8), (True, 2, True)),
    # Same column, target above, facing down
    (Tank(5, 10, Direction.DOWN), Tank(5, 8), (True, 2, False)),
    # Same column, target below, facing down
    (Tank(5, 2, Direction.DOWN), Tank(5, 9), (True, 7, True)),
    # Same row, target to the right, facing right
    (Tank(1, 4, Direction.RIGHT), Tank(4, 4), (True, 3, True)),
    # Same row, target to the left, facing right
    (Tank(6, 4, Direction.RIGHT), Tank(4, 4), (True, 2, False)),
    # Same row, target to the left, facing left
    (Tank(6, 4, Direction.LEFT), Tank(4, 4), (True, 2, True)),
    # No shared axis
    (Tank(2, 17, Direction.UP), Tank(17, 2), (False, NOT_ALIGNED, False)),
    # Same cell
    (Tank(3, 3, Direction.UP), Tank(3, 3), (False, 0, False)),
])
def test_line_of_sight(observer, target, expected):
    los = line_of_sight(observer, target)
    assert (los.seen, los.distance, los.dir_ok) == expected


def test_in_range_needs_sight_facing_and_distance():
    shooter = Tank(5, 10, Direction.UP)
    assert line_of_sight(shooter, Tank(5, 7)).in_range()
    assert not line_of_sight(shooter, Tank(5, 6)).in_range()
    assert not line_of_sight(Tank(5, 10, Direction.LEFT), Tank(5, 8)).in_range()
