"""
World Model

Tanks, facing directions and the line-of-sight geometry shared by the
interpreter and the opponent policy.
"""

from enum import IntEnum
from dataclasses import dataclass, asdict
from typing import Dict, Tuple


GRID_SIZE = 20       # 20x20 board, one tank per cell
CELL_SIZE = 28       # Pixels per cell on the rendering surface
MAX_HEALTH = 100
ATTACK_RANGE = 3     # Max distance for a hit, in cells
NOT_ALIGNED = 999    # Sentinel distance when no axis is shared


class Direction(IntEnum):
    """Facing directions, ordered clockwise."""
    UP = 0
    RIGHT = 1
    DOWN = 2
    LEFT = 3

    def turned(self, steps: int) -> "Direction":
        """Rotate clockwise by `steps` quarter turns (negative = counter-clockwise)."""
        return Direction((self.value + steps) % 4)

    @property
    def vector(self) -> Tuple[int, int]:
        """Unit grid vector; y grows downward."""
        return DIRECTION_VECTORS[self]


DIRECTION_VECTORS: Dict[Direction, Tuple[int, int]] = {
    Direction.UP: (0, -1),
    Direction.RIGHT: (1, 0),
    Direction.DOWN: (0, 1),
    Direction.LEFT: (-1, 0),
}


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


@dataclass
class Tank:
    """A grid-bound tank. Health 0 means destroyed but still on the board."""
    x: int
    y: int
    facing: Direction = Direction.UP
    health: int = MAX_HEALTH

    @property
    def is_destroyed(self) -> bool:
        return self.health <= 0

    def take_damage(self, amount: int):
        """Reduce health, never below zero."""
        self.health = max(0, self.health - amount)

    def to_dict(self) -> Dict:
        data = asdict(self)
        data["facing"] = self.facing.name
        return data


@dataclass
class World:
    """
    Everything the renderer needs: both tanks, the tick counter and the
    status line written by the last primitive.
    """
    actor: Tank
    opponent: Tank
    tick: int = 0
    message: str = ""

    def to_dict(self) -> Dict:
        return {
            "actor": self.actor.to_dict(),
            "opponent": self.opponent.to_dict(),
            "tick": self.tick,
            "message": self.message,
        }


def make_initial_world() -> World:
    """Level one layout: actor bottom-left facing up, opponent top-right facing down."""
    return World(
        actor=Tank(x=2, y=GRID_SIZE - 3, facing=Direction.UP, health=MAX_HEALTH),
        opponent=Tank(x=GRID_SIZE - 3, y=2, facing=Direction.DOWN, health=MAX_HEALTH),
        tick=0,
        message="",
    )


@dataclass(frozen=True)
class LineOfSight:
    """Result of an axis-aligned visibility test."""
    seen: bool
    distance: int
    dir_ok: bool

    def in_range(self, max_distance: int = ATTACK_RANGE) -> bool:
        """True when a shot from the observer would land."""
        return self.seen and self.dir_ok and self.distance <= max_distance


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


def line_of_sight(observer: Tank, target: Tank) -> LineOfSight:
    """
    Check whether `observer` can see `target` along a row or column.

    Obstruction is not modelled. A target on the observer's own cell is not
    seen. `dir_ok` only says whether the observer faces the target's side of
    the shared axis.
    """
    if observer.x == target.x:
        dy = _sign(target.y - observer.y)
        distance = abs(target.y - observer.y)
        facing = (dy < 0 and observer.facing == Direction.UP) or \
                 (dy > 0 and observer.facing == Direction.DOWN)
        return LineOfSight(seen=distance > 0, distance=distance, dir_ok=facing)

    if observer.y == target.y:
        dx = _sign(target.x - observer.x)
        distance = abs(target.x - observer.x)
        facing = (dx > 0 and observer.facing == Direction.RIGHT) or \
                 (dx < 0 and observer.facing == Direction.LEFT)
        return LineOfSight(seen=distance > 0, distance=distance, dir_ok=facing)

    return LineOfSight(seen=False, distance=NOT_ALIGNED, dir_ok=False)
