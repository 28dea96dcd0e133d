"""
Opponent Policy

A fixed per-tick rule: fire when the actor is lined up in front, otherwise
turn toward the actor and roll one cell.
"""

from .world import World, Direction, GRID_SIZE, ATTACK_RANGE, clamp, line_of_sight


OPPONENT_DAMAGE = 15


def choose_facing(dx: int, dy: int) -> Direction:
    """Face along the axis with the larger offset; the vertical axis wins ties."""
    if abs(dx) > abs(dy):
        return Direction.RIGHT if dx > 0 else Direction.LEFT
    return Direction.DOWN if dy > 0 else Direction.UP


def opponent_step(world: World):
    """Apply the opponent's move for this tick. A destroyed opponent does nothing."""
    opponent = world.opponent
    actor = world.actor
    if opponent.is_destroyed:
        return

    los = line_of_sight(opponent, actor)
    if los.in_range(ATTACK_RANGE):
        actor.take_damage(OPPONENT_DAMAGE)
        world.message = world.message + f" | Enemy fires (-{OPPONENT_DAMAGE} HP)"
        return

    opponent.facing = choose_facing(actor.x - opponent.x, actor.y - opponent.y)
    dx, dy = opponent.facing.vector
    opponent.x = clamp(opponent.x + dx, 0, GRID_SIZE - 1)
    opponent.y = clamp(opponent.y + dy, 0, GRID_SIZE - 1)
