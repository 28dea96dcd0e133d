import os

# Headless rendering for the visualizer tests
os.environ.setdefault("MPLBACKEND", "Agg")

import pytest

from omega.world import World, Tank, Direction


@pytest.fixture
def make_world():
    """Build a World with tanks at chosen cells and facings."""
    def _make(actor=(5, 10, Direction.UP), opponent=(5, 8, Direction.DOWN),
              actor_health=100, opponent_health=100):
        ax, ay, af = actor
        ox, oy, of = opponent
        return World(
            actor=Tank(x=ax, y=ay, facing=af, health=actor_health),
            opponent=Tank(x=ox, y=oy, facing=of, health=opponent_health),
        )
    return _make
