"""
Visualization Tools for Omega Tanks

Provides tools for visualizing:
- The board (grid, tanks, facing, health)
- Health curves over a match
- Gauntlet rankings
- Match replays as image frames
"""

from typing import Dict, List, Optional
from pathlib import Path
import numpy as np

import matplotlib.pyplot as plt
import matplotlib.patches as mpatches

from omega.world import World, Tank, Direction, GRID_SIZE, MAX_HEALTH, make_initial_world
from omega.language import Program
from omega.match import Match, MatchResult, TickRecord


ACTOR_COLOR = "#00e5ff"
OPPONENT_COLOR = "#ff2ad1"
BACKGROUND = "#070a12"
GRID_COLOR = "#0e4a55"
HEALTH_COLOR = "#00ffaa"


def _finish(fig, save_path: Optional[str]):
    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=150, facecolor=fig.get_facecolor())
        print(f"Saved to {save_path}")
    else:
        plt.show()

    plt.close(fig)


def _draw_tank(ax, tank: Tank, color: str):
    """Body, turret line pointing along the facing, health bar under the body."""
    ax.add_patch(mpatches.FancyBboxPatch(
        (tank.x + 0.15, tank.y + 0.15), 0.7, 0.7,
        boxstyle="round,pad=0,rounding_size=0.15",
        fill=False, edgecolor=color, linewidth=2,
    ))

    cx, cy = tank.x + 0.5, tank.y + 0.5
    dx, dy = tank.facing.vector
    ax.plot([cx, cx + dx * 0.45], [cy, cy + dy * 0.45], color=color, linewidth=2)

    width = max(0.0, min(1.0, tank.health / MAX_HEALTH)) * 0.7
    ax.add_patch(mpatches.Rectangle(
        (tank.x + 0.15, tank.y + 0.88), width, 0.07, color=HEALTH_COLOR,
    ))


def render_world(
    world: World,
    title: Optional[str] = None,
    save_path: Optional[str] = None,
):
    """
    Draw the board with both tanks.

    Args:
        world: World to draw
        title: Plot title (defaults to tick and status message)
        save_path: Optional path to save the figure
    """
    fig, ax = plt.subplots(figsize=(7, 7))
    fig.patch.set_facecolor(BACKGROUND)
    ax.set_facecolor(BACKGROUND)

    ticks = np.arange(GRID_SIZE + 1)
    for t in ticks:
        ax.axhline(t, color=GRID_COLOR, linewidth=0.6)
        ax.axvline(t, color=GRID_COLOR, linewidth=0.6)

    _draw_tank(ax, world.actor, ACTOR_COLOR)
    _draw_tank(ax, world.opponent, OPPONENT_COLOR)

    ax.set_xlim(0, GRID_SIZE)
    ax.set_ylim(GRID_SIZE, 0)  # Row 0 at the top
    ax.set_aspect("equal")
    ax.axis("off")

    if title is None:
        title = f"Tick {world.tick}: {world.message or 'Ready.'}"
    ax.set_title(title, color=ACTOR_COLOR, fontsize=10)

    patches = [
        mpatches.Patch(color=ACTOR_COLOR, label=f"Player {world.actor.health} HP"),
        mpatches.Patch(color=OPPONENT_COLOR, label=f"Enemy {world.opponent.health} HP"),
    ]
    ax.legend(handles=patches, loc="upper center", bbox_to_anchor=(0.5, -0.01), ncol=2)

    _finish(fig, save_path)


def plot_health_curves(
    history: List[TickRecord],
    title: str = "Health Over Time",
    save_path: Optional[str] = None,
):
    """
    Plot both tanks' health across a recorded match.

    Args:
        history: TickRecords from Match.run
        title: Plot title
        save_path: Optional path to save the figure
    """
    if not history:
        raise ValueError("No ticks recorded")

    ticks = np.array([r.tick for r in history])
    actor_hp = np.array([r.actor["health"] for r in history])
    opponent_hp = np.array([r.opponent["health"] for r in history])

    fig, ax = plt.subplots(figsize=(10, 5))

    ax.plot(ticks, actor_hp, label="Player", color=ACTOR_COLOR, linewidth=2)
    ax.plot(ticks, opponent_hp, label="Enemy", color=OPPONENT_COLOR, linewidth=2)
    ax.fill_between(ticks, actor_hp, alpha=0.15, color=ACTOR_COLOR)
    ax.fill_between(ticks, opponent_hp, alpha=0.15, color=OPPONENT_COLOR)

    ax.set_xlabel("Tick", fontsize=12)
    ax.set_ylabel("Health", fontsize=12)
    ax.set_title(title, fontsize=14)
    ax.set_ylim(0, MAX_HEALTH + 5)
    ax.legend(loc="lower left")
    ax.grid(True, alpha=0.3)

    _finish(fig, save_path)


def plot_gauntlet_results(
    stats: Dict[str, Dict[str, float]],
    title: str = "Gauntlet Results",
    save_path: Optional[str] = None,
):
    """
    Bar chart of damage dealt and taken per program.

    Args:
        stats: Output of Match.run_gauntlet
        title: Plot title
        save_path: Optional path to save the figure
    """
    if not stats:
        raise ValueError("No gauntlet results to plot")

    names = [name[:15] for name in stats]
    dealt = np.array([s["damage_dealt"] for s in stats.values()])
    taken = np.array([s["damage_taken"] for s in stats.values()])
    x = np.arange(len(names))
    width = 0.38

    fig, ax = plt.subplots(figsize=(max(6, len(names) * 1.5), 5))

    ax.bar(x - width / 2, dealt, width, label="Damage dealt", color=ACTOR_COLOR)
    ax.bar(x + width / 2, taken, width, label="Damage taken", color=OPPONENT_COLOR)

    for i, s in enumerate(stats.values()):
        ax.text(i, MAX_HEALTH + 3, f"{s['points']:.0f} pts", ha="center")

    ax.set_xticks(x)
    ax.set_xticklabels(names, rotation=30, ha="right")
    ax.set_ylabel("HP", fontsize=12)
    ax.set_ylim(0, MAX_HEALTH + 12)
    ax.set_title(title, fontsize=14)
    ax.legend(loc="upper right")

    _finish(fig, save_path)


def world_from_record(record: TickRecord) -> World:
    """Rebuild a World from one recorded tick."""
    def tank(data: Dict) -> Tank:
        return Tank(
            x=data["x"],
            y=data["y"],
            facing=Direction[data["facing"]],
            health=data["health"],
        )

    return World(
        actor=tank(record.actor),
        opponent=tank(record.opponent),
        tick=record.tick,
        message=record.message,
    )


class MatchVisualizer:
    """
    Visualizes Omega matches as board images.
    """

    def __init__(self, match: Optional[Match] = None):
        """
        Initialize the visualizer.

        Args:
            match: Match runner to use (default configuration if omitted)
        """
        self.match = match or Match()

    def world_to_image(self, world: World) -> np.ndarray:
        """Occupancy grid: 0 empty, 1 player, 2 enemy (the enemy wins a shared cell)."""
        img = np.zeros((GRID_SIZE, GRID_SIZE), dtype=int)
        img[world.actor.y, world.actor.x] = 1
        img[world.opponent.y, world.opponent.x] = 2
        return img

    def visualize_final_state(
        self,
        program: Program,
        save_path: Optional[str] = None,
    ) -> MatchResult:
        """
        Run a match and draw the board as it ended.

        Args:
            program: Program to play
            save_path: Optional path to save figure
        """
        result = self.match.run(program)
        if result.history:
            world = world_from_record(result.history[-1])
        else:
            world = make_initial_world()

        render_world(
            world,
            title=f"{result.get_winner_name()} after {result.ticks} ticks",
            save_path=save_path,
        )
        return result

    def save_replay_frames(
        self,
        result: MatchResult,
        output_dir: str,
        every: int = 1,
    ) -> List[Path]:
        """
        Write one PNG per recorded tick (or every Nth tick).

        Args:
            result: MatchResult with history
            output_dir: Directory to write frames into
            every: Keep every Nth tick

        Returns:
            Paths of the written frames
        """
        if every < 1:
            raise ValueError("every must be at least 1")

        out = Path(output_dir)
        out.mkdir(parents=True, exist_ok=True)

        paths = []
        for record in result.history[::every]:
            path = out / f"tick_{record.tick:04d}.png"
            render_world(world_from_record(record), save_path=str(path))
            paths.append(path)
        return paths
