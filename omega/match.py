"""
Match Module - Drives ticks and runs Omega programs against the opponent.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional
import copy
import threading

from .language import Program
from .world import World, MAX_HEALTH, make_initial_world
from .interpreter import RuntimeState, make_runtime_state, step
from .enemy import opponent_step
from .config import SimulationConfig


ACTOR = "actor"
OPPONENT = "opponent"

WIN_POINTS = 3.0
DRAW_POINTS = 1.0


@dataclass
class TickRecord:
    """World state right after one tick."""
    tick: int
    executed: bool
    actor: Dict
    opponent: Dict
    message: str


@dataclass
class MatchResult:
    """Outcome of one program played against the opponent."""
    winner: Optional[str]  # ACTOR, OPPONENT or None for a draw
    ticks: int
    actor_health: int
    opponent_health: int
    program_finished: bool
    statements_executed: int = 0
    history: List[TickRecord] = field(default_factory=list)

    def is_draw(self) -> bool:
        return self.winner is None

    def get_winner_name(self) -> str:
        if self.winner is None:
            return "Draw"
        return "Player" if self.winner == ACTOR else "Enemy"

    @property
    def points(self) -> float:
        if self.winner == ACTOR:
            return WIN_POINTS
        if self.winner is None:
            return DRAW_POINTS
        return 0.0

    @property
    def damage_dealt(self) -> int:
        return MAX_HEALTH - self.opponent_health

    @property
    def damage_taken(self) -> int:
        return MAX_HEALTH - self.actor_health


class Simulation:
    """
    Owns the World and RuntimeState between ticks.

    One tick is a single interpreter step, one opponent move and a tick
    increment. Ticks are serialized with a lock so a periodic timer and a
    manual Step can never run one on top of the other.
    """

    def __init__(
        self,
        program: Program,
        world: Optional[World] = None,
        runtime: Optional[RuntimeState] = None,
    ):
        self.program = program
        self.world = world or make_initial_world()
        self.runtime = runtime or make_runtime_state()
        self._lock = threading.Lock()

    def load(self, program: Program):
        """Swap in a freshly parsed program, keeping world and runtime as they are."""
        with self._lock:
            self.program = program

    def reset(self):
        """Start over: initial layout, fresh runtime, same program."""
        with self._lock:
            self.world = make_initial_world()
            self.runtime = make_runtime_state()

    def is_over(self) -> bool:
        return self.world.actor.is_destroyed or self.world.opponent.is_destroyed

    def winner(self) -> Optional[str]:
        if self.world.opponent.is_destroyed:
            return ACTOR
        if self.world.actor.is_destroyed:
            return OPPONENT
        return None

    def is_program_finished(self) -> bool:
        return self.runtime.is_finished(self.program)

    def _announce_outcome(self):
        notices = []
        if self.world.opponent.is_destroyed:
            notices.append("Enemy destroyed!")
        if self.world.actor.is_destroyed:
            notices.append("You were destroyed.")
        for notice in notices:
            if self.world.message:
                self.world.message = f"{self.world.message} | {notice}"
            else:
                self.world.message = notice

    def tick(self) -> bool:
        """
        Advance the simulation by one tick.

        Returns:
            Whether the interpreter executed something. Once either tank is
            destroyed the match is over and ticking does nothing.
        """
        with self._lock:
            if self.is_over():
                return False

            executed = step(self.world, self.program, self.runtime)
            opponent_step(self.world)
            self.world.tick += 1
            self._announce_outcome()
            return executed

    def snapshot(self) -> Dict:
        """JSON-ready copy of everything a display needs."""
        with self._lock:
            frame = self.runtime.active_frame
            return {
                "world": self.world.to_dict(),
                "runtime": {
                    "program_counter": self.runtime.program_counter,
                    "call_stack": [
                        {"label": f.label, "program_counter": f.program_counter}
                        for f in self.runtime.call_stack
                    ],
                    "active": frame.label if frame else "<main>",
                    "variables": dict(self.runtime.variables),
                    "finished": self.runtime.is_finished(self.program),
                },
                "over": self.is_over(),
                "winner": self.winner(),
            }


class Match:
    """
    Runs Omega programs headlessly against the fixed opponent.

    A match ends when a tank is destroyed, when the tick limit is reached
    (a draw), or when the program finishes if `stop_when_finished` is set.
    """

    def __init__(
        self,
        config: Optional[SimulationConfig] = None,
        record_history: bool = True,
    ):
        """
        Initialize match configuration.

        Args:
            config: Tick limit and stop policy
            record_history: Keep a TickRecord for every tick (for replays and plots)
        """
        self.config = config or SimulationConfig()
        self.record_history = record_history

    def run(self, program: Program, world: Optional[World] = None) -> MatchResult:
        """
        Play one program to the end.

        Args:
            program: Parsed Omega program for the actor
            world: Optional starting layout (copied, never mutated)

        Returns:
            MatchResult with winner, final health and tick history
        """
        start = copy.deepcopy(world) if world is not None else None
        sim = Simulation(program, world=start)

        history: List[TickRecord] = []
        executed_count = 0

        while sim.world.tick < self.config.max_ticks and not sim.is_over():
            executed = sim.tick()
            if executed:
                executed_count += 1

            if self.record_history:
                history.append(TickRecord(
                    tick=sim.world.tick,
                    executed=executed,
                    actor=sim.world.actor.to_dict(),
                    opponent=sim.world.opponent.to_dict(),
                    message=sim.world.message,
                ))

            if self.config.stop_when_finished and sim.is_program_finished():
                break

        return MatchResult(
            winner=sim.winner(),
            ticks=sim.world.tick,
            actor_health=sim.world.actor.health,
            opponent_health=sim.world.opponent.health,
            program_finished=sim.is_program_finished(),
            statements_executed=executed_count,
            history=history,
        )

    def run_gauntlet(self, programs: Dict[str, Program]) -> Dict[str, Dict[str, float]]:
        """
        Run every program against the opponent from the same starting layout.

        Args:
            programs: Mapping of program name to parsed program

        Returns:
            Dict mapping program name to statistics, best first
        """
        if not programs:
            raise ValueError("Need at least 1 program for a gauntlet")

        stats: Dict[str, Dict[str, float]] = {}
        for name, program in programs.items():
            result = self.run(program)
            stats[name] = {
                "wins": 1 if result.winner == ACTOR else 0,
                "draws": 1 if result.is_draw() else 0,
                "losses": 1 if result.winner == OPPONENT else 0,
                "points": result.points,
                "ticks": result.ticks,
                "damage_dealt": result.damage_dealt,
                "damage_taken": result.damage_taken,
            }

        ranked = sorted(
            stats.items(),
            key=lambda item: (-item[1]["points"], -item[1]["damage_dealt"],
                              item[1]["damage_taken"], item[1]["ticks"]),
        )
        return dict(ranked)
