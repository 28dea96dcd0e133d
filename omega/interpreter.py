"""
Omega Interpreter

Executes a parsed Program one statement at a time against the World.
Function calls and chosen IF branches share a single explicit call stack.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from .language import (
    Program,
    Statement,
    Expression,
    Literal,
    Assign,
    Move,
    Turn,
    Scan,
    Attack,
    If,
    Call,
    MoveDirection,
    TurnSide,
)
from .world import World, GRID_SIZE, ATTACK_RANGE, clamp, line_of_sight


ATTACK_DAMAGE = 40
IF_FRAME_LABEL = "<if>"


@dataclass
class Frame:
    """An activation record: a function call or a chosen IF branch."""
    label: str
    program_counter: int = 0
    body: Sequence[Statement] = ()


@dataclass
class RuntimeState:
    """Mutable interpreter state between steps."""
    program_counter: int = 0
    call_stack: List[Frame] = field(default_factory=list)
    variables: Dict[str, int] = field(default_factory=dict)
    enemy_seen: int = 0  # mirrors $ENEMY after the last scan

    @property
    def active_frame(self) -> Optional[Frame]:
        return self.call_stack[-1] if self.call_stack else None

    def active_statements(self, program: Program) -> Sequence[Statement]:
        frame = self.active_frame
        return frame.body if frame else program.top_level

    def active_counter(self) -> int:
        frame = self.active_frame
        return frame.program_counter if frame else self.program_counter

    def advance(self):
        """Move the active program counter to the next statement."""
        frame = self.active_frame
        if frame:
            frame.program_counter += 1
        else:
            self.program_counter += 1

    def is_finished(self, program: Program) -> bool:
        """True once the top level has run out and no frame is left to drain."""
        return not self.call_stack and self.program_counter >= len(program.top_level)


def make_runtime_state() -> RuntimeState:
    """Fresh runtime: top of the program, empty stack, no variables."""
    return RuntimeState()


def evaluate(expr: Expression, runtime: RuntimeState) -> int:
    """Evaluate an expression. Unbound variables read as 0."""
    if isinstance(expr, Literal):
        return expr.value
    return runtime.variables.get(expr.name, 0)


# World primitives used by Omega statements

def _move_vector(world: World, direction: MoveDirection):
    facing = world.actor.facing
    if direction == MoveDirection.FORWARD:
        return facing.vector
    if direction == MoveDirection.BACKWARD:
        dx, dy = facing.vector
        return -dx, -dy
    if direction == MoveDirection.LEFT:
        return facing.turned(-1).vector
    return facing.turned(1).vector


def tank_move(world: World, direction: MoveDirection, amount: int):
    """Move the actor `amount` cells, clamping to the grid after every cell."""
    tank = world.actor
    dx, dy = _move_vector(world, direction)

    for _ in range(amount):
        nx = clamp(tank.x + dx, 0, GRID_SIZE - 1)
        ny = clamp(tank.y + dy, 0, GRID_SIZE - 1)
        if (nx, ny) == (tank.x, tank.y):
            break  # Pinned against a wall
        tank.x, tank.y = nx, ny


def tank_turn(world: World, side: TurnSide):
    world.actor.facing = world.actor.facing.turned(1 if side == TurnSide.RIGHT else -1)


def tank_scan(world: World, runtime: RuntimeState):
    """Store line-of-sight to the opponent in $ENEMY."""
    los = line_of_sight(world.actor, world.opponent)
    runtime.enemy_seen = 1 if los.seen else 0
    runtime.variables["ENEMY"] = runtime.enemy_seen
    if los.seen:
        world.message = f"Enemy spotted at {los.distance} tiles."
    else:
        world.message = "No enemy in sight."


def tank_attack(world: World):
    """Hit the opponent if it is in front of the actor and within range."""
    los = line_of_sight(world.actor, world.opponent)
    if los.in_range(ATTACK_RANGE):
        world.opponent.take_damage(ATTACK_DAMAGE)
        world.message = f"ATTACK hit! Enemy -{ATTACK_DAMAGE} HP"
    else:
        world.message = "ATTACK missed."


def step(world: World, program: Program, runtime: RuntimeState) -> bool:
    """
    Execute exactly one statement from the active frame.

    Returns:
        False when the program has finished and there is nothing left to
        do, True otherwise (including the step that pops a drained frame).
    """
    statements = runtime.active_statements(program)
    pc = runtime.active_counter()

    if pc >= len(statements):
        if runtime.call_stack:
            runtime.call_stack.pop()
            return True
        return False

    stmt = statements[pc]

    if isinstance(stmt, Assign):
        value = evaluate(stmt.value, runtime)
        runtime.variables[stmt.name] = value
        runtime.advance()
        world.message = f"${stmt.name} = {value}"

    elif isinstance(stmt, Move):
        amount = max(0, evaluate(stmt.amount, runtime))
        tank_move(world, stmt.direction, amount)
        runtime.advance()
        world.message = f"MOVE {amount} {stmt.direction.value}"

    elif isinstance(stmt, Turn):
        tank_turn(world, stmt.side)
        runtime.advance()
        world.message = f"TURN {stmt.side.value}"

    elif isinstance(stmt, Scan):
        tank_scan(world, runtime)
        runtime.advance()

    elif isinstance(stmt, Attack):
        tank_attack(world)
        runtime.advance()

    elif isinstance(stmt, If):
        condition = evaluate(stmt.condition, runtime)
        chosen = stmt.then_branch if condition != 0 else stmt.else_branch
        if chosen is not None:
            # The branch runs in its own frame; this IF is evaluated again once it drains
            runtime.call_stack.append(Frame(label=IF_FRAME_LABEL, body=(chosen,)))
        else:
            runtime.advance()
            world.message = f"IF ({condition}) no-op"

    elif isinstance(stmt, Call):
        body = program.functions.get(stmt.name)
        # Call site is consumed even when the function is unknown
        runtime.advance()
        if body is not None:
            runtime.call_stack.append(Frame(label=stmt.name, body=body))
        world.message = f"CALL {stmt.name}"

    else:
        # NoOp, or a FunctionDecl that slipped into an executable sequence
        runtime.advance()

    return True
