"""
Omega Tanks - A tiny tank-programming language and its simulator.

This package provides the Omega lexer/parser, the stepping interpreter,
the grid world with line-of-sight combat, and the fixed opponent policy.
"""

from .language import (
    Program,
    MoveDirection,
    TurnSide,
    tokenize,
    parse_expression,
    parse_statement,
    parse_program,
    program_to_string,
    PROGRAMS,
)
from .world import Direction, Tank, World, GRID_SIZE, line_of_sight, make_initial_world
from .interpreter import Frame, RuntimeState, evaluate, make_runtime_state, step
from .enemy import opponent_step
from .match import Simulation, Match, MatchResult
from .config import SimulationConfig, load_env

__all__ = [
    "Program",
    "MoveDirection",
    "TurnSide",
    "tokenize",
    "parse_expression",
    "parse_statement",
    "parse_program",
    "program_to_string",
    "PROGRAMS",
    "Direction",
    "Tank",
    "World",
    "GRID_SIZE",
    "line_of_sight",
    "make_initial_world",
    "Frame",
    "RuntimeState",
    "evaluate",
    "make_runtime_state",
    "step",
    "opponent_step",
    "Simulation",
    "Match",
    "MatchResult",
    "SimulationConfig",
    "load_env",
]
