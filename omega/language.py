"""
Omega Lexer and Parser

Turns Omega source text into a Program: a top-level statement sequence plus
a table of function bodies. The parser is tolerant: any line it
cannot make sense of becomes a NoOp.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple, Union
import re


class MoveDirection(Enum):
    """Movement relative to the tank's facing. LEFT/RIGHT strafe, they do not turn."""
    FORWARD = "FORWARD"
    BACKWARD = "BACKWARD"
    LEFT = "LEFT"
    RIGHT = "RIGHT"


class TurnSide(Enum):
    LEFT = "LEFT"
    RIGHT = "RIGHT"


# Expressions

@dataclass(frozen=True)
class Literal:
    value: int = 0

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class VariableRef:
    name: str

    def __str__(self) -> str:
        return f"${self.name}"


Expression = Union[Literal, VariableRef]


# Statements

@dataclass(frozen=True)
class Assign:
    name: str
    value: Expression

    def __str__(self) -> str:
        return f"{self.name} = {self.value};"


@dataclass(frozen=True)
class Move:
    amount: Expression
    direction: MoveDirection

    def __str__(self) -> str:
        return f"MOVE {self.amount} {self.direction.value};"


@dataclass(frozen=True)
class Turn:
    side: TurnSide

    def __str__(self) -> str:
        return f"TURN {self.side.value};"


@dataclass(frozen=True)
class Scan:
    def __str__(self) -> str:
        return "SCAN_FOR_ENEMY;"


@dataclass(frozen=True)
class Attack:
    def __str__(self) -> str:
        return "ATTACK;"


@dataclass(frozen=True)
class If:
    condition: Expression
    then_branch: "Statement"
    else_branch: Optional["Statement"] = None

    def __str__(self) -> str:
        text = f"IF {self.condition} THEN {_bare(self.then_branch)}"
        if self.else_branch is not None:
            text += f" ELSE {_bare(self.else_branch)}"
        return text + ";"


@dataclass(frozen=True)
class Call:
    name: str

    def __str__(self) -> str:
        return f"CALL {self.name};"


@dataclass(frozen=True)
class NoOp:
    def __str__(self) -> str:
        return ";"


@dataclass(frozen=True)
class FunctionDecl:
    """Only produced by the parser; parse_program moves these into the function table."""
    name: str
    body: Tuple["Statement", ...] = ()

    def __str__(self) -> str:
        lines = [f"FUNCTION {self.name}:"]
        lines.extend(f"  {stmt}" for stmt in self.body)
        lines.append("END")
        return "\n".join(lines)


Statement = Union[Assign, Move, Turn, Scan, Attack, If, Call, NoOp, FunctionDecl]


def _bare(stmt: Statement) -> str:
    """Render a statement without its terminator (for IF branches)."""
    text = str(stmt)
    return text[:-1] if text.endswith(";") else text


@dataclass
class Program:
    """A parsed Omega program. Not mutated after parse_program returns it."""
    top_level: Tuple[Statement, ...] = ()
    functions: Dict[str, Tuple[Statement, ...]] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.top_level)


# Lexer

_IDENT = r"[A-Za-z_][A-Za-z0-9_]*"
_COMMENT = re.compile(r"//.*$")
_FUNCTION_START = re.compile(r"^FUNCTION\s+", re.IGNORECASE)
_BLOCK_END = re.compile(r"^END\b", re.IGNORECASE)


def strip_comments(source: str) -> str:
    """Remove // comments up to the end of each line."""
    return "\n".join(_COMMENT.sub("", line) for line in source.split("\n"))


def tokenize(source: str) -> List[str]:
    """
    Split source text into statement tokens.

    Regular lines are split on ';' and every part gets its ';' back.
    A FUNCTION header line opens a block that runs until the first line
    starting with END (or the end of input) and becomes one multi-line token.
    """
    lines = [line.strip() for line in strip_comments(source).split("\n")]
    lines = [line for line in lines if line]

    tokens: List[str] = []
    i = 0
    while i < len(lines):
        line = lines[i]
        if _FUNCTION_START.match(line):
            body: List[str] = []
            i += 1
            while i < len(lines) and not _BLOCK_END.match(lines[i]):
                body.append(lines[i])
                i += 1
            # Consume END (no-op when the block was never closed)
            i += 1
            tokens.append("\n".join([line, *body, "END"]))
        else:
            for part in line.split(";"):
                part = part.strip()
                if part:
                    tokens.append(part + ";")
            i += 1

    return tokens


# Parser

_VARIABLE = re.compile(rf"^\$({_IDENT})$")
_FUNCTION_HEADER = re.compile(rf"^FUNCTION\s+({_IDENT})\s*:\s*$", re.IGNORECASE)
_IF = re.compile(r"^IF\s+(.+?)\s+THEN\s+(.+?)(?:\s+ELSE\s+(.+))?$", re.IGNORECASE)
_ASSIGN = re.compile(rf"^({_IDENT})\s*=\s*(.+)$")
_MOVE = re.compile(r"^MOVE\s+(.+)\s+(FORWARD|BACKWARD|LEFT|RIGHT)$", re.IGNORECASE)
_TURN = re.compile(r"^TURN\s+(LEFT|RIGHT)$", re.IGNORECASE)
_SCAN = re.compile(r"^SCAN_FOR_ENEMY$", re.IGNORECASE)
_ATTACK = re.compile(r"^ATTACK$", re.IGNORECASE)
_CALL = re.compile(rf"^CALL\s+({_IDENT})$", re.IGNORECASE)


def parse_expression(text: str) -> Expression:
    """Parse `$NAME` or an integer. Anything else is the literal 0."""
    text = text.strip()

    match = _VARIABLE.match(text)
    if match:
        return VariableRef(match.group(1))

    try:
        return Literal(int(text))
    except ValueError:
        return Literal(0)


def _strip_terminator(token: str) -> str:
    text = token.strip()
    if text.endswith(";"):
        text = text[:-1].rstrip()
    return text


def _parse_branch(text: str) -> Statement:
    """Parse an IF branch. A nested IF or FUNCTION inside a branch is a NoOp."""
    return _apply_rules(_strip_terminator(text), _BRANCH_RULES)


def _parse_function(text: str) -> Optional[Statement]:
    if not _FUNCTION_START.match(text):
        return None

    lines = text.split("\n")
    header = _FUNCTION_HEADER.match(lines[0].strip())
    if not header or len(lines) < 2 or not _BLOCK_END.match(lines[-1].strip()):
        return None

    body: List[Statement] = []
    for token in tokenize("\n".join(lines[1:-1])):
        stmt = parse_statement(token)
        if stmt is None:
            continue
        # Nested declarations are never registered
        if isinstance(stmt, FunctionDecl):
            stmt = NoOp()
        body.append(stmt)

    return FunctionDecl(name=header.group(1), body=tuple(body))


def _parse_if(text: str) -> Optional[Statement]:
    match = _IF.match(text)
    if not match:
        return None

    condition_str, then_str, else_str = match.groups()
    return If(
        condition=parse_expression(condition_str),
        then_branch=_parse_branch(then_str),
        else_branch=_parse_branch(else_str) if else_str else None,
    )


def _parse_assign(text: str) -> Optional[Statement]:
    match = _ASSIGN.match(text)
    if not match:
        return None
    return Assign(name=match.group(1), value=parse_expression(match.group(2)))


def _parse_move(text: str) -> Optional[Statement]:
    match = _MOVE.match(text)
    if not match:
        return None
    return Move(
        amount=parse_expression(match.group(1)),
        direction=MoveDirection(match.group(2).upper()),
    )


def _parse_turn(text: str) -> Optional[Statement]:
    match = _TURN.match(text)
    if not match:
        return None
    return Turn(TurnSide(match.group(1).upper()))


def _parse_scan(text: str) -> Optional[Statement]:
    return Scan() if _SCAN.match(text) else None


def _parse_attack(text: str) -> Optional[Statement]:
    return Attack() if _ATTACK.match(text) else None


def _parse_call(text: str) -> Optional[Statement]:
    match = _CALL.match(text)
    if not match:
        return None
    return Call(match.group(1))


# Tried in order, first match wins
_RULES: List[Callable[[str], Optional[Statement]]] = [
    _parse_function,
    _parse_if,
    _parse_assign,
    _parse_move,
    _parse_turn,
    _parse_scan,
    _parse_attack,
    _parse_call,
]

_BRANCH_RULES = [rule for rule in _RULES if rule not in (_parse_function, _parse_if)]


def _apply_rules(text: str, rules: List[Callable[[str], Optional[Statement]]]) -> Statement:
    if not text:
        return NoOp()
    for rule in rules:
        stmt = rule(text)
        if stmt is not None:
            return stmt
    return NoOp()


def parse_statement(token: str) -> Optional[Statement]:
    """
    Parse one statement token.

    Returns None only for an empty token. Everything else yields a
    statement; text that matches no rule becomes NoOp.
    """
    if not token.strip():
        return None

    return _apply_rules(_strip_terminator(token), _RULES)


def parse_program(source: str) -> Program:
    """Parse complete Omega source. Later FUNCTION blocks replace earlier ones with the same name."""
    top_level: List[Statement] = []
    functions: Dict[str, Tuple[Statement, ...]] = {}

    for token in tokenize(source):
        stmt = parse_statement(token)
        if stmt is None:
            continue
        if isinstance(stmt, FunctionDecl):
            functions[stmt.name] = stmt.body
        else:
            top_level.append(stmt)

    return Program(top_level=tuple(top_level), functions=functions)


def program_to_string(program: Program) -> str:
    """Convert a Program back to Omega source (functions first)."""
    blocks = [
        str(FunctionDecl(name=name, body=body))
        for name, body in program.functions.items()
    ]
    lines = [str(stmt) for stmt in program.top_level]

    parts = []
    if blocks:
        parts.append("\n\n".join(blocks))
    if lines:
        parts.append("\n".join(lines))
    return "\n\n".join(parts)


# Bundled example programs
PROGRAMS = {
    "sample": """// Omega sample
MOVEMENT = 2;
SCAN_FOR_ENEMY;
IF $ENEMY THEN ATTACK ELSE MOVE $MOVEMENT FORWARD;

FUNCTION Patrol:
  MOVE 1 LEFT;
  MOVE 1 RIGHT;
END;

CALL Patrol;
""",

    "hunter": """// Hunter: sweep the turret until the opponent lines up, then fire
FUNCTION Strike:
  ATTACK;
  SCAN_FOR_ENEMY;
END

FUNCTION Seek:
  TURN RIGHT;
  SCAN_FOR_ENEMY;
END

SCAN_FOR_ENEMY;
IF $ENEMY THEN CALL Strike ELSE CALL Seek;
""",

    "patrol": """// Patrol: strafe back and forth along the bottom edge
STEP = 3;
FUNCTION Patrol:
  MOVE $STEP RIGHT;
  SCAN_FOR_ENEMY;
  MOVE $STEP LEFT;
  SCAN_FOR_ENEMY;
END
CALL Patrol; CALL Patrol; CALL Patrol;
""",

    "sentry": """// Sentry: hold position and shoot whatever walks into the column
SCAN_FOR_ENEMY;
IF $ENEMY THEN CALL Fire;
FUNCTION Fire:
  ATTACK;
  SCAN_FOR_ENEMY;
END
""",
}
