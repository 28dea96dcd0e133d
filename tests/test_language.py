import textwrap

from omega.language import (
    Assign,
    Attack,
    Call,
    FunctionDecl,
    If,
    Literal,
    Move,
    MoveDirection,
    NoOp,
    PROGRAMS,
    Scan,
    Turn,
    TurnSide,
    VariableRef,
    parse_expression,
    parse_program,
    parse_statement,
    program_to_string,
    strip_comments,
    tokenize,
)


def test_tokenize_splits_lines_and_semicolons():
    tokens = tokenize("A = 1; B = 2;\nATTACK\n\n   TURN LEFT ;  ")
    assert tokens == ["A = 1;", "B = 2;", "ATTACK;", "TURN LEFT;"]


def test_tokenize_drops_line_comments():
    source = "// header\nMOVE 1 FORWARD; // go\n// trailing"
    assert tokenize(source) == ["MOVE 1 FORWARD;"]
    assert strip_comments("ATTACK; // fire") == "ATTACK; "


def test_tokens_rejoin_to_the_same_statements():
    source = "X = 3; SCAN_FOR_ENEMY;\nIF $ENEMY THEN ATTACK ELSE TURN RIGHT;\n  CALL Patrol"
    tokens = tokenize(source)

    rejoined = [part.strip() for part in "".join(tokens).split(";") if part.strip()]
    original = [part.strip() for part in source.replace("\n", ";").split(";") if part.strip()]
    assert rejoined == original


def test_function_block_is_one_token_despite_blank_lines_and_comments():
    source = textwrap.dedent("""
        FUNCTION Patrol:

          // strafe left
          MOVE 1 LEFT;

          MOVE 1 RIGHT; TURN LEFT;
        END;
        CALL Patrol;
    """)
    tokens = tokenize(source)

    assert len(tokens) == 2
    assert tokens[0] == "FUNCTION Patrol:\nMOVE 1 LEFT;\nMOVE 1 RIGHT; TURN LEFT;\nEND"
    assert tokens[1] == "CALL Patrol;"


def test_unterminated_function_block_runs_to_end_of_input():
    tokens = tokenize("ATTACK;\nFUNCTION Open:\nTURN LEFT;\nATTACK;")
    assert tokens == ["ATTACK;", "FUNCTION Open:\nTURN LEFT;\nATTACK;\nEND"]


def test_parse_expression_variants():
    assert parse_expression("$ENEMY") == VariableRef("ENEMY")
    assert parse_expression("  42 ") == Literal(42)
    assert parse_expression("-3") == Literal(-3)
    assert parse_expression("abc") == Literal(0)
    assert parse_expression("2.5") == Literal(0)
    assert parse_expression("$") == Literal(0)
    assert parse_expression("$1X") == Literal(0)
    assert parse_expression("") == Literal(0)


def test_parse_simple_statements():
    assert parse_statement("MOVEMENT = 2;") == Assign("MOVEMENT", Literal(2))
    assert parse_statement("X=$Y;") == Assign("X", VariableRef("Y"))
    assert parse_statement("MOVE $MOVEMENT FORWARD;") == Move(VariableRef("MOVEMENT"), MoveDirection.FORWARD)
    assert parse_statement("MOVE 3 LEFT;") == Move(Literal(3), MoveDirection.LEFT)
    assert parse_statement("TURN RIGHT;") == Turn(TurnSide.RIGHT)
    assert parse_statement("SCAN_FOR_ENEMY;") == Scan()
    assert parse_statement("ATTACK;") == Attack()
    assert parse_statement("CALL Patrol;") == Call("Patrol")


def test_keywords_are_case_insensitive():
    assert parse_statement("move 2 backward;") == Move(Literal(2), MoveDirection.BACKWARD)
    assert parse_statement("turn left") == Turn(TurnSide.LEFT)
    assert parse_statement("attack;") == Attack()
    assert parse_statement("call patrol;") == Call("patrol")


def test_unparseable_input_becomes_noop():
    assert parse_statement("JUMP 3;") == NoOp()
    assert parse_statement("MOVE 3 UPWARD;") == NoOp()
    assert parse_statement("TURN AROUND;") == NoOp()
    assert parse_statement("CALL;") == NoOp()
    assert parse_statement(";") == NoOp()
    assert parse_statement("   ") is None


def test_parse_if_with_and_without_else():
    stmt = parse_statement("IF $ENEMY THEN ATTACK ELSE MOVE $MOVEMENT FORWARD;")
    assert stmt == If(
        condition=VariableRef("ENEMY"),
        then_branch=Attack(),
        else_branch=Move(VariableRef("MOVEMENT"), MoveDirection.FORWARD),
    )

    stmt = parse_statement("if 1 then call Strike;")
    assert stmt == If(condition=Literal(1), then_branch=Call("Strike"), else_branch=None)


def test_if_branch_that_does_not_parse_is_noop():
    stmt = parse_statement("IF $A THEN DANCE ELSE ATTACK;")
    assert stmt.then_branch == NoOp()
    assert stmt.else_branch == Attack()


def test_nested_if_in_a_branch_is_noop():
    stmt = parse_statement("IF 1 THEN IF 2 THEN ATTACK ELSE TURN LEFT;")
    assert stmt == If(condition=Literal(1), then_branch=NoOp(), else_branch=Turn(TurnSide.LEFT))


def test_deeply_nested_if_line_parses_without_error():
    program = parse_program("IF 1 THEN " * 600 + "ATTACK;")
    assert program.top_level == (If(condition=Literal(1), then_branch=NoOp()),)


def test_parse_function_declaration():
    stmt = parse_statement("FUNCTION Patrol:\nMOVE 1 LEFT;\nMOVE 1 RIGHT;\nEND")
    assert stmt == FunctionDecl(
        name="Patrol",
        body=(Move(Literal(1), MoveDirection.LEFT), Move(Literal(1), MoveDirection.RIGHT)),
    )


def test_empty_function_body_is_allowed():
    program = parse_program("FUNCTION Nothing:\nEND\nCALL Nothing;")
    assert program.functions == {"Nothing": ()}
    assert program.top_level == (Call("Nothing"),)


def test_malformed_function_header_is_noop():
    program = parse_program("FUNCTION 9lives:\nATTACK;\nEND")
    assert program.functions == {}
    assert program.top_level == (NoOp(),)


def test_nested_function_is_never_registered():
    source = textwrap.dedent("""
        FUNCTION Outer:
          TURN LEFT;
          FUNCTION Inner:
          ATTACK;
        END
        CALL Inner;
    """)
    program = parse_program(source)

    assert set(program.functions) == {"Outer"}
    assert program.functions["Outer"] == (Turn(TurnSide.LEFT), NoOp())
    assert program.top_level == (Call("Inner"),)


def test_parse_program_routes_functions_and_keeps_order():
    program = parse_program(PROGRAMS["sample"])

    assert program.top_level == (
        Assign("MOVEMENT", Literal(2)),
        Scan(),
        If(VariableRef("ENEMY"), Attack(), Move(VariableRef("MOVEMENT"), MoveDirection.FORWARD)),
        Call("Patrol"),
    )
    assert program.functions == {
        "Patrol": (Move(Literal(1), MoveDirection.LEFT), Move(Literal(1), MoveDirection.RIGHT)),
    }
    assert len(program) == 4


def test_last_function_with_a_name_wins():
    source = "FUNCTION F:\nATTACK;\nEND\nFUNCTION F:\nTURN LEFT;\nEND"
    program = parse_program(source)
    assert program.functions == {"F": (Turn(TurnSide.LEFT),)}
    assert program.top_level == ()


def test_program_to_string_parses_back_to_the_same_program():
    program = parse_program(PROGRAMS["hunter"])
    text = program_to_string(program)

    assert "FUNCTION Strike:" in text
    assert "IF $ENEMY THEN CALL Strike ELSE CALL Seek;" in text
    assert parse_program(text) == program


def test_bundled_programs_parse_without_noops():
    for name, source in PROGRAMS.items():
        program = parse_program(source)
        everything = list(program.top_level)
        for body in program.functions.values():
            everything.extend(body)
        assert NoOp() not in everything, name
