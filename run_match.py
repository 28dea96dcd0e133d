#!/usr/bin/env python3
"""
Omega Tanks - Match Runner

Play Omega programs against the built-in opponent from the command line.

Usage:
    # Quick demo with the bundled sample program
    python run_match.py --demo

    # Play a bundled program or a file
    python run_match.py --program hunter --trace
    python run_match.py --file my_tank.omega --max-ticks 500 --plot board.png

    # Rank every .omega file in a directory
    python run_match.py --gauntlet ./programs
"""

import argparse
import sys
import os
from pathlib import Path
from typing import Optional

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from omega.config import SimulationConfig, load_env
from omega.language import PROGRAMS, parse_program, program_to_string
from omega.match import Match, MatchResult


def print_result(name: str, result: MatchResult):
    print(f"Program: {name}")
    print(f"Winner: {result.get_winner_name()}")
    print(f"Ticks: {result.ticks}")
    print(f"  Player HP: {result.actor_health}")
    print(f"  Enemy HP:  {result.opponent_health}")
    print(f"  Statements executed: {result.statements_executed}")
    print(f"  Program finished: {'yes' if result.program_finished else 'no'}")


def run_demo(config: SimulationConfig):
    """Play the bundled sample program and print the outcome."""
    print("\n" + "="*60)
    print("OMEGA TANKS DEMO - Sample Program vs Enemy")
    print("="*60 + "\n")

    source = PROGRAMS["sample"]
    program = parse_program(source)

    print(program_to_string(program))
    print()

    result = Match(config).run(program)
    print_result("sample", result)

    print("\n" + "="*60)
    print("Demo complete! To play your own program:")
    print("  python run_match.py --file my_tank.omega --trace")
    print("="*60 + "\n")

    return result


def run_single(
    name: str,
    source: str,
    config: SimulationConfig,
    trace: bool = False,
    plot_path: Optional[str] = None,
) -> MatchResult:
    """
    Play one program and report the result.

    Args:
        name: Display name of the program
        source: Omega source text
        config: Tick limit and stop policy
        trace: Print the status line of every tick
        plot_path: Optional path for a final-board image; a health chart is saved beside it
    """
    print("\n" + "="*60)
    print(f"Omega Match: {name}")
    print(f"Max ticks: {config.max_ticks}")
    print("="*60 + "\n")

    program = parse_program(source)
    result = Match(config).run(program)

    if trace:
        for record in result.history:
            marker = " " if record.executed else "."
            print(f"{marker}[{record.tick:4d}] {record.message}")
        print()

    print_result(name, result)

    if plot_path:
        try:
            from visualize import plot_health_curves, render_world, world_from_record
            if result.history:
                render_world(world_from_record(result.history[-1]), save_path=plot_path)
                health_path = health_plot_path(plot_path)
                plot_health_curves(result.history, title=f"Health: {name}", save_path=str(health_path))
            else:
                print("  (Nothing to plot: no ticks were played)")
        except Exception as e:
            print(f"  (Skipped visualization: {e})")

    return result


def health_plot_path(plot_path: str) -> Path:
    """board.png -> board_health.png"""
    path = Path(plot_path)
    return path.with_name(f"{path.stem}_health{path.suffix or '.png'}")


def run_gauntlet(programs_dir: str, config: SimulationConfig, plot_path: Optional[str] = None):
    """
    Rank every .omega program in a directory.

    Args:
        programs_dir: Directory containing .omega files
        config: Tick limit and stop policy
        plot_path: Optional path for a damage chart of the ranking
    """
    programs_path = Path(programs_dir)

    programs = {}
    for omega_file in sorted(programs_path.glob("*.omega")):
        try:
            with open(omega_file, encoding="utf-8") as f:
                programs[omega_file.stem] = parse_program(f.read())
                print(f"Loaded: {omega_file.stem}")
        except (OSError, UnicodeDecodeError) as e:
            print(f"Failed to load {omega_file}: {e}")

    if not programs:
        print("No .omega programs found")
        return None

    print(f"\nRunning gauntlet with {len(programs)} programs...")

    stats = Match(config, record_history=False).run_gauntlet(programs)

    print("\n" + "="*60)
    print("GAUNTLET RESULTS")
    print("="*60)

    for rank, (name, s) in enumerate(stats.items(), 1):
        print(
            f"{rank}. {name}: {s['points']:.0f} pts "
            f"(dealt {s['damage_dealt']:.0f}, taken {s['damage_taken']:.0f}, "
            f"{s['ticks']:.0f} ticks)"
        )

    print("="*60 + "\n")

    if plot_path:
        try:
            from visualize import plot_gauntlet_results
            plot_gauntlet_results(stats, save_path=plot_path)
        except Exception as e:
            print(f"  (Skipped visualization: {e})")

    return stats


def list_programs():
    print("Bundled programs:")
    for name, source in PROGRAMS.items():
        first_line = source.strip().splitlines()[0]
        print(f"  {name:10s} {first_line}")


def main(argv=None):
    load_env()

    parser = argparse.ArgumentParser(
        description="Omega Tanks - program a tank, beat the enemy",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run_match.py --demo
  python run_match.py --program hunter --trace
  python run_match.py --file my_tank.omega --plot board.png
  python run_match.py --gauntlet ./programs
        """
    )

    parser.add_argument(
        "--demo",
        action="store_true",
        help="Play the bundled sample program",
    )

    parser.add_argument(
        "--program",
        type=str,
        choices=sorted(PROGRAMS),
        help="Play a bundled program",
    )

    parser.add_argument(
        "--file",
        type=str,
        help="Play an Omega source file",
    )

    parser.add_argument(
        "--gauntlet",
        type=str,
        help="Rank every .omega file in a directory",
    )

    parser.add_argument(
        "--max-ticks",
        type=int,
        help="Ticks before the match is a draw (default: OMEGA_MAX_TICKS or 300)",
    )

    parser.add_argument(
        "--until-finished",
        action="store_true",
        help="Stop as soon as the program runs out of statements",
    )

    parser.add_argument(
        "--trace",
        action="store_true",
        help="Print the status line of every tick",
    )

    parser.add_argument(
        "--plot",
        type=str,
        help="Save the final board (and a health chart beside it) or the gauntlet chart to this path",
    )

    parser.add_argument(
        "--list",
        action="store_true",
        help="List bundled programs",
    )

    args = parser.parse_args(argv)

    try:
        config = SimulationConfig.from_env()
        if args.max_ticks is not None:
            config = SimulationConfig(
                max_ticks=args.max_ticks,
                stop_when_finished=config.stop_when_finished,
                tick_ms=config.tick_ms,
                port=config.port,
            )
    except ValueError as e:
        parser.error(str(e))
    if args.until_finished:
        config.stop_when_finished = True

    # Handle different modes
    if args.list:
        list_programs()

    elif args.demo:
        run_demo(config)

    elif args.gauntlet:
        run_gauntlet(args.gauntlet, config, plot_path=args.plot)

    elif args.program:
        run_single(args.program, PROGRAMS[args.program], config,
                   trace=args.trace, plot_path=args.plot)

    elif args.file:
        try:
            with open(args.file, encoding="utf-8") as f:
                source = f.read()
        except (OSError, UnicodeDecodeError) as e:
            print(f"✗ Failed to read {args.file}: {e}")
            return 1
        run_single(Path(args.file).stem, source, config,
                   trace=args.trace, plot_path=args.plot)

    else:
        parser.print_help()
        print("\nQuick start: python run_match.py --demo")

    return 0


if __name__ == "__main__":
    sys.exit(main())
