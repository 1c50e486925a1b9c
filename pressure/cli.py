"""Command-line tools.

pressure-solve
    Verify every level of a level set by playing it through with a minimal
    solution. Exits 0 only when every level is won.

    Usage:
        pressure-solve [--mode classic] [--levels FILE] [--verbose]
                       [--fix [--write] [--output FILE]] [--timeout SECONDS]
        pressure-solve --list

pressure-generate
    Generate certified-solvable levels and print or save them as JSON.

    Usage:
        pressure-generate [--cols 7] [--rows 7] [--nodes 2] [--difficulty medium]
                          [--count 1] [--seed N] [--output FILE]
"""
import argparse
import json
import logging
import sys
from typing import Dict, List, Optional

from .config import get_settings
from .core.generator import LevelGenerator
from .core.modes import GameMode
from .core.solver import RotationSolver
from .core.verifier import LevelVerifier
from .models.classic import LEVEL_SETS
from .models.level import (
    CompressionDirection,
    Difficulty,
    GenerationParams,
    Level,
    LevelFix,
    LevelVerification,
    VerifyStatus,
)
from .utils.helpers import level_to_json, load_levels, render_grid, save_levels

logger = logging.getLogger(__name__)

RULE = "=" * 39


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else get_settings().log_level
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )


def _status_text(report: LevelVerification) -> str:
    if report.status == VerifyStatus.IMPOSSIBLE:
        return f"impossible (needs {report.min_moves} moves, max is {report.max_moves})"
    if report.status == VerifyStatus.NO_SOLUTION:
        return "no solution"
    if report.status == VerifyStatus.ALREADY_SOLVED:
        return "already solved at start"
    if report.status == VerifyStatus.TIMED_OUT:
        return "timed out"
    return report.status.value


def print_report(level: Level, report: LevelVerification, verbose: bool) -> None:
    mark = "✓" if report.passed else "✗"
    moves = f"{report.min_moves}/{report.max_moves}" if report.min_moves >= 0 else f"-/{report.max_moves}"
    print(f"  {mark} Level {level.id} \"{level.name}\" - {_status_text(report)} (moves {moves})")
    if not verbose:
        return
    print(render_grid(level.grid))
    for line in report.log:
        print(f"      {line}")
    if report.solution:
        print(render_grid(level.grid.apply_moves(report.solution), report.wall_offset))


def print_summary(results: Dict[str, List[LevelVerification]]) -> None:
    print(f"\n{RULE}\n  SOLVER SUMMARY\n{RULE}\n")
    all_reports = [r for reports in results.values() for r in reports]

    for mode_id, reports in results.items():
        won = sum(1 for r in reports if r.passed)
        percentage = round(won / len(reports) * 100) if reports else 100
        print(f"{mode_id.upper()}: {won}/{len(reports)} solved ({percentage}%)")
        for r in reports:
            if r.passed:
                continue
            print(f"  ✗ Level {r.level_id} \"{r.level_name}\" - {_status_text(r)}")
            if r.fix_suggestion:
                print(f"    Fix: {r.fix_suggestion}")

    counts = {status: sum(1 for r in all_reports if r.status == status) for status in VerifyStatus}
    print("-" * len(RULE))
    print(
        f"Total: {counts[VerifyStatus.WON]} won, {counts[VerifyStatus.LOST]} lost, "
        f"{counts[VerifyStatus.NO_SOLUTION]} no solution, {counts[VerifyStatus.IMPOSSIBLE]} impossible, "
        f"{counts[VerifyStatus.ALREADY_SOLVED]} already solved, {counts[VerifyStatus.TIMED_OUT]} timed out "
        f"out of {len(all_reports)} levels"
    )
    if all_reports and counts[VerifyStatus.WON] == len(all_reports):
        print("All levels solved!")
    elif all_reports:
        print(f"Solve rate: {round(counts[VerifyStatus.WON] / len(all_reports) * 100)}%")


def list_modes() -> None:
    print("\nAvailable level sets:\n")
    for mode_id, levels in LEVEL_SETS.items():
        print(f"  {mode_id}: {len(levels)} levels")
    total = sum(len(levels) for levels in LEVEL_SETS.values())
    print(f"\nTotal: {total} levels across {len(LEVEL_SETS)} modes\n")


def solve_main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="pressure-solve",
        description="Verify pipe puzzle levels by solving and playing them through",
    )
    parser.add_argument("--mode", "-m", type=str, choices=[m.value for m in GameMode], default=None,
                        help="Solve only this mode's levels and apply its rules")
    parser.add_argument("--levels", "-l", type=str, default=None,
                        help="JSON level file to verify instead of the built-in set")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Show boards and per-move logs for each level")
    parser.add_argument("--fix", action="store_true",
                        help="Automatically fix broken levels (scramble, raise maxMoves or regenerate)")
    parser.add_argument("--write", action="store_true",
                        help="Write fixed levels to --output or back to --levels (implies --fix)")
    parser.add_argument("--output", "-o", type=str, default=None,
                        help="File to write fixed levels to")
    parser.add_argument("--timeout", type=float, default=None,
                        help="Solver time limit per level in seconds")
    parser.add_argument("--seed", type=int, default=None,
                        help="Random seed for fixes")
    parser.add_argument("--list", action="store_true",
                        help="List available level sets and exit")

    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    if args.list:
        list_modes()
        return 0

    if args.write and not args.fix:
        print("Warning: --write requires --fix. Enabling --fix automatically.")
        args.fix = True

    levels_file = args.levels or get_settings().levels_file
    if args.write and not (args.output or levels_file):
        print("Error: --write needs --output or --levels", file=sys.stderr)
        return 2

    level_sets: Dict[str, List[Level]] = {}
    try:
        if levels_file:
            level_sets[args.mode or GameMode.CLASSIC.value] = load_levels(levels_file)
        elif args.mode:
            if args.mode not in LEVEL_SETS:
                print(f"Error: no built-in levels for mode \"{args.mode}\"", file=sys.stderr)
                print(f"\nAvailable modes: {', '.join(LEVEL_SETS)}")
                return 1
            level_sets[args.mode] = LEVEL_SETS[args.mode]
        else:
            level_sets = dict(LEVEL_SETS)
    except (OSError, ValueError) as e:
        print(f"Error: could not load levels: {e}", file=sys.stderr)
        return 1

    verifier = LevelVerifier(solver=RotationSolver(time_limit=args.timeout))

    print(f"\n{RULE}\n  PRESSURE LEVEL SOLVER")
    if args.fix:
        print("  Auto-fix mode enabled")
        if args.write:
            print("  Write-to-file enabled")
    print(RULE)

    results: Dict[str, List[LevelVerification]] = {}
    for mode_id, levels in level_sets.items():
        mode = GameMode(mode_id)
        print(f"\n{mode_id.upper()} ({len(levels)} levels)")
        reports = []
        fixes: List[LevelFix] = []
        for level in levels:
            report = verifier.verify(level, mode)
            reports.append(report)
            print_report(level, report, args.verbose)

            if args.fix and not report.passed:
                level_fix = verifier.fix(level, report, seed=args.seed)
                if level_fix is None:
                    print("    No automatic fix available")
                    continue
                fixes.append(level_fix)
                recheck = verifier.verify(level_fix.fixed, mode)
                print(f"    Fixed: {level_fix.description} -> {recheck.status.value}")
        results[mode_id] = reports

        if args.write and fixes:
            by_id = {f.original.id: f.fixed for f in fixes}
            path = args.output or levels_file
            save_levels(path, [by_id.get(level.id, level) for level in levels])
            print(f"\nWrote {len(fixes)} fixed level(s) to {path}")

    print_summary(results)

    failed = sum(1 for reports in results.values() for r in reports if not r.passed)
    return 1 if failed else 0


def generate_main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="pressure-generate",
        description="Generate certified-solvable pipe puzzle levels",
    )
    parser.add_argument("--cols", type=int, default=7, help="Grid columns (default: 7)")
    parser.add_argument("--rows", type=int, default=7, help="Grid rows (default: 7)")
    parser.add_argument("--nodes", type=int, default=2, help="Goal node count (default: 2)")
    parser.add_argument("--difficulty", "-d", type=str, choices=[d.value for d in Difficulty],
                        default="medium", help="Difficulty (default: medium)")
    parser.add_argument("--direction", type=str, choices=[d.value for d in CompressionDirection],
                        default=None, help="Compression direction (default: random)")
    parser.add_argument("--decoys", type=int, default=None, help="Decoy path tiles")
    parser.add_argument("--walls", type=int, default=None, help="Interior wall clusters")
    parser.add_argument("--locked", type=float, default=0.0, help="Fraction of path tiles locked")
    parser.add_argument("--count", "-n", type=int, default=1, help="Levels to generate (default: 1)")
    parser.add_argument("--start-id", type=int, default=1, help="Id of the first level (default: 1)")
    parser.add_argument("--world", type=int, default=1, help="World number (default: 1)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--output", "-o", type=str, default=None, help="Write levels to this JSON file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    try:
        params = GenerationParams(
            grid_cols=args.cols,
            grid_rows=args.rows,
            node_count=args.nodes,
            difficulty=args.difficulty,
            decoy_count=args.decoys,
            compression_direction=args.direction,
            interior_walls=args.walls,
            locked_fraction=args.locked,
            seed=args.seed,
            world=args.world,
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    levels = LevelGenerator().generate_world(params, args.count, start_id=args.start_id)
    failed = args.count - len(levels)
    if failed:
        logger.warning("%d of %d levels could not be generated", failed, args.count)

    if args.output:
        save_levels(args.output, levels)
        print(f"Wrote {len(levels)} level(s) to {args.output}")
    else:
        print(json.dumps({"levels": [level_to_json(level) for level in levels]}, indent=2, ensure_ascii=False))
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(solve_main())
