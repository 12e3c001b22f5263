#!/usr/bin/env python3
"""
KenKen Solver - Main Entry Point

Usage:
    python -m KenKen.main puzzles/example.txt
    python -m KenKen.main --save puzzles/example.txt
    python -m KenKen.main --verbose puzzles/example.txt
    python -m KenKen.main --all puzzles/
"""

import sys
import os
from pathlib import Path
from typing import List, Optional, Tuple

from .puzzle import KenKenPuzzle, InvalidPuzzleError
from .solver import CSPSolver
from .output import SolutionFormatter
from .diagnostics import SolverDiagnostics

# ============================================================================
# CONFIGURATION
# ============================================================================
PUZZLE_PATH = None                         # Puzzle to solve when no argument is given
OUTPUT_DIR = "data/solutions"              # Base output directory for --save
SAVE_OUTPUT = False                        # Write solution.json / solution.txt

PROGRESS_INTERVAL = 10000
# Print a progress line every N attempts when verbose
# ============================================================================

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_INVALID = 2
EXIT_UNSOLVED = 3

USAGE = """Usage:
    kenken <puzzle.txt>
    kenken --save <puzzle.txt>
    kenken --verbose <puzzle.txt>
    kenken --all <directory>
    kenken --verbose --all <directory>"""


def solve_puzzle(input_path: str, output_dir: Optional[str] = OUTPUT_DIR,
                 verbose: bool = True, save_output: bool = SAVE_OUTPUT,
                 progress_interval: int = PROGRESS_INTERVAL
                 ) -> Tuple[bool, Optional[KenKenPuzzle], Optional[CSPSolver]]:
    """
    Solve a single puzzle and optionally save results.

    Args:
        input_path: Path to the puzzle text file
        output_dir: Base directory for output files (<output_dir>/<puzzle_name>/)
        verbose: Print detailed solving progress
        save_output: Write solution.json and solution.txt
        progress_interval: Attempts between progress lines

    Raises InvalidPuzzleError if the file does not describe a valid board.
    """
    puzzle = KenKenPuzzle.from_file(str(input_path))

    if verbose:
        print(f"\n{'='*60}")
        print(f"Loading puzzle: {input_path}")
        print(f"{'='*60}")
        print(puzzle)

    solver = CSPSolver(puzzle.rows, puzzle.domains, verbose=verbose,
                       progress_interval=progress_interval)

    try:
        solved = solver.solve()
    except KeyboardInterrupt:
        print(f"\n\n{'='*60}")
        print("⚠ Solving interrupted by user (Ctrl+C)")
        print(f"{'='*60}")
        print(f"\nProgress when stopped: {solver.grid.filled_count()}/{puzzle.size ** 2} cells")
        solver._print_stats()
        return False, puzzle, solver

    puzzle.grid = solver.solution()

    if solved:
        if verbose:
            print(f"\n{'='*60}")
            print("SUCCESS! Puzzle solved ✓")
            print(f"{'='*60}")
            print("\n" + SolutionFormatter.format_solution_human_readable(puzzle, puzzle.grid))
        else:
            print("SOLVED:")
            print(SolutionFormatter.format_grid(puzzle.grid))
    else:
        print(f"\n{'='*60}")
        print("Could not solve it! ✗")
        print(f"{'='*60}")
        if verbose:
            SolverDiagnostics.dump_failure(solver, puzzle)
            SolverDiagnostics.analyze_puzzle_structure(puzzle)

    if save_output and output_dir is not None:
        out = Path(output_dir) / puzzle.name
        out.mkdir(parents=True, exist_ok=True)
        SolutionFormatter.save_solution(puzzle, puzzle.grid, solver.stats, str(out / "solution.json"))
        SolutionFormatter.save_human_readable(puzzle, puzzle.grid, str(out / "solution.txt"))

    return solved, puzzle, solver


def solve_all_puzzles(data_dir: str, output_dir: Optional[str] = OUTPUT_DIR,
                      save_output: bool = SAVE_OUTPUT, verbose: bool = False) -> List[dict]:
    """
    Solve every *.txt puzzle in a directory and print a summary
    """
    data_path = Path(data_dir)
    if not data_path.is_dir():
        print(f"Error: Directory not found: {data_dir}")
        return []

    puzzle_files = sorted(data_path.glob("*.txt"))
    if not puzzle_files:
        print(f"No puzzles found in {data_dir}")
        return []

    print(f"\nFound {len(puzzle_files)} puzzle(s) to solve")

    results = []
    for i, puzzle_file in enumerate(puzzle_files, 1):
        print(f"\n[{i}/{len(puzzle_files)}] Solving {puzzle_file.name}...")

        try:
            solved, puzzle, solver = solve_puzzle(
                str(puzzle_file),
                output_dir=output_dir,
                verbose=verbose,
                save_output=save_output,
            )
        except InvalidPuzzleError as e:
            print(f"  ✗ INVALID: {e}")
            results.append({'file': puzzle_file.name, 'solved': False, 'invalid': True,
                            'size': None, 'attempts': None, 'backtracks': None})
            continue

        results.append({
            'file': puzzle_file.name,
            'solved': bool(solved),
            'invalid': False,
            'size': puzzle.size,
            'attempts': solver.stats['total_attempts'],
            'backtracks': solver.stats['backtracks'],
        })
        print(f"  {'✓ SOLVED' if solved else '✗ FAILED'}")
        if verbose:
            SolverDiagnostics.print_summary(solver, puzzle)

    # ---------------------------
    # Print summary
    # ---------------------------
    print(f"\n{'='*60}")
    print("SUMMARY")
    print(f"{'='*60}")
    solved_count = sum(1 for r in results if r['solved'])
    total_count = len(results)
    solve_rate = (solved_count / total_count * 100) if total_count > 0 else 0
    print(f"Solved: {solved_count}/{total_count} puzzles ({solve_rate:.1f}%)")
    print(f"{'='*60}\n")

    for r in results:
        status = "✓" if r['solved'] else "✗"
        print(f"{status} {r['file']:30s}", end="")
        if r['solved']:
            print(f" - {r['size']}x{r['size']}, {r['attempts']} attempts, {r['backtracks']} backtracks")
        elif r['invalid']:
            print(" - Invalid")
        else:
            print(" - No solution")

    return results


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    args = list(sys.argv[1:] if argv is None else argv)

    save_output = SAVE_OUTPUT
    verbose = False
    while args and args[0] in ("--save", "-v", "--verbose"):
        if args[0] == "--save":
            save_output = True
        else:
            verbose = True
        args = args[1:]

    if args and args[0] == "--all":
        if len(args) < 2:
            print(USAGE)
            return EXIT_USAGE
        results = solve_all_puzzles(args[1], save_output=save_output, verbose=verbose)
        if not results:
            return EXIT_USAGE
        return EXIT_OK if all(r['solved'] for r in results) else EXIT_UNSOLVED

    input_file = args[0] if args else PUZZLE_PATH
    if input_file is None:
        print("You need a filename argument!")
        print(USAGE)
        return EXIT_USAGE

    if not os.path.exists(input_file):
        print(f"Error: File not found: {input_file}")
        return EXIT_USAGE

    try:
        solved, _, _ = solve_puzzle(input_file, verbose=verbose, save_output=save_output)
    except InvalidPuzzleError as e:
        print(f"Error: invalid puzzle {input_file}: {e}")
        return EXIT_INVALID

    return EXIT_OK if solved else EXIT_UNSOLVED


if __name__ == "__main__":
    sys.exit(main())
