"""
Backtracking solver for KenKen puzzles

Strategy:
1. Walk the cells in row-major order starting at (0, 0)
2. Try each value 1..N in ascending order
3. After each placement check only the affected row, column and domain
4. Recurse on success; clear the cell and report failure on exhaustion

The first solution found wins, so the search is fully deterministic.
"""
import sys
import time
from typing import Dict, List, Optional, Sequence

from .puzzle import Domain, Grid, InvalidPuzzleError, Position
from .constraints import ConstraintChecker


# Frames reserved for the caller on top of one frame per cell (plus one per row)
RECURSION_HEADROOM = 200


class CSPSolver:
    def __init__(self, layout: Sequence[Sequence[str]], domains: Dict[str, Domain],
                 verbose: bool = False, progress_interval: int = 10000):
        self.layout = layout
        self.domains = domains
        self.size = len(layout)
        self.verbose = verbose
        self.progress_interval = progress_interval  # 0 turns progress lines off
        self.stats = {
            'total_attempts': 0,
            'row_col_prunes': 0,
            'domain_prunes': 0,
            'backtracks': 0,
            'max_depth': 0,
        }
        self.elapsed = 0.0

        self.domains_by_cell: Dict[Position, List[Domain]] = {}
        self._index_domains()
        self.grid = Grid(self.size)

    # -------------------------------------------------------------------------
    # Setup
    # -------------------------------------------------------------------------
    def _index_domains(self) -> None:
        """Map each cell to the domains covering it; every cell needs one."""
        if self.size == 0:
            raise InvalidPuzzleError("Board layout is empty")
        for r, row in enumerate(self.layout):
            if len(row) != self.size:
                raise InvalidPuzzleError(f"Row {r} has {len(row)} cells, expected {self.size}")

        for domain in self.domains.values():
            if domain.positions is None:
                domain.locate(self.layout)
            if not domain.positions:
                raise InvalidPuzzleError(f"Domain {domain.name!r} covers no cells")
            for pos in domain.positions:
                self.domains_by_cell.setdefault(pos, []).append(domain)

        for r in range(self.size):
            for c in range(self.size):
                if (r, c) not in self.domains_by_cell:
                    raise InvalidPuzzleError(
                        f"Cell ({r},{c}) labeled {self.layout[r][c]!r} belongs to no domain")

    # -------------------------------------------------------------------------
    # Main solving driver
    # -------------------------------------------------------------------------
    def solve(self) -> bool:
        start = time.time()

        if self.verbose:
            print(f"Starting backtracking solver: {self.size}x{self.size} grid, "
                  f"{len(self.domains)} domains")

        old_limit = sys.getrecursionlimit()
        needed = self.size * (self.size + 1) + RECURSION_HEADROOM
        if old_limit < needed:
            sys.setrecursionlimit(needed)
        try:
            result = self._guess_and_check(0, 0, 0)
        finally:
            if old_limit < needed:
                sys.setrecursionlimit(old_limit)
        self.elapsed = time.time() - start

        if result and not ConstraintChecker.verify(self.grid, list(self.domains.values())):
            raise RuntimeError(f"Couldn't verify the final attempt: {self.grid.to_list()}")

        if self.verbose:
            print("\n✓ Puzzle solved!" if result else "\n✗ No solution found")
            self._print_stats()

        return result

    def solution(self) -> Optional[List[List[int]]]:
        """The solved grid, or None if the search has not succeeded"""
        if not self.grid.is_filled():
            return None
        return self.grid.to_list()

    # -------------------------------------------------------------------------
    # Backtracking
    # -------------------------------------------------------------------------
    def _guess_and_check(self, row: int, col: int, depth: int) -> bool:
        if col >= self.size:
            # Time to move to the next row
            return self._guess_and_check(row + 1, 0, depth)
        if row >= self.size:
            raise InvalidPuzzleError(f"Cursor ({row},{col}) is outside the {self.size}x{self.size} grid")

        if depth > self.stats['max_depth']:
            self.stats['max_depth'] = depth

        grid = self.grid
        domains = self.domains_by_cell[(row, col)]

        for v in range(1, self.size + 1):
            grid.set(row, col, v)
            self.stats['total_attempts'] += 1

            if self.verbose and self.progress_interval > 0 \
                    and self.stats['total_attempts'] % self.progress_interval == 0:
                print(f"  Progress: {grid.filled_count()}/{self.size * self.size} cells | "
                      f"Attempts: {self.stats['total_attempts']} | "
                      f"Backtracks: {self.stats['backtracks']} | Depth: {depth}")

            if not (ConstraintChecker.col_ok(grid, col) and ConstraintChecker.row_ok(grid, row)):
                self.stats['row_col_prunes'] += 1
                continue
            if not ConstraintChecker.domain_ok(grid, domains):
                self.stats['domain_prunes'] += 1
                continue

            if grid.is_complete():
                return True  # found it

            # So far so good; a False here means try the next value
            if self._guess_and_check(row, col + 1, depth + 1):
                return True

        # Didn't find a satisfactory value here, backtrack
        grid.clear(row, col)
        self.stats['backtracks'] += 1
        return False

    # -------------------------------------------------------------------------
    # Stats
    # -------------------------------------------------------------------------
    def _print_stats(self) -> None:
        """Print solving statistics."""
        print("\nSolving Statistics:")
        print(f"  Total attempts: {self.stats['total_attempts']}")
        print(f"  Row/column prunes: {self.stats['row_col_prunes']}")
        print(f"  Domain prunes: {self.stats['domain_prunes']}")
        print(f"  Backtracks: {self.stats['backtracks']}")
        print(f"  Max depth: {self.stats['max_depth']}")
        print(f"  Time: {self.elapsed:.3f}s")


def solve(layout: Sequence[Sequence[str]], domains: Dict[str, Domain],
          verbose: bool = False) -> Optional[List[List[int]]]:
    """
    Solve a board layout against its domains.

    Returns the fully assigned grid, or None if the puzzle has no solution.
    Raises InvalidPuzzleError for a malformed layout.
    """
    solver = CSPSolver(layout, domains, verbose=verbose)
    if not solver.solve():
        return None
    return solver.solution()
