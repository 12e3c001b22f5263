"""
Diagnostics: puzzle structure analysis and failure dumps

Helps tell an impossible puzzle apart from a typo in the board file.
"""
from typing import Dict, List, Tuple

from .puzzle import KenKenPuzzle, Domain
from .solver import CSPSolver
from .constraints import SUM, DIFFERENCE, PRODUCT, QUOTIENT
from .output import SolutionFormatter


class SolverDiagnostics:

    @staticmethod
    def goal_range(domain: Domain, size: int) -> Tuple[int, int]:
        """
        Loose (min, max) bounds on what a domain can produce with values 1..size.
        Repeats are allowed, since cells of one domain may sit in different rows.
        """
        k = len(domain.positions)
        if domain.op == SUM:
            return k, k * size
        if domain.op == PRODUCT:
            return 1, size ** k
        if k == 1:
            return 1, size
        if domain.op == DIFFERENCE:
            return 0, size - (k - 1)
        if domain.op == QUOTIENT:
            return 1, size
        return 0, 0

    @staticmethod
    def infeasible_domains(puzzle: KenKenPuzzle) -> List[str]:
        """Names of domains whose goal is outside the reachable range"""
        bad = []
        for name, domain in sorted(puzzle.domains.items()):
            lo, hi = SolverDiagnostics.goal_range(domain, puzzle.size)
            if not lo <= domain.goal <= hi:
                bad.append(name)
        return bad

    @staticmethod
    def analyze_puzzle_structure(puzzle: KenKenPuzzle) -> None:
        """Print the domain table with a feasibility check per domain"""
        print("\n" + "=" * 70)
        print("PUZZLE STRUCTURE ANALYSIS")
        print("=" * 70)

        print(f"\nSize: {puzzle.size}x{puzzle.size}")
        print(f"Total domains: {len(puzzle.domains)}")

        print("\n--- BOARD ---")
        for row in puzzle.rows:
            print("  " + "".join(row))

        print("\n--- CONSTRAINT FEASIBILITY ---")
        for name, domain in sorted(puzzle.domains.items()):
            lo, hi = SolverDiagnostics.goal_range(domain, puzzle.size)
            print(f"Domain {name}: {len(domain.positions)} cells, "
                  f"{domain.op} {domain.goal}, range=[{lo}, {hi}]", end="")
            if not lo <= domain.goal <= hi:
                print(" ⚠ IMPOSSIBLE!")
            else:
                print(" ✓")

    @staticmethod
    def dump_failure(solver: CSPSolver, puzzle: KenKenPuzzle) -> None:
        """Dump solver state after the search space was exhausted"""
        print("\n" + "=" * 70)
        print("FAILURE DUMP")
        print("=" * 70)
        print(f"Rows: {puzzle.rows}")
        print(f"Domains: {[str(d) for d in puzzle.domains.values()]}")
        print(f"Max: {puzzle.size}")
        print("Attempt:")
        print(SolutionFormatter.format_grid(solver.grid.to_list()))

        bad = SolverDiagnostics.infeasible_domains(puzzle)
        if bad:
            print(f"\n⚠ Domains with unreachable goals: {', '.join(bad)}")
        elif solver.stats['backtracks'] > 0:
            print("\n⚠ SEARCH EXHAUSTED - every domain is reachable on its own, "
                  "but not together with the row/column rules")

    @staticmethod
    def print_summary(solver: CSPSolver, puzzle: KenKenPuzzle) -> Dict:
        """Print a one-screen summary and return it"""
        attempts = solver.stats['total_attempts']
        prunes = solver.stats['row_col_prunes'] + solver.stats['domain_prunes']
        summary = {
            'puzzle': puzzle.name,
            'size': puzzle.size,
            'domains': len(puzzle.domains),
            'solved': solver.grid.is_filled(),
            'attempts': attempts,
            'prune_rate': prunes / attempts if attempts else 0.0,
            'elapsed': solver.elapsed,
        }
        print(f"\nDiagnostics for {puzzle.name}:")
        print(f"  Attempts: {attempts}, pruned {summary['prune_rate']:.1%}")
        print(f"  Elapsed: {solver.elapsed:.3f}s")
        return summary
