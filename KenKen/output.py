import json
from typing import Dict, List, Optional, Sequence
from datetime import datetime

from .puzzle import KenKenPuzzle, Domain
from .constraints import ConstraintChecker, unify


class SolutionFormatter:
    """Formats puzzle solutions for output"""

    @staticmethod
    def format_grid(grid: Sequence[Sequence[Optional[int]]]) -> str:
        """
        Plain grid, one row per line, values separated by spaces.
        Unset cells are shown as '·'.
        """
        return "\n".join(
            " ".join('·' if v is None else str(v) for v in row)
            for row in grid
        )

    @staticmethod
    def _domain_values(domain: Domain, grid: Sequence[Sequence[int]]) -> List[int]:
        return [grid[r][c] for r, c in domain.positions]

    @staticmethod
    def _check_domain_satisfied(domain: Domain, grid: Sequence[Sequence[int]]) -> bool:
        """Check if a domain's goal is met by the solved grid"""
        values = SolutionFormatter._domain_values(domain, grid)
        if any(v is None for v in values):
            return False
        return unify(domain.op, domain.goal, values)

    @staticmethod
    def format_solution_json(puzzle: KenKenPuzzle, grid: Optional[List[List[int]]],
                             stats: Dict) -> Dict:
        """
        Format solution as JSON
        """
        solved = grid is not None
        solution = {
            'puzzle_info': {
                'name': puzzle.name,
                'size': puzzle.size,
                'total_cells': puzzle.size * puzzle.size,
                'total_domains': len(puzzle.domains),
                'solved': solved,
                'timestamp': datetime.now().isoformat()
            },
            'solving_stats': dict(stats),
            'grid': [list(row) for row in grid] if solved else None,
            'latin_square': ConstraintChecker.is_latin_square(grid) if solved else False,
            'domain_validation': {}
        }

        for name, domain in sorted(puzzle.domains.items()):
            entry = {
                'operator': domain.op,
                'symbol': domain.symbol,
                'goal': domain.goal,
                'cells': [[r, c] for r, c in domain.positions],
            }
            if solved:
                entry['values'] = SolutionFormatter._domain_values(domain, grid)
                entry['satisfied'] = SolutionFormatter._check_domain_satisfied(domain, grid)
            solution['domain_validation'][name] = entry

        return solution

    @staticmethod
    def format_solution_human_readable(puzzle: KenKenPuzzle,
                                       grid: Optional[List[List[int]]]) -> str:
        """
        Format solution as human-readable text
        """
        lines = []
        lines.append("=" * 60)
        lines.append("KENKEN PUZZLE SOLUTION")
        lines.append("=" * 60)
        lines.append(f"\nPuzzle '{puzzle.name}' is {puzzle.size}x{puzzle.size} "
                     f"with {len(puzzle.domains)} domains\n")

        if grid is None:
            lines.append("Could not solve it!")
            lines.append("=" * 60)
            return "\n".join(lines)

        lines.append("SOLVED:")
        lines.append("-" * 60)
        lines.append(SolutionFormatter.format_grid(grid))

        lines.append("\n" + "=" * 60)
        lines.append("DOMAIN VALIDATION:")
        lines.append("-" * 60)

        for name, domain in sorted(puzzle.domains.items()):
            satisfied = "✓" if SolutionFormatter._check_domain_satisfied(domain, grid) else "✗"
            values = SolutionFormatter._domain_values(domain, grid)
            constraint_str = f"{domain.symbol} {domain.goal}"
            lines.append(
                f"Domain {name}: {constraint_str:10s} "
                f"→ Values: {' '.join(str(v) for v in values):15s} {satisfied}"
            )

        lines.append("=" * 60)

        return "\n".join(lines)

    @staticmethod
    def save_solution(puzzle: KenKenPuzzle, grid: Optional[List[List[int]]],
                      stats: Dict, output_path: str):
        """
        Save solution to JSON file
        """
        solution = SolutionFormatter.format_solution_json(puzzle, grid, stats)

        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump(solution, f, indent=2, ensure_ascii=False)

        print(f"\n✓ Solution saved to: {output_path}")

    @staticmethod
    def save_human_readable(puzzle: KenKenPuzzle, grid: Optional[List[List[int]]],
                            output_path: str):
        """
        Save human-readable solution to text file
        """
        text = SolutionFormatter.format_solution_human_readable(puzzle, grid)

        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(text + "\n")

        print(f"✓ Human-readable solution saved to: {output_path}")
