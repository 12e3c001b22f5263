"""
Core data structures for KenKen puzzle representation
"""
from typing import List, Dict, Tuple, Optional, Sequence, Iterable
from dataclasses import dataclass, field
from pathlib import Path

from .constraints import OPERATOR_SYMBOLS, OPERATOR_DISPLAY, unify


Position = Tuple[int, int]
Layout = List[List[str]]
ConstraintSpec = Tuple[str, str, int]


class InvalidPuzzleError(ValueError):
    """Raised when a board layout or constraint list is malformed"""


@dataclass
class Domain:
    """A set of cells that must be unified by an arithmetic operator to produce a goal"""
    name: str
    op: str  # 'sum', 'difference', 'product', 'quotient'
    goal: int
    positions: Optional[List[Position]] = field(default=None, repr=False)

    @property
    def symbol(self) -> str:
        return OPERATOR_DISPLAY[self.op]

    def locate(self, layout: Sequence[Sequence[str]]) -> List[Position]:
        """Find (and memoize) this domain's cells in row-major order."""
        if self.positions is None:
            self.positions = [
                (r, c)
                for r, row in enumerate(layout)
                for c, name in enumerate(row)
                if name == self.name
            ]
        return self.positions

    def is_satisfiable(self, candidates: Sequence[Optional[int]]) -> bool:
        """True if the values at this domain's cells meet, or can still meet, the goal"""
        return unify(self.op, self.goal, candidates)

    def __str__(self):
        return f"{self.name} {self.symbol} {self.goal}"


class Grid:
    """N x N search state; None marks a cell that has not been guessed yet"""

    def __init__(self, size: int):
        if size < 1:
            raise InvalidPuzzleError(f"Grid size must be positive, got {size}")
        self.size = size
        self.cells: List[List[Optional[int]]] = [[None] * size for _ in range(size)]

    def get(self, row: int, col: int) -> Optional[int]:
        return self.cells[row][col]

    def set(self, row: int, col: int, value: int):
        self.cells[row][col] = value

    def clear(self, row: int, col: int):
        self.cells[row][col] = None

    def values_at(self, positions: Iterable[Position]) -> List[Optional[int]]:
        return [self.cells[r][c] for r, c in positions]

    def _has_duplicate(self, values: Iterable[Optional[int]]) -> bool:
        found = [False] * (self.size + 1)
        for v in values:
            if v is None:
                continue
            if found[v]:
                return True  # found a value twice
            found[v] = True
        return False

    def row_has_duplicate(self, row: int) -> bool:
        return self._has_duplicate(self.cells[row])

    def col_has_duplicate(self, col: int) -> bool:
        return self._has_duplicate(row[col] for row in self.cells)

    def is_complete(self) -> bool:
        """Assuming cells are filled in row-major order, check the last one only"""
        return self.cells[-1][-1] is not None

    def is_filled(self) -> bool:
        """Check every cell (order independent)"""
        return all(v is not None for row in self.cells for v in row)

    def filled_count(self) -> int:
        return sum(1 for row in self.cells for v in row if v is not None)

    def to_list(self) -> List[List[Optional[int]]]:
        return [list(row) for row in self.cells]

    def __repr__(self):
        return f"Grid(size={self.size}, filled={self.filled_count()}/{self.size * self.size})"


def parse_operator(symbol: str) -> str:
    """Map an operator symbol such as '+' to its name"""
    try:
        return OPERATOR_SYMBOLS[symbol]
    except KeyError:
        raise InvalidPuzzleError(f"Unknown operator {symbol!r}") from None


def build_domains(layout: Sequence[Sequence[str]],
                  constraints: Iterable[ConstraintSpec]) -> Dict[str, Domain]:
    """
    Build the Domain collection for a board layout.

    Args:
        layout: N x N array of domain names
        constraints: (name, operator symbol, goal) triples

    Every domain's positions are computed here, once. Raises
    InvalidPuzzleError if a cell has no domain or a domain has no cell.
    """
    size = len(layout)
    if size == 0:
        raise InvalidPuzzleError("Board layout is empty")
    for r, row in enumerate(layout):
        if len(row) != size:
            raise InvalidPuzzleError(
                f"Row {r} has {len(row)} cells, expected {size} (board must be square)")

    domains: Dict[str, Domain] = {}
    for name, symbol, goal in constraints:
        if name in domains:
            raise InvalidPuzzleError(f"Duplicate constraint for domain {name!r}")
        if isinstance(goal, bool) or not isinstance(goal, int):
            raise InvalidPuzzleError(f"Goal for domain {name!r} must be an integer, got {goal!r}")
        if goal < 1:
            raise InvalidPuzzleError(f"Goal for domain {name!r} must be positive, got {goal}")
        domains[name] = Domain(name=name, op=parse_operator(symbol), goal=goal)

    labels = {name for row in layout for name in row}
    unconstrained = sorted(labels - set(domains))
    if unconstrained:
        raise InvalidPuzzleError(f"Cells belong to domains with no constraint: {unconstrained}")

    for domain in domains.values():
        if not domain.locate(layout):
            raise InvalidPuzzleError(f"Domain {domain.name!r} covers no cells")

    return domains


class KenKenPuzzle:
    """
    A parsed KenKen board. The text format is:

        AAB
        CCB
        CDD

        A + 5
        B + 4
        ...

    Each symbol names a domain; there are as many rows as columns. A blank
    line separates the board from the constraints, one per line as
    <domain> <operator> <goal>.
    """

    def __init__(self, text: str, name: str = "puzzle"):
        self.name = name
        self.rows: Layout = []
        self.constraints: List[ConstraintSpec] = []
        self._parse(text)

        self.size = len(self.rows)
        self.domains: Dict[str, Domain] = build_domains(self.rows, self.constraints)

        # Last solution found by solve()
        self.grid: Optional[List[List[int]]] = None

    @classmethod
    def from_file(cls, path: str) -> "KenKenPuzzle":
        """Load puzzle from a text file"""
        with open(path, 'r', encoding='utf-8') as f:
            text = f.read()
        return cls(text, name=Path(path).stem)

    def _parse(self, text: str):
        """Split the text into board rows and (name, symbol, goal) constraints"""
        constraint_mode = False
        width = None

        for lineno, raw in enumerate(text.splitlines(), 1):
            line = raw.strip()
            if not line:
                if self.rows:
                    constraint_mode = True  # now parsing constraints
                continue

            if constraint_mode:
                self.constraints.append(self._parse_constraint(line, lineno))
                continue

            # A row of the board listing its domains letter by letter
            if width is None:
                width = len(line)  # width of board == max integer to include
            if len(line) != width:
                raise InvalidPuzzleError(
                    f"Line {lineno}: row has {len(line)} cells, expected {width}")
            self.rows.append(list(line))

        if not self.rows:
            raise InvalidPuzzleError("No board rows found")
        if len(self.rows) != width:
            raise InvalidPuzzleError(
                f"Board has {len(self.rows)} rows but is {width} columns wide")
        if not self.constraints:
            raise InvalidPuzzleError("No constraints found after the board")

    @staticmethod
    def _parse_constraint(line: str, lineno: int) -> ConstraintSpec:
        parts = line.split()
        if len(parts) != 3:
            raise InvalidPuzzleError(
                f"Line {lineno}: expected '<domain> <operator> <goal>', got {line!r}")
        name, symbol, goal_text = parts
        if symbol not in OPERATOR_SYMBOLS:
            raise InvalidPuzzleError(f"Line {lineno}: unknown operator {symbol!r}")
        try:
            goal = int(goal_text)
        except ValueError:
            raise InvalidPuzzleError(
                f"Line {lineno}: goal must be an integer, got {goal_text!r}") from None
        return name, symbol, goal

    def domain_at(self, row: int, col: int) -> Domain:
        """Get the domain a cell belongs to"""
        return self.domains[self.rows[row][col]]

    def solve(self, verbose: bool = False) -> Optional[List[List[int]]]:
        from .solver import solve
        self.grid = solve(self.rows, self.domains, verbose=verbose)
        return self.grid

    def is_solved(self) -> bool:
        return self.grid is not None

    def __repr__(self):
        return f"KenKenPuzzle(name={self.name!r}, size={self.size}, domains={len(self.domains)})"
