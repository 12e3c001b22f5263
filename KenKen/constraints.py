"""
Constraint checking for the KenKen solver

Key points:
 - Domain unification: decides whether a (possibly partial) set of values
   can still meet a domain's arithmetic goal
 - Sum/product fold left to right and prune as soon as the goal is exceeded
 - Difference/quotient try every anchor and every ordering of the rest
 - Quotient works in exact integers (a remainder means "no match")
 - ConstraintChecker wraps row/column/domain checks around a Grid

Compatible with:
  from .puzzle import Grid, Domain, KenKenPuzzle
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Dict, List, Optional, Sequence

import numpy as np

if TYPE_CHECKING:
    from .puzzle import Domain, Grid


SUM = 'sum'
DIFFERENCE = 'difference'
PRODUCT = 'product'
QUOTIENT = 'quotient'

# Symbol -> operator name. 'x', '×' and '÷' show up in hand-typed puzzles.
OPERATOR_SYMBOLS: Dict[str, str] = {
    '+': SUM,
    '-': DIFFERENCE,
    '*': PRODUCT,
    'x': PRODUCT,
    '×': PRODUCT,
    '/': QUOTIENT,
    '÷': QUOTIENT,
}

# Canonical symbol used when rendering a domain
OPERATOR_DISPLAY: Dict[str, str] = {
    SUM: '+',
    DIFFERENCE: '-',
    PRODUCT: '*',
    QUOTIENT: '/',
}

COMMUTATIVE = (SUM, PRODUCT)
IDENTITY: Dict[str, int] = {SUM: 0, DIFFERENCE: 0, PRODUCT: 1, QUOTIENT: 1}


# -----------------------------------------------------------------------------
# Unification
# -----------------------------------------------------------------------------
def unify(op: str, goal: int, candidates: Sequence[Optional[int]]) -> bool:
    """
    Return True if the candidates can still be unified by `op` to produce `goal`.

    e.g., for a two-cell domain with a goal of 6 and operator 'sum', the
    values [4, 2] or [1, 5] unify, as do [2, 4] and [5, 1]. A partial list
    such as [4, None] also unifies, since the last cell may still be 2.
    """
    if op in COMMUTATIVE:
        return unify_commutative(op, goal, candidates)
    if op in (DIFFERENCE, QUOTIENT):
        if any(c is None for c in candidates):
            # Not filled out yet; ordered operators are not pruned early.
            return True
        return _unify_ordered(op, goal, None, list(candidates))
    raise ValueError(f"Unknown operator: {op!r}")


def unify_commutative(op: str, goal: int, candidates: Sequence[Optional[int]]) -> bool:
    """Fold sum/product in encounter order, pruning once the goal is exceeded."""
    accumulator = IDENTITY[op]
    for candidate in candidates:
        if candidate is None:
            return True  # so far, we are okay to continue
        if op == SUM:
            accumulator += candidate
        else:
            accumulator *= candidate
        # Values are positive, so the accumulator never shrinks again
        if accumulator > goal:
            return False
    return accumulator == goal


def _unify_ordered(op: str, goal: int, accumulator: Optional[int],
                   remaining: List[int]) -> bool:
    """
    Check every ordering of a fully assigned difference/quotient domain.

    `accumulator` is None until an anchor has been picked; every value
    picked after that is subtracted from (or divided into) it.
    Left-associative on purpose: a - b - c, not the right fold c - (b - a).
    """
    if not remaining:
        if accumulator is None:
            return IDENTITY[op] == goal
        return accumulator == goal

    for idx, candidate in enumerate(remaining):
        if accumulator is None:
            next_val = candidate
        elif op == DIFFERENCE:
            next_val = accumulator - candidate
        else:
            if accumulator % candidate:
                continue  # inexact division never matches
            next_val = accumulator // candidate

        rest = remaining[:idx] + remaining[idx + 1:]
        if _unify_ordered(op, goal, next_val, rest):
            return True

    return False


# -----------------------------------------------------------------------------
# Constraint Checking
# -----------------------------------------------------------------------------
class ConstraintChecker:
    """Validates placements on a Grid against row, column and domain constraints."""

    @staticmethod
    def row_ok(grid: Grid, row: int) -> bool:
        return not grid.row_has_duplicate(row)

    @staticmethod
    def col_ok(grid: Grid, col: int) -> bool:
        return not grid.col_has_duplicate(col)

    @staticmethod
    def domain_ok(grid: Grid, domains: Sequence[Domain]) -> bool:
        """True if every given domain is satisfied or still satisfiable."""
        for domain in domains:
            if not domain.is_satisfiable(grid.values_at(domain.positions)):
                return False
        return True

    @staticmethod
    def is_valid_placement(grid: Grid, row: int, col: int,
                           domains: Sequence[Domain]) -> bool:
        """Check the row, column and domains touched by the cell at (row, col)."""
        return (ConstraintChecker.col_ok(grid, col)
                and ConstraintChecker.row_ok(grid, row)
                and ConstraintChecker.domain_ok(grid, domains))

    @staticmethod
    def is_latin_square(values: Sequence[Sequence[Optional[int]]]) -> bool:
        """Every row and column holds exactly the integers 1..N."""
        n = len(values)
        if n == 0 or any(len(row) != n for row in values):
            return False
        if any(v is None for row in values for v in row):
            return False

        arr = np.array(values, dtype=int)
        expected = np.arange(1, n + 1)
        rows_ok = (np.sort(arr, axis=1) == expected).all()
        cols_ok = (np.sort(arr, axis=0) == expected[:, None]).all()
        return bool(rows_ok and cols_ok)

    @staticmethod
    def verify(grid: Grid, domains: Sequence[Domain]) -> bool:
        """Return True if the grid is a complete solution, False otherwise."""
        if not grid.is_filled():
            return False
        if not ConstraintChecker.is_latin_square(grid.to_list()):
            return False
        return ConstraintChecker.domain_ok(grid, domains)
