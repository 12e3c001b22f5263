"""
KenKen Puzzle Solver Package

A backtracking solver for KenKen puzzles with per-domain arithmetic pruning.
"""

from .puzzle import KenKenPuzzle, Domain, Grid, InvalidPuzzleError, build_domains
from .constraints import ConstraintChecker, unify
from .solver import CSPSolver, solve
from .output import SolutionFormatter

__version__ = "1.0.0"
__all__ = [
    'KenKenPuzzle',
    'Domain',
    'Grid',
    'InvalidPuzzleError',
    'build_domains',
    'ConstraintChecker',
    'unify',
    'CSPSolver',
    'solve',
    'SolutionFormatter'
]
