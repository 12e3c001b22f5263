import os
import tempfile
import unittest

from KenKen.puzzle import (
    Domain, Grid, KenKenPuzzle, InvalidPuzzleError, build_domains, parse_operator,
)
from KenKen.constraints import SUM, DIFFERENCE, PRODUCT, QUOTIENT


BOARD_3X3 = """AAB
CCB
CDD

A + 3
B + 4
C + 8
D + 3
"""


def layout(*rows):
    return [list(row) for row in rows]


class TestGrid(unittest.TestCase):
    def test_starts_empty(self):
        grid = Grid(3)
        self.assertEqual(grid.to_list(), [[None] * 3 for _ in range(3)])
        self.assertFalse(grid.is_complete())
        self.assertFalse(grid.is_filled())
        self.assertEqual(grid.filled_count(), 0)

    def test_row_duplicates_ignore_unset(self):
        grid = Grid(3)
        grid.set(0, 0, 1)
        grid.set(0, 2, 2)
        self.assertFalse(grid.row_has_duplicate(0))
        grid.set(0, 1, 2)
        self.assertTrue(grid.row_has_duplicate(0))
        self.assertFalse(grid.row_has_duplicate(1))

    def test_col_duplicates(self):
        grid = Grid(3)
        grid.set(0, 1, 3)
        grid.set(2, 1, 3)
        self.assertTrue(grid.col_has_duplicate(1))
        grid.clear(2, 1)
        self.assertFalse(grid.col_has_duplicate(1))

    def test_is_complete_checks_last_cell(self):
        grid = Grid(2)
        grid.set(1, 1, 1)
        self.assertTrue(grid.is_complete())
        self.assertFalse(grid.is_filled())

    def test_values_at(self):
        grid = Grid(2)
        grid.set(0, 1, 2)
        self.assertEqual(grid.values_at([(0, 0), (0, 1)]), [None, 2])

    def test_to_list_is_a_copy(self):
        grid = Grid(2)
        snapshot = grid.to_list()
        grid.set(0, 0, 1)
        self.assertIsNone(snapshot[0][0])

    def test_invalid_size(self):
        with self.assertRaises(InvalidPuzzleError):
            Grid(0)


class TestDomain(unittest.TestCase):
    def test_locate_is_row_major_and_memoized(self):
        board = layout("AAB", "CAB", "CDD")
        domain = Domain('A', SUM, 6)
        self.assertEqual(domain.locate(board), [(0, 0), (0, 1), (1, 1)])

        # The layout never changes during a solve, so the first answer sticks
        self.assertEqual(domain.locate(layout("BBB", "BBB", "BBB")), [(0, 0), (0, 1), (1, 1)])

    def test_is_satisfiable(self):
        domain = Domain('A', QUOTIENT, 2)
        self.assertTrue(domain.is_satisfiable([4, 2]))
        self.assertTrue(domain.is_satisfiable([None, 3]))
        self.assertFalse(domain.is_satisfiable([3, 2]))

    def test_str(self):
        self.assertEqual(str(Domain('B', PRODUCT, 24)), "B * 24")


class TestBuildDomains(unittest.TestCase):
    def test_builds_positions(self):
        domains = build_domains(layout("AB", "AB"), [('A', '+', 3), ('B', '-', 1)])
        self.assertEqual(set(domains), {'A', 'B'})
        self.assertEqual(domains['A'].op, SUM)
        self.assertEqual(domains['B'].op, DIFFERENCE)
        self.assertEqual(domains['A'].positions, [(0, 0), (1, 0)])
        self.assertEqual(domains['B'].positions, [(0, 1), (1, 1)])

    def test_operator_aliases(self):
        self.assertEqual(parse_operator('x'), PRODUCT)
        self.assertEqual(parse_operator('×'), PRODUCT)
        self.assertEqual(parse_operator('÷'), QUOTIENT)
        with self.assertRaises(InvalidPuzzleError):
            parse_operator('%')

    def test_non_square_layout(self):
        with self.assertRaises(InvalidPuzzleError):
            build_domains(layout("AAB", "AAB"), [('A', '+', 3), ('B', '+', 3)])
        with self.assertRaises(InvalidPuzzleError):
            build_domains([], [])

    def test_unknown_operator(self):
        with self.assertRaises(InvalidPuzzleError):
            build_domains(layout("A"), [('A', '^', 1)])

    def test_goal_must_be_positive_integer(self):
        with self.assertRaises(InvalidPuzzleError):
            build_domains(layout("A"), [('A', '+', 0)])
        with self.assertRaises(InvalidPuzzleError):
            build_domains(layout("A"), [('A', '+', 1.5)])

    def test_duplicate_constraint(self):
        with self.assertRaises(InvalidPuzzleError):
            build_domains(layout("A"), [('A', '+', 1), ('A', '+', 1)])

    def test_cell_without_constraint(self):
        with self.assertRaises(InvalidPuzzleError):
            build_domains(layout("AB", "AB"), [('A', '+', 3)])

    def test_constraint_without_cells(self):
        with self.assertRaises(InvalidPuzzleError):
            build_domains(layout("AA", "AA"), [('A', '+', 6), ('Z', '+', 1)])


class TestPuzzleParsing(unittest.TestCase):
    def test_parse(self):
        puzzle = KenKenPuzzle(BOARD_3X3)
        self.assertEqual(puzzle.size, 3)
        self.assertEqual(puzzle.rows, layout("AAB", "CCB", "CDD"))
        self.assertEqual(len(puzzle.domains), 4)
        self.assertEqual(puzzle.domain_at(2, 0).name, 'C')
        self.assertEqual(puzzle.domains['C'].positions, [(1, 0), (1, 1), (2, 0)])
        self.assertIsNone(puzzle.grid)
        self.assertIn("size=3", repr(puzzle))

    def test_whitespace_and_extra_blank_lines(self):
        text = "\n  AB\nAB  \n\n\nA + 3\n\nB - 1\n\n"
        puzzle = KenKenPuzzle(text)
        self.assertEqual(puzzle.rows, layout("AB", "AB"))
        self.assertEqual(puzzle.domains['B'].op, DIFFERENCE)

    def test_product_alias(self):
        puzzle = KenKenPuzzle("AA\nBB\n\nA x 2\nB + 3\n")
        self.assertEqual(puzzle.domains['A'].op, PRODUCT)

    def test_ragged_row(self):
        with self.assertRaises(InvalidPuzzleError):
            KenKenPuzzle("AAB\nCB\nCDD\n\nA + 3\n")

    def test_too_few_rows(self):
        with self.assertRaises(InvalidPuzzleError):
            KenKenPuzzle("AAB\nCCB\n\nA + 3\nB + 3\nC + 3\n")

    def test_bad_constraint_line(self):
        with self.assertRaises(InvalidPuzzleError):
            KenKenPuzzle("A\n\nA +\n")
        with self.assertRaises(InvalidPuzzleError):
            KenKenPuzzle("A\n\nA + one\n")
        with self.assertRaises(InvalidPuzzleError):
            KenKenPuzzle("A\n\nA ? 1\n")

    def test_missing_sections(self):
        with self.assertRaises(InvalidPuzzleError):
            KenKenPuzzle("")
        with self.assertRaises(InvalidPuzzleError):
            KenKenPuzzle("AB\nAB\n")

    def test_from_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "small.txt")
            with open(path, 'w', encoding='utf-8') as f:
                f.write(BOARD_3X3)
            puzzle = KenKenPuzzle.from_file(path)
        self.assertEqual(puzzle.name, "small")
        self.assertEqual(puzzle.size, 3)


if __name__ == '__main__':
    unittest.main()
