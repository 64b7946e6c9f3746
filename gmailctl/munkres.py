"""Munkres (Hungarian) method for the assignment problem; cost is minimised."""

from __future__ import annotations

import enum
import math
import sys
from collections.abc import Sequence


class MaskType(enum.IntEnum):
    """Marks on the cost matrix entries."""

    NONE = 0
    STAR = 1
    PRIME = 2


_MASK_MARKS = {MaskType.NONE: " ", MaskType.STAR: "*", MaskType.PRIME: "'"}


def _format_number(value: float) -> str:
    text = repr(float(value))
    return text[:-2] if text.endswith(".0") else text


class Munkres:
    """Solver for a (possibly rectangular) assignment problem.

    After run(), links[i] is the column assigned to row i, or -1 when the row
    has no assignment, and cost is the total cost following the links.
    Rectangular matrices are padded to a square with zero costs.
    """

    def __init__(self, nrow: int, ncol: int) -> None:
        if nrow <= 0 or ncol <= 0:
            raise ValueError(f"matrix dimensions must be positive, got {nrow}x{ncol}")
        self._nrow_ori = nrow
        self._ncol_ori = ncol
        size = max(nrow, ncol)
        self._nrow = size
        self._ncol = size
        self.c: list[list[float]] = [[0.0] * size for _ in range(size)]
        self.c_ori: list[list[float]] = []
        self.m: list[list[MaskType]] = [[MaskType.NONE] * size for _ in range(size)]
        self.links: list[int] = [-1] * nrow
        self.cost = 0.0
        self._row_covered = [False] * size
        self._col_covered = [False] * size
        self._path_row0 = 0
        self._path_col0 = 0

    def set_cost_matrix(self, c: Sequence[Sequence[float]]) -> None:
        """Load the cost matrix; it must have at least nrow rows of ncol values."""
        if len(c) < self._nrow_ori or any(len(row) < self._ncol_ori for row in c[: self._nrow_ori]):
            raise ValueError(
                f"cost matrix must be at least {self._nrow_ori}x{self._ncol_ori}"
            )
        self.c_ori = [list(row) for row in c]
        size = self._nrow
        self.c = [[0.0] * size for _ in range(size)]
        self.m = [[MaskType.NONE] * size for _ in range(size)]
        for i, row in enumerate(c[: self._nrow_ori]):
            for j, value in enumerate(row[: self._ncol_ori]):
                if math.isnan(value):
                    raise ValueError("cannot set cost matrix because of NaN value")
                self.c[i][j] = float(value)
        self._clear_covers()
        self._path_row0 = 0
        self._path_col0 = 0

    def run(self) -> None:
        """Solve the problem, filling links and cost."""
        if self._ncol == 1:
            column = [row[0] for row in self.c]
            best = min(range(self._nrow), key=column.__getitem__)
            self.cost = column[best]
            self.links = [-1] * self._nrow_ori
            self.links[best] = 0
            return

        if self._nrow == 1:
            row = self.c[0]
            best = min(range(self._ncol), key=row.__getitem__)
            self.cost = row[best]
            self.links = [best]
            return

        steps = {
            1: self._step1,
            2: self._step2,
            3: self._step3,
            4: self._step4,
            5: self._step5,
            6: self._step6,
        }
        step = 1
        while step != 7:
            step = steps[step]()

        self.cost = 0.0
        self.links = [-1] * self._nrow_ori
        for i in range(self._nrow_ori):
            for j in range(self._ncol_ori):
                if self.m[i][j] == MaskType.STAR:
                    self.links[i] = j
                    self.cost += self.c_ori[i][j]
                    break

    def str_cost_matrix(self) -> str:
        """Render the cost matrix with masks and covers."""
        lines = [
            f"{' ':>4}"
            + "".join(f"{'T ' if cov else 'F ':>8}" for cov in self._col_covered)
        ]
        for covered, costs, masks in zip(self._row_covered, self.c, self.m):
            cells = "".join(
                f"{_format_number(value) + _MASK_MARKS[mask]:>8}"
                for value, mask in zip(costs, masks)
            )
            lines.append(f"{'T' if covered else 'F':>4}" + cells)
        return "".join(line + "\n" for line in lines)

    def _clear_covers(self) -> None:
        self._row_covered = [False] * self._nrow
        self._col_covered = [False] * self._ncol

    def _step1(self) -> int:
        """Subtract each row's minimum from the row."""
        for row in self.c:
            xmin = min(row)
            row[:] = [value - xmin for value in row]
        return 2

    def _step2(self) -> int:
        """Star zeros with no starred zero in their row or column."""
        for i, row in enumerate(self.c):
            for j, value in enumerate(row):
                if not self._row_covered[i] and not self._col_covered[j] and value == 0:
                    self.m[i][j] = MaskType.STAR
                    self._row_covered[i] = True
                    self._col_covered[j] = True
        self._clear_covers()
        return 3

    def _step3(self) -> int:
        """Cover columns holding starred zeros; finish when enough are covered."""
        for row in self.m:
            for j, mask in enumerate(row):
                if mask == MaskType.STAR:
                    self._col_covered[j] = True
        count = sum(self._col_covered)
        if count >= self._ncol or count >= self._nrow:
            return 7
        return 4

    def _step4(self) -> int:
        """Prime uncovered zeros until one has no starred zero in its row."""
        while True:
            found = self._find_noncov_zero()
            if found is None:
                return 6
            row, col = found
            self.m[row][col] = MaskType.PRIME
            star_col = self._find_star_in_row(row)
            if star_col >= 0:
                self._row_covered[row] = True
                self._col_covered[star_col] = False
            else:
                self._path_row0 = row
                self._path_col0 = col
                return 5

    def _step5(self) -> int:
        """Augment along the alternating path of primed and starred zeros."""
        path = [(self._path_row0, self._path_col0)]
        while True:
            r = self._find_star_in_col(path[-1][1])
            if r < 0:
                break
            path.append((r, path[-1][1]))
            path.append((r, self._find_prime_in_row(r)))

        for r, c in path:
            self.m[r][c] = MaskType.NONE if self.m[r][c] == MaskType.STAR else MaskType.STAR

        self._clear_covers()
        for row in self.m:
            row[:] = [MaskType.NONE if mask == MaskType.PRIME else mask for mask in row]
        return 3

    def _step6(self) -> int:
        """Shift costs by the smallest uncovered value."""
        xmin = sys.float_info.max
        for i, row in enumerate(self.c):
            if self._row_covered[i]:
                continue
            for j, value in enumerate(row):
                if not self._col_covered[j]:
                    xmin = min(xmin, value)

        for i, row in enumerate(self.c):
            for j in range(self._ncol):
                if self._row_covered[i]:
                    row[j] += xmin
                if not self._col_covered[j]:
                    row[j] -= xmin
        return 4

    def _find_noncov_zero(self) -> tuple[int, int] | None:
        for i, row in enumerate(self.c):
            if self._row_covered[i]:
                continue
            for j, value in enumerate(row):
                if not self._col_covered[j] and value == 0:
                    return i, j
        return None

    def _find_star_in_row(self, row: int) -> int:
        col = -1
        for j, mask in enumerate(self.m[row]):
            if mask == MaskType.STAR:
                col = j
        return col

    def _find_star_in_col(self, col: int) -> int:
        found = -1
        for i, row in enumerate(self.m):
            if row[col] == MaskType.STAR:
                found = i
        return found

    def _find_prime_in_row(self, row: int) -> int:
        col = 0
        for j, mask in enumerate(self.m[row]):
            if mask == MaskType.PRIME:
                col = j
        return col