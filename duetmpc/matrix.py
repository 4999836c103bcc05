"""Matrix containers for public, private, shared and encrypted data."""

from __future__ import annotations

import copy
from typing import Any, Iterable, List, Optional, Sequence, Tuple

import numpy as np


class MatrixBase:
    """A row-major 2-D matrix with flat and (row, col) indexing."""

    dtype: Any = np.int64

    def __init__(self, rows: int = 0, cols: int = 0):
        self._matrix = np.zeros((rows, cols), dtype=self.dtype)

    @property
    def matrix(self) -> np.ndarray:
        return self._matrix

    @matrix.setter
    def matrix(self, value) -> None:
        arr = np.array(value, dtype=self.dtype)
        if arr.ndim != 2:
            raise ValueError("matrix must be two-dimensional")
        self._matrix = np.ascontiguousarray(arr)

    @property
    def rows(self) -> int:
        return self._matrix.shape[0]

    @property
    def cols(self) -> int:
        return self._matrix.shape[1]

    @property
    def size(self) -> int:
        return self._matrix.size

    @property
    def shape(self) -> Tuple[int, int]:
        return (self.rows, self.cols)

    def resize(self, rows: int, cols: int) -> None:
        """Change the shape; contents are kept only if the element count is unchanged."""
        if rows * cols == self.size:
            self._matrix = self._matrix.reshape(rows, cols).copy()
        else:
            self._matrix = np.zeros((rows, cols), dtype=self.dtype)

    def _locate(self, index):
        if isinstance(index, tuple):
            return index
        index = int(index)
        if not -self.size <= index < self.size:
            raise IndexError(f"index {index} out of range for size {self.size}")
        if index < 0:
            index += self.size
        return divmod(index, self.cols)

    def __getitem__(self, index):
        return self._matrix[self._locate(index)]

    def __setitem__(self, index, value) -> None:
        self._matrix[self._locate(index)] = value

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._matrix.tolist()!r})"


class PublicMatrix(MatrixBase):
    """A matrix known to both parties."""

    def __init__(self, rows: int = 0, cols: int = 0, dtype: Any = np.float64):
        self.dtype = dtype
        super().__init__(rows, cols)


class PrivateMatrix(MatrixBase):
    """A matrix whose contents belong to one party."""

    def __init__(self, rows: int = 0, cols: int = 0, party_id: int = 0, dtype: Any = np.float64):
        self.dtype = dtype
        self.party_id = party_id
        super().__init__(rows, cols)

    def index_like(self, rows: int, cols: int, party_id: int, axis: Optional[int] = None) -> None:
        """Fill with indices when owned by ``party_id``.

        With no axis each element holds its flat index; axis 0 gives the row
        index and axis 1 the column index.
        """
        self.resize(rows, cols)
        if self.party_id != party_id:
            return
        if axis is None:
            self.matrix = np.arange(rows * cols).reshape(rows, cols)
        elif axis == 0:
            self.matrix = np.repeat(np.arange(rows), cols).reshape(rows, cols)
        elif axis == 1:
            self.matrix = np.tile(np.arange(cols), rows).reshape(rows, cols)

    def __repr__(self) -> str:
        return f"PrivateMatrix(party_id={self.party_id}, {self.matrix.tolist()!r})"


def _check_same_size(a: MatrixBase, b: MatrixBase) -> None:
    if a.size != b.size:
        raise ValueError(f"size mismatch: {a.size} vs {b.size}")


class BoolMatrix(MatrixBase):
    """Boolean (XOR) secret shares stored as int64."""

    dtype = np.int64

    @property
    def shares(self) -> np.ndarray:
        return self.matrix

    @shares.setter
    def shares(self, value) -> None:
        self.matrix = value

    def __xor__(self, other: "BoolMatrix") -> "BoolMatrix":
        _check_same_size(self, other)
        out = BoolMatrix()
        out.shares = np.bitwise_xor(self.shares.reshape(other.shape), other.shares)
        return out

    def __and__(self, other: "BoolMatrix") -> "BoolMatrix":
        _check_same_size(self, other)
        out = BoolMatrix()
        out.shares = np.bitwise_and(self.shares.reshape(other.shape), other.shares)
        return out


class ArithMatrix(MatrixBase):
    """Arithmetic secret shares over the ring of 64-bit integers."""

    dtype = np.int64

    @property
    def shares(self) -> np.ndarray:
        return self.matrix

    @shares.setter
    def shares(self, value) -> None:
        self.matrix = value

    def _binary(self, other: "ArithMatrix", op) -> "ArithMatrix":
        if self.shape != other.shape:
            raise ValueError(f"shape mismatch: {self.shape} vs {other.shape}")
        out = ArithMatrix()
        with np.errstate(over="ignore"):
            out.shares = op(self.shares, other.shares)
        return out

    def __add__(self, other: "ArithMatrix") -> "ArithMatrix":
        return self._binary(other, np.add)

    def __sub__(self, other: "ArithMatrix") -> "ArithMatrix":
        return self._binary(other, np.subtract)

    def __mul__(self, other: "ArithMatrix") -> "ArithMatrix":
        return self._binary(other, np.multiply)


class PaillierMatrix:
    """A row-major matrix of Paillier ciphertexts belonging to one party's key."""

    def __init__(self, rows: int = 0, cols: int = 0, party: int = 0):
        self.party = party
        self._rows = 0
        self._cols = 0
        self.ciphers: List[Any] = []
        self.resize(rows, cols)

    @property
    def rows(self) -> int:
        return self._rows

    @property
    def cols(self) -> int:
        return self._cols

    @property
    def size(self) -> int:
        return self._rows * self._cols

    def resize(self, rows: int, cols: int) -> None:
        """Change the shape, keeping the leading ciphertexts in flat order."""
        self._rows = rows
        self._cols = cols
        wanted = rows * cols
        del self.ciphers[wanted:]
        self.ciphers.extend([None] * (wanted - len(self.ciphers)))

    def _flat(self, index) -> int:
        if isinstance(index, tuple):
            row, col = index
            if not (0 <= row < self._rows and 0 <= col < self._cols):
                raise IndexError(f"index {index} out of range for shape {(self._rows, self._cols)}")
            return row * self._cols + col
        return int(index)

    def __getitem__(self, index):
        return self.ciphers[self._flat(index)]

    def __setitem__(self, index, value) -> None:
        self.ciphers[self._flat(index)] = value

    def set_ciphers(self, ciphers: Iterable[Any]) -> None:
        values = list(ciphers)
        if len(values) != self.size:
            raise ValueError(f"expected {self.size} ciphertexts, got {len(values)}")
        self.ciphers = values

    def __len__(self) -> int:
        return self.size


def _with_matrix(template: MatrixBase, data) -> MatrixBase:
    out = copy.copy(template)
    out.matrix = data
    return out


def _empty_like(template: MatrixBase) -> MatrixBase:
    return _with_matrix(template, np.zeros((0, 0), dtype=template.dtype))


def matrix_block(
    src: MatrixBase,
    begin_row: int,
    begin_col: int,
    row_num: int,
    col_num: int,
    party_id: Optional[int] = None,
) -> MatrixBase:
    """Return a rectangular block of ``src``.

    When ``party_id`` is given, ``src`` must be a private matrix and the block
    is taken only by its owner; other parties get an empty matrix.
    """
    if party_id is not None and src.party_id != party_id:
        return _empty_like(src)
    if (
        min(begin_row, begin_col, row_num, col_num) < 0
        or begin_row + row_num > src.rows
        or begin_col + col_num > src.cols
    ):
        raise ValueError("block exceeds matrix bounds")
    data = src.matrix[begin_row : begin_row + row_num, begin_col : begin_col + col_num]
    return _with_matrix(src, data)


def _check_private_pair(a: MatrixBase, b: MatrixBase) -> None:
    if a.party_id != b.party_id:
        raise ValueError("two private matrix must have same party.")


def vstack(top: MatrixBase, bottom: MatrixBase, party_id: Optional[int] = None) -> MatrixBase:
    """Stack two matrices vertically."""
    if party_id is not None:
        _check_private_pair(top, bottom)
        if top.party_id != party_id:
            return _empty_like(top)
    if top.cols != bottom.cols:
        raise ValueError("not support broadcast.")
    return _with_matrix(top, np.vstack([top.matrix, bottom.matrix]))


def hstack(left: MatrixBase, right: MatrixBase, party_id: Optional[int] = None) -> MatrixBase:
    """Stack two matrices horizontally."""
    if party_id is not None:
        _check_private_pair(left, right)
        if left.party_id != party_id:
            return _empty_like(left)
    if left.rows != right.rows:
        raise ValueError("not support broadcast.")
    return _with_matrix(left, np.hstack([left.matrix, right.matrix]))