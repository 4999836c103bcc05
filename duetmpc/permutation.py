"""Permutations of rows and sequences, public or owned by one party."""

from __future__ import annotations

import copy
from typing import Any, Optional, Sequence, Tuple, Union

import numpy as np

from duetmpc.common import Block, random_block
from duetmpc.matrix import MatrixBase
from duetmpc.prng import AesCtrPrng


class Permutation:
    """A permutation of ``0 .. n-1``; element ``i`` of the output is input ``self[i]``."""

    def __init__(self, data: Sequence[int]):
        order = tuple(int(x) for x in data)
        if sorted(order) != list(range(len(order))):
            raise ValueError("index should like 0, 1, 2, ..., n-1")
        self._data: Tuple[int, ...] = order

    @classmethod
    def random(cls, size: int, seed: Optional[Block] = None):
        """Draw a uniformly random permutation, reproducible from ``seed``."""
        if size < 0:
            raise ValueError("size must be non-negative")
        prng = AesCtrPrng(random_block() if seed is None else seed)
        order = list(range(size))
        for i in range(size - 1, 0, -1):
            j = prng.randbelow(i + 1)
            order[i], order[j] = order[j], order[i]
        return cls(order)

    @property
    def data(self) -> Tuple[int, ...]:
        return self._data

    def __len__(self) -> int:
        return len(self._data)

    def __getitem__(self, index: int) -> int:
        index = int(index)
        if not 0 <= index < len(self._data):
            raise IndexError("index should be less than permutation size")
        return self._data[index]

    def __iter__(self):
        return iter(self._data)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Permutation):
            return NotImplemented
        return self._data == other._data

    def __hash__(self) -> int:
        return hash(self._data)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self._data)!r})"

    def _check_length(self, n: int) -> None:
        if n != len(self._data):
            raise ValueError(f"expected {len(self._data)} items, got {n}")

    def permute(self, values: Sequence[Any]) -> Any:
        """Return ``values`` rearranged so that item ``i`` is ``values[self[i]]``."""
        self._check_length(len(values))
        if isinstance(values, np.ndarray):
            return values[list(self._data)]
        return [values[j] for j in self._data]

    def inverse_permute(self, values: Sequence[Any]) -> Any:
        """Undo :meth:`permute`: item ``self[i]`` of the output is ``values[i]``."""
        self._check_length(len(values))
        if isinstance(values, np.ndarray):
            out = np.empty_like(values)
            out[list(self._data)] = values
            return out
        out = [None] * len(values)
        for i, j in enumerate(self._data):
            out[j] = values[i]
        return out

    def permute_rows(self, matrix: Union[np.ndarray, MatrixBase]):
        """Rearrange the rows of a 2-D array or matrix container."""
        if isinstance(matrix, MatrixBase):
            self._check_length(matrix.rows)
            out = copy.copy(matrix)
            out.matrix = matrix.matrix[list(self._data)]
            return out
        arr = np.asarray(matrix)
        self._check_length(arr.shape[0])
        return arr[list(self._data)]

    def combine(self, other: "Permutation") -> "Permutation":
        """Concatenate with ``other``, which acts on the indices after this one's."""
        n = len(self._data)
        return Permutation(list(self._data) + [x + n for x in other.data])

    def inverse(self) -> "Permutation":
        out = [0] * len(self._data)
        for i, j in enumerate(self._data):
            out[j] = i
        return Permutation(out)


class PrivatePermutation(Permutation):
    """A permutation known only to the party ``party_id``."""

    def __init__(self, data: Union[int, Sequence[int]], party_id: int = 0):
        if isinstance(data, int):
            data = Permutation.random(data).data
        super().__init__(data)
        self.party_id = party_id

    def __repr__(self) -> str:
        return f"PrivatePermutation({list(self.data)!r}, party_id={self.party_id})"