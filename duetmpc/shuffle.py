"""Secret-shared shuffle built from oblivious punctured vectors over GGM trees."""

from __future__ import annotations

import hashlib
from functools import reduce
from typing import Iterable, List, Sequence, Tuple

import numpy as np

from duetmpc.common import BLOCK_SIZE, Block, GGMTreeNode, OTChoice, ceil_log2, random_block
from duetmpc.permutation import Permutation
from duetmpc.prng import AesCtrPrng

ZERO_NODE: GGMTreeNode = bytes(BLOCK_SIZE)

LevelSums = Tuple[GGMTreeNode, GGMTreeNode]


def _xor(a: bytes, b: bytes) -> bytes:
    value = int.from_bytes(a, "little") ^ int.from_bytes(b, "little")
    return value.to_bytes(BLOCK_SIZE, "little")


def _xor_all(nodes: Iterable[bytes]) -> bytes:
    return reduce(_xor, nodes, ZERO_NODE)


def _tweak(seed: bytes, value: int) -> bytes:
    # XOR into the upper 64-bit lane of the block.
    out = bytearray(seed)
    out[8] ^= value
    return bytes(out)


def double_prg(seed: Block) -> Tuple[GGMTreeNode, GGMTreeNode]:
    """Expand one 128-bit seed into two: G(x) = H(x ^ 1) || H(x ^ 2), H(y) = h(y) ^ y."""
    seed = bytes(seed)
    if len(seed) != BLOCK_SIZE:
        raise ValueError(f"seed must be {BLOCK_SIZE} bytes, got {len(seed)}")
    one = _tweak(seed, 1)
    two = _tweak(seed, 2)
    first = _xor(hashlib.sha256(one).digest()[:BLOCK_SIZE], one)
    second = _xor(hashlib.sha256(two).digest()[:BLOCK_SIZE], two)
    return first, second


def _expand(layer: int, leaves: List[GGMTreeNode]) -> None:
    """Replace the first 2**layer nodes in place by their children."""
    for i in range(1 << layer, 0, -1):
        first, second = double_prg(leaves[i - 1])
        leaves[2 * (i - 1)] = first
        leaves[2 * (i - 1) + 1] = second


class ObliviousPuncturedVector:
    """A vector of ``n`` random blocks, known whole to the passive party.

    The active party, acting as OT receiver, learns every block but the one at
    a position of its choosing.
    """

    def __init__(self, n: int):
        if n < 1:
            raise ValueError("n must be positive")
        self.n = n
        self.depth = ceil_log2(n)

    @property
    def ot_num(self) -> int:
        """Number of OTs needed, i.e. the depth of the GGM tree."""
        return self.depth

    def _check_pos(self, pos: int) -> None:
        if not 0 <= pos < self.n:
            raise ValueError("pos should less than n")

    def _path(self, pos: int) -> List[int]:
        return [(pos >> (self.depth - 1 - i)) & 1 for i in range(self.depth)]

    def active_phase_1(self, pos: int) -> List[OTChoice]:
        """Return the OT choice bits for puncturing ``pos``: its path bits inverted."""
        self._check_pos(pos)
        return [1 ^ bit for bit in self._path(pos)]

    def passive_phase_1(self) -> Tuple[List[LevelSums], List[GGMTreeNode]]:
        """Build the whole vector; return per-level (even, odd) sums and the leaves."""
        leaves = [ZERO_NODE] * (1 << self.depth)
        leaves[0] = random_block()
        levels_sums: List[LevelSums] = []
        for layer in range(self.depth):
            _expand(layer, leaves)
            width = 2 << layer
            levels_sums.append((_xor_all(leaves[0:width:2]), _xor_all(leaves[1:width:2])))
        return levels_sums, leaves[: self.n]

    def active_phase_2(self, pos: int, need_levels_sums: Sequence[GGMTreeNode]) -> List[GGMTreeNode]:
        """Rebuild the vector from the OT results, with a zero block at ``pos``."""
        self._check_pos(pos)
        if len(need_levels_sums) < self.depth:
            raise ValueError(f"expected {self.depth} level sums, got {len(need_levels_sums)}")
        leaves = [ZERO_NODE] * (1 << self.depth)
        index = 0
        for layer, bit in enumerate(self._path(pos)):
            _expand(layer, leaves)
            leaves[2 * index] = ZERO_NODE
            leaves[2 * index + 1] = ZERO_NODE
            sibling = 1 - bit
            correction = _xor(_xor_all(leaves[sibling : 2 << layer : 2]), bytes(need_levels_sums[layer]))
            leaves[2 * index + sibling] = _xor(leaves[2 * index + sibling], correction)
            index = 2 * index + bit
        return leaves[: self.n]


def _extend_leaf(leaf: GGMTreeNode, cols: int) -> np.ndarray:
    data = AesCtrPrng(leaf).generate(8 * cols)
    return np.frombuffer(data, dtype="<i8").astype(np.int64)


def _extend_matrix(leaves_matrix: Sequence[Sequence[GGMTreeNode]], n: int, cols: int) -> np.ndarray:
    out = np.zeros((n, n, cols), dtype=np.int64)
    for i, row in enumerate(leaves_matrix):
        for j, leaf in enumerate(row):
            out[i, j] = _extend_leaf(leaf, cols)
    return out


class ShareTranslation:
    """Share translation: ``n`` punctured vectors yielding a tuple with p(a) - b = delta."""

    def __init__(self, n: int):
        self.n = n
        self._opv = ObliviousPuncturedVector(n)

    def _check_permutation(self, permutation: Permutation) -> None:
        if len(permutation) != self.n:
            raise ValueError("n shuold equal permutation's size")

    def active_phase_1(self, permutation: Permutation) -> List[List[OTChoice]]:
        """OT choices for puncturing row ``i`` at ``permutation[i]``."""
        self._check_permutation(permutation)
        return [self._opv.active_phase_1(permutation[i]) for i in range(self.n)]

    def passive_phase_1(self) -> Tuple[List[List[LevelSums]], List[List[GGMTreeNode]]]:
        """Build ``n`` whole vectors; return their OT messages and leaves."""
        all_levels_sums = []
        all_leaves = []
        for _ in range(self.n):
            sums, leaves = self._opv.passive_phase_1()
            all_levels_sums.append(sums)
            all_leaves.append(leaves)
        return all_levels_sums, all_leaves

    def active_phase_2(
        self, permutation: Permutation, all_need_levels_sums: Sequence[Sequence[GGMTreeNode]]
    ) -> List[List[GGMTreeNode]]:
        """Rebuild the ``n`` punctured vectors from the OT results."""
        self._check_permutation(permutation)
        if len(all_need_levels_sums) != self.n:
            raise ValueError(f"expected {self.n} rows of level sums, got {len(all_need_levels_sums)}")
        return [self._opv.active_phase_2(permutation[i], all_need_levels_sums[i]) for i in range(self.n)]

    def passive_tuple(
        self, cols: int, boolean: bool = False
    ) -> Tuple[List[List[LevelSums]], np.ndarray, np.ndarray]:
        """Return the OT messages and the passive party's ``a`` and ``b`` (n by cols)."""
        all_levels_sums, all_leaves = self.passive_phase_1()
        ext = _extend_matrix(all_leaves, self.n, cols)
        if boolean:
            a = np.bitwise_xor.reduce(ext, axis=0)
            b = np.bitwise_xor.reduce(ext, axis=1)
        else:
            a = ext.sum(axis=0, dtype=np.int64)
            b = ext.sum(axis=1, dtype=np.int64)
        return all_levels_sums, a.reshape(self.n, cols), b.reshape(self.n, cols)

    def active_delta(
        self,
        cols: int,
        permutation: Permutation,
        all_need_levels_sums: Sequence[Sequence[GGMTreeNode]],
        boolean: bool = False,
    ) -> np.ndarray:
        """Return the active party's ``delta`` with p(a) - b = delta (or p(a) ^ b = delta)."""
        all_leaves = self.active_phase_2(permutation, all_need_levels_sums)
        ext = _extend_matrix(all_leaves, self.n, cols)
        order = list(permutation.data)
        if boolean:
            col_sums = np.bitwise_xor.reduce(ext, axis=0).reshape(self.n, cols)
            row_sums = np.bitwise_xor.reduce(ext, axis=1).reshape(self.n, cols)
            return np.bitwise_xor(col_sums[order], row_sums)
        col_sums = ext.sum(axis=0, dtype=np.int64).reshape(self.n, cols)
        row_sums = ext.sum(axis=1, dtype=np.int64).reshape(self.n, cols)
        with np.errstate(over="ignore"):
            return col_sums[order] - row_sums


def mask_input(x, a) -> np.ndarray:
    """Passive step of the shuffle: return ``x - a`` over 64-bit integers."""
    x = np.asarray(x, dtype=np.int64)
    a = np.asarray(a, dtype=np.int64)
    if x.shape != a.shape:
        raise ValueError(f"shape mismatch: {x.shape} vs {a.shape}")
    with np.errstate(over="ignore"):
        return x - a


def translate(permutation: Permutation, x_sub_a, delta) -> np.ndarray:
    """Active step of the shuffle: return ``p(x - a) + delta``, a share of ``p(x)``."""
    permuted = permutation.permute_rows(np.asarray(x_sub_a, dtype=np.int64))
    delta = np.asarray(delta, dtype=np.int64)
    if permuted.shape != delta.shape:
        raise ValueError(f"shape mismatch: {permuted.shape} vs {delta.shape}")
    with np.errstate(over="ignore"):
        return permuted + delta