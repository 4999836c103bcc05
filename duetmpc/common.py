"""Shared constants and small numeric helpers used throughout the package."""

from __future__ import annotations

import math
import os
from typing import Callable

import numpy as np

# Types used by the protocols.
Block = bytes
OTChoice = int
GGMTreeNode = bytes
RegisterAddress = int

BLOCK_SIZE = 16

# Secure comparison: the number of blocks must be a power of two.
BLOCK_BIT_LENGTH = 1
OT_SIZE = 1 << BLOCK_BIT_LENGTH

# Arithmetic shares.
FIXED_POINT_PRECISION = 16
FIXED_SCALE = 1 << FIXED_POINT_PRECISION
POW_DEPTH = 6

# Boolean shares.
KOGGE_STONE_PPA_DEPTH = 6

# Oblivious transfer.
DEFAULT_BASE_OT_SIZES = 128
DEFAULT_EXT_OT_SIZES = 8192

# Triples.
DEFAULT_BOOLEAN_TRIPLE_BUFFER_SIZE = 1024
DEFAULT_ARITHMETIC_TRIPLE_BUFFER_SIZE = 8192

# Fully homomorphic encryption.
FHE_BATCH_SIZE = 8192
POLY_MODULUS_DEGREE = 8192
CRT_PRIME_COUNT = 4
FHE_RANDOM_BIT_LENGTH = 168
TWO_POWER_SIXTY_FOUR = 1 << 64

# Additively homomorphic encryption.
PAILLIER_KEY_SIZE = 2048
PAILLIER_CIPHER_SIZE = ((PAILLIER_KEY_SIZE + 7) // 8) * 2
STATISTICAL_LAMBDA = 40
PAILLIER_THREADS = 1

# Sigmoid approximation coefficients.
SIGMOID_PARAMS = (-0.018715, 0.24955, 0.4999)
# Division initial guess.
TWO_POINT_NINE = 2.9142
# Extremes used by max / min.
MAX_VALUE = 0x000000FFFFFFFFFF
MIN_VALUE = 0x8FFFFFFFFFFFFFFF - (1 << 64)

_INT64_MOD = 1 << 64
_INT64_HALF = 1 << 63


def _wrap_int64(value: int) -> int:
    """Reduce an integer into the signed 64-bit range."""
    value %= _INT64_MOD
    return value - _INT64_MOD if value >= _INT64_HALF else value


def random_block() -> Block:
    """Return a fresh random 128-bit block from the operating system."""
    return os.urandom(BLOCK_SIZE)


def double_to_fixed(value):
    """Encode a float (or array of floats) as fixed point, truncating toward zero."""
    if isinstance(value, np.ndarray) or np.ndim(value) > 0:
        scaled = np.trunc(np.asarray(value, dtype=np.float64) * FIXED_SCALE)
        return scaled.astype(np.int64)
    return _wrap_int64(int(float(value) * FIXED_SCALE))


def fixed_to_double(value):
    """Decode a fixed-point integer (or array of them) back to float."""
    if isinstance(value, np.ndarray) or np.ndim(value) > 0:
        return np.asarray(value, dtype=np.int64).astype(np.float64) / FIXED_SCALE
    return int(value) / FIXED_SCALE


def ceil_log2(n: int) -> int:
    """Return the smallest k with 2**k >= n."""
    if n < 1:
        raise ValueError("ceil_log2 requires a positive integer")
    return (int(n) - 1).bit_length()


def random_mpz(generate: Callable[[int], bytes], bits: int) -> int:
    """Draw a random integer with exactly ``bits`` significant bits.

    ``generate`` takes a byte count and returns that many random bytes.
    """
    if bits < 1:
        raise ValueError("bits must be positive")
    byte_count = (bits + 7) // 8
    shift = byte_count * 8 - bits
    while True:
        data = generate(byte_count)
        if len(data) != byte_count:
            raise ValueError("generator returned the wrong number of bytes")
        out = int.from_bytes(data, "big") >> shift
        if out != 0 and out.bit_length() == bits:
            return out


def mpz_from_bytes(data: bytes) -> int:
    """Read a non-negative integer stored least significant byte first."""
    if data is None:
        raise ValueError("data is None")
    return int.from_bytes(bytes(data), "little")


def mpz_to_bytes(value: int, length: int) -> bytes:
    """Write a non-negative integer least significant byte first, zero padded."""
    if value < 0:
        raise ValueError("value must be non-negative")
    needed = (int(value).bit_length() + 7) // 8
    if needed > length:
        raise ValueError(f"value needs {needed} bytes but only {length} are available")
    return int(value).to_bytes(length, "little")