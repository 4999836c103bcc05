"""Paillier encryption over 64-bit plaintexts, as used by the two parties."""

from __future__ import annotations

import math
import secrets
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Union

import numpy as np
from cryptography.hazmat.primitives.asymmetric import rsa

from duetmpc.common import (
    PAILLIER_KEY_SIZE,
    double_to_fixed,
    fixed_to_double,
    mpz_from_bytes,
    mpz_to_bytes,
)
from duetmpc.matrix import MatrixBase, PaillierMatrix

_UINT64_MOD = 1 << 64
_INT64_HALF = 1 << 63
_MIN_KEY_SIZE = 128
_SMALL_PRIMES = (3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37, 41, 43, 47, 53, 59, 61, 67, 71, 73, 79, 83, 89, 97)


class ForeignCiphertextError(RuntimeError):
    """Raised when decrypting a ciphertext made under the other party's key."""


def _to_int64(value: int) -> int:
    value %= _UINT64_MOD
    return value - _UINT64_MOD if value >= _INT64_HALF else value


def _is_probable_prime(n: int, rounds: int = 40) -> bool:
    if n < 2:
        return False
    for p in (2,) + _SMALL_PRIMES:
        if n % p == 0:
            return n == p
    d = n - 1
    s = 0
    while d % 2 == 0:
        d //= 2
        s += 1
    for _ in range(rounds):
        a = secrets.randbelow(n - 3) + 2
        x = pow(a, d, n)
        if x in (1, n - 1):
            continue
        for _ in range(s - 1):
            x = pow(x, 2, n)
            if x == n - 1:
                break
        else:
            return False
    return True


def _random_prime(bits: int) -> int:
    while True:
        candidate = secrets.randbits(bits) | (0b11 << (bits - 2)) | 1
        if _is_probable_prime(candidate):
            return candidate


def _generate_primes(key_size: int):
    if key_size >= 1024:
        numbers = rsa.generate_private_key(public_exponent=65537, key_size=key_size).private_numbers()
        return numbers.p, numbers.q
    half = key_size // 2
    while True:
        p = _random_prime(half)
        q = _random_prime(key_size - half)
        if p != q and (p * q).bit_length() == key_size:
            return p, q


@dataclass(frozen=True)
class PaillierPublicKey:
    """A Paillier public key with generator n + 1."""

    n: int
    n_squared: int = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if self.n < 3:
            raise ValueError("modulus is too small")
        object.__setattr__(self, "n_squared", self.n * self.n)

    @property
    def byte_count(self) -> int:
        """Size of the serialized key in bytes."""
        return (self.n.bit_length() + 7) // 8

    def _random_unit(self) -> int:
        while True:
            r = secrets.randbelow(self.n - 1) + 1
            if math.gcd(r, self.n) == 1:
                return r

    def encrypt(self, plaintext: int) -> int:
        """Encrypt one plaintext with fresh randomness."""
        m = int(plaintext) % self.n
        r = self._random_unit()
        return (1 + m * self.n) * pow(r, self.n, self.n_squared) % self.n_squared

    def add(self, c0: int, c1: int) -> int:
        """Return a ciphertext of the sum of two plaintexts."""
        return int(c0) * int(c1) % self.n_squared

    def add_plain(self, cipher: int, plaintext: int) -> int:
        """Return a ciphertext of the encrypted value plus ``plaintext``."""
        m = int(plaintext) % self.n
        return int(cipher) * (1 + m * self.n) % self.n_squared

    def mul_plain(self, cipher: int, plaintext: int) -> int:
        """Return a ciphertext of the encrypted value times ``plaintext``."""
        return pow(int(cipher), int(plaintext) % self.n, self.n_squared)

    def to_bytes(self) -> bytes:
        """Serialize the modulus least significant byte first."""
        return mpz_to_bytes(self.n, self.byte_count)

    @classmethod
    def from_bytes(cls, data: bytes) -> "PaillierPublicKey":
        """Read a key written by :meth:`to_bytes`."""
        if not data:
            raise ValueError("empty public key data")
        return cls(mpz_from_bytes(data))


def _as_array(matrix, dtype) -> np.ndarray:
    arr = matrix.matrix if isinstance(matrix, MatrixBase) else matrix
    return np.atleast_2d(np.asarray(arr, dtype=dtype))


class Paillier:
    """One party's Paillier keys, plus the other party's public key once known."""

    def __init__(self, party: int, key_size: int = PAILLIER_KEY_SIZE):
        if key_size < _MIN_KEY_SIZE:
            raise ValueError(f"key_size must be at least {_MIN_KEY_SIZE} bits")
        self.party_id = party
        self.key_size = key_size
        p, q = _generate_primes(key_size)
        n = p * q
        self.public_key = PaillierPublicKey(n)
        self._lambda = (p - 1) * (q - 1) // math.gcd(p - 1, q - 1)
        self._mu = pow(self._lambda, -1, n)
        self.other_public_key: Optional[PaillierPublicKey] = None

    @property
    def public_key_byte_count(self) -> int:
        return self.public_key.byte_count

    def _key(self, own_key: bool) -> PaillierPublicKey:
        if own_key:
            return self.public_key
        if self.other_public_key is None:
            raise RuntimeError("public key of the other party is not set")
        return self.other_public_key

    def set_other_public_key(self, key: Union[PaillierPublicKey, bytes]) -> None:
        """Install the other party's public key, given as a key or its bytes."""
        if not isinstance(key, PaillierPublicKey):
            key = PaillierPublicKey.from_bytes(key)
        self.other_public_key = key

    def encode(self, value: Union[int, Iterable[int]]):
        """Map a 64-bit integer (or several) onto the unsigned plaintext space."""
        if isinstance(value, (int, np.integer)):
            return int(value) % _UINT64_MOD
        return [int(v) % _UINT64_MOD for v in value]

    def decode(self, plaintext: int) -> int:
        """Return the unsigned 64-bit value held by a plaintext."""
        return int(plaintext) % _UINT64_MOD

    def _decrypt_one(self, cipher) -> int:
        if cipher is None:
            raise ValueError("ciphertext is missing")
        n = self.public_key.n
        u = pow(int(cipher), self._lambda, self.public_key.n_squared)
        return (u - 1) // n * self._mu % n

    def _encrypt_plaintexts(self, plaintexts: Sequence[int], rows: int, cols: int, own_key: bool) -> PaillierMatrix:
        key = self._key(own_key)
        owner = self.party_id if own_key else 1 - self.party_id
        out = PaillierMatrix(rows, cols, owner)
        out.set_ciphers(key.encrypt(m) for m in plaintexts)
        return out

    def encrypt(self, matrix, use_own_key: bool = True) -> PaillierMatrix:
        """Encrypt a 64-bit integer matrix under this party's or the other's key."""
        arr = _as_array(matrix, np.int64)
        rows, cols = arr.shape
        return self._encrypt_plaintexts(self.encode(arr.ravel().tolist()), rows, cols, use_own_key)

    def _check_owner(self, ciphers: PaillierMatrix) -> None:
        if ciphers.party != self.party_id:
            raise ForeignCiphertextError("Cannot decrypt ciphertext from other party")

    def decrypt(self, ciphers: PaillierMatrix) -> np.ndarray:
        """Decrypt a matrix made under this party's key to signed 64-bit integers."""
        self._check_owner(ciphers)
        values = [_to_int64(self.decode(self._decrypt_one(c))) for c in ciphers.ciphers]
        return np.array(values, dtype=np.int64).reshape(ciphers.rows, ciphers.cols)

    def encrypt_double(self, matrix, use_own_key: bool = True) -> PaillierMatrix:
        """Encrypt a float matrix in fixed point."""
        arr = _as_array(matrix, np.float64)
        rows, cols = arr.shape
        fixed = double_to_fixed(arr).ravel().tolist()
        return self._encrypt_plaintexts(self.encode(fixed), rows, cols, use_own_key)

    def decrypt_double(self, ciphers: PaillierMatrix) -> np.ndarray:
        """Decrypt a fixed-point matrix back to floats."""
        return fixed_to_double(self.decrypt(ciphers))

    @staticmethod
    def _pairwise(a: Sequence, b: Sequence) -> List:
        a = list(a)
        b = list(b)
        if len(a) != len(b):
            raise ValueError(f"length mismatch: {len(a)} vs {len(b)}")
        return list(zip(a, b))

    def add(self, c0: Sequence[int], c1: Sequence[int], own_key: bool = True) -> List[int]:
        """Add two lists of ciphertexts element by element."""
        key = self._key(own_key)
        return [key.add(x, y) for x, y in self._pairwise(c0, c1)]

    def add_plain(self, ciphers: Sequence[int], plaintexts: Sequence[int], own_key: bool = True) -> List[int]:
        """Add plaintexts to ciphertexts element by element."""
        key = self._key(own_key)
        return [key.add_plain(c, m) for c, m in self._pairwise(ciphers, plaintexts)]

    def mul_plain(self, ciphers: Sequence[int], plaintexts: Sequence[int], own_key: bool = True) -> List[int]:
        """Multiply ciphertexts by plaintexts element by element."""
        key = self._key(own_key)
        return [key.mul_plain(c, m) for c, m in self._pairwise(ciphers, plaintexts)]