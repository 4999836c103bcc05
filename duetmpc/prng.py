"""Pseudo-random generators shared by the two parties of a protocol."""

from __future__ import annotations

from typing import Optional

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from duetmpc.common import BLOCK_SIZE, Block, random_block


class AesCtrPrng:
    """A deterministic byte stream: AES-128 in counter mode keyed by the seed."""

    def __init__(self, seed: Optional[Block] = None):
        if seed is None:
            seed = random_block()
        seed = bytes(seed)
        if len(seed) != BLOCK_SIZE:
            raise ValueError(f"seed must be {BLOCK_SIZE} bytes, got {len(seed)}")
        cipher = Cipher(algorithms.AES(seed), modes.CTR(bytes(BLOCK_SIZE)))
        self._encryptor = cipher.encryptor()

    def generate(self, nbytes: int) -> bytes:
        """Return the next ``nbytes`` bytes of the stream."""
        if nbytes < 0:
            raise ValueError("nbytes must be non-negative")
        return self._encryptor.update(bytes(nbytes))

    def randbelow(self, bound: int) -> int:
        """Return a uniform integer in ``[0, bound)``."""
        if bound < 1:
            raise ValueError("bound must be positive")
        bits = (bound - 1).bit_length()
        if bits == 0:
            return 0
        nbytes = (bits + 7) // 8
        mask = (1 << bits) - 1
        while True:
            value = int.from_bytes(self.generate(nbytes), "little") & mask
            if value < bound:
                return value


class _BufferedStream:
    """A byte buffer refilled from a generator whenever a request does not fit."""

    def __init__(self, generator: AesCtrPrng, size: int):
        self._generator = generator
        self._size = size
        self._buffer = b""
        self._index = 0
        self.refill()

    def refill(self) -> None:
        self._buffer = self._generator.generate(self._size)
        self._index = 0

    def take(self, nbytes: int) -> bytes:
        if nbytes < 0:
            raise ValueError("nbytes must be non-negative")
        if nbytes > self._size:
            raise ValueError(f"request of {nbytes} bytes exceeds buffer of {self._size} bytes")
        if self._index + nbytes > self._size:
            self.refill()
        out = self._buffer[self._index : self._index + nbytes]
        self._index += nbytes
        return out


class PRNG:
    """Randomness for a protocol party.

    The common stream yields the same numbers in both parties when they share
    ``common_seed``; the unique stream is seeded privately in each party.
    """

    def __init__(self, common_seed: Block, buffer_blocks: int = 256):
        if buffer_blocks < 1:
            raise ValueError("buffer_blocks must be positive")
        size = buffer_blocks * BLOCK_SIZE
        self._common = _BufferedStream(AesCtrPrng(common_seed), size)
        self._unique_generator = AesCtrPrng()
        self._unique = _BufferedStream(self._unique_generator, size)

    @property
    def unique_generator(self) -> AesCtrPrng:
        """The private generator behind the unique stream."""
        return self._unique_generator

    def common_rand(self) -> int:
        """Return a signed 64-bit number that both parties draw alike."""
        return int.from_bytes(self._common.take(8), "little", signed=True)

    def unique_rand(self, nbytes: int = 8) -> int:
        """Return a signed integer of ``nbytes`` bytes private to this party."""
        if nbytes < 1:
            raise ValueError("nbytes must be positive")
        return int.from_bytes(self._unique.take(nbytes), "little", signed=True)

    def unique_int64(self) -> int:
        """Return a signed 64-bit number private to this party."""
        return self.unique_rand(8)

    def unique_bytes(self, nbytes: int) -> bytes:
        """Return ``nbytes`` random bytes private to this party."""
        return self._unique.take(nbytes)