"""Byte-level channels and the wire formats of blocks, bits, matrices and ciphertexts."""

from __future__ import annotations

import threading
from typing import Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np

from duetmpc.common import BLOCK_SIZE, PAILLIER_CIPHER_SIZE, mpz_from_bytes, mpz_to_bytes
from duetmpc.matrix import MatrixBase, PaillierMatrix

_SIZE_BYTES = 8


class Network:
    """A reliable, ordered byte channel to the other party."""

    def send_data(self, data: bytes) -> None:
        raise NotImplementedError

    def recv_data(self, nbytes: int) -> bytes:
        raise NotImplementedError


class _Channel:
    def __init__(self):
        self._buffer = bytearray()
        self._cond = threading.Condition()

    def put(self, data: bytes) -> None:
        with self._cond:
            self._buffer.extend(data)
            self._cond.notify_all()

    def get(self, nbytes: int, timeout: Optional[float]) -> bytes:
        with self._cond:
            ready = self._cond.wait_for(lambda: len(self._buffer) >= nbytes, timeout)
            if not ready:
                raise TimeoutError(f"timed out waiting for {nbytes} bytes")
            out = bytes(self._buffer[:nbytes])
            del self._buffer[:nbytes]
            return out


class MemoryNetwork(Network):
    """One end of an in-process channel; safe to use from two threads.

    ``timeout`` bounds how long :meth:`recv_data` waits; ``None`` waits forever.
    """

    def __init__(self, incoming: _Channel, outgoing: _Channel, timeout: Optional[float] = None):
        self._incoming = incoming
        self._outgoing = outgoing
        self.timeout = timeout

    def send_data(self, data: bytes) -> None:
        self._outgoing.put(bytes(data))

    def recv_data(self, nbytes: int) -> bytes:
        if nbytes < 0:
            raise ValueError("nbytes must be non-negative")
        return self._incoming.get(nbytes, self.timeout)


def memory_network_pair() -> Tuple[MemoryNetwork, MemoryNetwork]:
    """Return two connected in-process endpoints that wait without a time limit."""
    a_to_b = _Channel()
    b_to_a = _Channel()
    return MemoryNetwork(b_to_a, a_to_b), MemoryNetwork(a_to_b, b_to_a)


def _send_size(net: Network, value: int) -> None:
    net.send_data(int(value).to_bytes(_SIZE_BYTES, "little"))


def _recv_size(net: Network) -> int:
    return int.from_bytes(net.recv_data(_SIZE_BYTES), "little")


def send_block(net: Network, blocks: Iterable[bytes]) -> None:
    """Send 128-bit blocks back to back."""
    payload = bytearray()
    for block in blocks:
        if len(block) != BLOCK_SIZE:
            raise ValueError(f"block must be {BLOCK_SIZE} bytes, got {len(block)}")
        payload.extend(block)
    net.send_data(bytes(payload))


def recv_block(net: Network, count: int) -> List[bytes]:
    """Receive ``count`` 128-bit blocks."""
    data = net.recv_data(count * BLOCK_SIZE)
    return [data[i : i + BLOCK_SIZE] for i in range(0, len(data), BLOCK_SIZE)]


def send_bool(net: Network, bits: Sequence[bool]) -> None:
    """Send bits packed eight to a byte, most significant bit first."""
    packed = bytearray((len(bits) + 7) // 8)
    for i, bit in enumerate(bits):
        if bit:
            packed[i // 8] |= 1 << (7 - i % 8)
    net.send_data(bytes(packed))


def recv_bool(net: Network, length: int) -> List[bool]:
    """Receive ``length`` bits packed by :func:`send_bool`."""
    packed = net.recv_data((length + 7) // 8)
    return [bool((packed[i // 8] >> (7 - i % 8)) & 1) for i in range(length)]


def send_matrix(net: Network, matrix: Union[np.ndarray, MatrixBase]) -> None:
    """Send a 64-bit integer matrix in row-major order; the shape is not sent."""
    arr = matrix.matrix if isinstance(matrix, MatrixBase) else np.asarray(matrix)
    net.send_data(np.ascontiguousarray(arr, dtype="<i8").tobytes())


def recv_matrix(net: Network, rows: int, cols: int) -> np.ndarray:
    """Receive a ``rows`` by ``cols`` 64-bit integer matrix."""
    data = net.recv_data(rows * cols * 8)
    return np.frombuffer(data, dtype="<i8").astype(np.int64).reshape(rows, cols)


def send_cipher(net: Network, matrix: PaillierMatrix) -> None:
    """Send a ciphertext matrix: shape, owner, then fixed-width ciphertexts."""
    _send_size(net, matrix.rows)
    _send_size(net, matrix.cols)
    _send_size(net, matrix.party)
    payload = b"".join(mpz_to_bytes(int(c), PAILLIER_CIPHER_SIZE) for c in matrix.ciphers)
    _send_size(net, len(payload))
    net.send_data(payload)


def recv_cipher(net: Network) -> PaillierMatrix:
    """Receive a ciphertext matrix sent by :func:`send_cipher`."""
    rows = _recv_size(net)
    cols = _recv_size(net)
    party = _recv_size(net)
    data_size = _recv_size(net)
    payload = net.recv_data(data_size)
    needed = rows * cols * PAILLIER_CIPHER_SIZE
    if data_size < needed:
        raise ValueError(f"cipher payload of {data_size} bytes is shorter than {needed}")
    out = PaillierMatrix(rows, cols, party)
    out.set_ciphers(
        mpz_from_bytes(payload[i : i + PAILLIER_CIPHER_SIZE])
        for i in range(0, needed, PAILLIER_CIPHER_SIZE)
    )
    return out