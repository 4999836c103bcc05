# duetmpc

Building blocks for two-party secure computation on matrices. The two
parties are numbered 0 and 1. Values are held either privately by one party
or as additive (arithmetic) or XOR (boolean) secret shares split between both.

The package depends on `numpy` and `cryptography`. Its test suite uses
`pytest`, which the `test` extra installs.

## What is included

- `duetmpc.common`: constants, fixed-point conversion (`double_to_fixed`,
  which truncates toward zero, and `fixed_to_double`, with 16 fractional
  bits), `ceil_log2`, random 128-bit blocks (`random_block`), and big-integer
  helpers (`mpz_from_bytes` and `mpz_to_bytes`, least significant byte first,
  and `random_mpz`, which draws an integer with exactly the given number of
  bits).
- `duetmpc.matrix`: `PublicMatrix`, `PrivateMatrix` (owned by one party, with
  `index_like` to fill it with indices), `ArithMatrix` (additive shares over
  64-bit integers, with `+`, `-` and element-wise `*`), `BoolMatrix` (XOR
  shares, with `^` and `&`) and `PaillierMatrix` (a row-major grid of
  ciphertexts). `matrix_block`, `vstack` and `hstack` cut and join them.
- `duetmpc.prng`: `AesCtrPrng`, an AES-128 counter-mode byte stream keyed by
  a 16-byte seed, and `PRNG`, which gives both parties the same "common"
  random numbers from a shared seed (`common_rand`) and each party its own
  "unique" random numbers (`unique_rand`, `unique_int64`, `unique_bytes`).
- `duetmpc.permutation`: `Permutation` and `PrivatePermutation`, with random
  generation reproducible from a seed (`Permutation.random`), `inverse`,
  `combine`, and `permute`, `inverse_permute` and `permute_rows` for
  sequences, arrays and matrix rows.
- `duetmpc.io`: the `Network` interface, an in-process `MemoryNetwork`
  (`memory_network_pair()` returns two linked ends that can be used from two
  threads), and helpers to send and receive blocks (`send_block`,
  `recv_block`), packed bits (`send_bool`, `recv_bool`), 64-bit integer
  matrices (`send_matrix`, `recv_matrix`) and ciphertext matrices
  (`send_cipher`, `recv_cipher`).
- `duetmpc.shuffle`: the GGM-tree double PRG (`double_prg`), the oblivious
  punctured vector (`ObliviousPuncturedVector`), share translation
  (`ShareTranslation`) and the two steps of the secret-shared shuffle
  (`mask_input`, `translate`).
- `duetmpc.paillier`: additively homomorphic Paillier encryption with
  `PaillierPublicKey` and `Paillier`. Decrypting a ciphertext made under the
  other party's key raises `ForeignCiphertextError`.

## Example: a secret-shared shuffle tuple

Share translation gives the passive party a pair of matrices `(a, b)` and the
active party a permutation `p` with a correction `delta`, such that
`p(a) - b == delta`. The passive party masks its data with `a`, and the active
party permutes the masked data and adds `delta`. The two results are then
additive shares of the permuted data.

```python
import numpy as np

from duetmpc.permutation import Permutation
from duetmpc.shuffle import ShareTranslation, mask_input, translate

rows, cols = 4, 2
perm = Permutation.random(rows)

passive = ShareTranslation(rows)
levels_sums, a, b = passive.passive_tuple(cols)

active = ShareTranslation(rows)
choices = active.active_phase_1(perm)
# An oblivious transfer hands the active party, for every row and level,
# the level sum selected by its choice bit.
received = [
    [sums[level][bit] for level, bit in enumerate(row_choices)]
    for sums, row_choices in zip(levels_sums, choices)
]
delta = active.active_delta(cols, perm, received)

x = np.arange(rows * cols, dtype=np.int64).reshape(rows, cols)
share_active = translate(perm, mask_input(x, a), delta)
share_passive = b
assert np.array_equal(share_active + share_passive, perm.permute_rows(x))
```

## Example: Paillier

Party 1 encrypts under party 0's public key and adds plaintexts to the
ciphertexts; only party 0 can decrypt the result. `Paillier` takes a
`key_size` (2048 bits by default).

```python
from duetmpc.matrix import PaillierMatrix
from duetmpc.paillier import Paillier

alice = Paillier(0)
bob = Paillier(1)
bob.set_other_public_key(alice.public_key)

encrypted = bob.encrypt([[1, 2, 3]], use_own_key=False)  # owned by party 0
summed = bob.add_plain(encrypted.ciphers, [10, 20, 30], own_key=False)

result = PaillierMatrix(1, 3, party=0)
result.set_ciphers(summed)
assert alice.decrypt(result).tolist() == [[11, 22, 33]]
```

## Example: two parties in one process

```python
from duetmpc.io import memory_network_pair, recv_bool, send_bool

net0, net1 = memory_network_pair()
send_bool(net0, [True, False, True])
assert recv_bool(net1, 3) == [True, False, True]
```

## What the package does not do

- It has no oblivious transfer. The share-translation example above hands
  the level sums across directly; in a real deployment the chosen sums must
  be delivered by an oblivious-transfer protocol you supply.
- It has no network transport between machines. `Network` is an interface;
  the only implementation is the in-process `MemoryNetwork`.
- It has no higher-level secure operations on shares, such as sharing and
  revealing values, secure comparison, sorting, argmax or multiplication
  triples. It provides the containers, randomness, permutations, shuffle
  tuples and encryption such operations are built from.
- It has no command-line program.