"""Two-party secure computation primitives: secret-shared matrices, permutations, share translation, secret-shared shuffle and Paillier encryption."""

__version__ = "0.1.0"

__all__ = ["common", "io", "matrix", "paillier", "permutation", "prng", "shuffle"]