import numpy as np
import pytest

from duetmpc.matrix import (
    ArithMatrix,
    BoolMatrix,
    PaillierMatrix,
    PrivateMatrix,
    PublicMatrix,
    hstack,
    matrix_block,
    vstack,
)


def arith(data):
    m = ArithMatrix()
    m.shares = data
    return m


def boolm(data):
    m = BoolMatrix()
    m.shares = data
    return m


def private(data, party_id=0):
    m = PrivateMatrix(party_id=party_id)
    m.matrix = data
    return m


def test_new_matrix_is_zero_with_shape():
    m = ArithMatrix(2, 3)
    assert m.rows == 2
    assert m.cols == 3
    assert m.size == 6
    assert m.shape == (2, 3)
    assert np.array_equal(m.shares, np.zeros((2, 3), dtype=np.int64))


def test_flat_and_row_col_indexing_agree():
    m = ArithMatrix(2, 3)
    for i in range(m.size):
        m[i] = i * 7
    for r in range(2):
        for c in range(3):
            assert m[r, c] == m[r * 3 + c]
    m[1, 2] = -9
    assert m[5] == -9


def test_flat_index_out_of_range():
    m = ArithMatrix(2, 2)
    m[3] = 8
    assert m[3] == 8
    with pytest.raises(IndexError):
        _ = m[4]
    with pytest.raises(IndexError):
        m[10] = 1
    assert m.shares.ravel().tolist() == [0, 0, 0, 8]


def test_negative_flat_index():
    m = arith([[1, 2], [3, 4]])
    assert m[-1] == m[3]


def test_resize_same_size_keeps_row_major_data():
    m = arith([[0, 1, 2], [3, 4, 5]])
    m.resize(3, 2)
    assert m.shape == (3, 2)
    assert m.shares.ravel().tolist() == [0, 1, 2, 3, 4, 5]


def test_resize_different_size_resets():
    m = arith([[1, 2], [3, 4]])
    m.resize(3, 3)
    assert m.shape == (3, 3)
    assert not m.shares.any()


def test_matrix_setter_requires_2d():
    with pytest.raises(ValueError):
        arith([1, 2, 3])


def test_public_matrix_default_float():
    m = PublicMatrix(2, 2)
    m[0] = 1.5
    assert m[0, 0] == 1.5
    assert m.matrix.dtype == np.float64


def test_private_matrix_party_and_dtype():
    m = PrivateMatrix(2, 2, party_id=1, dtype=np.int64)
    assert m.party_id == 1
    assert m.matrix.dtype == np.int64
    assert m.shape == (2, 2)


def test_index_like_flat():
    m = PrivateMatrix(party_id=0)
    m.index_like(2, 3, party_id=0)
    assert m.matrix.ravel().tolist() == list(range(6))


def test_index_like_axis0_gives_row_numbers():
    m = PrivateMatrix(party_id=1)
    m.index_like(3, 2, party_id=1, axis=0)
    for r in range(3):
        for c in range(2):
            assert m[r, c] == r


def test_index_like_axis1_gives_col_numbers():
    m = PrivateMatrix(party_id=0)
    m.index_like(3, 4, party_id=0, axis=1)
    for r in range(3):
        for c in range(4):
            assert m[r, c] == c


def test_index_like_other_party_only_resizes():
    m = PrivateMatrix(party_id=0)
    m.index_like(2, 2, party_id=1)
    assert m.shape == (2, 2)
    assert not m.matrix.any()


def test_bool_xor_and():
    a_data = np.array([[1, 0, 1], [0, 1, 1]], dtype=np.int64)
    b_data = np.array([[1, 1, 0], [0, 0, 1]], dtype=np.int64)
    a = boolm(a_data)
    b = boolm(b_data)
    assert np.array_equal((a ^ b).shares, a_data ^ b_data)
    assert np.array_equal((a & b).shares, a_data & b_data)
    assert np.array_equal(((a ^ b) ^ b).shares, a_data)


def test_bool_result_takes_other_shape():
    a = boolm([[1, 0, 1, 1]])
    b = boolm([[1, 1], [0, 0]])
    assert (a ^ b).shape == (2, 2)


def test_bool_size_mismatch():
    with pytest.raises(ValueError):
        boolm([[1, 0]]) ^ boolm([[1, 0, 1]])


def test_arith_operations_match_numpy():
    x = np.array([[1, -2], [30, 4]], dtype=np.int64)
    y = np.array([[5, 6], [-7, 8]], dtype=np.int64)
    a, b = arith(x), arith(y)
    assert np.array_equal((a + b).shares, x + y)
    assert np.array_equal((a - b).shares, x - y)
    assert np.array_equal((a * b).shares, x * y)


def test_arith_wraps_modulo_two_to_64():
    info = np.iinfo(np.int64)
    a = arith([[info.max]])
    b = arith([[1]])
    assert (a + b)[0] == info.min
    assert ((a + b) - b)[0] == info.max


def test_arith_shares_reconstruct():
    secret = np.array([[11, -3], [0, 99]], dtype=np.int64)
    share0 = np.array([[123456789, -5], [7, 2 ** 62]], dtype=np.int64)
    with np.errstate(over="ignore"):
        share1 = secret - share0
    assert np.array_equal((arith(share0) + arith(share1)).shares, secret)


def test_arith_shape_mismatch():
    with pytest.raises(ValueError):
        arith([[1, 2]]) + arith([[1], [2]])


def test_paillier_matrix_indexing_and_resize():
    m = PaillierMatrix(2, 2, party=1)
    assert m.party == 1
    assert m.size == 4
    for i in range(4):
        m[i] = i + 100
    assert m[1, 0] == m[2]
    m.resize(1, 3)
    assert m.ciphers == [100, 101, 102]
    m.resize(2, 3)
    assert m.ciphers[:3] == [100, 101, 102]
    assert m.ciphers[3:] == [None, None, None]


def test_paillier_matrix_set_ciphers():
    m = PaillierMatrix(1, 2)
    m.set_ciphers([7, 8])
    assert m[0, 1] == 8
    with pytest.raises(ValueError):
        m.set_ciphers([1, 2, 3])


def test_paillier_matrix_bad_row_col():
    m = PaillierMatrix(2, 2)
    m[3] = 5
    assert m[1, 1] == 5
    with pytest.raises(IndexError):
        _ = m[2, 0]


def test_matrix_block_extracts_region():
    data = np.arange(12, dtype=np.int64).reshape(3, 4)
    block = matrix_block(arith(data), 1, 1, 2, 2)
    assert isinstance(block, ArithMatrix)
    assert np.array_equal(block.shares, data[1:3, 1:3])


def test_matrix_block_out_of_bounds():
    with pytest.raises(ValueError):
        matrix_block(arith(np.zeros((2, 2))), 1, 0, 2, 1)


def test_matrix_block_private_owner_and_other():
    data = np.arange(6, dtype=np.float64).reshape(2, 3)
    src = private(data, party_id=1)
    owned = matrix_block(src, 0, 1, 2, 2, party_id=1)
    assert owned.party_id == 1
    assert np.array_equal(owned.matrix, data[:, 1:3])
    other = matrix_block(src, 0, 1, 2, 2, party_id=0)
    assert other.size == 0


def test_vstack_and_hstack():
    a = np.array([[1, 2]], dtype=np.int64)
    b = np.array([[3, 4], [5, 6]], dtype=np.int64)
    stacked = vstack(arith(a), arith(b))
    assert np.array_equal(stacked.shares, np.vstack([a, b]))
    c = np.array([[9], [8]], dtype=np.int64)
    wide = hstack(arith(b), arith(c))
    assert np.array_equal(wide.shares, np.hstack([b, c]))


def test_stack_broadcast_errors():
    with pytest.raises(ValueError):
        vstack(arith([[1, 2]]), arith([[1, 2, 3]]))
    with pytest.raises(ValueError):
        hstack(arith([[1], [2]]), arith([[1]]))


def test_private_stack_party_rules():
    a = private([[1.0, 2.0]], party_id=0)
    b = private([[3.0, 4.0]], party_id=0)
    owned = vstack(a, b, party_id=0)
    assert np.array_equal(owned.matrix, np.array([[1.0, 2.0], [3.0, 4.0]]))
    assert owned.party_id == 0
    assert vstack(a, b, party_id=1).size == 0
    assert hstack(a, b, party_id=0).shape == (1, 4)
    with pytest.raises(ValueError):
        vstack(a, private([[1.0, 2.0]], party_id=1), party_id=0)
    with pytest.raises(ValueError):
        hstack(a, private([[1.0], [2.0]], party_id=0), party_id=0)


def test_stack_does_not_alias_inputs():
    a = arith([[1, 2]])
    b = arith([[3, 4]])
    stacked = vstack(a, b)
    stacked[0] = 50
    assert a[0] == 1