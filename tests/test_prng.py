import pytest

from duetmpc.prng import PRNG, AesCtrPrng

SEED = bytes(range(16))


def test_aes_ctr_zero_key_first_block():
    stream = AesCtrPrng(bytes(16)).generate(16)
    assert stream.hex() == "66e94bd4ef8a2c3b884cfa59ca342b2e"


def test_same_seed_same_stream():
    stream = AesCtrPrng(bytes(16)).generate(64)
    assert len(stream) == 64
    assert stream[:16].hex() == "66e94bd4ef8a2c3b884cfa59ca342b2e"
    assert stream == AesCtrPrng(bytes(16)).generate(64)


def test_stream_is_continuous():
    a = AesCtrPrng(SEED)
    pieces = a.generate(5) + a.generate(27)
    assert pieces == AesCtrPrng(SEED).generate(32)


def test_seed_length_checked():
    with pytest.raises(ValueError):
        AesCtrPrng(b"short")


def test_negative_generate_rejected():
    with pytest.raises(ValueError):
        AesCtrPrng(SEED).generate(-1)


def test_randbelow_range():
    prng = AesCtrPrng(SEED)
    values = [prng.randbelow(7) for _ in range(200)]
    assert all(0 <= v < 7 for v in values)
    assert set(values) == set(range(7))


def test_randbelow_one_is_zero():
    assert AesCtrPrng(SEED).randbelow(1) == 0


def test_randbelow_invalid_bound():
    with pytest.raises(ValueError):
        AesCtrPrng(SEED).randbelow(0)


def test_common_rand_matches_between_parties():
    p0 = PRNG(SEED)
    p1 = PRNG(SEED)
    assert [p0.common_rand() for _ in range(50)] == [p1.common_rand() for _ in range(50)]


def test_common_rand_follows_stream_across_refill():
    prng = PRNG(SEED, buffer_blocks=1)
    values = [prng.common_rand() for _ in range(3)]
    stream = AesCtrPrng(SEED).generate(24)
    expected = [int.from_bytes(stream[i : i + 8], "little", signed=True) for i in (0, 8, 16)]
    assert values == expected


def test_unique_differs_between_parties():
    p0 = PRNG(SEED)
    p1 = PRNG(SEED)
    assert p0.unique_bytes(32) != p1.unique_bytes(32)


def test_unique_rand_range():
    prng = PRNG(SEED, buffer_blocks=1)
    values = [prng.unique_rand(2) for _ in range(40)]
    assert all(-(1 << 15) <= v < (1 << 15) for v in values)
    assert all(-(1 << 63) <= prng.unique_int64() < (1 << 63) for _ in range(10))


def test_unique_bytes_length():
    assert len(PRNG(SEED).unique_bytes(10)) == 10


def test_request_larger_than_buffer_rejected():
    with pytest.raises(ValueError):
        PRNG(SEED, buffer_blocks=1).unique_bytes(17)


def test_invalid_buffer_size():
    with pytest.raises(ValueError):
        PRNG(SEED, buffer_blocks=0)