"""Tests for the seeded Alea generator."""

import pytest

from py_hexmap.core.alea_prng import AleaPRNG


class TestAleaPRNG:
    """Test determinism and the integer helpers."""

    def test_same_seed_same_sequence(self):
        a = AleaPRNG("seed")
        b = AleaPRNG("seed")
        assert [a.random() for _ in range(20)] == [b.random() for _ in range(20)]

    def test_different_seeds_differ(self):
        a = AleaPRNG("seed1")
        b = AleaPRNG("seed2")
        assert [a.random() for _ in range(5)] != [b.random() for _ in range(5)]

    def test_numeric_seed_matches_string(self):
        assert AleaPRNG(42).random() == AleaPRNG("42").random()

    def test_random_range(self):
        prng = AleaPRNG("range")
        for _ in range(1000):
            value = prng.random()
            assert 0 <= value < 1

    def test_call_count(self):
        prng = AleaPRNG("count")
        for _ in range(7):
            prng.random()
        assert prng.call_count == 7

    def test_randint_inclusive(self):
        prng = AleaPRNG("ints")
        values = {prng.randint(-1, 1) for _ in range(500)}
        assert values == {-1, 0, 1}

    def test_randint_single_value(self):
        assert AleaPRNG("one").randint(3, 3) == 3

    def test_randint_empty_range(self):
        with pytest.raises(ValueError):
            AleaPRNG("empty").randint(5, 4)

    def test_choice(self):
        prng = AleaPRNG("choice")
        pool = ["a", "b", "c"]
        for _ in range(50):
            assert prng.choice(pool) in pool

    def test_choice_empty(self):
        with pytest.raises(IndexError):
            AleaPRNG("choice").choice([])

    def test_shuffle_is_permutation(self):
        prng = AleaPRNG("shuffle")
        items = list(range(50))
        prng.shuffle(items)
        assert sorted(items) == list(range(50))
        assert items != list(range(50))

    def test_shuffle_reproducible(self):
        a, b = list(range(20)), list(range(20))
        AleaPRNG("same").shuffle(a)
        AleaPRNG("same").shuffle(b)
        assert a == b

    def test_chance_bounds(self):
        prng = AleaPRNG("chance")
        assert not any(prng.chance(0) for _ in range(200))
        assert all(prng.chance(100) for _ in range(200))

    def test_noise_seed_is_int(self):
        seed = AleaPRNG("noise").noise_seed()
        assert isinstance(seed, int)
        assert 0 <= seed <= 0x7FFFFFFF
