"""
Ciphertext Algebra Tests
"""

import pytest

from silentroll.service.crypto_ops import handle_type
from silentroll.service.crypto_ops.scalar_operations import (
    centered,
    is_at_least,
    lagrange_coefficients,
)

P = 2147483647
SUMS = range(2, 13)


def evaluate(coefficients, x, p=P):
    return sum(c * pow(x, k, p) for k, c in enumerate(coefficients)) % p


class TestLagrange:
    """Tests for cleartext interpolation."""

    def test_linear(self):
        """1 - x through (0, 1) and (1, 0)."""
        assert lagrange_coefficients([(0, 1), (1, 0)], P) == [1, P - 1]

    def test_indicator_matches_points(self):
        """Big/small indicator is exact on every dice sum."""
        points = [(x, 1 if x >= 7 else 0) for x in SUMS]
        coefficients = lagrange_coefficients(points, P)
        assert len(coefficients) == 11
        for x, y in points:
            assert evaluate(coefficients, x) == y

    def test_centered(self):
        """Residues above p/2 map to negatives."""
        assert centered(5, P) == 5
        assert centered(P - 1, P) == -1
        assert centered(P, P) == 0

    def test_threshold_must_split_domain(self):
        """A constant indicator is rejected before touching ciphertexts."""
        with pytest.raises(ValueError):
            is_at_least(None, None, 2, SUMS, P)
        with pytest.raises(ValueError):
            is_at_least(None, None, 13, SUMS, P)


class TestEncryptedOperations:
    """Tests for homomorphic operations, checked by threshold decryption."""

    def test_encrypt_zero(self, algebra, reveal):
        """Zero round-trips like any other value."""
        assert reveal(algebra.encrypt(0)) == 0

    def test_add(self, algebra, reveal):
        """3 + 4 = 7."""
        assert reveal(algebra.add(algebra.encrypt(3), algebra.encrypt(4))) == 7

    def test_add_wraps_modulo_plaintext(self, algebra, reveal):
        """Accumulators wrap at the plaintext modulus."""
        total = algebra.add(algebra.encrypt(P - 1), algebra.encrypt(2))
        assert reveal(total) == 1

    def test_compare_ge_every_sum(self, algebra, reveal):
        """sum >= 7 is exact for all dice sums."""
        for value in SUMS:
            result = algebra.compare_ge(algebra.encrypt(value), 7, SUMS)
            assert reveal(result) == (1 if value >= 7 else 0), value

    def test_compare_ge_returns_ebool(self, algebra):
        """Comparison results are typed as encrypted booleans."""
        result = algebra.compare_ge(algebra.encrypt(9), 7, SUMS)
        assert handle_type(result) == "ebool"

    def test_equal_truth_table(self, algebra, reveal):
        """ebool equality."""
        for a in (0, 1):
            for b in (0, 1):
                result = algebra.equal(algebra.encrypt(a, "ebool"), algebra.encrypt(b, "ebool"))
                assert reveal(result) == (1 if a == b else 0)

    def test_select(self, algebra, reveal):
        """select(c, 10000, 0)."""
        assert reveal(algebra.select(algebra.encrypt(1, "ebool"), 10000, 0)) == 10000
        assert reveal(algebra.select(algebra.encrypt(0, "ebool"), 10000, 0)) == 0

    def test_random_uint_in_range(self, algebra, reveal):
        """Encrypted draws stay within bounds."""
        for _ in range(3):
            assert 1 <= reveal(algebra.random_uint(1, 6)) <= 6

    def test_random_uint_empty_range(self, algebra):
        with pytest.raises(ValueError):
            algebra.random_uint(6, 1)

    def test_ebool_range(self, algebra):
        """Booleans are 0 or 1."""
        with pytest.raises(ValueError):
            algebra.encrypt(2, "ebool")

    def test_type_mismatch(self, algebra):
        """euint32 operations reject ebool handles."""
        with pytest.raises(TypeError):
            algebra.add(algebra.encrypt(1, "ebool"), algebra.encrypt(1))

    def test_unknown_handle(self, algebra):
        with pytest.raises(KeyError):
            algebra.ciphertext_for_decryption("0x" + "ab" * 32)
