"""Test Gauss-Jordan elimination."""

import numpy as np

from spotfit.core.fitting.linear_algebra import gauss_jordan, invert


class TestGaussJordan:
    """Tests for the linear solver."""

    def test_solves_vector_system(self):
        """Solution should satisfy A x = b."""
        a = np.array([[4.0, 1.0, 2.0], [1.0, 5.0, 3.0], [2.0, 3.0, 6.0]])
        b = np.array([1.0, 2.0, 3.0])
        x = gauss_jordan(a, b)
        assert x.shape == (3,)
        np.testing.assert_allclose(a @ x, b, rtol=1e-12)

    def test_requires_pivoting(self):
        """A zero on the diagonal must be handled by row swapping."""
        a = np.array([[0.0, 2.0], [3.0, 1.0]])
        b = np.array([4.0, 5.0])
        np.testing.assert_allclose(gauss_jordan(a, b), np.linalg.solve(a, b))

    def test_does_not_modify_inputs(self):
        """Inputs should be left untouched."""
        a = np.array([[2.0, 1.0], [1.0, 3.0]])
        b = np.eye(2)
        a_before, b_before = a.copy(), b.copy()
        gauss_jordan(a, b)
        np.testing.assert_array_equal(a, a_before)
        np.testing.assert_array_equal(b, b_before)

    def test_inverse_of_symmetric_positive_definite(self):
        """A @ inv(A) should be the identity."""
        rng = np.random.default_rng(42)
        m = rng.normal(size=(6, 6))
        a = m @ m.T + 6 * np.eye(6)
        inverse = invert(a)
        assert np.max(np.abs(a @ inverse - np.eye(6))) < 1e-9

    def test_singular_matrix_gives_non_finite(self):
        """Singular systems propagate NaN/inf instead of raising."""
        a = np.array([[1.0, 2.0], [2.0, 4.0]])
        x = gauss_jordan(a, np.array([1.0, 1.0]))
        assert not np.all(np.isfinite(x))
