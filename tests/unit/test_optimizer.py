"""Test the Levenberg-Marquardt solver."""

import numpy as np
import pytest

from spotfit.core.fitting.models import Exponential, Gaussian1D, NumericalModel, Polynomial
from spotfit.core.fitting.optimizer import levenberg_marquardt


class TestLevenbergMarquardt:
    """Tests for levenberg_marquardt."""

    def test_recovers_line(self):
        """Noise-free line should be recovered exactly."""
        x = np.arange(10.0)
        y = 2.0 + 0.5 * x
        result = levenberg_marquardt(Polynomial(degree=1), x, y, [0.0, 0.0])
        np.testing.assert_allclose(result.parameters, [2.0, 0.5], atol=1e-6)
        assert result.r_squared == pytest.approx(1.0)

    def test_recovers_gaussian_with_noise(self):
        """Noisy 1D Gaussian should be fitted within a few standard errors."""
        rng = np.random.default_rng(42)
        x = np.linspace(-5, 5, 101)
        truth = np.array([1.0, 10.0, 0.4, 1.1])
        y = Gaussian1D().evaluate(x, truth) + rng.normal(0, 0.1, x.size)

        result = levenberg_marquardt(Gaussian1D(), x, y, [0.0, 8.0, 0.0, 1.0])

        assert np.all(np.abs(result.parameters - truth) < 5 * result.errors)
        assert np.all(result.errors > 0)
        assert result.r_squared > 0.99

    def test_initial_parameters_not_modified(self):
        """The initial parameter array is copied."""
        x = np.linspace(0, 1, 20)
        initial = np.array([1.0, 1.0])
        levenberg_marquardt(Exponential(), x, 2.0 * np.exp(-x), initial)
        np.testing.assert_array_equal(initial, [1.0, 1.0])

    def test_fixed_parameters(self):
        """Fixed parameters keep their value and get a zero error."""
        x = np.arange(10.0)
        y = 2.0 + 0.5 * x
        result = levenberg_marquardt(
            Polynomial(degree=1), x, y, [1.0, 0.0], vary=[False, True]
        )
        assert result.parameters[0] == 1.0
        assert result.errors[0] == 0.0
        assert result.n_free == 1

    def test_zero_sigma_means_unweighted(self):
        """A sigma of 0 is treated as 1."""
        x = np.arange(8.0)
        y = 1.0 + 3.0 * x + np.array([0.1, -0.1, 0.2, 0.0, -0.2, 0.1, 0.0, -0.1])
        unweighted = levenberg_marquardt(Polynomial(degree=1), x, y, [0.0, 0.0])
        zero_sigma = levenberg_marquardt(
            Polynomial(degree=1), x, y, [0.0, 0.0], sigma=np.zeros(x.size)
        )
        np.testing.assert_allclose(zero_sigma.parameters, unweighted.parameters)

    def test_iteration_cap(self):
        """The solver never exceeds max_iterations."""
        x = np.linspace(-5, 5, 51)
        y = Gaussian1D().evaluate(x, np.array([0.0, 5.0, 1.0, 1.0]))
        result = levenberg_marquardt(Gaussian1D(), x, y, [0.0, 1.0, -2.0, 3.0], max_iterations=3)
        assert result.iterations <= 3

    def test_numerical_model(self):
        """Models with a finite-difference gradient can be fitted."""
        model = NumericalModel(lambda x, p: p[0] * np.sin(p[1] * x), ("a", "k"))
        x = np.linspace(0, 3, 40)
        y = 2.0 * np.sin(1.3 * x)
        result = levenberg_marquardt(model, x, y, [1.5, 1.2])
        np.testing.assert_allclose(result.parameters, [2.0, 1.3], atol=1e-4)

    def test_degenerate_problem_is_not_finite(self):
        """No degrees of freedom left gives non-finite errors, not an exception."""
        x = np.array([0.0, 1.0])
        result = levenberg_marquardt(Polynomial(degree=1), x, np.array([1.0, 2.0]), [0.0, 0.0])
        assert not np.all(np.isfinite(result.errors))
