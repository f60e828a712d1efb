"""Linear algebra utilities for the Levenberg-Marquardt solver.

The solver needs one operation: solving ``left @ X = right`` for a small
symmetric system. It is done by Gauss-Jordan elimination with partial
pivoting, which also yields the matrix inverse when ``right`` is the identity.
Singular systems are not detected: the zero pivot propagates NaN/inf into the
solution, and callers check for NaN.
"""

from __future__ import annotations

import numpy as np

from spotfit.core.shared.typing import FloatArray


def gauss_jordan(left: FloatArray, right: FloatArray) -> FloatArray:
    """Solve ``left @ X = right`` by Gauss-Jordan elimination.

    Args:
        left: Square coefficient matrix of shape (n, n)
        right: Right-hand side of shape (n,) or (n, m)

    Returns
    -------
        Solution with the same shape as ``right``. Inputs are not modified.
    """
    a = np.array(left, dtype=float, copy=True)
    b = np.array(right, dtype=float, copy=True)
    vector = b.ndim == 1
    if vector:
        b = b[:, np.newaxis]

    n = a.shape[0]
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        for i in range(n):
            # Row with the largest absolute entry in the pivot column
            pivot = i + int(np.argmax(np.abs(a[i:, i])))
            if pivot != i:
                a[[i, pivot]] = a[[pivot, i]]
                b[[i, pivot]] = b[[pivot, i]]

            factors = a[:, i] / a[i, i]
            factors[i] = 0.0
            a -= np.outer(factors, a[i])
            b -= np.outer(factors, b[i])

        b /= np.diag(a)[:, np.newaxis]

    return b[:, 0] if vector else b


def invert(matrix: FloatArray) -> FloatArray:
    """Invert a square matrix with Gauss-Jordan elimination."""
    return gauss_jordan(matrix, np.eye(matrix.shape[0]))


__all__ = ["gauss_jordan", "invert"]
