"""Shared typing aliases used across SpotFit."""

import numpy as np
import numpy.typing as npt

FloatArray = npt.NDArray[np.float64 | np.float32]
IntArray = npt.NDArray[np.int_]
BoolArray = npt.NDArray[np.bool_]
