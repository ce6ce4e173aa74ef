"""
Errors raised by the training engine.

Shape and protocol errors are fatal for the operation that raised them;
nothing in the engine retries or returns a partial result.
"""

import numpy as np


class MinetError(Exception):
    """Base class for engine errors."""


class ShapeMismatchError(MinetError, ValueError):
    """Operands of an operation have incompatible dimensions."""


class ProtocolViolationError(MinetError, RuntimeError):
    """
    The forward/backward protocol was broken.

    Raised when backward is called without a preceding forward, called twice
    for one forward, or given a gradient whose shape differs from the output.
    """


def check_matrix(x, name='input'):
    """Return x as a float64 2-D array, raising ShapeMismatchError otherwise."""
    x = np.asarray(x, dtype=np.float64)
    if x.ndim != 2:
        raise ShapeMismatchError(f"{name} must be 2-D (batch, features), got shape {x.shape}")
    return x


def check_integral(values, name='labels'):
    """Return class indices as ints, raising ShapeMismatchError on fractional or non-finite entries."""
    values = np.asarray(values)
    if values.dtype.kind == 'f':
        bad = ~np.isfinite(values) | (values != np.floor(values))
        if np.any(bad):
            raise ShapeMismatchError(f"{name} must be whole class indices, got {values[bad][:3]}")
    return values.astype(int)
