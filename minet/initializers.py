"""
Weight Initializers
===================

Strategies for drawing the initial weight matrix of a Linear layer.

Each initializer implements:
- generate(indims, outdims): Return an (indims, outdims) float64 matrix

Every initializer draws from its own numpy Generator. Pass `rng` to make
construction reproducible; nothing here touches the global numpy seed.
"""

import numpy as np


class WeightInit:
    """Base class for weight initializers."""

    def __init__(self, rng=None):
        self.rng = rng if rng is not None else np.random.default_rng()

    def generate(self, indims, outdims):
        """Generate an (indims, outdims) weight matrix."""
        raise NotImplementedError

    def __call__(self, indims, outdims):
        return self.generate(indims, outdims)


class Uniform(WeightInit):
    """
    Uniform initialization: W ~ U[min_val, max_val), half-open

    Args:
        min_val: Lower bound (default: -1.0)
        max_val: Upper bound (default: 1.0)
        rng: numpy Generator (default: fresh default_rng())
    """

    def __init__(self, min_val=-1.0, max_val=1.0, rng=None):
        super().__init__(rng)
        if max_val < min_val:
            raise ValueError(f"max_val ({max_val}) must be >= min_val ({min_val})")
        self.min_val = min_val
        self.max_val = max_val

    def generate(self, indims, outdims):
        return self.rng.random((indims, outdims)) * (self.max_val - self.min_val) + self.min_val

    def __repr__(self):
        return f"Uniform({self.min_val}, {self.max_val})"


class Normal(WeightInit):
    """
    Normal initialization: W ~ N(mean, std^2)

    Standard normal draws are scaled by std, then shifted by mean.
    """

    def __init__(self, mean=0.0, std=1.0, rng=None):
        super().__init__(rng)
        self.mean = mean
        self.std = std

    def generate(self, indims, outdims):
        return self.rng.standard_normal((indims, outdims)) * self.std + self.mean

    def __repr__(self):
        return f"Normal(mean={self.mean}, std={self.std})"


class Xavier(WeightInit):
    """
    Xavier (Glorot) uniform initialization.

    W ~ U[-a, a), half-open, with a = sqrt(6) / sqrt(indims + outdims)

    Keeps the variance of activations and gradients roughly constant
    from layer to layer (Glorot & Bengio, 2010, eq. 16).
    """

    def generate(self, indims, outdims):
        a = np.sqrt(6) / np.sqrt(indims + outdims)
        return self.rng.random((indims, outdims)) * (2 * a) - a

    def __repr__(self):
        return "Xavier()"


# ============================================================================
# Initializer Registry
# ============================================================================

INITIALIZERS = {
    'uniform': Uniform,
    'normal': Normal,
    'gaussian': Normal,
    'xavier': Xavier,
    'glorot': Xavier,
}


def get_initializer(name, **kwargs):
    """
    Get weight initializer by name.

    Args:
        name: String name or WeightInit instance
        **kwargs: Arguments to pass to the initializer (e.g. rng=...)

    Returns:
        WeightInit instance
    """
    if isinstance(name, WeightInit):
        return name

    name_lower = name.lower()
    if name_lower not in INITIALIZERS:
        available = ', '.join(sorted(INITIALIZERS.keys()))
        raise ValueError(f"Unknown initializer '{name}'. Available: {available}")

    return INITIALIZERS[name_lower](**kwargs)
