"""
Activation Layers
=================

Parameter-free non-linear layers. Each one caches either its input or its
output during forward and uses it in backward.

Mathematical Background:
- Without non-linearities, stacking Linear layers = single linear transformation
- Activations introduce non-linearity, enabling universal function approximation

Layers:
- ReLU: max(0, x), caches x
- Sigmoid: 1 / (1 + exp(-x)), caches y
- Tanh: tanh(x), caches y
- Softmax: row-wise normalized exponential, caches y
"""

import numpy as np

from .layers import Layer


class Activation(Layer):
    """Base class for parameter-free activation layers."""


class ReLU(Activation):
    """
    Rectified Linear Unit: f(x) = max(0, x)

    Derivative:
        f'(x) = 1 if x > 0 else 0

    The gradient is zeroed wherever the cached input was <= 0.
    """

    def _forward(self, x):
        return np.maximum(0, x), {'x': x.copy()}

    def _backward(self, grad_output, cache):
        return np.where(cache['x'] > 0, grad_output, 0.0)


class Sigmoid(Activation):
    """
    Sigmoid: f(x) = 1 / (1 + exp(-x))

    Squashes output to (0, 1).

    Derivative:
        f'(x) = f(x) * (1 - f(x))
    """

    def _forward(self, x):
        # Clip for numerical stability
        x_clipped = np.clip(x, -500, 500)
        output = 1.0 / (1.0 + np.exp(-x_clipped))
        return output, {'y': output.copy()}

    def _backward(self, grad_output, cache):
        y = cache['y']
        return grad_output * y * (1 - y)


class Tanh(Activation):
    """
    Hyperbolic Tangent: f(x) = tanh(x)

    Output range: (-1, 1)

    Derivative:
        f'(x) = 1 - tanh(x)^2
    """

    def _forward(self, x):
        output = np.tanh(x)
        return output, {'y': output.copy()}

    def _backward(self, grad_output, cache):
        y = cache['y']
        return grad_output * (1 - y * y)


class Softmax(Activation):
    """
    Softmax: f(x_i) = exp(x_i) / sum_j exp(x_j), per row

    Converts logits to a probability distribution per row (sums to 1).

    Numerical Stability:
        We subtract the row max before exp to prevent overflow.
        This doesn't change the result: exp(x-c)/sum(exp(x-c)) = exp(x)/sum(exp(x))

    Backward uses the Jacobian-vector product directly:
        dL/dx = y * (dL/dy - sum_j(dL/dy_j * y_j))
    so the (classes x classes) Jacobian is never built.
    """

    def _forward(self, x):
        x_shifted = x - np.max(x, axis=1, keepdims=True)
        exp_x = np.exp(x_shifted)
        output = exp_x / np.sum(exp_x, axis=1, keepdims=True)
        return output, {'y': output.copy()}

    def _backward(self, grad_output, cache):
        y = cache['y']
        return y * (grad_output - np.sum(grad_output * y, axis=1, keepdims=True))


# ====================================
# Activation Registry
# ====================================

ACTIVATIONS = {
    'relu': ReLU,
    'sigmoid': Sigmoid,
    'tanh': Tanh,
    'softmax': Softmax,
}


def get_activation(name):
    """
    Get activation layer by name.

    Args:
        name: String name ('relu', 'sigmoid', etc.) or Activation instance

    Returns:
        Activation instance

    Example:
        >>> act = get_activation('relu')
        >>> act.forward(np.array([[-1.0, 0.0, 1.0]]))
        array([[0., 0., 1.]])
    """
    if isinstance(name, Activation):
        return name

    name_lower = name.lower().replace('-', '_')
    if name_lower not in ACTIVATIONS:
        available = ', '.join(ACTIVATIONS.keys())
        raise ValueError(f"Unknown activation '{name}'. Available: {available}")

    return ACTIVATIONS[name_lower]()
