"""
Layers - Forward/Backward Protocol
==================================

Building blocks of a feed-forward network implemented with NumPy.
Each layer implements a forward pass that caches what it needs and a
backward pass that consumes that cache.

Layers implemented here:
- Layer: Base class holding the protocol
- Linear: Affine transform Y = X @ W + b
- Sequential: Ordered container of layers

Activations (ReLU, Sigmoid, Tanh, Softmax) live in activations.py.

Protocol:
    y = layer.forward(x)              # caches state on the layer
    dx = layer.backward(dy)           # consumes that cache, exactly once

or, with the cache held by the caller:
    y, cache = layer.forward_with_cache(x)
    dx = layer.backward_with_cache(dy, cache)

Parameter gradients are ACCUMULATED (+=) by backward. They are only zeroed
by Optimizer.reset_gradients() (or the gradient checker).

Caches hold private copies of the arrays they keep, so a caller may
overwrite its input buffer or the returned output before calling backward.
"""

from collections import namedtuple

import numpy as np

from .errors import ShapeMismatchError, ProtocolViolationError, check_matrix
from .initializers import get_initializer
from .utils import get_model_summary


class ParameterSlot(namedtuple('ParameterSlot', ['layer', 'name'])):
    """Handle to one parameter of a layer, resolved on every access."""

    __slots__ = ()

    @property
    def value(self):
        return self.layer.params[self.name]

    @property
    def grad(self):
        return self.layer.grads[self.name]


class Layer:
    """Base class for all layers."""

    def __init__(self):
        self.params = {}    # Trainable parameters
        self.grads = {}     # Gradient accumulators, same keys and shapes
        self.cache = None   # Set by forward, consumed by backward

    def _forward(self, x):
        """Compute output and the cache for backward. Returns (output, cache dict)."""
        raise NotImplementedError

    def _backward(self, grad_output, cache):
        """Accumulate parameter gradients and return the input gradient."""
        raise NotImplementedError

    def forward_with_cache(self, x):
        """
        Forward pass returning the cache instead of storing it.

        Args:
            x: Input, shape (batch, in_features)

        Returns:
            (output, cache) where cache must be passed to backward_with_cache
        """
        x = check_matrix(x)
        output, cache = self._forward(x)
        cache['input_shape'] = x.shape
        cache['output_shape'] = output.shape
        return output, cache

    def backward_with_cache(self, grad_output, cache):
        """
        Backward pass for a cache returned by forward_with_cache.

        Args:
            grad_output: dL/dY, same shape as the forward output
            cache: Cache from the matching forward

        Returns:
            dL/dX, same shape as the forward input
        """
        if cache is None:
            raise ProtocolViolationError(f"{self!r}: backward called without a preceding forward")

        grad_output = np.asarray(grad_output, dtype=np.float64)
        if grad_output.shape != cache['output_shape']:
            raise ProtocolViolationError(
                f"{self!r}: gradient shape {grad_output.shape} does not match "
                f"forward output shape {cache['output_shape']}")

        return self._backward(grad_output, cache)

    def forward(self, x):
        """Forward pass. Keeps the cache on the layer for the next backward."""
        output, self.cache = self.forward_with_cache(x)
        return output

    def backward(self, grad_output):
        """Backward pass for the most recent forward. Valid once per forward."""
        cache, self.cache = self.cache, None
        return self.backward_with_cache(grad_output, cache)

    def __call__(self, x):
        return self.forward(x)

    def collect_weights(self, weights):
        """Append this layer's parameter arrays to `weights` and return it."""
        weights.extend(self.params[name] for name in self.params)
        return weights

    def collect_gradients(self, grads):
        """Append this layer's gradient arrays to `grads`, in parameter order."""
        grads.extend(self.grads[name] for name in self.params)
        return grads

    def collect_slots(self, slots):
        """Append a ParameterSlot per parameter, in parameter order."""
        slots.extend(ParameterSlot(self, name) for name in self.params)
        return slots

    def num_params(self):
        return sum(p.size for p in self.collect_weights([]))

    def __repr__(self):
        return f"{type(self).__name__}()"


class Linear(Layer):
    """
    Fully Connected (Linear) Layer.

    Each output is connected to every input.

    Args:
        indims: Number of input features
        outdims: Number of output features
        weight_init: WeightInit instance or registry name (default: 'xavier')

    Forward: Y = X @ W + b, with W (indims, outdims) and b (outdims,)

    Backward (accumulating):
        dL/dW += X.T @ dY
        dL/db += column sums of dY
        dL/dX  = dY @ W.T
    """

    def __init__(self, indims, outdims, weight_init='xavier'):
        super().__init__()
        init = get_initializer(weight_init)
        self._set_params(init.generate(indims, outdims), np.zeros(outdims))

    @classmethod
    def from_weights(cls, weight, bias):
        """Build a layer around explicit weight (indims, outdims) and bias (outdims,) arrays."""
        layer = cls.__new__(cls)
        Layer.__init__(layer)
        layer._set_params(weight, bias)
        return layer

    def _set_params(self, weight, bias):
        weight = check_matrix(weight, 'weight')
        bias = np.asarray(bias, dtype=np.float64).reshape(-1)
        if bias.shape[0] != weight.shape[1]:
            raise ShapeMismatchError(
                f"bias has {bias.shape[0]} entries but weight has {weight.shape[1]} columns")

        self.indims, self.outdims = weight.shape
        self.params['weight'] = weight
        self.params['bias'] = bias
        self.grads['weight'] = np.zeros_like(weight)
        self.grads['bias'] = np.zeros_like(bias)

    def _forward(self, x):
        if x.shape[1] != self.indims:
            raise ShapeMismatchError(
                f"{self!r} expects {self.indims} input features, got {x.shape[1]}")

        output = x @ self.params['weight'] + self.params['bias']
        return output, {'x': x.copy()}

    def _backward(self, grad_output, cache):
        x = cache['x']

        self.grads['weight'] += x.T @ grad_output
        self.grads['bias'] += np.sum(grad_output, axis=0)

        return grad_output @ self.params['weight'].T

    def __repr__(self):
        return f"Linear({self.indims}, {self.outdims})"


class Sequential(Layer):
    """
    Sequential container.

    For example, Sequential([Linear, ReLU, Linear, Softmax]) computes
        X -> Linear -> ReLU -> Linear -> Softmax -> Y

    forward runs children in order, backward runs them in reverse order.
    Parameters are collected depth first in forward order, which fixes the
    order the optimizer sees them in.
    """

    def __init__(self, layers):
        super().__init__()
        self.layers = list(layers)

    def forward(self, x):
        """Forward through every child; each child keeps its own cache."""
        for layer in self.layers:
            x = layer.forward(x)
        return x

    def backward(self, grad_output):
        """Backward through every child in reverse order."""
        grad = grad_output
        for layer in reversed(self.layers):
            grad = layer.backward(grad)
        return grad

    def _forward(self, x):
        caches = []
        for layer in self.layers:
            x, cache = layer.forward_with_cache(x)
            caches.append(cache)
        return x, {'layers': caches}

    def _backward(self, grad_output, cache):
        grad = grad_output
        for layer, layer_cache in zip(reversed(self.layers), reversed(cache['layers'])):
            grad = layer.backward_with_cache(grad, layer_cache)
        return grad

    def collect_weights(self, weights):
        for layer in self.layers:
            layer.collect_weights(weights)
        return weights

    def collect_gradients(self, grads):
        for layer in self.layers:
            layer.collect_gradients(grads)
        return grads

    def collect_slots(self, slots):
        for layer in self.layers:
            layer.collect_slots(slots)
        return slots

    def summary(self):
        """Parameter-count table for the direct children."""
        return get_model_summary(self.layers)

    def __len__(self):
        return len(self.layers)

    def __iter__(self):
        return iter(self.layers)

    def __getitem__(self, index):
        return self.layers[index]

    def __repr__(self):
        lines = ["Sequential("]
        for layer in self.layers:
            lines.append("    " + repr(layer).replace("\n", "\n    "))
        lines.append(")")
        return "\n".join(lines)
