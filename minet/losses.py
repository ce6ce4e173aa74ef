"""
Loss Functions
==============

Loss functions measure how wrong the network's predictions are.
The goal of training is to minimize the loss.

Each loss implements:
- forward(y, y_hat): Compute the scalar loss from ground truth and prediction,
  caching what backward needs
- backward(): Return dL/dy_hat for the most recent forward, once

Note the argument order: ground truth first, prediction second.
"""

import numpy as np

from .errors import ShapeMismatchError, ProtocolViolationError, check_matrix, check_integral
from .utils import one_hot_encode


def _check_labels(y, y_hat):
    """Flatten integer labels and check them against the prediction matrix."""
    labels = np.asarray(y)
    if labels.ndim == 2 and labels.shape[1] == 1:
        labels = labels[:, 0]
    if labels.ndim != 1:
        raise ShapeMismatchError(f"labels must be a single column, got shape {np.shape(y)}")
    if labels.shape[0] != y_hat.shape[0]:
        raise ShapeMismatchError(
            f"got {labels.shape[0]} labels for {y_hat.shape[0]} prediction rows")

    labels = check_integral(labels)
    if labels.size and (labels.min() < 0 or labels.max() >= y_hat.shape[1]):
        raise ShapeMismatchError(
            f"labels must lie in [0, {y_hat.shape[1]}), got range "
            f"[{labels.min()}, {labels.max()}]")
    return labels


class Loss:
    """Base class for loss functions."""

    def __init__(self):
        self.cache = None

    def forward(self, y, y_hat):
        """Compute loss value and cache state for backward."""
        raise NotImplementedError

    def _backward(self, cache):
        raise NotImplementedError

    def backward(self):
        """Compute gradient of loss w.r.t. y_hat. Valid once per forward."""
        if self.cache is None:
            raise ProtocolViolationError(f"{self!r}: backward called without a preceding forward")
        cache, self.cache = self.cache, None
        return self._backward(cache)

    def __call__(self, y, y_hat):
        return self.forward(y, y_hat)

    def __repr__(self):
        return f"{type(self).__name__}()"


class CrossEntropy(Loss):
    """
    Cross-Entropy Loss for multi-class classification.

    Formula: L = -(1/n) * sum_i log(y_hat[i, label_i] + epsilon)

    Gradient: zero everywhere except
        dL/dy_hat[i, label_i] = -1 / (n * (y_hat[i, label_i] + epsilon))

    Expects y_hat to be row-stochastic (e.g. a Softmax output) and y to hold
    one integer class index per row.

    Args:
        epsilon: Small constant to prevent log(0) and division by zero
    """

    def __init__(self, epsilon=1e-7):
        super().__init__()
        self.epsilon = epsilon

    def forward(self, y, y_hat):
        """
        Compute cross-entropy loss.

        Args:
            y: Integer class labels, shape (batch, 1) or (batch,)
            y_hat: Class probabilities, shape (batch, classes)

        Returns:
            Mean loss across batch
        """
        y_hat = check_matrix(y_hat, 'y_hat')
        labels = _check_labels(y, y_hat)

        rows = np.arange(len(labels))
        picked = y_hat[rows, labels] + self.epsilon

        self.cache = {'labels': labels, 'picked': picked, 'shape': y_hat.shape}
        return float(-np.mean(np.log(picked)))

    def _backward(self, cache):
        labels = cache['labels']
        n = len(labels)

        grad = np.zeros(cache['shape'])
        grad[np.arange(n), labels] = -1.0 / cache['picked']
        return grad / n

    def __repr__(self):
        return f"CrossEntropy(epsilon={self.epsilon})"


class MeanSquaredError(Loss):
    """
    Mean Squared Error Loss.

    Formula: L = (1/n) * sum_i sum_j (y[i, j] - y_hat[i, j])^2

    Gradient: dL/dy_hat = -2 * (y - y_hat) / n

    Note the mean is over rows only; columns are summed.

    Args:
        labels_as_indices: If True, y is a single column of integer class
            indices and is expanded to a one-hot matrix shaped like y_hat.
            This lets the loss train classifiers. If False (default), y must
            have exactly the shape of y_hat.
    """

    def __init__(self, labels_as_indices=False):
        super().__init__()
        self.labels_as_indices = labels_as_indices

    def forward(self, y, y_hat):
        y_hat = check_matrix(y_hat, 'y_hat')

        if self.labels_as_indices:
            labels = _check_labels(y, y_hat)
            y = one_hot_encode(labels, y_hat.shape[1])
        else:
            y = check_matrix(y, 'y')
            if y.shape != y_hat.shape:
                raise ShapeMismatchError(
                    f"y shape {y.shape} does not match y_hat shape {y_hat.shape}; "
                    f"pass labels_as_indices=True for integer class targets")

        diff = y - y_hat
        n = y.shape[0]

        self.cache = {'diff': diff, 'n': n}
        return float(np.sum(diff ** 2) / n)

    def _backward(self, cache):
        return -2.0 * cache['diff'] / cache['n']

    def __repr__(self):
        return f"MeanSquaredError(labels_as_indices={self.labels_as_indices})"


# ============================================================================
# Loss Registry
# ============================================================================

LOSSES = {
    'cross_entropy': CrossEntropy,
    'crossentropy': CrossEntropy,
    'ce': CrossEntropy,
    'mse': MeanSquaredError,
    'mean_squared_error': MeanSquaredError,
}


def get_loss(name, **kwargs):
    """
    Get loss function by name.

    Args:
        name: String name or Loss instance
        **kwargs: Arguments to pass to the loss

    Returns:
        Loss instance
    """
    if isinstance(name, Loss):
        return name

    name_lower = name.lower().replace('-', '_').replace(' ', '_')
    if name_lower not in LOSSES:
        available = ', '.join(sorted(set(LOSSES.keys())))
        raise ValueError(f"Unknown loss '{name}'. Available: {available}")

    return LOSSES[name_lower](**kwargs)
