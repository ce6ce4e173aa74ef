"""
Utility Functions
=================

Helpers shared by the losses, the training driver and Sequential:
- Label columns to one-hot rows
- Argmax accuracy
- Parameter-count summaries
"""

import numpy as np

from .errors import ShapeMismatchError, check_integral


def one_hot_encode(labels, num_classes=None):
    """
    Expand integer class labels into one-hot rows.

    Args:
        labels: Integer labels as a flat (N,) array or an (N, 1) column
        num_classes: Width of the result; the largest label + 1 when None

    Returns:
        float64 matrix of shape (N, num_classes) with a single 1.0 per row
    """
    indices = check_integral(np.asarray(labels).reshape(-1))
    if num_classes is None:
        num_classes = int(indices.max()) + 1 if indices.size else 0

    if indices.size and (indices.min() < 0 or indices.max() >= num_classes):
        raise ShapeMismatchError(f"labels must lie in [0, {num_classes}), "
                                 f"got range [{indices.min()}, {indices.max()}]")

    encoded = np.zeros((indices.shape[0], num_classes))
    encoded[np.arange(indices.shape[0]), indices] = 1.0
    return encoded


def accuracy_score(y_true, y_pred):
    """
    Fraction of rows whose predicted class equals the true class.

    Either argument may be class indices ((N,) or an (N, 1) column) or a
    score matrix (N, C), which is reduced with a row argmax.
    """
    def as_classes(y):
        y = np.asarray(y)
        if y.ndim == 2:
            y = y[:, 0] if y.shape[1] == 1 else np.argmax(y, axis=1)
        return y.astype(int)

    y_true, y_pred = as_classes(y_true), as_classes(y_pred)
    if y_true.shape != y_pred.shape:
        raise ShapeMismatchError(f"{y_true.shape[0]} labels for {y_pred.shape[0]} predictions")
    if y_true.size == 0:
        return 0.0

    return float(np.mean(y_true == y_pred))


def get_model_summary(layers):
    """
    Parameter-count table, one row per layer.

    Args:
        layers: Iterable of layers (nested containers show their first repr line)

    Returns:
        Summary string
    """
    rule = "=" * 70
    rows = [rule, f"{'Layer':<45} {'Params':<15}", rule]

    total = 0
    for layer in layers:
        count = layer.num_params()
        total += count
        rows.append(f"{repr(layer).splitlines()[0]:<45} {count:,}")

    rows += [rule, f"Total trainable parameters: {total:,}", rule]
    return "\n".join(rows)
