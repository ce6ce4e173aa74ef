"""
Optimizers
==========

Optimizers update network weights based on computed gradients.

An optimizer is bound to one network at construction. It walks the layer
tree once and records a ParameterSlot per parameter, in the order
Sequential.collect_slots yields them. Every later reset/update iterates
those slots, so weights and gradients always pair up by position.

This module implements:
- SGD: Plain stochastic gradient descent, w <- w - lr * g
"""


class Optimizer:
    """
    Base class for optimizers.

    Training step:
        optimizer.reset_gradients()
        y_hat = net.forward(x)
        loss.forward(y, y_hat)
        net.backward(loss.backward())
        optimizer.update_weights()

    Gradients accumulate across backward calls, so reset_gradients() must be
    called exactly once per intended update.
    """

    def __init__(self, net):
        self.net = net
        self.slots = net.collect_slots([])

    @property
    def weights(self):
        """Parameter arrays, in slot order."""
        return [slot.value for slot in self.slots]

    @property
    def gradients(self):
        """Gradient arrays, paired with `weights` by position."""
        return [slot.grad for slot in self.slots]

    def reset_gradients(self):
        """Set all gradients to zero, in place."""
        for slot in self.slots:
            slot.grad.fill(0.0)

    def update_weights(self):
        """Update weights using the accumulated gradients."""
        raise NotImplementedError


class SGD(Optimizer):
    """
    Stochastic Gradient Descent.

    Update rule, applied in place to every parameter:
        w <- w + (-learning_rate) * g

    No momentum, weight decay or per-parameter adaptivity.

    Args:
        net: Layer whose parameters are optimized
        learning_rate: Step size (default: 0.1)
    """

    def __init__(self, net, learning_rate=0.1):
        super().__init__(net)
        self.learning_rate = learning_rate

    def update_weights(self):
        for slot in self.slots:
            weight = slot.value
            weight += -self.learning_rate * slot.grad

    def get_learning_rate(self):
        return self.learning_rate

    def set_learning_rate(self, learning_rate):
        self.learning_rate = learning_rate

    def __repr__(self):
        return f"SGD(learning_rate={self.learning_rate}, n_params={len(self.slots)})"


# Optimizer registry
OPTIMIZERS = {
    'sgd': SGD,
}


def get_optimizer(name, net, **kwargs):
    """
    Get optimizer by name.

    Args:
        name: 'sgd' or an Optimizer instance
        net: Layer to optimize (ignored when an instance is passed)
        **kwargs: Arguments to pass to optimizer

    Returns:
        Optimizer instance
    """
    if isinstance(name, Optimizer):
        return name

    name_lower = name.lower()
    if name_lower not in OPTIMIZERS:
        raise ValueError(f"Unknown optimizer '{name}'. Available: {list(OPTIMIZERS.keys())}")

    return OPTIMIZERS[name_lower](net, **kwargs)
