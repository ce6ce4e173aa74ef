"""
Gradient Checking
=================

Verify analytical gradients match numerical approximations.

Method: Centered finite differences
    f'(x) ≈ (f(x + ε) - f(x - ε)) / (2ε)

We compare:
    - Analytical gradient: accumulated by backward()
    - Numerical gradient: finite difference approximation of the loss

Every scalar entry of every parameter is perturbed on its own and the full
network is re-run forward twice, so a check costs 2 * n_params forward
passes. Use it on small networks only.

A mismatch is reported, not raised: the result object says whether the
check passed and which entries disagreed.

See http://ufldl.stanford.edu/tutorial/supervised/DebuggingGradientChecking/
"""

from collections import namedtuple

import numpy as np

from .activations import ReLU, Sigmoid, Softmax
from .errors import check_matrix
from .initializers import Uniform
from .layers import Linear, Sequential
from .losses import CrossEntropy


GradientMismatch = namedtuple('GradientMismatch', ['param_index', 'index', 'analytic', 'numeric'])


class GradientCheckResult:
    """
    Outcome of a gradient check.

    Attributes:
        mismatches: GradientMismatch entries whose difference exceeded tolerance.
            param_index is the position in collect_weights() order, or
            'input' for the input gradient.
        max_difference: Largest absolute difference seen
        n_checked: Number of scalar entries compared
        tolerance: Absolute tolerance used
    """

    def __init__(self, mismatches, max_difference, n_checked, tolerance):
        self.mismatches = mismatches
        self.max_difference = max_difference
        self.n_checked = n_checked
        self.tolerance = tolerance

    @property
    def passed(self):
        return not self.mismatches

    def __bool__(self):
        return self.passed

    def __repr__(self):
        status = 'passed' if self.passed else f'failed ({len(self.mismatches)} mismatches)'
        return (f"GradientCheckResult({status}, max_difference={self.max_difference:.3e}, "
                f"n_checked={self.n_checked})")


class GradientChecker:
    """
    Finite-difference gradient checker for a network and a loss.

    Args:
        epsilon: Perturbation size (default: 1e-7)
        tolerance: Max absolute difference between gradients (default: 1e-6)
        verbose: Print a one-line verdict per check
    """

    def __init__(self, epsilon=1e-7, tolerance=1e-6, verbose=True):
        self.epsilon = epsilon
        self.tolerance = tolerance
        self.verbose = verbose

    def check(self, net, loss, x, y, check_input=False):
        """
        Compare analytic and numeric gradients of loss(y, net(x)).

        Args:
            net: Layer (usually a Sequential) to check
            loss: Loss instance
            x: Input batch, shape (batch, features)
            y: Ground truth accepted by `loss`
            check_input: Also check dL/dx returned by net.backward

        Returns:
            GradientCheckResult
        """
        x = check_matrix(x).copy()

        # Start from clean accumulators so earlier steps don't leak in
        for grad in net.collect_gradients([]):
            grad.fill(0.0)

        loss.forward(y, net.forward(x))
        grad_input = net.backward(loss.backward())

        weights = net.collect_weights([])
        analytic = [grad.copy() for grad in net.collect_gradients([])]

        targets = list(enumerate(zip(weights, analytic)))
        if check_input:
            targets.append(('input', (x, grad_input)))

        mismatches = []
        max_difference = 0.0
        n_checked = 0

        for param_index, (param, grad) in targets:
            it = np.nditer(param, flags=['multi_index'])
            while not it.finished:
                idx = it.multi_index
                original = param[idx]

                # f(w + epsilon)
                param[idx] = original + self.epsilon
                loss_plus = loss.forward(y, net.forward(x))

                # f(w - epsilon)
                param[idx] = original - self.epsilon
                loss_minus = loss.forward(y, net.forward(x))

                # Restore
                param[idx] = original

                numeric = (loss_plus - loss_minus) / (2 * self.epsilon)
                difference = abs(grad[idx] - numeric)

                max_difference = max(max_difference, difference)
                n_checked += 1
                if difference > self.tolerance:
                    mismatches.append(GradientMismatch(param_index, idx, float(grad[idx]), numeric))

                it.iternext()

        result = GradientCheckResult(mismatches, max_difference, n_checked, self.tolerance)

        if self.verbose:
            if result.passed:
                print("correct backward for weights")
            else:
                print(f"incorrect backward for weights: {len(mismatches)} of {n_checked} "
                      f"entries differ (max difference {max_difference:.3e})")

        return result


def check_gradient(net, loss, x, y, epsilon=1e-7, tolerance=1e-6, check_input=False, verbose=True):
    """Run a GradientChecker once. See GradientChecker.check."""
    checker = GradientChecker(epsilon=epsilon, tolerance=tolerance, verbose=verbose)
    return checker.check(net, loss, x, y, check_input=check_input)


def classification_check(rng=None, verbose=True):
    """
    Gradient check on a small classifier.

    Network: Linear(5, 10) -> Sigmoid -> Linear(10, 20) -> ReLU -> Linear(20, 6) -> Softmax
    with U(-1, 1) weights, CrossEntropy loss, a 3x5 batch and labels [2, 0, 1].
    """
    rng = rng if rng is not None else np.random.default_rng()
    init = Uniform(-1, 1, rng=rng)

    x = np.array([[.1, .1, .1, .6, .1],
                  [.5, .1, .2, .1, .1],
                  [.1, .2, .2, .1, .4]])
    y = np.array([[2.], [0.], [1.]])

    net = Sequential([
        Linear(5, 10, init),
        Sigmoid(),
        Linear(10, 20, init),
        ReLU(),
        Linear(20, 6, init),
        Softmax(),
    ])
    loss = CrossEntropy()

    if verbose:
        print(net)
        print(loss)

    return check_gradient(net, loss, x, y, verbose=verbose)


if __name__ == '__main__':
    print("--- Test Classification ---")
    classification_check()
