"""
minet - Feed-Forward Network Training Engine
============================================

A minimal feed-forward neural network library using only NumPy.
This library demonstrates the mechanics of training including:
- Linear layers and elementwise activations
- Softmax output layer
- Sequential composition with forward and backward propagation
- Cross-entropy and mean squared error losses
- Weight initialization (uniform, normal, Xavier)
- Stochastic gradient descent
- Finite-difference gradient checking
"""

from .errors import MinetError, ShapeMismatchError, ProtocolViolationError
from .initializers import WeightInit, Uniform, Normal, Xavier, get_initializer
from .layers import Layer, Linear, Sequential, ParameterSlot
from .activations import ReLU, Sigmoid, Tanh, Softmax, get_activation
from .losses import Loss, CrossEntropy, MeanSquaredError, get_loss
from .optimizers import Optimizer, SGD, get_optimizer
from .gradient_check import GradientChecker, GradientCheckResult, check_gradient
from .data import Dataset, ArrayDataset, MNISTDataset
from .trainer import train, train_step, evaluate
from .utils import one_hot_encode, accuracy_score
from . import visualizations

__version__ = "1.0.0"
__all__ = [
    # Errors
    'MinetError', 'ShapeMismatchError', 'ProtocolViolationError',
    # Initializers
    'WeightInit', 'Uniform', 'Normal', 'Xavier', 'get_initializer',
    # Layers
    'Layer', 'Linear', 'Sequential', 'ParameterSlot',
    'ReLU', 'Sigmoid', 'Tanh', 'Softmax', 'get_activation',
    # Losses
    'Loss', 'CrossEntropy', 'MeanSquaredError', 'get_loss',
    # Optimizers
    'Optimizer', 'SGD', 'get_optimizer',
    # Gradient checking
    'GradientChecker', 'GradientCheckResult', 'check_gradient',
    # Data and training
    'Dataset', 'ArrayDataset', 'MNISTDataset',
    'train', 'train_step', 'evaluate',
    # Utilities
    'one_hot_encode', 'accuracy_score',
]
