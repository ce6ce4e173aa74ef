"""
Datasets
========

Minibatch sources for the training driver.

A dataset hands out consecutive minibatches of (X, Y) where X is a
(batch, features) float64 matrix and Y is a (batch, 1) label column.
When a pass over the data is finished next_batch() returns None and the
dataset rewinds itself (and reshuffles, if shuffling is on).

Datasets:
- Dataset: Base class, holds a list of (features, label) items
- ArrayDataset: Wraps in-memory arrays
- MNISTDataset: Loads the plain-text MNIST format
"""

from pathlib import Path

import numpy as np

from .errors import ShapeMismatchError


class Dataset:
    """
    Base class for datasets.

    Args:
        batch_size: Size of each minibatch
        shuffle: Reshuffle items on every reset()
        rng: numpy Generator used for shuffling (default: fresh default_rng())

    reset() must be called before the first pass.
    """

    def __init__(self, batch_size, shuffle=False, rng=None):
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")
        self.batch_size = batch_size
        self.shuffle = shuffle
        self.rng = rng if rng is not None else np.random.default_rng()
        self.items = []
        self.curr_index = 0

    @property
    def size(self):
        """Number of items in the dataset."""
        return len(self.items)

    def __len__(self):
        return self.size

    @property
    def n_batches(self):
        return (self.size + self.batch_size - 1) // self.batch_size

    def reset(self):
        """Rewind to the first item, shuffling first if enabled."""
        self.curr_index = 0
        if self.shuffle:
            order = self.rng.permutation(len(self.items))
            self.items = [self.items[i] for i in order]

    def next_batch(self):
        """
        Get the next minibatch.

        Returns:
            (X, Y) with X shape (batch, features) and Y shape (batch, 1),
            or None once the pass is finished (the dataset is reset then)
        """
        if self.curr_index >= len(self.items):
            self.reset()
            return None

        start = self.curr_index
        end = min(start + self.batch_size, len(self.items))
        self.curr_index = end

        batch = self.items[start:end]
        X = np.array([features for features, _ in batch], dtype=np.float64)
        Y = np.array([[label] for _, label in batch], dtype=np.float64)
        return X, Y

    def __iter__(self):
        """Yield the minibatches of one pass, starting from a reset."""
        self.reset()
        while True:
            batch = self.next_batch()
            if batch is None:
                return
            yield batch


class ArrayDataset(Dataset):
    """
    Dataset over in-memory arrays.

    Args:
        X: Features, shape (N, features)
        y: Labels, shape (N,) or (N, 1)
        batch_size, shuffle, rng: See Dataset
    """

    def __init__(self, X, y, batch_size, shuffle=False, rng=None):
        super().__init__(batch_size, shuffle, rng)

        X = np.asarray(X, dtype=np.float64)
        y = np.asarray(y)
        if y.ndim == 1:
            y = y[:, np.newaxis]
        if X.ndim != 2:
            raise ShapeMismatchError(f"X must be 2-D (N, features), got shape {X.shape}")
        if X.shape[0] != y.shape[0]:
            raise ShapeMismatchError(f"X has {X.shape[0]} rows but y has {y.shape[0]}")
        if y.shape[1] != 1:
            raise ShapeMismatchError(f"y must hold one label per row, got shape {y.shape}")

        self.input_dims = X.shape[1]
        self.items = [(X[i], y[i, 0]) for i in range(X.shape[0])]


class MNISTDataset(Dataset):
    """
    MNIST in the plain-text format:

        <n_samples> <input_dims>
        <f_1> <f_2> ... <f_dims> ; <label>
        ...

    one sample per line after the header.
    """

    def __init__(self, batch_size, shuffle=False, rng=None):
        super().__init__(batch_size, shuffle, rng)
        self.input_dims = 0

    @classmethod
    def from_file(cls, path, batch_size, shuffle=False, rng=None):
        """Create a dataset and load it from `path`."""
        dataset = cls(batch_size, shuffle, rng)
        dataset.load(path)
        return dataset

    def load(self, path):
        """Load items from `path`, replacing any current items."""
        path = Path(path)

        with open(path) as f:
            header = f.readline().split()
            if len(header) < 2:
                raise ValueError(f"{path}: expected header '<n_samples> <input_dims>'")
            size, self.input_dims = int(header[0]), int(header[1])

            items = []
            for line_no in range(2, size + 2):
                line = f.readline()
                if not line:
                    raise ValueError(f"{path}: expected {size} samples, file ended at line {line_no}")

                features_str, label_str = line.split(' ; ')
                features = np.array(features_str.split(), dtype=np.float64)
                if features.shape[0] != self.input_dims:
                    raise ShapeMismatchError(
                        f"{path}:{line_no}: expected {self.input_dims} features, got {features.shape[0]}")
                items.append((features, int(label_str)))

        self.items = items
        self.curr_index = 0
