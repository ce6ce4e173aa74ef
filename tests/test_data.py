"""
Tests for Datasets
==================

Unit tests for minibatching, rewinding and the text MNIST loader.
"""

import numpy as np
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from minet.data import Dataset, ArrayDataset, MNISTDataset
from minet.errors import ShapeMismatchError


def make_arrays(n=10, dims=3):
    X = np.arange(n * dims, dtype=np.float64).reshape(n, dims)
    y = np.arange(n) % 4
    return X, y


class TestArrayDataset:
    """Tests for ArrayDataset batching."""

    def test_batches_cover_data(self):
        """Test batches come out in order with a short final batch."""
        X, y = make_arrays(10)
        data = ArrayDataset(X, y, batch_size=4)
        data.reset()

        shapes = []
        rows = []
        while True:
            batch = data.next_batch()
            if batch is None:
                break
            X_batch, Y_batch = batch
            shapes.append((X_batch.shape, Y_batch.shape))
            rows.append(X_batch)

        assert shapes == [((4, 3), (4, 1)), ((4, 3), (4, 1)), ((2, 3), (2, 1))]
        np.testing.assert_array_equal(np.vstack(rows), X)

    def test_rewinds_after_end(self):
        """Test the dataset resets itself after returning None."""
        X, y = make_arrays(5)
        data = ArrayDataset(X, y, batch_size=5)
        data.reset()

        first = data.next_batch()
        assert data.next_batch() is None
        again = data.next_batch()

        np.testing.assert_array_equal(first[0], again[0])

    def test_labels_are_column(self):
        """Test labels come back as a (batch, 1) column for 1-D and 2-D input."""
        X, y = make_arrays(6)
        for labels in (y, y.reshape(-1, 1)):
            data = ArrayDataset(X, labels, batch_size=6)
            data.reset()
            _, Y = data.next_batch()
            np.testing.assert_array_equal(Y, y.reshape(-1, 1).astype(np.float64))

    def test_iteration_is_one_pass(self):
        """Test iterating yields exactly n_batches batches, and can be repeated."""
        X, y = make_arrays(7)
        data = ArrayDataset(X, y, batch_size=3)

        assert data.n_batches == 3
        assert len(list(data)) == 3
        assert len(list(data)) == 3

    def test_size(self):
        X, y = make_arrays(9)
        data = ArrayDataset(X, y, batch_size=2)

        assert data.size == len(data) == 9
        assert data.input_dims == 3

    def test_shuffle_is_seeded(self):
        """Test shuffled order depends only on the rng seed and keeps pairs intact."""
        X, y = make_arrays(20)

        def first_pass(seed):
            data = ArrayDataset(X, y, batch_size=20, shuffle=True,
                                rng=np.random.default_rng(seed))
            return next(iter(data))

        X_a, Y_a = first_pass(0)
        X_b, Y_b = first_pass(0)

        np.testing.assert_array_equal(X_a, X_b)
        assert not np.array_equal(X_a, X)
        # Rows still match their labels
        row_ids = (X_a[:, 0] / 3).astype(int)
        np.testing.assert_array_equal(Y_a[:, 0], row_ids % 4)

    def test_row_mismatch(self):
        """Test X and y must have the same number of rows."""
        X, y = make_arrays(5)
        with pytest.raises(ShapeMismatchError):
            ArrayDataset(X, y[:4], batch_size=2)

    def test_features_must_be_matrix(self):
        with pytest.raises(ShapeMismatchError):
            ArrayDataset(np.zeros(5), np.zeros(5), batch_size=2)

    def test_invalid_batch_size(self):
        with pytest.raises(ValueError):
            Dataset(batch_size=0)


class TestMNISTDataset:
    """Tests for the plain-text MNIST loader."""

    def write(self, tmp_path, text):
        path = tmp_path / "mnist.txt"
        path.write_text(text)
        return path

    def test_load(self, tmp_path):
        """Test header and samples are parsed."""
        path = self.write(tmp_path,
                          "3 4\n"
                          "0.0 0.5 1.0 0.25 ; 7\n"
                          "1.0 1.0 0.0 0.0 ; 2\n"
                          "0.1 0.2 0.3 0.4 ; 0\n")

        data = MNISTDataset.from_file(path, batch_size=2)

        assert data.size == 3
        assert data.input_dims == 4

        data.reset()
        X, Y = data.next_batch()
        np.testing.assert_allclose(X, [[0.0, 0.5, 1.0, 0.25], [1.0, 1.0, 0.0, 0.0]])
        np.testing.assert_array_equal(Y, [[7.0], [2.0]])

    def test_wrong_feature_count(self, tmp_path):
        """Test a sample with the wrong number of features is rejected."""
        path = self.write(tmp_path, "1 3\n0.1 0.2 ; 1\n")

        with pytest.raises(ShapeMismatchError):
            MNISTDataset.from_file(path, batch_size=1)

    def test_truncated_file(self, tmp_path):
        """Test a file with fewer samples than its header says is rejected."""
        path = self.write(tmp_path, "2 2\n0.1 0.2 ; 1\n")

        with pytest.raises(ValueError):
            MNISTDataset.from_file(path, batch_size=1)

    def test_bad_header(self, tmp_path):
        path = self.write(tmp_path, "5\n")

        with pytest.raises(ValueError):
            MNISTDataset.from_file(path, batch_size=1)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
