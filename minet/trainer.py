"""
Training Driver
===============

Ties a network, a loss, an optimizer and datasets together:
- Minibatch training loop
- Accuracy evaluation
- Early stopping on validation (dev) accuracy

One training step is:
    1. optimizer.reset_gradients()
    2. y_hat = net.forward(X)
    3. loss_val = loss.forward(Y, y_hat)
    4. grad = loss.backward()
    5. net.backward(grad)
    6. optimizer.update_weights()
"""

import numpy as np
from tqdm import tqdm

from .utils import accuracy_score


def train_step(net, loss, optimizer, X, Y):
    """Run one reset/forward/backward/update step and return the loss value."""
    optimizer.reset_gradients()

    y_hat = net.forward(X)
    loss_val = loss.forward(Y, y_hat)

    net.backward(loss.backward())

    optimizer.update_weights()

    return loss_val


def evaluate(net, dataset):
    """
    Classification accuracy of `net` on `dataset`.

    The predicted class of a row is the argmax of the network output.

    Returns:
        Accuracy in [0, 1]
    """
    if dataset.size == 0:
        return 0.0

    labels, preds = [], []
    for X, Y in dataset:
        labels.append(Y[:, 0])
        preds.append(np.argmax(net.forward(X), axis=1))

    return accuracy_score(np.concatenate(labels), np.concatenate(preds))


def train(net, loss, optimizer, train_data, dev_data=None, epochs=100, patience=5,
          verbose=True):
    """
    Train a network.

    Args:
        net: Layer to train
        loss: Loss instance
        optimizer: Optimizer bound to `net`
        train_data: Dataset of training minibatches
        dev_data: Dataset used for early stopping (optional)
        epochs: Maximum number of epochs
        patience: Stop after this many consecutive epochs whose dev accuracy
            does not beat the best so far
        verbose: Show progress bars and print epoch summaries

    Returns:
        Training history dictionary
    """
    history = {'loss': [], 'train_accuracy': [], 'dev_accuracy': []}

    not_at_peak = 0
    peak_acc = -1.0

    for epoch in range(epochs):
        total_loss = 0.0

        # Progress bar for batches
        if verbose:
            pbar = tqdm(train_data, total=train_data.n_batches,
                        desc=f"Epoch {epoch+1}/{epochs}")
        else:
            pbar = train_data

        for X_batch, Y_batch in pbar:
            total_loss += train_step(net, loss, optimizer, X_batch, Y_batch)

            if verbose:
                pbar.set_postfix({'loss': f'{total_loss:.4f}'})

        train_acc = evaluate(net, train_data)
        history['loss'].append(total_loss)
        history['train_accuracy'].append(train_acc)

        if dev_data is None:
            if verbose:
                print(f"epoch: {epoch:4d}\tloss: {total_loss:5.4f}\ttrain-accuracy: {train_acc:3.4f}")
            continue

        dev_acc = evaluate(net, dev_data)
        history['dev_accuracy'].append(dev_acc)

        if verbose:
            print(f"epoch: {epoch:4d}\tloss: {total_loss:5.4f}\t"
                  f"train-accuracy: {train_acc:3.4f}\tdev-accuracy: {dev_acc:3.4f}")

        # Early stopping
        if dev_acc <= peak_acc:
            not_at_peak += 1
            if verbose:
                print(f"not at peak {not_at_peak} times consecutively")
        else:
            not_at_peak = 0
            peak_acc = dev_acc

        if not_at_peak == patience:
            break

    if verbose:
        print("\ntraining is finished")

    return history
