"""
Visualization Utilities
=======================

matplotlib views of a training run and of a trained network:
- plot_training_history: per-epoch loss next to train/dev accuracy,
  with the best dev epoch marked
- visualize_weights: a Linear layer's weight matrix as a heatmap
"""

import numpy as np
import matplotlib.pyplot as plt


def _finish(fig, save_path, show, what):
    fig.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight')
        print(f"{what} saved to {save_path}")

    if show:
        plt.show()
    return fig


def plot_training_history(history, figsize=(14, 5), save_path=None, show=True):
    """
    Plot a history dict returned by trainer.train.

    Args:
        history: Dict with 'loss', 'train_accuracy' and (possibly empty)
            'dev_accuracy' lists, one entry per epoch
        figsize: Figure size
        save_path: Where to write the figure (optional)
        show: Call plt.show() at the end

    Returns:
        The matplotlib Figure
    """
    fig, (loss_ax, acc_ax) = plt.subplots(1, 2, figsize=figsize)
    epochs = np.arange(1, len(history['loss']) + 1)

    loss_ax.plot(epochs, history['loss'], 'o-', color='tab:blue', linewidth=2)
    loss_ax.set_xlabel('Epoch', fontsize=12)
    loss_ax.set_ylabel('Summed minibatch loss', fontsize=12)
    loss_ax.set_title('Loss per epoch', fontsize=14)
    loss_ax.grid(True, alpha=0.3)

    acc_ax.plot(epochs, history['train_accuracy'], 'o-', color='tab:blue',
                label='train', linewidth=2)

    dev_acc = history.get('dev_accuracy') or []
    if dev_acc:
        dev_epochs = epochs[:len(dev_acc)]
        acc_ax.plot(dev_epochs, dev_acc, 's-', color='tab:red', label='dev', linewidth=2)
        best = int(np.argmax(dev_acc))
        acc_ax.axvline(dev_epochs[best], color='gray', linestyle='--',
                       label=f'best dev ({dev_acc[best]:.3f})')

    acc_ax.set_ylim(0, 1.05)
    acc_ax.set_xlabel('Epoch', fontsize=12)
    acc_ax.set_ylabel('Accuracy', fontsize=12)
    acc_ax.set_title('Accuracy per epoch', fontsize=14)
    acc_ax.legend(fontsize=10)
    acc_ax.grid(True, alpha=0.3)

    return _finish(fig, save_path, show, "Training history plot")


def visualize_weights(layer, figsize=(8, 6), save_path=None, show=True):
    """
    Show a Linear layer's weight matrix as a heatmap centred on zero.

    Rows are input features, columns are output units.
    """
    weight = layer.params['weight']
    limit = np.max(np.abs(weight)) or 1.0

    fig, ax = plt.subplots(figsize=figsize)
    im = ax.imshow(weight, cmap='coolwarm', vmin=-limit, vmax=limit, aspect='auto')
    ax.set_xlabel('Output unit', fontsize=12)
    ax.set_ylabel('Input feature', fontsize=12)
    ax.set_title(repr(layer), fontsize=14)
    fig.colorbar(im, ax=ax)

    return _finish(fig, save_path, show, "Weights plot")
