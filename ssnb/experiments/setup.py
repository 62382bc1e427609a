"""
Shared setup for the command surface and experiments: default priors,
paths and a synthetic binary dataset generator.
Centralising this ensures every run uses identical defaults.
"""

import numpy as np
from pathlib import Path

RESULTS_DIR = Path(__file__).parent.parent.parent / "results"

DEFAULT_MODEL_PATH = "model.json"
DEFAULT_N_CLASSES  = 2
DEFAULT_TOL        = 1e-6
DEFAULT_MAX_ITER   = 100

FEATURE_ALPHA = 1.0
FEATURE_BETA  = 1.0
CLASS_ALPHA   = 1.0

SEED = 42


def make_binary_classification(n_samples=500, n_features=20, n_classes=2,
                               class_weights=None, separation=0.3, seed=SEED):
    """
    Draw labeled binary data from a Bernoulli Naive Bayes generative model.

    Per-class feature probabilities are 0.5 +/- a random offset of up to
    `separation`, so larger values make the classes easier to tell apart.

    Returns
    -------
    X : np.ndarray of shape (n_samples, n_features), bool
    y : np.ndarray of shape (n_samples,), int
    theta : np.ndarray of shape (n_classes, n_features)
        The true feature probabilities.
    """
    rng = np.random.default_rng(seed)
    weights = (np.full(n_classes, 1.0 / n_classes) if class_weights is None
               else np.asarray(class_weights, dtype=float) / np.sum(class_weights))

    theta = np.clip(0.5 + rng.uniform(-separation, separation, size=(n_classes, n_features)),
                    0.01, 0.99)
    y = rng.choice(n_classes, size=n_samples, p=weights)
    X = rng.random((n_samples, n_features)) < theta[y]
    return X, y, theta


def hide_labels(y, fraction, seed=SEED):
    """Copy of y as a list with a random `fraction` of entries replaced by None."""
    rng = np.random.default_rng(seed)
    n_hidden = int(round(fraction * len(y)))
    hidden = set(rng.choice(len(y), size=n_hidden, replace=False).tolist())
    return [None if i in hidden else int(label) for i, label in enumerate(y)]
