"""
Responsibility engine: soft class assignments for every training instance.

Each instance carries one of three label states:
    None             unknown; row starts uniform and is re-estimated each cycle
    int c            known; row is the one-hot vector for c and never changes
    length-C vector  a fixed soft label (e.g. a posterior produced by an
                     earlier run); normalised once and never changes

For unknown rows the unnormalised log-score is the Bernoulli NB joint

    log E[pi_c] + sum_f x_f log E[theta_cf] + (1 - x_f) log(1 - E[theta_cf])

normalised across classes with the log-sum-exp trick.
"""

import numbers

import numpy as np

from ssnb.errors import DimensionMismatchError, MalformedInputError

LOG_EPS = 1e-9


def _label_row(label, n_classes, i):
    if label is None:
        return np.full(n_classes, 1.0 / n_classes), False

    if isinstance(label, (bool, np.bool_)):
        raise MalformedInputError(f"instance {i}: boolean label {label!r} is not a class index")

    if isinstance(label, numbers.Integral):
        if not 0 <= label < n_classes:
            raise MalformedInputError(
                f"instance {i}: label {label} outside [0, {n_classes})"
            )
        row = np.zeros(n_classes)
        row[int(label)] = 1.0
        return row, True

    probs = np.asarray(label, dtype=float)
    if probs.shape != (n_classes,):
        raise MalformedInputError(
            f"instance {i}: soft label must have {n_classes} entries, got shape {probs.shape}"
        )
    if np.any(probs < 0) or not np.isfinite(probs).all() or probs.sum() <= 0:
        raise MalformedInputError(f"instance {i}: soft label {probs.tolist()} is not a distribution")
    return probs / probs.sum(), True


def initial_responsibilities(labels, n_classes):
    """
    Starting responsibility matrix and the mask of rows the loop must not touch.

    Returns
    -------
    resp : np.ndarray of shape (n_instances, n_classes)
    fixed : np.ndarray of bool, shape (n_instances,)
    """
    n = len(labels)
    resp  = np.empty((n, n_classes))
    fixed = np.zeros(n, dtype=bool)
    for i, label in enumerate(labels):
        resp[i], fixed[i] = _label_row(label, n_classes, i)
    return resp, fixed


def log_scores(X, feature_means, class_means, eps=LOG_EPS):
    """Joint log-scores, shape (n_instances, n_classes)."""
    X = np.asarray(X, dtype=float)
    p  = np.clip(np.asarray(feature_means, dtype=float), eps, 1 - eps)
    pi = np.clip(np.asarray(class_means, dtype=float), eps, None)

    if X.shape[1] != p.shape[1]:
        raise DimensionMismatchError(
            f"feature vectors have {X.shape[1]} features, posteriors have {p.shape[1]}"
        )
    if pi.shape[0] != p.shape[0]:
        raise DimensionMismatchError(
            f"{pi.shape[0]} class proportions for {p.shape[0]} feature-probability rows"
        )

    return X @ np.log(p).T + (1 - X) @ np.log(1 - p).T + np.log(pi)


def normalize_log_scores(scores):
    """Row-wise softmax with the max subtracted first to avoid under/overflow."""
    scores = np.asarray(scores, dtype=float)
    shifted = scores - scores.max(axis=-1, keepdims=True)
    p = np.exp(shifted)
    return p / p.sum(axis=-1, keepdims=True)


def update_responsibilities(X, resp, fixed, feature_posterior, class_posterior, eps=LOG_EPS):
    """E-step: recompute the non-fixed rows of resp from the current posteriors."""
    free = ~fixed
    new_resp = resp.copy()
    if free.any():
        scores = log_scores(np.asarray(X)[free], feature_posterior.mean, class_posterior.mean, eps)
        new_resp[free] = normalize_log_scores(scores)
    return new_resp
