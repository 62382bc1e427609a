import numpy as np
from scipy.special import logsumexp

from ssnb.errors import DimensionMismatchError
from ssnb.models.responsibilities import LOG_EPS, log_scores, normalize_log_scores


def _as_feature_matrix(X):
    X = np.asarray(X)
    if X.ndim == 1:
        return X[None, :].astype(float), True
    if X.ndim != 2:
        raise DimensionMismatchError(f"expected a feature vector or matrix, got {X.ndim}-D input")
    return X.astype(float), False


def _check_grid(feature_means, class_means):
    feature_means = np.asarray(feature_means, dtype=float)
    class_means   = np.asarray(class_means, dtype=float)
    if feature_means.ndim != 2:
        raise DimensionMismatchError("feature means must be a (n_classes, n_features) grid")
    if class_means.shape != (feature_means.shape[0],):
        raise DimensionMismatchError(
            f"{class_means.shape[0] if class_means.ndim else 0} class means "
            f"for {feature_means.shape[0]} classes"
        )
    return feature_means, class_means


def predict_log_proba(feature_means, class_means, X, eps=LOG_EPS):
    """
    Normalised log posterior predictive class probabilities.

        log p(c | x) = log pi_c + sum_f [x_f log p_cf + (1 - x_f) log(1 - p_cf)] - log Z

    X may be a single length-F vector (returns shape (n_classes,)) or an
    (n_samples, F) matrix. A feature length other than F raises
    DimensionMismatchError; nothing is truncated or padded.
    """
    feature_means, class_means = _check_grid(feature_means, class_means)
    X, single = _as_feature_matrix(X)
    scores = log_scores(X, feature_means, class_means, eps)
    log_proba = scores - logsumexp(scores, axis=1, keepdims=True)
    return log_proba[0] if single else log_proba


def predict_proba(feature_means, class_means, X, eps=LOG_EPS):
    feature_means, class_means = _check_grid(feature_means, class_means)
    X, single = _as_feature_matrix(X)
    proba = normalize_log_scores(log_scores(X, feature_means, class_means, eps))
    return proba[0] if single else proba


def predict(feature_means, class_means, X, eps=LOG_EPS):
    """Most probable class; np.argmax breaks ties toward the lower index."""
    return np.argmax(predict_proba(feature_means, class_means, X, eps), axis=-1)
