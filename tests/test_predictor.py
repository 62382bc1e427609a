import numpy as np
import pytest

from ssnb.errors import DimensionMismatchError
from ssnb.models import predictor

FEATURE_MEANS = np.array([[0.9, 0.1], [0.1, 0.9]])
CLASS_MEANS   = np.array([0.5, 0.5])


def test_single_vector():
    proba = predictor.predict_proba(FEATURE_MEANS, CLASS_MEANS, [True, False])
    assert proba.shape == (2,)
    assert proba[0] == pytest.approx(0.81 / 0.82)
    assert proba.sum() == pytest.approx(1.0)
    assert predictor.predict(FEATURE_MEANS, CLASS_MEANS, [True, False]) == 0


def test_matrix_input():
    X = np.array([[1, 0], [0, 1], [1, 1]])
    proba = predictor.predict_proba(FEATURE_MEANS, CLASS_MEANS, X)
    assert proba.shape == (3, 2)
    assert predictor.predict(FEATURE_MEANS, CLASS_MEANS, X).tolist() == [0, 1, 0]


def test_log_proba_agrees_with_proba():
    X = np.array([[1, 0], [0, 1]])
    log_p = predictor.predict_log_proba(FEATURE_MEANS, [0.3, 0.7], X)
    assert np.allclose(np.exp(log_p), predictor.predict_proba(FEATURE_MEANS, [0.3, 0.7], X))


def test_many_features_stay_a_distribution():
    rng = np.random.default_rng(0)
    n_features = 20_000
    means = rng.uniform(0.01, 0.99, size=(2, n_features))
    x = rng.random(n_features) < 0.5
    proba = predictor.predict_proba(means, [0.5, 0.5], x)
    assert np.isfinite(proba).all()
    assert np.all(proba >= 0)
    assert proba.sum() == pytest.approx(1.0)


def test_ties_break_toward_lower_class():
    means = np.full((3, 2), 0.5)
    assert predictor.predict(means, [1 / 3, 1 / 3, 1 / 3], [True, True]) == 0


def test_boundary_means_are_clamped():
    means = np.array([[1.0, 0.0], [0.0, 1.0]])
    proba = predictor.predict_proba(means, [0.5, 0.5], [True, True])
    assert np.isfinite(proba).all()
    assert proba.sum() == pytest.approx(1.0)


def test_wrong_feature_length_raises():
    with pytest.raises(DimensionMismatchError):
        predictor.predict_proba(FEATURE_MEANS, CLASS_MEANS, [True, False, True])


def test_wrong_class_mean_length_raises():
    with pytest.raises(DimensionMismatchError):
        predictor.predict_proba(FEATURE_MEANS, [0.2, 0.3, 0.5], [True, False])
