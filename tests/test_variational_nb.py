import numpy as np
import pytest
from sklearn.exceptions import NotFittedError

from ssnb.errors import DimensionMismatchError, MalformedInputError
from ssnb.experiments.setup import make_binary_classification, hide_labels
from ssnb.models.variational_nb import (
    FitState,
    Priors,
    SemiSupervisedBernoulliNB,
    fit_variational,
)


class TestFullyLabeled:

    def test_four_instance_scenario(self, four_instances):
        X, y = four_instances
        result = fit_variational(X, y, priors=Priors(1.0, 1.0, 1.0))

        means = result.feature_posterior.mean
        assert means[0, 0] > 0.5
        assert means[1, 0] < 0.5
        assert np.allclose(result.class_posterior.mean, [0.5, 0.5])

    def test_converges_in_one_cycle(self, four_instances):
        X, y = four_instances
        result = fit_variational(X, y, infer_labels=True)
        assert result.state is FitState.CONVERGED
        assert result.converged
        assert result.n_iter == 1
        assert np.allclose(result.responsibilities, np.eye(2)[y])

    def test_matches_closed_form_conjugate_update(self):
        X, y, _ = make_binary_classification(n_samples=200, n_features=6, seed=3)
        a, b, alpha = 2.0, 3.0, 0.5
        result = fit_variational(X, list(y), priors=Priors(a, b, alpha))

        for c in range(2):
            X_c = X[y == c]
            n_true = X_c.sum(axis=0)
            assert np.allclose(result.feature_posterior.alpha[c], a + n_true)
            assert np.allclose(result.feature_posterior.beta[c], b + len(X_c) - n_true)
        counts = np.bincount(y, minlength=2)
        assert np.allclose(result.class_posterior.concentration, alpha + counts)


class TestSemiSupervised:

    def test_blanked_instance_favours_class_zero(self, four_instances):
        X, _ = four_instances
        labels = [0, None, 1, 1]
        result = fit_variational(X, labels, tol=1e-6, max_iter=100, infer_labels=True)

        assert result.state is FitState.CONVERGED
        assert result.n_iter < 100
        assert result.responsibilities[1, 0] > 0.5
        assert np.allclose(result.responsibilities.sum(axis=1), 1.0)
        # labeled rows untouched
        assert np.allclose(result.responsibilities[[0, 2, 3]], [[1, 0], [0, 1], [0, 1]])

    def test_deterministic(self, four_instances):
        X, _ = four_instances
        labels = [0, None, 1, None]
        r1 = fit_variational(X, labels, infer_labels=True)
        r2 = fit_variational(X, labels, infer_labels=True)
        assert np.array_equal(r1.feature_posterior.alpha, r2.feature_posterior.alpha)
        assert np.array_equal(r1.responsibilities, r2.responsibilities)
        assert r1.deltas == r2.deltas

    def test_max_iters_reached_is_not_an_error(self, four_instances):
        X, _ = four_instances
        result = fit_variational(X, [0, None, 1, 1], tol=0.0, max_iter=3)
        assert result.state is FitState.MAX_ITERS_REACHED
        assert result.n_iter == 3
        assert len(result.deltas) == 3

    def test_labels_not_returned_unless_requested(self, four_instances):
        X, _ = four_instances
        assert fit_variational(X, [0, None, 1, 1]).responsibilities is None

    def test_refit_on_own_soft_labels_is_idempotent(self):
        X, y, _ = make_binary_classification(n_samples=300, n_features=10, seed=7)
        labels = hide_labels(y, 0.7, seed=7)
        first = fit_variational(X, labels, tol=1e-10, max_iter=1000, infer_labels=True)

        relabeled = [first.responsibilities[i] if label is None else label
                     for i, label in enumerate(labels)]
        second = fit_variational(X, relabeled, tol=1e-10, max_iter=1000)

        assert second.n_iter == 1
        assert np.allclose(second.feature_posterior.mean, first.feature_posterior.mean, atol=1e-6)
        assert np.allclose(second.class_posterior.mean, first.class_posterior.mean, atol=1e-6)

    def test_three_classes(self):
        X, y, _ = make_binary_classification(n_samples=150, n_features=8, n_classes=3, seed=1)
        labels = hide_labels(y, 0.5, seed=1)
        result = fit_variational(X, labels, n_classes=3, infer_labels=True)

        assert result.feature_posterior.shape == (3, 8)
        assert result.responsibilities.shape == (150, 3)
        assert np.allclose(result.responsibilities.sum(axis=1), 1.0)
        assert result.class_posterior.mean.sum() == pytest.approx(1.0)


def test_extreme_columns_keep_means_inside_unit_interval():
    n = 1000
    X = np.zeros((2 * n, 2), dtype=bool)
    X[:n, 0] = True           # all-true for class 0, all-false for class 1
    labels = [0] * n + [1] * n
    result = fit_variational(X, labels, priors=Priors(1e-3, 1e-3, 1.0))

    means = result.feature_posterior.mean
    assert np.all(means > 0)
    assert np.all(means < 1)


def test_label_count_mismatch(four_instances):
    X, _ = four_instances
    with pytest.raises(DimensionMismatchError):
        fit_variational(X, [0, 1, None])


def test_out_of_range_label(four_instances):
    X, _ = four_instances
    with pytest.raises(MalformedInputError):
        fit_variational(X, [0, 1, 2, None])


def test_empty_input():
    with pytest.raises(MalformedInputError):
        fit_variational(np.zeros((0, 3)), [])


@pytest.mark.parametrize("kwargs", [{"max_iter": 0}, {"tol": -1.0}, {"n_classes": 1}])
def test_invalid_settings(four_instances, kwargs):
    X, y = four_instances
    with pytest.raises(ValueError):
        fit_variational(X, y, **kwargs)


def test_priors_must_be_positive():
    with pytest.raises(ValueError):
        Priors(feature_alpha=0.0)


class TestSemiSupervisedBernoulliNB:

    def test_fit_predict(self):
        X, y, _ = make_binary_classification(n_samples=400, n_features=40, seed=11)
        labels = hide_labels(y, 0.5, seed=11)
        model = SemiSupervisedBernoulliNB().fit(X, labels)

        proba = model.predict_proba(X)
        assert proba.shape == (400, 2)
        assert np.allclose(proba.sum(axis=1), 1.0)
        assert (model.predict(X) == y).mean() > 0.8
        assert np.allclose(np.exp(model.predict_log_proba(X)), proba)

    def test_fitted_attributes(self, four_instances):
        X, _ = four_instances
        model = SemiSupervisedBernoulliNB().fit(X, [0, None, 1, 1])

        assert model.is_fitted
        assert model.classes_.tolist() == [0, 1]
        assert model.state_ is FitState.CONVERGED
        assert model.label_posteriors_.shape == (4, 2)
        assert np.allclose(model.label_posteriors_[0], [1, 0])
        assert np.allclose(model.class_prior_, model.class_posterior_.mean)
        assert model.class_prior_.sum() == pytest.approx(1.0)

    def test_not_fitted(self):
        with pytest.raises(NotFittedError):
            SemiSupervisedBernoulliNB().predict_proba([[1, 0]])

    def test_get_params(self):
        params = SemiSupervisedBernoulliNB(feature_alpha=2.0, max_iter=50).get_params()
        assert params["feature_alpha"] == 2.0
        assert params["max_iter"] == 50
        assert params["n_classes"] == 2
        assert params["is_fitted"] is False

    def test_predict_wrong_feature_count(self, four_instances):
        X, y = four_instances
        model = SemiSupervisedBernoulliNB().fit(X, y)
        with pytest.raises(DimensionMismatchError):
            model.predict([[1, 0, 1]])
