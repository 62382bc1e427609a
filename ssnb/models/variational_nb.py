from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

import numpy as np
from tqdm import tqdm

from ssnb.errors import DimensionMismatchError, MalformedInputError
from ssnb.models.base import BaseBayesianModel
from ssnb.models.beta_posterior import BetaPosterior
from ssnb.models.dirichlet_posterior import DirichletPosterior
from ssnb.models import predictor
from ssnb.models.responsibilities import initial_responsibilities, update_responsibilities


class FitState(Enum):
    INITIALIZING      = "initializing"
    ITERATING         = "iterating"
    CONVERGED         = "converged"
    MAX_ITERS_REACHED = "max_iters_reached"


@dataclass(frozen=True)
class Priors:
    """Beta(feature_alpha, feature_beta) on every theta_cf, symmetric Dirichlet(class_alpha) on pi."""
    feature_alpha: float = 1.0
    feature_beta: float = 1.0
    class_alpha: float = 1.0

    def __post_init__(self):
        for name in ("feature_alpha", "feature_beta", "class_alpha"):
            if not getattr(self, name) > 0:
                raise ValueError(f"{name} must be strictly positive, got {getattr(self, name)}")


@dataclass
class VariationalResult:
    feature_posterior: BetaPosterior
    class_posterior: DirichletPosterior
    responsibilities: Optional[np.ndarray]
    state: FitState
    n_iter: int
    deltas: List[float] = field(default_factory=list)

    @property
    def converged(self):
        return self.state is FitState.CONVERGED


def _check_inputs(X, labels):
    X = np.asarray(X)
    if X.ndim != 2:
        raise DimensionMismatchError(f"X must be 2-D (n_instances, n_features), got {X.ndim}-D")
    if X.shape[0] == 0:
        raise MalformedInputError("no training instances")
    if X.shape[1] == 0:
        raise MalformedInputError("training instances have no features")
    if len(labels) != X.shape[0]:
        raise DimensionMismatchError(
            f"{len(labels)} labels for {X.shape[0]} instances"
        )
    return X.astype(bool).astype(float)


def _m_step(X, resp, feature_prior, class_prior):
    """Posterior update from the prior using responsibility-weighted counts."""
    w1 = resp.T @ X          # sum_i resp(i, c) [x_if = true]
    w0 = resp.T @ (1 - X)    # sum_i resp(i, c) [x_if = false]
    return feature_prior.update(w1, w0), class_prior.update(resp.sum(axis=0))


def fit_variational(X, labels, n_classes=2, priors=None, tol=1e-6, max_iter=100,
                    infer_labels=False, progress=False):
    """
    Coordinate-ascent (variational EM) fit of a Bernoulli Naive Bayes model
    with unknown labels.

    Each cycle:
        1. M-step: theta_cf ~ Beta(a + w1_cf, b + w0_cf),  pi ~ Dir(alpha + sum_i resp_i)
        2. E-step: recompute responsibilities of the unlabeled rows
        3. stop when the largest change in any posterior mean is below tol

    Labeled rows stay one-hot for the whole run, so fully labeled data
    terminates after one cycle with the closed-form conjugate posteriors.
    Initialisation is deterministic (unlabeled rows start uniform), so equal
    inputs always give equal outputs.

    Parameters
    ----------
    X : array-like of shape (n_instances, n_features)
        Binary features.
    labels : sequence of length n_instances
        None for unlabeled rows, an int class index for labeled rows, or a
        length-n_classes probability vector for a fixed soft label.
    n_classes : int, default=2
    priors : Priors, optional
    tol : float, default=1e-6
    max_iter : int, default=100
        Cycle cap; reaching it is a normal (non-error) termination.
    infer_labels : bool, default=False
        Return the final responsibility matrix as soft label posteriors.
    progress : bool, default=False
        Show a tqdm progress bar over cycles.

    Returns
    -------
    VariationalResult
    """
    priors = priors or Priors()
    if max_iter < 1:
        raise ValueError(f"max_iter must be at least 1, got {max_iter}")
    if tol < 0:
        raise ValueError(f"tol must be non-negative, got {tol}")
    if n_classes < 2:
        raise ValueError(f"n_classes must be at least 2, got {n_classes}")

    X = _check_inputs(X, labels)
    n_features = X.shape[1]

    state = FitState.INITIALIZING
    feature_prior = BetaPosterior.uniform_grid(n_classes, n_features,
                                               priors.feature_alpha, priors.feature_beta)
    class_prior   = DirichletPosterior.symmetric(priors.class_alpha, n_classes)
    resp, fixed   = initial_responsibilities(labels, n_classes)

    feature_post, class_post = feature_prior, class_prior
    prev_feature_mean = feature_post.mean
    prev_class_mean   = class_post.mean
    deltas = []

    state  = FitState.ITERATING
    cycles = range(1, max_iter + 1)
    if progress:
        cycles = tqdm(cycles, desc="variational EM", unit="cycle")

    n_iter = 0
    for n_iter in cycles:
        feature_post, class_post = _m_step(X, resp, feature_prior, class_prior)
        resp = update_responsibilities(X, resp, fixed, feature_post, class_post)

        feature_mean, class_mean = feature_post.mean, class_post.mean
        delta = max(np.abs(feature_mean - prev_feature_mean).max(),
                    np.abs(class_mean - prev_class_mean).max())
        deltas.append(float(delta))
        prev_feature_mean, prev_class_mean = feature_mean, class_mean

        # with every row fixed the responsibilities cannot move
        if fixed.all() or delta < tol:
            state = FitState.CONVERGED
            break
    else:
        state = FitState.MAX_ITERS_REACHED

    if progress:
        cycles.close()

    return VariationalResult(
        feature_posterior=feature_post,
        class_posterior=class_post,
        responsibilities=resp if infer_labels else None,
        state=state,
        n_iter=n_iter,
        deltas=deltas,
    )


class SemiSupervisedBernoulliNB(BaseBayesianModel):
    """
    Bernoulli Naive Bayes with full posteriors, trainable on partially labeled data.

    Each feature x_k is binary. The likelihood for one sample is:

        P(x | class=c) = prod_k theta_ck^x_k * (1 - theta_ck)^(1 - x_k)

    with theta_ck ~ Beta(feature_alpha, feature_beta) and the class
    proportions pi ~ Dirichlet(class_alpha). Unlabeled rows contribute to
    the posteriors through their soft class responsibilities, fitted by
    fit_variational.

    Prediction uses the posterior means E[theta] and E[pi].
    """

    def __init__(self, n_classes=2, feature_alpha=1.0, feature_beta=1.0, class_alpha=1.0,
                 tol=1e-6, max_iter=100):
        super().__init__(n_classes=n_classes)
        self.priors   = Priors(feature_alpha, feature_beta, class_alpha)
        self.tol      = tol
        self.max_iter = max_iter

        self.feature_posterior_ = None
        self.class_posterior_   = None
        self.label_posteriors_  = None   # (n_samples, n_classes) soft labels of the training rows
        self.state_  = None
        self.n_iter_ = None

    def fit(self, X, y, progress=False):
        result = fit_variational(X, y, n_classes=self.n_classes, priors=self.priors,
                                 tol=self.tol, max_iter=self.max_iter,
                                 infer_labels=True, progress=progress)

        self.feature_posterior_ = result.feature_posterior
        self.class_posterior_   = result.class_posterior
        self.label_posteriors_  = result.responsibilities
        self.state_  = result.state
        self.n_iter_ = result.n_iter

        self.class_prior_ = result.class_posterior.mean
        self.classes_  = np.arange(self.n_classes)
        self.is_fitted = True
        return self

    def predict_log_proba(self, X):
        self._check_is_fitted()
        return predictor.predict_log_proba(self.feature_posterior_.mean, self.class_prior_,
                                           np.atleast_2d(X))

    def predict_proba(self, X):
        self._check_is_fitted()
        return predictor.predict_proba(self.feature_posterior_.mean, self.class_prior_,
                                       np.atleast_2d(X))

    def predict(self, X):
        return self.classes_[np.argmax(self.predict_proba(X), axis=1)]

    def get_params(self):
        params = super().get_params()
        params.update({
            'feature_alpha': self.priors.feature_alpha,
            'feature_beta':  self.priors.feature_beta,
            'class_alpha':   self.priors.class_alpha,
            'tol':      self.tol,
            'max_iter': self.max_iter,
        })
        return params
