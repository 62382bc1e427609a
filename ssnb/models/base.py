"""
Base class for Bayesian classifiers.

This module defines the interface that posterior-based classifiers implement.
"""

from abc import ABC, abstractmethod
import numpy as np
from typing import Optional, Sequence, Dict, Any
from sklearn.exceptions import NotFittedError


class BaseBayesianModel(ABC):
    """
    Abstract base class for Bayesian classifiers.

    Concrete models keep posterior distributions over their parameters rather
    than point estimates, and predict through the posterior means.
    """

    def __init__(self, n_classes: int = 2):
        """
        Initialize the Bayesian model.

        Parameters
        ----------
        n_classes : int, default=2
            Number of classes. Labels are class indices in [0, n_classes).
        """
        if n_classes < 2:
            raise ValueError(f"n_classes must be at least 2, got {n_classes}")
        self.n_classes = n_classes
        self.is_fitted = False

        # These will be set during training
        self.classes_ = None
        self.class_prior_ = None

    @abstractmethod
    def fit(self, X: np.ndarray, y: Sequence[Optional[int]]) -> 'BaseBayesianModel':
        """
        Fit the model to partially labeled training data.

        Parameters
        ----------
        X : np.ndarray of shape (n_samples, n_features)
            Binary training data
        y : sequence of length n_samples
            Class index per sample, or None where the label is unknown

        Returns
        -------
        self : BaseBayesianModel
            Fitted model
        """
        pass

    @abstractmethod
    def predict(self, X: np.ndarray) -> np.ndarray:
        """
        Predict class labels for samples in X.

        Parameters
        ----------
        X : np.ndarray of shape (n_samples, n_features)
            Samples to predict

        Returns
        -------
        y_pred : np.ndarray of shape (n_samples,)
            Predicted class labels
        """
        pass

    @abstractmethod
    def predict_proba(self, X: np.ndarray) -> np.ndarray:
        """
        Predict class probabilities for samples in X.

        Parameters
        ----------
        X : np.ndarray of shape (n_samples, n_features)
            Samples to predict

        Returns
        -------
        proba : np.ndarray of shape (n_samples, n_classes)
            Class probabilities for each sample
        """
        pass

    @abstractmethod
    def predict_log_proba(self, X: np.ndarray) -> np.ndarray:
        """
        Predict log class probabilities for samples in X.

        Parameters
        ----------
        X : np.ndarray of shape (n_samples, n_features)
            Samples to predict

        Returns
        -------
        log_proba : np.ndarray of shape (n_samples, n_classes)
            Log class probabilities for each sample
        """
        pass

    def _check_is_fitted(self):
        if not self.is_fitted:
            raise NotFittedError(
                f"This {type(self).__name__} instance is not fitted yet. "
                "Call 'fit' before using this model."
            )

    def get_params(self) -> Dict[str, Any]:
        """
        Get model parameters.

        Returns
        -------
        params : dict
            Model hyperparameters and fitted state
        """
        return {
            'n_classes': self.n_classes,
            'is_fitted': self.is_fitted,
            'classes': self.classes_,
            'class_prior': self.class_prior_
        }
