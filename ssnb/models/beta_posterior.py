import numpy as np

from ssnb.errors import DimensionMismatchError


class BetaPosterior:
    """
    Beta belief over Bernoulli success probabilities, stored as shape parameters.

    alpha and beta are arrays of any shape, so a single object holds either
    one (class, feature) cell or the whole C x F grid indexed by
    (class, feature):

        theta_cf ~ Beta(alpha_cf, beta_cf)

        E[theta]   = alpha / (alpha + beta)
        Var[theta] = alpha * beta / ((alpha + beta)^2 * (alpha + beta + 1))

    Conjugate update from weighted binary evidence (weights may be soft
    responsibilities, not just 0/1):

        Beta(alpha, beta) + (w1 true, w0 false)  ->  Beta(alpha + w1, beta + w0)
    """

    def __init__(self, alpha, beta):
        alpha = np.asarray(alpha, dtype=float)
        beta  = np.asarray(beta, dtype=float)
        if alpha.shape != beta.shape:
            raise DimensionMismatchError(
                f"alpha shape {alpha.shape} does not match beta shape {beta.shape}"
            )
        if np.any(alpha <= 0) or np.any(beta <= 0):
            raise ValueError("Beta shape parameters must be strictly positive")
        self.alpha = alpha
        self.beta  = beta

    @classmethod
    def uniform_grid(cls, n_classes, n_features, alpha=1.0, beta=1.0):
        """Prior grid: every (class, feature) cell at Beta(alpha, beta)."""
        return cls(np.full((n_classes, n_features), alpha, dtype=float),
                   np.full((n_classes, n_features), beta, dtype=float))

    @classmethod
    def from_moments(cls, mean, variance, eps=1e-6):
        """
        Method-of-moments construction, element-wise.

        For 0 < m < 1 and v > 0:
            t = m(1 - m) / v - 1,  alpha = max(eps, m t),  beta = max(eps, (1 - m) t)

        Cells with zero variance or a boundary mean fall back to Beta(1, 1)
        instead of producing NaN or a zero-width distribution.
        """
        mean     = np.asarray(mean, dtype=float)
        variance = np.asarray(variance, dtype=float)
        if mean.shape != variance.shape:
            raise DimensionMismatchError(
                f"mean shape {mean.shape} does not match variance shape {variance.shape}"
            )

        valid = (variance > 0) & (mean > 0) & (mean < 1)
        safe_var = np.where(valid, variance, 1.0)
        t = mean * (1 - mean) / safe_var - 1.0

        alpha = np.where(valid, np.maximum(eps, mean * t), 1.0)
        beta  = np.where(valid, np.maximum(eps, (1 - mean) * t), 1.0)
        return cls(alpha, beta)

    @property
    def shape(self):
        return self.alpha.shape

    @property
    def mean(self):
        return self.alpha / (self.alpha + self.beta)

    @property
    def variance(self):
        total = self.alpha + self.beta
        return self.alpha * self.beta / (total ** 2 * (total + 1))

    def clipped_mean(self, eps=1e-9):
        """Mean clamped to [eps, 1 - eps] so log(p) and log(1 - p) stay finite."""
        return np.clip(self.mean, eps, 1 - eps)

    def update(self, w1, w0):
        """Fold in weighted true (w1) / false (w0) counts; returns a new posterior."""
        w1 = np.asarray(w1, dtype=float)
        w0 = np.asarray(w0, dtype=float)
        if w1.shape != self.shape or w0.shape != self.shape:
            raise DimensionMismatchError(
                f"weighted counts {w1.shape}/{w0.shape} do not match posterior shape {self.shape}"
            )
        return BetaPosterior(self.alpha + w1, self.beta + w0)

    def cell(self, c, f):
        return BetaPosterior(self.alpha[c, f], self.beta[c, f])

    def __repr__(self):
        if self.alpha.ndim == 0:
            return f"BetaPosterior(alpha={float(self.alpha):.4g}, beta={float(self.beta):.4g})"
        return f"BetaPosterior(shape={self.shape})"
