import numpy as np

from ssnb.errors import DimensionMismatchError


class DirichletPosterior:
    """
    Dirichlet belief over the class mixing proportions.

    Generative story:
        pi ~ Dirichlet(alpha)
        label_i | pi ~ Categorical(pi)

    Posterior after observing (possibly soft) per-class counts n:
        pi | n ~ Dirichlet(alpha + n)

    With soft labels n_c is the sum of responsibilities for class c, so the
    counts need not be integers.
    """

    def __init__(self, concentration):
        concentration = np.asarray(concentration, dtype=float)
        if concentration.ndim != 1 or len(concentration) == 0:
            raise ValueError("concentration must be a non-empty 1-D vector")
        if np.any(concentration <= 0):
            raise ValueError("Dirichlet concentrations must be strictly positive")
        self.concentration = concentration

    @classmethod
    def symmetric(cls, alpha, n_classes):
        return cls(np.full(n_classes, alpha, dtype=float))

    @property
    def n_classes(self):
        return len(self.concentration)

    @property
    def mean(self):
        return self.concentration / self.concentration.sum()

    @property
    def variance(self):
        alpha_0 = self.concentration.sum()
        m = self.mean
        return m * (1 - m) / (alpha_0 + 1)

    def update(self, counts):
        counts = np.asarray(counts, dtype=float)
        if counts.shape != self.concentration.shape:
            raise DimensionMismatchError(
                f"expected {self.n_classes} class counts, got shape {counts.shape}"
            )
        return DirichletPosterior(self.concentration + counts)

    def __repr__(self):
        return f"DirichletPosterior(concentration={np.round(self.concentration, 4).tolist()})"
