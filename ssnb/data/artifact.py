"""
On-disk JSON model artifact.

    {
      "n_classes": C,
      "n_features": F,
      "feature_prob": [[{"mean", "variance", "alpha", "beta"}, ...F], ...C],
      "class_prob": [pi_0, ..., pi_{C-1}],
      "label_posteriors": [{"instance": i, "probs": [...]}, ...]   # optional
    }

alpha/beta are re-derived from (mean, variance) by method of moments, so a
degenerate cell is stored as Beta(1, 1). On load each cell collapses to a
point estimate at alpha / (alpha + beta), or the stored mean when the shape
parameters are not usable.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import numpy as np

from ssnb.errors import ArtifactCorruptionError
from ssnb.models.beta_posterior import BetaPosterior

REQUIRED_SECTIONS = ("feature_prob", "class_prob")


@dataclass
class LoadedModel:
    feature_means: np.ndarray                        # (n_classes, n_features)
    class_means: np.ndarray                          # (n_classes,)
    label_posteriors: Optional[List[dict]] = None    # [{"instance": i, "probs": [...]}, ...]

    @property
    def n_classes(self):
        return self.feature_means.shape[0]

    @property
    def n_features(self):
        return self.feature_means.shape[1]


def model_to_dict(result, labels=None):
    """
    Serialisable record of a VariationalResult.

    Label posteriors are written only for rows whose entry in labels is None,
    and only when the result carries responsibilities.
    """
    posterior = result.feature_posterior
    mean, variance = posterior.mean, posterior.variance
    shapes = BetaPosterior.from_moments(mean, variance)
    n_classes, n_features = posterior.shape

    feature_prob = [
        [
            {
                "mean":     float(mean[c, f]),
                "variance": float(variance[c, f]),
                "alpha":    float(shapes.alpha[c, f]),
                "beta":     float(shapes.beta[c, f]),
            }
            for f in range(n_features)
        ]
        for c in range(n_classes)
    ]

    record = {
        "n_classes": n_classes,
        "n_features": n_features,
        "feature_prob": feature_prob,
        "class_prob": result.class_posterior.mean.tolist(),
    }

    if result.responsibilities is not None:
        unlabeled = (range(len(result.responsibilities)) if labels is None
                     else [i for i, label in enumerate(labels) if label is None])
        record["label_posteriors"] = [
            {"instance": i, "probs": result.responsibilities[i].tolist()} for i in unlabeled
        ]
    return record


def save_model(path, result, labels=None):
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(model_to_dict(result, labels), f, indent=2)
    return path


def _cell_mean(cell, c, f):
    try:
        alpha = float(cell.get("alpha", 0.0) or 0.0)
        beta  = float(cell.get("beta", 0.0) or 0.0)
        if alpha > 0 and beta > 0 and np.isfinite(alpha) and np.isfinite(beta):
            return alpha / (alpha + beta)
        mean = float(cell["mean"])
    except (AttributeError, KeyError, TypeError, ValueError):
        raise ArtifactCorruptionError(
            f"feature_prob[{c}][{f}] has neither usable alpha/beta nor a mean"
        ) from None
    if not 0 <= mean <= 1:
        raise ArtifactCorruptionError(f"feature_prob[{c}][{f}] mean {mean!r} is not in [0, 1]")
    return mean


def model_from_dict(record):
    if not isinstance(record, dict):
        raise ArtifactCorruptionError("model record is not a JSON object")
    missing = [k for k in REQUIRED_SECTIONS if record.get(k) is None]
    if missing:
        raise ArtifactCorruptionError(f"model is missing required section(s): {', '.join(missing)}")

    grid = record["feature_prob"]
    if not isinstance(grid, list) or not grid or not all(isinstance(r, list) for r in grid):
        raise ArtifactCorruptionError("feature_prob must be a non-empty list of per-class lists")
    n_features = len(grid[0])
    if n_features == 0 or any(len(r) != n_features for r in grid):
        raise ArtifactCorruptionError("feature_prob rows must all have the same, non-zero length")

    feature_means = np.array([[_cell_mean(cell, c, f) for f, cell in enumerate(row)]
                              for c, row in enumerate(grid)])

    try:
        class_means = np.asarray(record["class_prob"], dtype=float)
    except (TypeError, ValueError):
        raise ArtifactCorruptionError("class_prob must be a list of numbers") from None
    if class_means.shape != (len(grid),):
        raise ArtifactCorruptionError(
            f"class_prob has shape {class_means.shape}, expected ({len(grid)},)"
        )
    if not np.all(np.isfinite(class_means)) or np.any(class_means <= 0):
        raise ArtifactCorruptionError(
            f"class_prob entries must be finite and positive, got {class_means.tolist()}"
        )

    for key, actual in (("n_classes", len(grid)), ("n_features", n_features)):
        declared = record.get(key)
        if declared is not None and declared != actual:
            raise ArtifactCorruptionError(
                f"{key} is declared as {declared!r} but feature_prob has {actual}"
            )

    return LoadedModel(
        feature_means=feature_means,
        class_means=class_means,
        label_posteriors=record.get("label_posteriors"),
    )


def load_model(path):
    path = Path(path)
    try:
        with open(path) as f:
            record = json.load(f)
    except json.JSONDecodeError as e:
        raise ArtifactCorruptionError(f"{path} is not valid JSON: {e}") from e
    return model_from_dict(record)
