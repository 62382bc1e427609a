"""
Label-fraction sweep: how much do unlabeled rows help?

Draws synthetic binary data from a Bernoulli NB model, hides a growing
fraction of the labels, and compares
  - semi-supervised: fit on every row, hidden labels as None
  - supervised-only: fit on the rows that kept their label
by accuracy and macro F1 on the hidden rows.
Results saved to results/metrics/label_fraction_sweep.csv.

    python -m ssnb.experiments.label_fraction_sweep
"""

import numpy as np
import pandas as pd
from sklearn.metrics import accuracy_score, f1_score
from tqdm import tqdm

from ssnb.models.variational_nb import SemiSupervisedBernoulliNB
from ssnb.experiments.setup import RESULTS_DIR, SEED, make_binary_classification, hide_labels

FRACTIONS = [0.0, 0.25, 0.5, 0.75, 0.9, 0.95, 0.98]


def score(model, X, y):
    preds = model.predict(X)
    return {
        "accuracy": accuracy_score(y, preds),
        "f1_macro": f1_score(y, preds, average="macro", zero_division=0),
    }


def run_fraction(X, y, fraction, seed=SEED):
    labels = hide_labels(y, fraction, seed=seed)
    hidden = np.array([label is None for label in labels])
    row = {"fraction_hidden": fraction, "n_labeled": int((~hidden).sum())}

    if not hidden.any():
        # nothing to evaluate on; both fits are identical
        return row

    semi = SemiSupervisedBernoulliNB().fit(X, labels)
    sup  = SemiSupervisedBernoulliNB().fit(X[~hidden], [label for label in labels if label is not None])

    for name, model in [("semi", semi), ("sup", sup)]:
        s = score(model, X[hidden], y[hidden])
        row[f"{name}_accuracy"] = s["accuracy"]
        row[f"{name}_f1_macro"] = s["f1_macro"]
    row["semi_n_iter"] = semi.n_iter_
    row["semi_state"]  = semi.state_.value
    return row


def main():
    print("Generating data...")
    X, y, _ = make_binary_classification(n_samples=2_000, n_features=30, separation=0.25)
    print(f"  {X.shape[0]:,} rows x {X.shape[1]} binary features")

    print(f"\nSweeping {len(FRACTIONS)} hidden-label fractions...\n")
    rows = [run_fraction(X, y, f) for f in tqdm(FRACTIONS, unit="fraction")]
    results = pd.DataFrame(rows)

    out_path = RESULTS_DIR / "metrics" / "label_fraction_sweep.csv"
    out_path.parent.mkdir(parents=True, exist_ok=True)
    results.to_csv(out_path, index=False)
    print(f"✓ Saved to {out_path}\n")

    print(f"{'Hidden':>8}  {'Labeled':>8}  {'Semi acc':>9}  {'Sup acc':>9}")
    print("-" * 42)
    for _, row in results.dropna(subset=["semi_accuracy"]).iterrows():
        print(f"{row['fraction_hidden']:>8.2f}  {int(row['n_labeled']):>8,}  "
              f"{row['semi_accuracy']:>9.4f}  {row['sup_accuracy']:>9.4f}")


if __name__ == "__main__":
    main()
