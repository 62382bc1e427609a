"""
Command surface.

    ssnb train   --train train.csv [--out-model model.json] [--predict-unlabeled preds.csv] [-v]
    ssnb predict --model model.json --input input.csv --output predictions.csv [-v]

CSV format: a header row, then feature columns followed by the label column.
Labels are class indices, or blank for unlabeled rows.
"""

import argparse
import sys
from pathlib import Path

import numpy as np
import pandas as pd

from ssnb.errors import SSNBError
from ssnb.data.artifact import load_model, save_model
from ssnb.data.load_csv import load_instances
from ssnb.experiments.setup import (
    CLASS_ALPHA, DEFAULT_MAX_ITER, DEFAULT_MODEL_PATH, DEFAULT_N_CLASSES, DEFAULT_TOL,
    FEATURE_ALPHA, FEATURE_BETA,
)
from ssnb.models import predictor
from ssnb.models.variational_nb import Priors, fit_variational


def posterior_table(index, probs):
    """One row per scored instance: instance, p0..p{C-1}, predicted (argmax)."""
    probs = np.asarray(probs, dtype=float)
    table = pd.DataFrame(probs, columns=[f"p{c}" for c in range(probs.shape[1])])
    table.insert(0, "instance", list(index))
    table["predicted"] = np.argmax(probs, axis=1)
    return table


def write_table(table, path):
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    table.to_csv(path, index=False, float_format="%.6f")


def train(args):
    print("Mode: train")
    if not Path(args.train).exists():
        print(f"Error: Training file not found: '{args.train}'")
        return 1

    if args.verbose:
        print(f"Loading training data from {args.train}")
    data = load_instances(args.train)
    unlabeled = data.unlabeled_index
    if args.verbose:
        print(f"  {data.n_instances:,} instances x {data.n_features} features "
              f"({len(unlabeled):,} unlabeled)")

    priors = Priors(args.feature_alpha, args.feature_beta, args.class_alpha)
    infer_labels = args.predict_unlabeled is not None
    result = fit_variational(data.X, data.labels, n_classes=args.n_classes, priors=priors,
                             tol=args.tol, max_iter=args.max_iter,
                             infer_labels=infer_labels, progress=args.verbose)
    if args.verbose:
        print(f"  {result.state.value} after {result.n_iter} cycle(s), "
              f"last change {result.deltas[-1]:.3g}")
        print(f"  Class proportions: {np.round(result.class_posterior.mean, 4).tolist()}")

    save_model(args.out_model, result, labels=data.labels)
    print(f"Model saved to {args.out_model}")

    if infer_labels:
        table = posterior_table(unlabeled, result.responsibilities[unlabeled])
        write_table(table, args.predict_unlabeled)
        print(f"Predicted unlabeled instances saved to {args.predict_unlabeled}")
    return 0


def predict(args):
    print("Mode: predict")
    if not Path(args.model).exists():
        print(f"Error: Model file not found: '{args.model}'")
        return 1
    if not Path(args.input).exists():
        print(f"Error: Input CSV not found: '{args.input}'")
        return 1

    if args.verbose:
        print(f"Loading model from {args.model}")
    model = load_model(args.model)

    if args.verbose:
        print(f"Loading instances from {args.input}")
    data = load_instances(args.input)
    unlabeled = data.unlabeled_index
    if args.verbose:
        print(f"  Loaded {data.n_instances:,} instances, "
              f"will predict for {len(unlabeled):,} unlabeled instances")
    if not unlabeled:
        print("Warning: no unlabeled instances found in input CSV")

    probs = (predictor.predict_proba(model.feature_means, model.class_means, data.X[unlabeled])
             if unlabeled else np.empty((0, model.n_classes)))
    write_table(posterior_table(unlabeled, probs), args.output)
    print(f"Predictions written to {args.output}")
    return 0


def build_argparser():
    p = argparse.ArgumentParser(
        prog="ssnb",
        description="Semi-supervised Bayesian Naive Bayes over binary features.",
    )
    sub = p.add_subparsers(dest="command", required=True)

    t = sub.add_parser("train", help="Train a model from CSV and save model JSON.")
    t.add_argument("--train", required=True, help="Training CSV file")
    t.add_argument("--out-model", default=DEFAULT_MODEL_PATH,
                   help=f"Output model JSON file (default {DEFAULT_MODEL_PATH})")
    t.add_argument("--predict-unlabeled", default=None, metavar="FILE",
                   help="Save posteriors for unlabeled training instances to FILE")
    t.add_argument("--feature-alpha", type=float, default=FEATURE_ALPHA)
    t.add_argument("--feature-beta", type=float, default=FEATURE_BETA)
    t.add_argument("--class-alpha", type=float, default=CLASS_ALPHA)
    t.add_argument("--n-classes", type=int, default=DEFAULT_N_CLASSES)
    t.add_argument("--tol", type=float, default=DEFAULT_TOL)
    t.add_argument("--max-iter", type=int, default=DEFAULT_MAX_ITER)
    t.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    t.set_defaults(func=train)

    r = sub.add_parser("predict", help="Load model JSON and predict unlabeled instances from CSV")
    r.add_argument("--model", required=True, help="Model JSON file produced by training")
    r.add_argument("--input", required=True,
                   help="Input CSV file containing instances (empty label field for unlabeled)")
    r.add_argument("--output", required=True, help="Output CSV file to write predictions")
    r.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    r.set_defaults(func=predict)
    return p


def main(argv=None):
    args = build_argparser().parse_args(argv)
    try:
        return args.func(args)
    except (SSNBError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
