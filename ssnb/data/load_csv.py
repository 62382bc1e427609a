"""
Training / prediction table ingestion.

Row format: feature values followed by a label column. A feature is true
when its trimmed value is "1" or "true" (any case); anything else is false.
The label is an integer class index, or blank for an unlabeled row. The
first row of a file is a header.

Rows are reported by their 0-based position among the data rows, the same
key used for prediction output.
"""

import csv
import math
import numbers
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import numpy as np
import pandas as pd

from ssnb.errors import MalformedInputError

TRUE_VALUES = {"1", "true"}


@dataclass
class Instances:
    X: np.ndarray                  # (n_instances, n_features) bool
    labels: List[Optional[int]]    # None where the label is unknown

    @property
    def n_instances(self):
        return self.X.shape[0]

    @property
    def n_features(self):
        return self.X.shape[1]

    @property
    def unlabeled_index(self):
        return [i for i, label in enumerate(self.labels) if label is None]


def parse_feature(value):
    if isinstance(value, (bool, np.bool_)):
        return bool(value)
    if isinstance(value, numbers.Number):
        return bool(value == 1)
    return str(value).strip().lower() in TRUE_VALUES


def parse_label(value, row=None):
    where = f"row {row}: " if row is not None else ""

    # pandas turns an integer column with blanks into floats
    if isinstance(value, float):
        if math.isnan(value):
            return None
        if value.is_integer():
            return int(value)
        raise MalformedInputError(f"{where}label {value!r} is not an integer class index")
    if isinstance(value, numbers.Integral) and not isinstance(value, (bool, np.bool_)):
        return int(value)

    text = "" if value is None else str(value).strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        raise MalformedInputError(
            f"{where}label {text!r} is neither blank nor an integer class index"
        ) from None


def _build(rows, width):
    if width < 2:
        raise MalformedInputError(
            f"expected at least one feature column plus a label column, got {width} column(s)"
        )
    if not rows:
        raise MalformedInputError("no data rows")

    X = np.zeros((len(rows), width - 1), dtype=bool)
    labels = []
    for i, row in enumerate(rows):
        if len(row) != width:
            raise MalformedInputError(
                f"row {i}: expected {width - 1} features and a label, got {len(row)} column(s)"
            )
        X[i] = [parse_feature(v) for v in row[:-1]]
        labels.append(parse_label(row[-1], row=i))
    return Instances(X=X, labels=labels)


def load_instances(path):
    """Read a CSV table; the header fixes the expected row width."""
    path = Path(path)
    with open(path, newline="") as f:
        reader = csv.reader(f)
        header = next(reader, None)
        if header is None:
            raise MalformedInputError(f"{path} is empty")
        rows = [row for row in reader if row]
    return _build(rows, len(header))


def instances_from_frame(df: pd.DataFrame):
    """Same rules for a DataFrame whose last column is the label."""
    rows = [list(row) for row in df.itertuples(index=False, name=None)]
    return _build(rows, df.shape[1])
