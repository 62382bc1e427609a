import numpy as np
import pytest


@pytest.fixture
def four_instances():
    """Class 0: [T,F], [T,T]; class 1: [F,F], [F,T]."""
    X = np.array([
        [True,  False],
        [True,  True],
        [False, False],
        [False, True],
    ])
    return X, [0, 0, 1, 1]


@pytest.fixture
def training_csv(tmp_path):
    path = tmp_path / "train.csv"
    path.write_text(
        "f0,f1,label\n"
        "1,0,0\n"
        "true,TRUE,\n"
        "0,0,1\n"
        "false,1,1\n"
    )
    return path
