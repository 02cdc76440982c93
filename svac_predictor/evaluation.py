from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

import numpy as np
import pandas as pd
from sklearn.metrics import (
    accuracy_score,
    classification_report,
    confusion_matrix,
    mean_squared_error,
    precision_score,
    recall_score,
)


@dataclass
class RegressionResult:
    rmse: float
    n_test: int


@dataclass
class ClassificationResult:
    accuracy: float
    precision: float
    recall: float
    cm: np.ndarray
    labels: List
    report: Dict


def evaluate_regression(y_true: np.ndarray, y_pred: np.ndarray) -> RegressionResult:
    """Root-mean-squared error on held-out rows."""
    rmse = float(np.sqrt(mean_squared_error(y_true, y_pred)))
    return RegressionResult(rmse=rmse, n_test=int(len(y_true)))


def evaluate_classification(y_true: np.ndarray, y_pred: np.ndarray) -> ClassificationResult:
    """Confusion matrix (rows = truth, columns = prediction) plus headline rates for class 1."""
    labels = sorted(set(np.asarray(y_true).tolist()) | set(np.asarray(y_pred).tolist()))
    cm = confusion_matrix(y_true, y_pred, labels=labels)
    return ClassificationResult(
        accuracy=float(accuracy_score(y_true, y_pred)),
        precision=float(precision_score(y_true, y_pred, zero_division=0)),
        recall=float(recall_score(y_true, y_pred, zero_division=0)),
        cm=cm,
        labels=labels,
        report=classification_report(y_true, y_pred, output_dict=True, zero_division=0),
    )


def confusion_frame(result: ClassificationResult) -> pd.DataFrame:
    """Confusion matrix as a labeled table for printing and CSV output."""
    return pd.DataFrame(
        result.cm,
        index=[f"truth_{lab}" for lab in result.labels],
        columns=[f"pred_{lab}" for lab in result.labels],
    )
