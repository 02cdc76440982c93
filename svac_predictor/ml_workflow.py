from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

import numpy as np
import pandas as pd
from sklearn.base import BaseEstimator
from sklearn.ensemble import RandomForestClassifier, RandomForestRegressor
from sklearn.linear_model import ElasticNet, LassoCV, LogisticRegression
from sklearn.model_selection import GridSearchCV
from sklearn.feature_selection import VarianceThreshold
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import SplineTransformer

from .bart import BartClassifier
from .constants import (
    BART_TREES_RANGE,
    COUNTRY_ID,
    DEFAULT_SEED,
    GRID_LEVELS,
    MIXTURE_RANGE,
    N_RESAMPLES,
    PENALTY_RANGE,
)
from .evaluation import (
    ClassificationResult,
    RegressionResult,
    evaluate_classification,
    evaluate_regression,
)
from .preprocessing import build_preprocessor


logger = logging.getLogger(__name__)

ModelSpaces = Dict[str, Tuple[Pipeline, Dict[str, List]]]


class BootstrapSplit:
    """Bootstrap resampling as a CV splitter.

    Each resample fits on rows drawn with replacement and assesses on the
    out-of-bag rows.
    """

    def __init__(self, n_resamples: int = N_RESAMPLES, random_state: Optional[int] = None):
        self.n_resamples = n_resamples
        self.random_state = random_state

    def split(self, X, y=None, groups=None) -> Iterator[Tuple[np.ndarray, np.ndarray]]:
        n = len(X)
        if n < 2:
            raise ValueError("bootstrap resampling needs at least two rows")
        rng = np.random.default_rng(self.random_state)
        produced = 0
        while produced < self.n_resamples:
            in_bag = rng.integers(0, n, size=n)
            out_of_bag = np.setdiff1d(np.arange(n), in_bag)
            # Every row drawn at least once leaves nothing to assess on
            if len(out_of_bag) == 0:
                continue
            produced += 1
            yield in_bag, out_of_bag

    def get_n_splits(self, X=None, y=None, groups=None) -> int:
        return self.n_resamples


def regular_grid(low: float, high: float, levels: int, log: bool = False) -> List[float]:
    """Evenly spaced grid between `low` and `high`; with log=True the bounds are log10 exponents."""
    if levels < 1:
        raise ValueError("levels must be >= 1")
    if levels == 1:
        points = np.array([(low + high) / 2.0])
    else:
        points = np.linspace(low, high, levels)
    if log:
        points = 10.0 ** points
    return [float(p) for p in points]


def integer_grid(low: int, high: int, levels: int) -> List[int]:
    return sorted({int(round(v)) for v in regular_grid(low, high, levels)})


def _pipeline(X: pd.DataFrame, estimator: BaseEstimator) -> Pipeline:
    return Pipeline([
        ("prep", build_preprocessor(X)),
        ("model", estimator),
    ])


def get_regression_spaces(X: pd.DataFrame, grid_levels: int = GRID_LEVELS, random_state: int = DEFAULT_SEED) -> ModelSpaces:
    spaces: ModelSpaces = {}

    spaces["rf"] = (
        _pipeline(X, RandomForestRegressor(n_estimators=500, random_state=random_state)),
        {},
    )

    # Elastic net: penalty strength (alpha) and lasso/ridge mixture (l1_ratio)
    spaces["elastic_net"] = (
        _pipeline(X, ElasticNet(max_iter=10000, random_state=random_state)),
        {
            "model__alpha": regular_grid(*PENALTY_RANGE, grid_levels, log=True),
            "model__l1_ratio": regular_grid(*MIXTURE_RANGE, grid_levels),
        },
    )

    # MARS-style: piecewise-linear hinge basis per predictor, lasso keeps the useful knots
    spaces["mars_style"] = (
        Pipeline([
            ("prep", build_preprocessor(X)),
            ("nzv", VarianceThreshold()),
            ("hinge", SplineTransformer(degree=1, n_knots=5, knots="uniform", extrapolation="linear")),
            ("model", LassoCV(cv=5, max_iter=10000, random_state=random_state)),
        ]),
        {},
    )

    return spaces


def get_classification_spaces(
    X: pd.DataFrame,
    grid_levels: int = GRID_LEVELS,
    random_state: int = DEFAULT_SEED,
    bart_draws: int = 500,
    bart_tune: int = 500,
    bart_max_trees: int = BART_TREES_RANGE[1],
) -> ModelSpaces:
    spaces: ModelSpaces = {}

    spaces["rf"] = (
        _pipeline(X, RandomForestClassifier(n_estimators=500, random_state=random_state)),
        {},
    )

    # Regularized logistic regression; sklearn's C is the inverse penalty
    penalties = regular_grid(*PENALTY_RANGE, grid_levels, log=True)
    spaces["elastic_net"] = (
        _pipeline(X, LogisticRegression(
            penalty="elasticnet",
            solver="saga",
            max_iter=5000,
            random_state=random_state,
        )),
        {
            "model__C": [1.0 / p for p in penalties],
            "model__l1_ratio": regular_grid(*MIXTURE_RANGE, grid_levels),
        },
    )

    spaces["bart"] = (
        _pipeline(X, BartClassifier(draws=bart_draws, tune=bart_tune, random_state=random_state)),
        {
            "model__trees": integer_grid(BART_TREES_RANGE[0], bart_max_trees, grid_levels),
        },
    )

    return spaces


@dataclass
class FittedModel:
    name: str
    estimator: Pipeline
    best_params: Dict[str, Any]
    cv_score: Optional[float]
    result: Any = field(default=None)


def tune_and_fit(
    name: str,
    pipe: Pipeline,
    grid: Dict[str, List],
    X_train: pd.DataFrame,
    y_train: pd.Series,
    scoring: str,
    n_resamples: int = N_RESAMPLES,
    random_state: int = DEFAULT_SEED,
    n_jobs: int = 1,
) -> FittedModel:
    """Bootstrap grid search for tuned models, plain fit for the rest; refit on the full train split."""
    if not grid:
        pipe.fit(X_train, y_train)
        logger.info("Fitted %s (no tuning)", name)
        return FittedModel(name=name, estimator=pipe, best_params={}, cv_score=None)

    gs = GridSearchCV(
        pipe,
        grid,
        scoring=scoring,
        cv=BootstrapSplit(n_resamples=n_resamples, random_state=random_state),
        n_jobs=n_jobs,
        refit=True,
    )
    gs.fit(X_train, y_train)
    logger.info("Tuned %s: best %s=%.4f with %s", name, scoring, gs.best_score_, gs.best_params_)
    return FittedModel(
        name=name,
        estimator=gs.best_estimator_,
        best_params=gs.best_params_,
        cv_score=float(gs.best_score_),
    )


def evaluate_regression_suite(
    X_train: pd.DataFrame,
    y_train: pd.Series,
    X_test: pd.DataFrame,
    y_test: pd.Series,
    grid_levels: int = GRID_LEVELS,
    n_resamples: int = N_RESAMPLES,
    random_state: int = DEFAULT_SEED,
    n_jobs: int = 1,
) -> Dict[str, FittedModel]:
    spaces = get_regression_spaces(X_train, grid_levels, random_state)
    fitted: Dict[str, FittedModel] = {}
    for key, (pipe, grid) in spaces.items():
        model = tune_and_fit(
            key, pipe, grid, X_train, y_train,
            scoring="neg_root_mean_squared_error",
            n_resamples=n_resamples, random_state=random_state, n_jobs=n_jobs,
        )
        model.result = evaluate_regression(y_test.values, model.estimator.predict(X_test))
        fitted[key] = model
    return fitted


def evaluate_classification_suite(
    X_train: pd.DataFrame,
    y_train: pd.Series,
    X_test: pd.DataFrame,
    y_test: pd.Series,
    grid_levels: int = GRID_LEVELS,
    n_resamples: int = N_RESAMPLES,
    random_state: int = DEFAULT_SEED,
    n_jobs: int = 1,
    bart_draws: int = 500,
    bart_tune: int = 500,
    bart_max_trees: int = BART_TREES_RANGE[1],
) -> Dict[str, FittedModel]:
    spaces = get_classification_spaces(
        X_train, grid_levels, random_state, bart_draws, bart_tune, bart_max_trees
    )
    fitted: Dict[str, FittedModel] = {}
    for key, (pipe, grid) in spaces.items():
        model = tune_and_fit(
            key, pipe, grid, X_train, y_train,
            scoring="accuracy",
            n_resamples=n_resamples, random_state=random_state, n_jobs=n_jobs,
        )
        model.result = evaluate_classification(y_test.values, model.estimator.predict(X_test))
        fitted[key] = model
    return fitted


def metrics_table(fitted: Dict[str, FittedModel]) -> pd.DataFrame:
    rows = []
    for key, model in fitted.items():
        res = model.result
        row: Dict[str, Any] = {"model": key}
        if isinstance(res, RegressionResult):
            row["rmse"] = res.rmse
        elif isinstance(res, ClassificationResult):
            row.update({
                "accuracy": res.accuracy,
                "precision": res.precision,
                "recall": res.recall,
            })
        row["cv_score"] = model.cv_score
        row["best_params"] = model.best_params
        rows.append(row)
    df = pd.DataFrame(rows)
    if "rmse" in df.columns:
        return df.sort_values("rmse", ascending=True).reset_index(drop=True)
    return df.sort_values("accuracy", ascending=False).reset_index(drop=True)


def best_regression_model(fitted: Dict[str, FittedModel]) -> FittedModel:
    return min(fitted.values(), key=lambda m: m.result.rmse)


def rank_unobserved(
    model: FittedModel,
    unobserved: pd.DataFrame,
    feature_columns: List[str],
    top_n: int = 10,
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Predict prevalence for countries outside SVAC; return (highest, lowest) top_n."""
    if unobserved.empty:
        empty = pd.DataFrame(columns=["country_name", "country_code", COUNTRY_ID, "predicted_prev"])
        return empty, empty

    preds = model.estimator.predict(unobserved[feature_columns])
    ranked = unobserved[["country_name", "country_code", COUNTRY_ID]].copy()
    ranked["predicted_prev"] = preds
    highest = ranked.sort_values("predicted_prev", ascending=False).head(top_n).reset_index(drop=True)
    lowest = ranked.sort_values("predicted_prev", ascending=True).head(top_n).reset_index(drop=True)
    return highest, lowest
