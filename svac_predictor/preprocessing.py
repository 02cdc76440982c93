from __future__ import annotations

from typing import List, Optional, Tuple

import numpy as np
import pandas as pd
from pandas.api.types import is_numeric_dtype
from sklearn.compose import ColumnTransformer
from sklearn.impute import SimpleImputer
from sklearn.model_selection import GroupShuffleSplit, train_test_split
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import OneHotEncoder, StandardScaler

from .constants import (
    ACTOR_ID,
    DEFAULT_SEED,
    ID_COLUMNS,
    RARE_LEVEL_SHARE,
    TEST_SIZE,
)


# Identifiers and SVAC keys carry no signal and would leak country identity
NON_FEATURE_COLUMNS = ID_COLUMNS + [ACTOR_ID]


def select_features(df: pd.DataFrame, target: str) -> Tuple[pd.DataFrame, pd.Series]:
    """Split a joined table into predictors and target, dropping identifier columns."""
    drop = [c for c in NON_FEATURE_COLUMNS + [target] if c in df.columns]
    X = df.drop(columns=drop)
    y = df[target]
    return X, y


def feature_column_types(X: pd.DataFrame) -> Tuple[List[str], List[str]]:
    """Return (numeric, categorical) predictor columns."""
    numeric = [c for c in X.columns if is_numeric_dtype(X[c])]
    categorical = [c for c in X.columns if c not in numeric]
    return numeric, categorical


def build_preprocessor(X: pd.DataFrame, min_frequency: float = RARE_LEVEL_SHARE) -> ColumnTransformer:
    """Imputation, rare-level pooling, one-hot encoding and z-scoring.

    Used as the first step of every model pipeline so that the statistics are
    learned from the rows the pipeline is fitted on (train split or bootstrap
    sample) and applied unchanged to held-out rows.
    """
    numeric, categorical = feature_column_types(X)

    num_pipe = Pipeline([
        ("imp", SimpleImputer(strategy="mean")),
        ("sc", StandardScaler()),
    ])
    cat_pipe = Pipeline([
        ("imp", SimpleImputer(strategy="most_frequent")),
        ("ohe", OneHotEncoder(
            min_frequency=min_frequency,
            handle_unknown="infrequent_if_exist",
            sparse_output=False,
        )),
    ])

    transformers = [("num", num_pipe, numeric)]
    if categorical:
        transformers.append(("cat", cat_pipe, categorical))
    return ColumnTransformer(transformers, remainder="drop")


def split_train_test(
    X: pd.DataFrame,
    y: pd.Series,
    test_size: float = TEST_SIZE,
    seed: int = DEFAULT_SEED,
    stratify: bool = False,
    groups: Optional[pd.Series] = None,
) -> Tuple[pd.DataFrame, pd.DataFrame, pd.Series, pd.Series]:
    """Seeded train/test split; stratified only when every class can appear on both sides.

    With `groups`, all rows of a group land on the same side of the split.
    """
    if groups is not None:
        gss = GroupShuffleSplit(n_splits=1, test_size=test_size, random_state=seed)
        train_idx, test_idx = next(gss.split(X, y, groups=np.asarray(groups)))
        return X.iloc[train_idx], X.iloc[test_idx], y.iloc[train_idx], y.iloc[test_idx]
    strata = None
    if stratify and y.value_counts().min() >= 2:
        strata = y
    return train_test_split(X, y, test_size=test_size, random_state=seed, stratify=strata)
