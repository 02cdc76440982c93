import numpy as np
import pandas as pd
import pytest
from sklearn.pipeline import Pipeline

from svac_predictor.preprocessing import (
    build_preprocessor,
    feature_column_types,
    select_features,
    split_train_test,
)


def test_select_features_drops_identifiers(regression_frame):
    X, y = select_features(regression_frame, "avg_prev")
    assert not {"country_name", "country_code", "gwno", "avg_prev"} & set(X.columns)
    assert "has_sexslv" in X.columns
    assert y.name == "avg_prev"


def test_feature_column_types(regression_frame):
    X, _ = select_features(regression_frame.drop(columns=["has_sexslv"]), "avg_prev")
    numeric, categorical = feature_column_types(X)
    assert numeric == ["x1", "x2", "x3"]
    assert categorical == ["business_procedures"]


def test_numeric_statistics_come_from_training_rows():
    train = pd.DataFrame({"x": [1.0, 2.0, 3.0, np.nan]})
    test = pd.DataFrame({"x": [np.nan, 4.0]})
    prep = build_preprocessor(train).fit(train)
    out = prep.transform(test)
    # NaN imputed with the train mean (2.0) lands at zero after scaling
    assert out[0, 0] == pytest.approx(0.0)
    scale = np.std([1.0, 2.0, 3.0, 2.0])
    assert out[1, 0] == pytest.approx((4.0 - 2.0) / scale)


def test_rare_levels_pooled():
    X = pd.DataFrame({
        "x": np.arange(41, dtype=float),
        "cat": ["a"] * 20 + ["b"] * 20 + ["c"],
    })
    prep = build_preprocessor(X).fit(X)
    ohe = prep.named_transformers_["cat"].named_steps["ohe"]
    assert [list(c) for c in ohe.infrequent_categories_] == [["c"]]
    # numeric + a, b + infrequent bucket
    assert prep.transform(X).shape == (41, 4)


def test_unseen_level_does_not_fail():
    X = pd.DataFrame({"x": [1.0, 2.0, 3.0, 4.0], "cat": ["a", "a", "b", "b"]})
    prep = build_preprocessor(X, min_frequency=None).fit(X)
    out = prep.transform(pd.DataFrame({"x": [1.0], "cat": ["z"]}))
    assert out.shape == (1, 3)
    assert out[0, 1:].tolist() == [0.0, 0.0]


def test_split_is_deterministic(regression_frame):
    X, y = select_features(regression_frame, "avg_prev")
    a = split_train_test(X, y, seed=7)
    b = split_train_test(X, y, seed=7)
    assert a[0].index.tolist() == b[0].index.tolist()
    assert len(a[1]) == 8
    c = split_train_test(X, y, seed=8)
    assert a[0].index.tolist() != c[0].index.tolist()


def test_stratified_split_keeps_both_classes(regression_frame):
    X, y = select_features(regression_frame, "has_sexslv")
    _, _, y_train, y_test = split_train_test(X, y, seed=1, stratify=True)
    assert set(y_test) == {0, 1}


def test_grouped_split_keeps_countries_on_one_side(regression_frame):
    # Three actors per country, all sharing the country indicators
    frame = pd.concat([regression_frame.assign(actorid=a) for a in (1, 2, 3)], ignore_index=True)
    X, y = select_features(frame, "avg_prev")
    X_train, X_test, y_train, y_test = split_train_test(X, y, seed=3, groups=frame["gwno"])
    train_countries = set(frame.loc[X_train.index, "gwno"])
    test_countries = set(frame.loc[X_test.index, "gwno"])
    assert not train_countries & test_countries
    assert len(test_countries) == 8
    assert len(X_train) + len(X_test) == len(frame)
    again = split_train_test(X, y, seed=3, groups=frame["gwno"])
    assert again[1].index.tolist() == X_test.index.tolist()


def test_preprocessor_inside_pipeline_handles_categoricals(regression_frame):
    from sklearn.linear_model import LinearRegression

    X, y = select_features(regression_frame.drop(columns=["has_sexslv"]), "avg_prev")
    pipe = Pipeline([("prep", build_preprocessor(X)), ("model", LinearRegression())])
    pipe.fit(X, y)
    assert pipe.predict(X).shape == (len(X),)
