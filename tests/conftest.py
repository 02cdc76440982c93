import numpy as np
import pandas as pd
import pytest


@pytest.fixture
def svac_records():
    """Conflict-actor-year rows with sentinel values already turned into NaN."""
    return pd.DataFrame({
        "conflictid": [1, 1, 2, 3, 4, 5],
        "actorid": [10, 10, 20, 30, 40, 50],
        "year": [2010, 2011, 2010, 2012, 2012, 2013],
        "gwnoloc": ["500", "500", "490", "625", "645, 652", "700"],
        "state_prev": [10.0, 2.0, np.nan, 1.0, 3.0, 0.0],
        "ai_prev": [np.nan, 2.0, np.nan, 1.0, np.nan, 0.0],
        "hrw_prev": [20.0, 2.0, np.nan, 3.0, 1.0, np.nan],
        "form": ["2, 4", "1, 3", "1, 2", "1, 3, 2", np.nan, "7"],
    })


@pytest.fixture
def regression_frame():
    rng = np.random.default_rng(0)
    n = 40
    x1 = rng.normal(0, 1, n)
    x2 = rng.normal(5, 2, n)
    x3 = rng.normal(0, 1, n)
    x3[::7] = np.nan
    df = pd.DataFrame({
        "country_name": [f"Country {i}" for i in range(n)],
        "country_code": [f"C{i:02d}" for i in range(n)],
        "gwno": np.arange(100, 100 + n),
        "x1": x1,
        "x2": x2,
        "x3": x3,
        "business_procedures": rng.choice(["4", "6", "8"], size=n),
    })
    df["avg_prev"] = 1.5 + 0.8 * x1 + rng.normal(0, 0.1, n)
    df["has_sexslv"] = (x1 > 0).astype(int)
    return df
