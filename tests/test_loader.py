import numpy as np
import pandas as pd
import pytest

from svac_predictor.loader import (
    DataFormatError,
    load_svac,
    load_world_bank,
    resolve_year_column,
)


def test_load_svac_converts_sentinel(tmp_path):
    path = tmp_path / "svac.csv"
    pd.DataFrame({
        "ConflictID": [1, 2],
        "ActorID": [10, 20],
        "gwnoloc": ["500", "645, 652"],
        "state_prev": [2, -99],
        "ai_prev": [-99, -99],
        "hrw_prev": [1, -99],
        "form": ["2, 4", "-99"],
    }).to_csv(path, index=False)

    df = load_svac(path)
    assert np.isnan(df.loc[0, "ai_prev"])
    assert df.loc[1, ["state_prev", "ai_prev", "hrw_prev"]].isna().all()
    assert pd.isna(df.loc[1, "form"])
    assert df.loc[0, "form"] == "2, 4"
    assert "actorid" in df.columns


def test_load_svac_reads_excel(tmp_path):
    path = tmp_path / "svac.xlsx"
    pd.DataFrame({
        "actorid": [10],
        "gwnoloc": [500],
        "state_prev": [3],
        "ai_prev": [-99],
        "hrw_prev": [2],
        "form": ["1"],
    }).to_excel(path, index=False)
    df = load_svac(path)
    assert df.loc[0, "state_prev"] == 3
    assert np.isnan(df.loc[0, "ai_prev"])


def test_load_svac_rejects_legacy_xls(tmp_path):
    path = tmp_path / "svac.xls"
    path.write_bytes(b"\xd0\xcf\x11\xe0")
    with pytest.raises(DataFormatError, match=r"\.xls"):
        load_svac(path)


def test_load_svac_missing_columns_named(tmp_path):
    path = tmp_path / "svac.csv"
    pd.DataFrame({"actorid": [1], "gwnoloc": ["2"], "form": ["1"]}).to_csv(path, index=False)
    with pytest.raises(DataFormatError) as exc:
        load_svac(path)
    assert "state_prev" in str(exc.value)
    assert str(path) in str(exc.value)


@pytest.mark.parametrize("columns, expected", [
    (["Country Name", "2014 [YR2014]", "2015 [YR2015]"], "2015 [YR2015]"),
    (["Country Name", "2015"], "2015"),
    (["Country Name", "2016 [YR2016]"], None),
])
def test_resolve_year_column(columns, expected):
    assert resolve_year_column(columns, 2015) == expected


def test_load_world_bank_long_form(tmp_path):
    path = tmp_path / "wdi.csv"
    path.write_text(
        "Country Name,Country Code,Series Name,Series Code,2015 [YR2015]\n"
        "Kenya,KEN,\"Population, total\",SP.POP.TOTL,47878339\n"
        "Kenya,KEN,GDP growth (annual %),NY.GDP.MKTP.KD.ZG,..\n"
        "World,WLD,\"Population, total\",SP.POP.TOTL,7380000000\n"
        ",,,,\n"
        "Data from database: World Development Indicators,,,,\n",
        encoding="utf-8",
    )
    long = load_world_bank(path, year=2015)
    assert list(long.columns) == ["country_name", "country_code", "indicator", "value"]
    assert len(long) == 3
    kenya = long[long["country_code"] == "KEN"].set_index("indicator")["value"]
    assert kenya["Population, total"] == 47878339
    assert np.isnan(kenya["GDP growth (annual %)"])


def test_load_world_bank_accepts_indicator_name(tmp_path):
    path = tmp_path / "wdi.csv"
    pd.DataFrame({
        "Country Name": ["Kenya"],
        "Country Code": ["KEN"],
        "Indicator Name": ["Population, total"],
        "2015": [1.0],
    }).to_csv(path, index=False)
    long = load_world_bank(path, year=2015)
    assert long["indicator"].tolist() == ["Population, total"]


def test_load_world_bank_missing_year(tmp_path):
    path = tmp_path / "wdi.csv"
    pd.DataFrame({
        "Country Name": ["Kenya"],
        "Country Code": ["KEN"],
        "Series Name": ["Population, total"],
        "2010 [YR2010]": [1.0],
    }).to_csv(path, index=False)
    with pytest.raises(DataFormatError, match="2015"):
        load_world_bank(path, year=2015)
