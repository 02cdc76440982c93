from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, Optional, Union

import numpy as np
import pandas as pd

from .constants import (
    MISSING_SENTINEL,
    PREVALENCE_COLUMNS,
    REFERENCE_YEAR,
    SVAC_COLUMNS,
    WDI_COLUMNS,
    WDI_MISSING_TOKEN,
)


logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class DataFormatError(ValueError):
    """Raised when an input table does not have the expected layout."""


def _require_cols(df: pd.DataFrame, cols: Iterable[str], where: str) -> None:
    missing = [c for c in cols if c not in df.columns]
    if missing:
        raise DataFormatError(
            f"{where}: missing columns: {missing}\n"
            f"Available columns: {sorted(map(str, df.columns))}"
        )


EXCEL_SUFFIXES = (".xlsx", ".xlsm")


def _read_table(path: Path, **kwargs) -> pd.DataFrame:
    suffix = path.suffix.lower()
    if suffix in EXCEL_SUFFIXES:
        return pd.read_excel(path, engine="openpyxl", **kwargs)
    if suffix == ".xls":
        raise DataFormatError(f"{path}: legacy .xls workbooks are not supported, save it as .xlsx or .csv")
    return pd.read_csv(path, low_memory=False, **kwargs)


def _form_or_nan(value):
    if pd.isna(value):
        return np.nan
    text = str(value).strip()
    if text == "" or pd.to_numeric(text, errors="coerce") == MISSING_SENTINEL:
        return np.nan
    return text


def load_svac(path: PathLike) -> pd.DataFrame:
    """Read the SVAC conflict-actor-year table and turn the -99 sentinel into NaN."""
    path = Path(path)
    df = _read_table(path)
    df.columns = [str(c).strip().lower() for c in df.columns]

    required = [SVAC_COLUMNS["actor"], SVAC_COLUMNS["location"], SVAC_COLUMNS["form"]] + PREVALENCE_COLUMNS
    _require_cols(df, required, str(path))

    for col in PREVALENCE_COLUMNS:
        df[col] = pd.to_numeric(df[col], errors="coerce").replace(MISSING_SENTINEL, np.nan)

    form = SVAC_COLUMNS["form"]
    df[form] = df[form].map(_form_or_nan)

    logger.info("Loaded %d SVAC records from %s", len(df), path)
    return df


def resolve_year_column(columns: Iterable[str], year: int) -> Optional[str]:
    """Find the value column for a year; DataBank exports label it '2015 [YR2015]'."""
    pattern = re.compile(rf"^\s*{year}(\s*\[YR{year}\])?\s*$")
    for col in columns:
        if pattern.match(str(col)):
            return col
    return None


def load_world_bank(path: PathLike, year: int = REFERENCE_YEAR) -> pd.DataFrame:
    """Read a WDI export into long form: country_name, country_code, indicator, value."""
    path = Path(path)
    df = _read_table(path, na_values=[WDI_MISSING_TOKEN])
    df.columns = [str(c).strip() for c in df.columns]

    indicator_col = next((c for c in WDI_COLUMNS["indicator"] if c in df.columns), None)
    if indicator_col is None:
        raise DataFormatError(
            f"{path}: none of the indicator columns {list(WDI_COLUMNS['indicator'])} present"
        )
    _require_cols(df, [WDI_COLUMNS["country_name"], WDI_COLUMNS["country_code"]], str(path))

    value_col = resolve_year_column(df.columns, year)
    if value_col is None:
        raise DataFormatError(f"{path}: no value column for reference year {year}")

    long = pd.DataFrame({
        "country_name": df[WDI_COLUMNS["country_name"]],
        "country_code": df[WDI_COLUMNS["country_code"]],
        "indicator": df[indicator_col],
        "value": pd.to_numeric(df[value_col], errors="coerce"),
    })
    # DataBank appends footer lines ("Data from database: ...") with no country code
    long = long.dropna(subset=["country_code", "indicator"])
    long["country_code"] = long["country_code"].astype(str).str.strip()
    long["indicator"] = long["indicator"].astype(str).str.strip()

    logger.info(
        "Loaded %d indicator rows (%d countries, %d series) for %d from %s",
        len(long), long["country_code"].nunique(), long["indicator"].nunique(), year, path,
    )
    return long
