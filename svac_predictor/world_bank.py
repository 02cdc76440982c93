from __future__ import annotations

import logging
import re
from typing import Dict, List, Mapping, Optional

import pandas as pd

from .constants import (
    CATEGORICAL_INDICATORS,
    COUNTRY_ID,
    INDICATOR_NAMES,
    MISSING_THRESHOLD,
)
from .crosswalk import map_country_codes


logger = logging.getLogger(__name__)

KEY_COLUMNS = ["country_name", "country_code"]


def pivot_indicators(long: pd.DataFrame) -> pd.DataFrame:
    """Long indicator rows -> one row per country, one column per indicator."""
    wide = long.pivot_table(
        index=KEY_COLUMNS,
        columns="indicator",
        values="value",
        aggfunc="mean",
    )
    # Countries whose every value is missing still need a row
    countries = long[KEY_COLUMNS].drop_duplicates().set_index(KEY_COLUMNS).index
    wide = wide.reindex(countries)
    wide.columns.name = None
    return wide.reset_index()


def missing_share(wide: pd.DataFrame) -> pd.Series:
    """Fraction of countries with no value, per indicator column."""
    value_cols = [c for c in wide.columns if c not in KEY_COLUMNS + [COUNTRY_ID]]
    return wide[value_cols].isna().mean(axis=0)


def drop_sparse_columns(wide: pd.DataFrame, threshold: float = MISSING_THRESHOLD) -> pd.DataFrame:
    """Keep only indicators missing in strictly less than `threshold` of countries."""
    share = missing_share(wide)
    sparse = share.index[share >= threshold].tolist()
    if sparse:
        logger.debug("Dropping %d sparse indicators: %s", len(sparse), sparse)
    logger.info("Kept %d of %d indicators (missing share < %.2f)", len(share) - len(sparse), len(share), threshold)
    return wide.drop(columns=sparse)


def attach_country_ids(wide: pd.DataFrame, overrides: Optional[Mapping[str, int]] = None) -> pd.DataFrame:
    """Add the GW country code and drop rows that cannot be mapped."""
    out = wide.copy()
    out[COUNTRY_ID] = map_country_codes(out["country_code"], overrides).values
    before = len(out)
    out = out.dropna(subset=[COUNTRY_ID])
    out[COUNTRY_ID] = out[COUNTRY_ID].astype(int)
    logger.info("Mapped %d of %d rows to GW codes", len(out), before)
    return out.reset_index(drop=True)


def slugify(name: str) -> str:
    slug = re.sub(r"[^0-9a-zA-Z]+", "_", str(name)).strip("_").lower()
    return slug or "indicator"


def indicator_renames(columns: List[str], names: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    names = INDICATOR_NAMES if names is None else names
    renames: Dict[str, str] = {}
    for col in columns:
        if col in KEY_COLUMNS or col == COUNTRY_ID:
            continue
        renames[col] = names.get(col) or slugify(col)
    return renames


def rename_indicators(wide: pd.DataFrame, names: Optional[Mapping[str, str]] = None) -> pd.DataFrame:
    """Rename WDI series labels to stable semantic column names."""
    names = INDICATOR_NAMES if names is None else names
    renames = indicator_renames(list(wide.columns), names)
    unknown = [c for c in renames if c not in names]
    if unknown:
        logger.debug("No semantic name for %d series, slugified: %s", len(unknown), unknown)
    return wide.rename(columns=renames)


def coerce_business_procedures(wide: pd.DataFrame) -> pd.DataFrame:
    """Treat count-like indicators as categories; rows without a usable count are dropped."""
    out = wide.copy()
    for col in CATEGORICAL_INDICATORS:
        if col not in out.columns:
            continue
        counts = pd.to_numeric(out[col], errors="coerce").round()
        before = len(out)
        out = out.loc[counts.notna()].copy()
        out[col] = counts.loc[counts.notna()].astype(int).astype(str)
        logger.info("Dropped %d rows with no %s value", before - len(out), col)
    return out.reset_index(drop=True)


def clean_world_bank(
    long: pd.DataFrame,
    threshold: float = MISSING_THRESHOLD,
    overrides: Optional[Mapping[str, int]] = None,
) -> pd.DataFrame:
    """Pivot, map GW codes, filter sparse indicators, rename, and coerce categoricals.

    Missing shares are taken over rows with a GW code only.
    """
    wide = pivot_indicators(long)
    wide = attach_country_ids(wide, overrides)
    wide = drop_sparse_columns(wide, threshold)
    wide = rename_indicators(wide)
    wide = coerce_business_procedures(wide)
    return wide
