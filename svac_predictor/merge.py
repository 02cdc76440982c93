from __future__ import annotations

import logging

import pandas as pd

from .constants import CLASSIFICATION_TARGET, COUNTRY_ID, REGRESSION_TARGET
from .loader import DataFormatError


logger = logging.getLogger(__name__)


def join_regression(svac_reg: pd.DataFrame, wb: pd.DataFrame) -> pd.DataFrame:
    """Attach SVAC prevalence averages to indicator rows; keep only countries with a score."""
    joined = wb.merge(svac_reg, on=COUNTRY_ID, how="left")
    joined = joined.dropna(subset=[REGRESSION_TARGET]).reset_index(drop=True)
    if joined.empty:
        raise DataFormatError("no countries left after joining SVAC prevalence to indicators")
    logger.info(
        "Regression set: %d rows across %d countries",
        len(joined), joined[COUNTRY_ID].nunique(),
    )
    return joined


def join_classification(svac_cls: pd.DataFrame, wb: pd.DataFrame) -> pd.DataFrame:
    """Left join of the country-level flag; countries without SVAC records keep a null target."""
    joined = wb.merge(svac_cls, on=COUNTRY_ID, how="left")
    logger.info(
        "Classification join: %d countries, %d with a target",
        len(joined), int(joined[CLASSIFICATION_TARGET].notna().sum()),
    )
    return joined


def drop_missing_target(df: pd.DataFrame, target: str) -> pd.DataFrame:
    """Supervised fits need an observed outcome."""
    out = df.dropna(subset=[target]).reset_index(drop=True)
    if out.empty:
        raise DataFormatError(f"no rows with an observed '{target}' to fit on")
    logger.info("Dropped %d rows without %s", len(df) - len(out), target)
    return out


def unobserved_countries(wb: pd.DataFrame, svac_reg: pd.DataFrame) -> pd.DataFrame:
    """Indicator rows for countries with no SVAC prevalence record."""
    seen = set(svac_reg[COUNTRY_ID].dropna().astype(int))
    return wb.loc[~wb[COUNTRY_ID].isin(seen)].reset_index(drop=True)
