from __future__ import annotations

import logging
from typing import List, Optional, Sequence

import pandas as pd

from .constants import (
    ACTOR_ID,
    CLASSIFICATION_TARGET,
    COUNTRY_ID,
    MAX_FORM_CODES,
    PREVALENCE_COLUMNS,
    REGRESSION_TARGET,
    SEXUAL_SLAVERY_CODE,
    SEXUAL_SLAVERY_POSITIONS,
    SVAC_COLUMNS,
)


logger = logging.getLogger(__name__)


def parse_codes(value, limit: Optional[int] = None) -> List[int]:
    """Split a comma-delimited code field into ints, skipping non-numeric tokens."""
    if value is None or pd.isna(value):
        return []
    codes: List[int] = []
    for token in str(value).split(","):
        code = _to_code(token)
        if code is not None:
            codes.append(code)
    return codes[:limit] if limit is not None else codes


def _to_code(token) -> Optional[int]:
    try:
        return int(float(str(token).strip()))
    except (ValueError, OverflowError):
        return None


def parse_form_codes(value) -> List[Optional[int]]:
    """Positional violence-type codes of a form field, at most five slots.

    Empty or non-numeric slots stay in place as None, so later codes keep their position.
    """
    if value is None or pd.isna(value):
        return []
    return [_to_code(token) for token in str(value).split(",")][:MAX_FORM_CODES]


def has_sexual_slavery(codes: Sequence[Optional[int]]) -> bool:
    """Sexual slavery in one of the two leading form slots."""
    return SEXUAL_SLAVERY_CODE in set(codes[:SEXUAL_SLAVERY_POSITIONS])


def record_average_prevalence(df: pd.DataFrame) -> pd.Series:
    """Mean of the available prevalence sub-scores per record (NaN if none reported)."""
    return df[PREVALENCE_COLUMNS].astype(float).mean(axis=1, skipna=True)


def explode_locations(df: pd.DataFrame) -> pd.DataFrame:
    """One row per GW location code; multi-country conflicts list several in one cell."""
    out = df.copy()
    out[COUNTRY_ID] = out[SVAC_COLUMNS["location"]].map(parse_codes)
    out = out.explode(COUNTRY_ID)
    out = out.dropna(subset=[COUNTRY_ID])
    out[COUNTRY_ID] = out[COUNTRY_ID].astype(int)
    return out


def build_regression_target(df: pd.DataFrame) -> pd.DataFrame:
    """Average prevalence per (country, actor), ignoring missing sub-scores.

    Records with all three sub-scores missing are dropped before aggregation.
    """
    records = df.copy()
    records[REGRESSION_TARGET] = record_average_prevalence(records)
    before = len(records)
    records = records.dropna(subset=[REGRESSION_TARGET])
    logger.info("Dropped %d SVAC records with no prevalence score", before - len(records))

    records = explode_locations(records)
    out = (
        records.groupby([COUNTRY_ID, ACTOR_ID], as_index=False)[REGRESSION_TARGET]
        .mean()
    )
    return out


def build_classification_target(df: pd.DataFrame) -> pd.DataFrame:
    """Country-level sexual slavery flag: 1 if any record reports it, else 0.

    Records without a form code (reported as -99) count as negative.
    """
    records = df.copy()
    flags = records[SVAC_COLUMNS["form"]].map(lambda v: has_sexual_slavery(parse_form_codes(v)))
    records[CLASSIFICATION_TARGET] = flags.astype(int)
    records = explode_locations(records)

    out = (
        records.groupby(COUNTRY_ID, as_index=False)[CLASSIFICATION_TARGET]
        .max()
    )
    out[CLASSIFICATION_TARGET] = out[CLASSIFICATION_TARGET].astype(int)
    logger.info(
        "Classification target: %d countries, %d flagged",
        len(out), int(out[CLASSIFICATION_TARGET].sum()),
    )
    return out
