from __future__ import annotations

import logging
from functools import lru_cache
from importlib import resources
from typing import Dict, Iterable, List, Mapping, Optional

import pandas as pd
import pycountry

from .constants import COUNTRY_ID_OVERRIDES


logger = logging.getLogger(__name__)

CROSSWALK_FILE = "gw_iso3.csv"


@lru_cache(maxsize=1)
def load_crosswalk() -> pd.DataFrame:
    """Gleditsch-Ward state list with ISO alpha-3 codes (blank for historical states)."""
    with resources.files("svac_predictor").joinpath("data").joinpath(CROSSWALK_FILE).open("r", encoding="utf-8") as fh:
        table = pd.read_csv(fh, dtype={"gwno": int, "iso3c": str, "name": str}, keep_default_na=False)
    table["iso3c"] = table["iso3c"].str.strip().str.upper()
    return table


def iso3_to_gwno_table(overrides: Optional[Mapping[str, int]] = None) -> Dict[str, int]:
    """ISO alpha-3 -> GW code lookup with the manual overrides applied on top."""
    table = load_crosswalk()
    lookup = {
        code: int(gwno)
        for code, gwno in zip(table["iso3c"], table["gwno"])
        if code
    }
    lookup.update(COUNTRY_ID_OVERRIDES if overrides is None else overrides)
    return lookup


def is_sovereign_code(code: str) -> bool:
    """True when the code names an ISO 3166 country rather than a WDI aggregate (e.g. WLD, SSF)."""
    if not isinstance(code, str) or len(code) != 3:
        return False
    return pycountry.countries.get(alpha_3=code.upper()) is not None


def map_country_codes(codes: Iterable[str], overrides: Optional[Mapping[str, int]] = None) -> pd.Series:
    """Map ISO alpha-3 codes to GW codes; unresolved codes become <NA>."""
    lookup = iso3_to_gwno_table(overrides)
    codes = pd.Series(list(codes), dtype="object")
    mapped = codes.map(lambda c: lookup.get(str(c).strip().upper()) if pd.notna(c) else None)

    unresolved: List[str] = sorted({str(c) for c, m in zip(codes, mapped) if pd.isna(m) and pd.notna(c)})
    countries = [c for c in unresolved if is_sovereign_code(c)]
    if countries:
        logger.warning("No GW code for %d countries, dropping: %s", len(countries), ", ".join(countries))
    aggregates = [c for c in unresolved if c not in countries]
    if aggregates:
        logger.debug("Ignoring %d aggregate/unknown codes: %s", len(aggregates), ", ".join(aggregates))

    return mapped.astype("Int64")
