from __future__ import annotations

import argparse
from typing import Tuple

import numpy as np
import pandas as pd

from svac_predictor.constants import INDICATOR_NAMES, MISSING_SENTINEL, REFERENCE_YEAR
from svac_predictor.crosswalk import load_crosswalk


# A slice of the WDI popular series, plus one that is mostly empty
SYNTHETIC_SERIES = [
    "Population, total",
    "Population growth (annual %)",
    "Surface area (sq. km)",
    "GNI per capita, Atlas method (current US$)",
    "Life expectancy at birth, total (years)",
    "Fertility rate, total (births per woman)",
    "Mortality rate, under-5 (per 1,000 live births)",
    "Immunization, measles (% of children ages 12-23 months)",
    "Prevalence of HIV, total (% of population ages 15-49)",
    "GDP growth (annual %)",
    "Start-up procedures to register a business (number)",
    "Military expenditure (% of GDP)",
    "Mobile cellular subscriptions (per 100 people)",
    "Inflation, consumer prices (annual %)",
    "Poverty headcount ratio at national poverty lines (% of population)",
]
SPARSE_SERIES = "Poverty headcount ratio at national poverty lines (% of population)"

AGGREGATES = [
    ("World", "WLD"),
    ("Sub-Saharan Africa", "SSF"),
    ("Low income", "LIC"),
]
# WDI economies without a GW code
TERRITORIES = [
    ("Puerto Rico", "PRI"),
    ("Hong Kong SAR, China", "HKG"),
]


def make_synthetic_world_bank(seed: int = 42, year: int = REFERENCE_YEAR) -> Tuple[pd.DataFrame, pd.Series]:
    """WDI-style long export and a latent country risk score indexed by ISO code."""
    rng = np.random.default_rng(seed)

    table = load_crosswalk()
    states = table.loc[table["iso3c"] != "", ["name", "iso3c"]].values.tolist()
    countries = states + [["Yemen, Rep.", "YEM"]] + [list(t) for t in TERRITORIES] + [list(a) for a in AGGREGATES]
    codes = [c for _, c in countries]

    risk = pd.Series(rng.normal(0, 1, size=len(codes)), index=codes)

    rows = []
    for name, code in countries:
        r = risk[code]
        for series in SYNTHETIC_SERIES:
            missing_p = 0.6 if series == SPARSE_SERIES else 0.1
            if rng.random() < missing_p:
                value = None
            elif series.startswith("Start-up procedures"):
                value = float(rng.integers(3, 13))
            elif series.startswith("Mortality") or series.startswith("Fertility"):
                value = float(50 + 20 * r + rng.normal(0, 5))
            elif series.startswith("Life expectancy"):
                value = float(70 - 6 * r + rng.normal(0, 2))
            elif series.startswith("Military"):
                value = float(abs(2 + 0.8 * r + rng.normal(0, 0.5)))
            else:
                value = float(rng.lognormal(2, 1))
            rows.append({
                "Country Name": name,
                "Country Code": code,
                "Series Name": series,
                "Series Code": INDICATOR_NAMES.get(series, "x").upper(),
                f"{year} [YR{year}]": ".." if value is None else f"{value:.4f}",
            })
    return pd.DataFrame(rows), risk


def make_synthetic_svac(risk: pd.Series, seed: int = 42, n_countries: int = 70) -> pd.DataFrame:
    """SVAC-style conflict-actor-year rows for a sample of GW states."""
    rng = np.random.default_rng(seed + 1)
    table = load_crosswalk()
    gw_by_iso = dict(zip(table["iso3c"], table["gwno"]))
    gw_by_iso["YEM"] = 678

    candidates = [c for c in risk.index if c in gw_by_iso]
    sample = rng.choice(candidates, size=min(n_countries, len(candidates)), replace=False)

    rows = []
    actor_id = 1000
    for i, code in enumerate(sample):
        gwno = int(gw_by_iso[code])
        for _ in range(int(rng.integers(1, 4))):
            actor_id += 1
            level = float(np.clip(1.5 + 0.7 * risk[code] + rng.normal(0, 0.4), 0, 3))
            for year in range(2010, 2010 + int(rng.integers(1, 4))):
                prev = [int(np.clip(round(level + rng.normal(0, 0.5)), 0, 3)) for _ in range(3)]
                prev = [MISSING_SENTINEL if rng.random() < 0.25 else p for p in prev]
                if rng.random() < 0.1:
                    form = str(MISSING_SENTINEL)
                else:
                    k = int(rng.integers(1, 4))
                    p_slavery = 0.5 if risk[code] > 0 else 0.1
                    codes = list(rng.choice([1, 3, 4, 5, 6, 7], size=k, replace=False))
                    if rng.random() < p_slavery:
                        codes.insert(int(rng.integers(0, 2)), 2)
                    form = ", ".join(str(c) for c in codes[:5])
                location = str(gwno)
                # A few conflicts span two countries
                if i % 17 == 0 and i + 1 < len(sample):
                    location = f"{gwno}, {int(gw_by_iso[sample[i + 1]])}"
                rows.append({
                    "conflictid": 100 + i,
                    "actorid": actor_id,
                    "year": year,
                    "gwnoloc": location,
                    "state_prev": prev[0],
                    "ai_prev": prev[1],
                    "hrw_prev": prev[2],
                    "form": form,
                })
    return pd.DataFrame(rows)


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(description="Write synthetic SVAC and WDI inputs")
    parser.add_argument("--svac_out", default="SVAC_synthetic.csv")
    parser.add_argument("--wdi_out", default="WDI_synthetic.csv")
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--year", type=int, default=REFERENCE_YEAR)
    args = parser.parse_args(argv)

    wdi, risk = make_synthetic_world_bank(seed=args.seed, year=args.year)
    svac = make_synthetic_svac(risk, seed=args.seed)
    wdi.to_csv(args.wdi_out, index=False)
    svac.to_csv(args.svac_out, index=False)
    print("Synthetic SVAC written to", args.svac_out, "with shape:", svac.shape)
    print("Synthetic WDI written to", args.wdi_out, "with shape:", wdi.shape)


if __name__ == "__main__":
    main()
