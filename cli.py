from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

import pandas as pd

from svac_predictor.constants import (
    BART_TREES_RANGE,
    CLASSIFICATION_TARGET,
    COUNTRY_ID,
    DEFAULT_SEED,
    GRID_LEVELS,
    N_RESAMPLES,
    REFERENCE_YEAR,
    REGRESSION_TARGET,
    TEST_SIZE,
)
from svac_predictor.evaluation import confusion_frame
from svac_predictor.loader import load_svac, load_world_bank
from svac_predictor.merge import (
    drop_missing_target,
    join_classification,
    join_regression,
    unobserved_countries,
)
from svac_predictor.ml_workflow import (
    best_regression_model,
    evaluate_classification_suite,
    evaluate_regression_suite,
    metrics_table,
    rank_unobserved,
)
from svac_predictor.preprocessing import select_features, split_train_test
from svac_predictor.svac import build_classification_target, build_regression_target
from svac_predictor.world_bank import clean_world_bank


logger = logging.getLogger("svac_predictor.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="SVAC Prevalence Predictor CLI")
    parser.add_argument("--svac", default="SVAC_3.2_conflictyears.xlsx", help="SVAC conflict-actor-year workbook (xlsx or csv)")
    parser.add_argument("--wdi", default="WDI_Data.csv", help="World Bank WDI export (csv or xlsx)")
    parser.add_argument("--year", type=int, default=REFERENCE_YEAR, help="Reference year of the indicator values")
    parser.add_argument("--out", default="svac_model_results", help="Output directory")
    parser.add_argument("--task", choices=["regression", "classification", "both"], default="both", help="Which models to fit")
    parser.add_argument("--test_size", type=float, default=TEST_SIZE, help="Test set ratio")
    parser.add_argument("--seed", type=int, default=DEFAULT_SEED, help="Random seed")
    parser.add_argument("--resamples", type=int, default=N_RESAMPLES, help="Bootstrap resamples for tuning")
    parser.add_argument("--grid_levels", type=int, default=GRID_LEVELS, help="Regular grid levels per tuned parameter")
    parser.add_argument("--bart_draws", type=int, default=500, help="Posterior draws per BART chain")
    parser.add_argument("--bart_tune", type=int, default=500, help="Tuning steps per BART chain")
    parser.add_argument("--bart_max_trees", type=int, default=BART_TREES_RANGE[1], help="Upper end of the BART trees grid")
    parser.add_argument("--top_n", type=int, default=10, help="Countries listed at each end of the prediction ranking")
    parser.add_argument("--n_jobs", type=int, default=1, help="Parallel jobs for grid search")
    parser.add_argument("--log_level", default="INFO", help="Logging level")
    return parser


def run_regression(args, svac_df: pd.DataFrame, wb: pd.DataFrame, out_dir: Path) -> dict:
    svac_reg = build_regression_target(svac_df)
    joined = join_regression(svac_reg, wb)

    X, y = select_features(joined, REGRESSION_TARGET)
    # Several actors share one country row of indicators; keep each country on one side
    X_train, X_test, y_train, y_test = split_train_test(
        X, y, test_size=args.test_size, seed=args.seed, groups=joined[COUNTRY_ID]
    )

    fitted = evaluate_regression_suite(
        X_train, y_train, X_test, y_test,
        grid_levels=args.grid_levels,
        n_resamples=args.resamples,
        random_state=args.seed,
        n_jobs=args.n_jobs,
    )
    table = metrics_table(fitted)
    table.to_csv(out_dir / "regression_metrics.csv", index=False, encoding="utf-8")

    print("\nRegression (test RMSE):")
    print(table[["model", "rmse", "cv_score"]].to_string(index=False))

    best = best_regression_model(fitted)
    unobserved = unobserved_countries(wb, svac_reg)
    highest, lowest = rank_unobserved(best, unobserved, list(X.columns), top_n=args.top_n)
    highest.to_csv(out_dir / "predicted_highest.csv", index=False, encoding="utf-8")
    lowest.to_csv(out_dir / "predicted_lowest.csv", index=False, encoding="utf-8")

    print(f"\nHighest predicted prevalence ({best.name}), countries outside SVAC:")
    print(highest.to_string(index=False))
    print(f"\nLowest predicted prevalence ({best.name}), countries outside SVAC:")
    print(lowest.to_string(index=False))

    return {
        "n_rows": int(len(joined)),
        "n_train": int(len(X_train)),
        "n_test": int(len(X_test)),
        "models": {
            key: {
                "rmse": m.result.rmse,
                "cv_score": m.cv_score,
                "best_params": m.best_params,
            }
            for key, m in fitted.items()
        },
        "best_model": best.name,
        "n_unobserved": int(len(unobserved)),
    }


def run_classification(args, svac_df: pd.DataFrame, wb: pd.DataFrame, out_dir: Path) -> dict:
    svac_cls = build_classification_target(svac_df)
    joined = join_classification(svac_cls, wb)
    joined = drop_missing_target(joined, CLASSIFICATION_TARGET)

    X, y = select_features(joined, CLASSIFICATION_TARGET)
    y = y.astype(int)
    X_train, X_test, y_train, y_test = split_train_test(
        X, y, test_size=args.test_size, seed=args.seed, stratify=True
    )

    fitted = evaluate_classification_suite(
        X_train, y_train, X_test, y_test,
        grid_levels=args.grid_levels,
        n_resamples=args.resamples,
        random_state=args.seed,
        n_jobs=args.n_jobs,
        bart_draws=args.bart_draws,
        bart_tune=args.bart_tune,
        bart_max_trees=args.bart_max_trees,
    )
    table = metrics_table(fitted)
    table.to_csv(out_dir / "classification_metrics.csv", index=False, encoding="utf-8")

    print("\nClassification (test set):")
    print(table[["model", "accuracy", "precision", "recall", "cv_score"]].to_string(index=False))

    results = {
        "n_rows": int(len(joined)),
        "n_train": int(len(X_train)),
        "n_test": int(len(X_test)),
        "models": {},
    }
    for key, m in fitted.items():
        cm = confusion_frame(m.result)
        cm.to_csv(out_dir / f"confusion_{key}.csv", encoding="utf-8")
        print(f"\nConfusion matrix: {key}")
        print(cm.to_string())
        results["models"][key] = {
            "accuracy": m.result.accuracy,
            "precision": m.result.precision,
            "recall": m.result.recall,
            "confusion_matrix": m.result.cm.tolist(),
            "cv_score": m.cv_score,
            "best_params": m.best_params,
        }
    return results


def main(argv=None) -> None:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    out_dir = Path(args.out)
    out_dir.mkdir(parents=True, exist_ok=True)

    svac_df = load_svac(args.svac)
    wb = clean_world_bank(load_world_bank(args.wdi, year=args.year))

    results = {
        "seed": args.seed,
        "test_size": args.test_size,
        "year": args.year,
        "n_countries": int(len(wb)),
        "features": list(wb.columns),
    }
    if args.task in ("regression", "both"):
        results["regression"] = run_regression(args, svac_df, wb, out_dir)
    if args.task in ("classification", "both"):
        results["classification"] = run_classification(args, svac_df, wb, out_dir)

    with open(out_dir / "results_summary.json", "w", encoding="utf-8") as f:
        json.dump(results, f, ensure_ascii=False, indent=2, default=str)

    logger.info("Wrote results to %s", out_dir)
    print("Done. Output directory:", str(out_dir))


if __name__ == "__main__":
    main()
