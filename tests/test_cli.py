import json

import pandas as pd
import pytest

import cli
import generate_synthetic_dataset as gen


def _write_inputs(tmp_path):
    svac_path = tmp_path / "svac.csv"
    wdi_path = tmp_path / "wdi.csv"
    gen.main(["--svac_out", str(svac_path), "--wdi_out", str(wdi_path), "--seed", "5"])
    return svac_path, wdi_path


def test_synthetic_inputs_have_real_layout(tmp_path):
    svac_path, wdi_path = _write_inputs(tmp_path)
    svac = pd.read_csv(svac_path)
    wdi = pd.read_csv(wdi_path)
    assert {"actorid", "gwnoloc", "state_prev", "ai_prev", "hrw_prev", "form"} <= set(svac.columns)
    assert (svac["state_prev"] == -99).any()
    assert {"Country Name", "Country Code", "Series Name", "2015 [YR2015]"} <= set(wdi.columns)
    assert (wdi["2015 [YR2015]"] == "..").any()


def test_cli_regression_run(tmp_path):
    svac_path, wdi_path = _write_inputs(tmp_path)
    out_dir = tmp_path / "results"
    cli.main([
        "--svac", str(svac_path),
        "--wdi", str(wdi_path),
        "--out", str(out_dir),
        "--task", "regression",
        "--grid_levels", "2",
        "--resamples", "2",
        "--top_n", "3",
        "--log_level", "WARNING",
    ])

    metrics = pd.read_csv(out_dir / "regression_metrics.csv")
    assert set(metrics["model"]) == {"rf", "elastic_net", "mars_style"}
    assert (metrics["rmse"] >= 0).all()

    highest = pd.read_csv(out_dir / "predicted_highest.csv")
    lowest = pd.read_csv(out_dir / "predicted_lowest.csv")
    assert len(highest) == 3 and len(lowest) == 3
    assert highest["predicted_prev"].is_monotonic_decreasing

    with open(out_dir / "results_summary.json", encoding="utf-8") as f:
        summary = json.load(f)
    assert summary["regression"]["best_model"] in {"rf", "elastic_net", "mars_style"}
    assert "classification" not in summary
    # The mostly empty poverty series is filtered out before modeling
    assert "poverty_headcount" not in summary["features"]
    assert "gwno" in summary["features"]


def test_cli_run_is_reproducible(tmp_path):
    svac_path, wdi_path = _write_inputs(tmp_path)
    args = [
        "--svac", str(svac_path), "--wdi", str(wdi_path),
        "--task", "regression", "--grid_levels", "2", "--resamples", "2",
        "--log_level", "WARNING",
    ]
    cli.main(args + ["--out", str(tmp_path / "a")])
    cli.main(args + ["--out", str(tmp_path / "b")])
    a = pd.read_csv(tmp_path / "a" / "regression_metrics.csv")
    b = pd.read_csv(tmp_path / "b" / "regression_metrics.csv")
    pd.testing.assert_frame_equal(a, b)


@pytest.mark.slow
def test_cli_classification_run(tmp_path):
    svac_path, wdi_path = _write_inputs(tmp_path)
    out_dir = tmp_path / "results"
    cli.main([
        "--svac", str(svac_path),
        "--wdi", str(wdi_path),
        "--out", str(out_dir),
        "--task", "classification",
        "--grid_levels", "1",
        "--resamples", "2",
        "--bart_draws", "20",
        "--bart_tune", "20",
        "--bart_max_trees", "10",
        "--log_level", "WARNING",
    ])

    metrics = pd.read_csv(out_dir / "classification_metrics.csv")
    assert set(metrics["model"]) == {"rf", "elastic_net", "bart"}
    assert metrics["accuracy"].between(0, 1).all()

    with open(out_dir / "results_summary.json", encoding="utf-8") as f:
        summary = json.load(f)
    cls = summary["classification"]
    assert "regression" not in summary
    assert cls["n_train"] + cls["n_test"] == cls["n_rows"]

    for key in ("rf", "elastic_net", "bart"):
        cm = pd.read_csv(out_dir / f"confusion_{key}.csv", index_col=0)
        assert cm.index.str.startswith("truth_").all()
        assert cm.columns.str.startswith("pred_").all()
        assert int(cm.to_numpy().sum()) == cls["n_test"]
        assert sum(map(sum, cls["models"][key]["confusion_matrix"])) == cls["n_test"]
    assert cls["models"]["bart"]["best_params"] == {"model__trees": 6}
