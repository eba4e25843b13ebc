"""Tests for the evaluation scripts (evaluate, runner, collect_runs)."""
import json

import pandas as pd
import pytest
import yaml

from clfmetrics.errors import MetricsError
from clfmetrics.collect_runs import collect, collect_rows
from clfmetrics.evaluate import evaluate_frame, main, read_predictions
from clfmetrics.runner import apply_overrides, run_experiments


@pytest.fixture
def preds_csv(tmp_path):
    path = tmp_path / "preds.csv"
    pd.DataFrame({
        "y_true": [2, 0, 2, 2, 0, 1],
        "y_pred": [0, 0, 2, 2, 0, 2],
    }).to_csv(path, index=False)
    return path


def _write_cfg(tmp_path, csv_path, **metrics):
    cfg = {
        "data": {"csv": str(csv_path), "y_true_col": "y_true", "y_pred_col": "y_pred"},
        "metrics": {"classes": [0, 1, 2], "beta": 1.0, **metrics},
        "logging": {"out_dir": str(tmp_path / "evals"), "write_table": True},
    }
    path = tmp_path / "eval.yaml"
    path.write_text(yaml.safe_dump(cfg), encoding="utf-8")
    return path


class TestReadPredictions:
    def test_reads_columns(self, preds_csv):
        df = read_predictions(preds_csv)
        assert list(df.columns) == ["y_true", "y_pred"]
        assert len(df) == 6

    def test_missing_column(self, preds_csv):
        with pytest.raises(KeyError, match="label"):
            read_predictions(preds_csv, y_true_col="label")

    def test_empty_label_cells_rejected(self, tmp_path):
        csv = tmp_path / "gaps.csv"
        csv.write_text("y_true,y_pred\n0,0\n1,\n1,1\n", encoding="utf-8")
        with pytest.raises(MetricsError, match="y_pred"):
            read_predictions(csv)


class TestEvaluateFrame:
    def test_metrics(self, preds_csv):
        out = evaluate_frame(pd.read_csv(preds_csv), classes=[0, 1, 2])
        assert out["accuracy"] == pytest.approx(4 / 6)
        assert out["f_beta"]["micro"] == pytest.approx(4 / 6)


class TestMain:
    def test_writes_artifacts(self, tmp_path, preds_csv, capsys):
        out_dir = main(str(_write_cfg(tmp_path, preds_csv)))
        assert out_dir.parent == tmp_path / "evals"
        for name in ("config_resolved.json", "metrics.json", "per_class.csv", "confusion_matrix.csv"):
            assert (out_dir / name).exists()

        metrics = json.loads((out_dir / "metrics.json").read_text(encoding="utf-8"))
        assert metrics["confusion_matrix"] == [[2, 0, 0], [0, 0, 1], [1, 0, 2]]
        assert metrics["cohen_kappa"] == pytest.approx(0.42857142857142855)

        cm = pd.read_csv(out_dir / "confusion_matrix.csv", index_col=0)
        assert cm.values.tolist() == [[2, 0, 0], [0, 0, 1], [1, 0, 2]]
        assert "acc=0.6667" in capsys.readouterr().out

    def test_strict_raises_on_undefined(self, tmp_path):
        csv = tmp_path / "one_class.csv"
        pd.DataFrame({"y_true": [1, 1], "y_pred": [1, 1]}).to_csv(csv, index=False)
        cfg = _write_cfg(tmp_path, csv, classes=[1], strict=True)
        with pytest.raises(ValueError):
            main(str(cfg))


class TestRunner:
    def test_apply_overrides_dot_paths(self):
        base = {"metrics": {"beta": 1.0, "classes": [0, 1]}, "data": {"csv": "a.csv"}}
        out = apply_overrides(base, {"metrics.beta": 2.0, "data": {"csv": "b.csv"}})
        assert out["metrics"] == {"beta": 2.0, "classes": [0, 1]}
        assert out["data"]["csv"] == "b.csv"
        assert base["metrics"]["beta"] == 1.0

    def test_run_and_collect(self, tmp_path, preds_csv, capsys):
        base = _write_cfg(tmp_path, preds_csv)
        matrix = {
            "tmp_dir": str(tmp_path / "tmp_configs"),
            "experiments": [
                {"name": "f1", "base": str(base), "overrides": {}},
                {"name": "f2", "base": str(base), "overrides": {"metrics.beta": 2.0}},
            ],
        }
        matrix_path = tmp_path / "experiments.yaml"
        matrix_path.write_text(yaml.safe_dump(matrix), encoding="utf-8")

        out_dirs = run_experiments(matrix_path)
        assert len(out_dirs) == 2
        info = json.loads((out_dirs[1] / "run_info.json").read_text(encoding="utf-8"))
        assert info["experiment_name"] == "f2"
        assert info["eval_time_sec"] >= 0

        df = collect_rows(tmp_path / "evals")
        assert list(df["experiment_name"]) == ["f1", "f2"]
        assert list(df["beta"]) == [1.0, 2.0]
        assert df["accuracy"].tolist() == pytest.approx([4 / 6, 4 / 6])

        out = collect(tmp_path / "summary" / "all.csv", evals_dir=tmp_path / "evals")
        assert len(pd.read_csv(out)) == 2

    def test_empty_matrix(self, tmp_path, capsys):
        path = tmp_path / "experiments.yaml"
        path.write_text("experiments: []\n", encoding="utf-8")
        assert run_experiments(path) == []
        assert "No experiments" in capsys.readouterr().out


class TestCollect:
    def test_broken_metrics_file_still_listed(self, tmp_path):
        d = tmp_path / "evals" / "20250101-000000"
        d.mkdir(parents=True)
        (d / "metrics.json").write_text("{not json", encoding="utf-8")
        df = collect_rows(tmp_path / "evals")
        assert len(df) == 1
        assert pd.isna(df.loc[0, "accuracy"])

    def test_no_evals(self, tmp_path):
        assert collect_rows(tmp_path / "missing").empty
