import json
import logging
import sys
import types
from pathlib import Path

import pytest

from ttt_search.cli import main
from ttt_search.export import ExportArgs, run_export
from ttt_search.tracking import log_artifact, log_metrics, log_params, maybe_mlflow_run


class _Run:
    def __init__(self, mod):
        self.mod = mod

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.mod.ended = True
        self.mod.current = None
        return False


def _fake_mlflow(start_fails=False, logging_fails=False):
    mod = types.ModuleType("mlflow")
    mod.current = None
    mod.ended = False
    mod.calls = []

    def set_tracking_uri(uri):
        mod.calls.append(("uri", uri))

    def start_run(run_name=None):
        if start_fails:
            raise RuntimeError("tracking server unreachable")
        mod.current = _Run(mod)
        return mod.current

    def _log(kind):
        def fn(*args, **kwargs):
            if logging_fails:
                raise RuntimeError(f"{kind} rejected")
            mod.calls.append((kind, args))
        return fn

    mod.set_tracking_uri = set_tracking_uri
    mod.start_run = start_run
    mod.active_run = lambda: mod.current
    mod.log_params = _log("params")
    mod.log_metrics = _log("metrics")
    mod.log_artifact = _log("artifact")
    return mod


def test_disabled_yields_false():
    with maybe_mlflow_run(False, run_name="off") as active:
        assert active is False


def test_missing_mlflow_warns_and_continues(monkeypatch, caplog):
    monkeypatch.setitem(sys.modules, "mlflow", None)
    caplog.set_level(logging.WARNING)
    with maybe_mlflow_run(True, run_name="missing") as active:
        assert active is False
    assert "not installed" in caplog.text


def test_failing_start_run_does_not_stop_export(tmp_path: Path, monkeypatch, caplog):
    monkeypatch.setitem(sys.modules, "mlflow", _fake_mlflow(start_fails=True))
    caplog.set_level(logging.WARNING)
    with maybe_mlflow_run(True, run_name="tree_export", log_dir=tmp_path / "runs") as active:
        assert active is False
        out = run_export(ExportArgs(out=tmp_path / "exp", depth=2))
    assert (out / "manifest.json").exists()
    assert "tracking server unreachable" in caplog.text


def test_cli_export_survives_unreachable_tracking(tmp_path: Path, monkeypatch):
    monkeypatch.setitem(sys.modules, "mlflow", _fake_mlflow(start_fails=True))
    out = tmp_path / "cli_out"
    rc = main(["export", "--board", ".........", "--depth", "2", "--out", str(out), "--tracking", "mlflow"])
    assert rc == 0
    assert json.loads((out / "manifest.json").read_text())['args']['depth'] == 2


def test_active_run_receives_params_and_artifacts(tmp_path: Path, monkeypatch):
    fake = _fake_mlflow()
    monkeypatch.setitem(sys.modules, "mlflow", fake)
    with maybe_mlflow_run(True, run_name="tree_export", log_dir=tmp_path) as active:
        assert active is True
        run_export(ExportArgs(out=tmp_path / "exp", depth=2))
    kinds = [c[0] for c in fake.calls]
    assert kinds[0] == "uri"
    assert "params" in kinds and "artifact" in kinds
    assert fake.ended


def test_failing_log_calls_only_warn(tmp_path: Path, monkeypatch, caplog):
    monkeypatch.setitem(sys.modules, "mlflow", _fake_mlflow(logging_fails=True))
    caplog.set_level(logging.WARNING)
    with maybe_mlflow_run(True, run_name="bench") as active:
        assert active is True
        log_params({"depth": 2})
        log_metrics({"nodes": 1.0})
        log_artifact(tmp_path / "missing.json")
    assert "log_params failed" in caplog.text
    assert "log_metrics failed" in caplog.text
    assert "log_artifact failed" in caplog.text


def test_errors_inside_the_run_propagate(monkeypatch):
    fake = _fake_mlflow()
    monkeypatch.setitem(sys.modules, "mlflow", fake)
    with pytest.raises(ValueError):
        with maybe_mlflow_run(True, run_name="boom"):
            raise ValueError("bad board")
    assert fake.ended
