"""
Optional MLflow tracking for exports and benchmarks.

MLflow is imported lazily and every helper is a no-op when it is missing or
misconfigured, so tracking never breaks a search or an export.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, Optional


def _mlflow():
    try:
        import mlflow  # type: ignore
    except ImportError:
        return None
    return mlflow


@contextmanager
def maybe_mlflow_run(enabled: bool, run_name: str, log_dir: Optional[Path] = None) -> Iterator[bool]:
    """Yields True when an MLflow run is active inside the block."""
    mlflow = _mlflow() if enabled else None
    if mlflow is None:
        if enabled:
            logging.warning("mlflow is not installed; continuing without tracking")
        yield False
        return
    try:
        if log_dir is not None:
            mlflow.set_tracking_uri((log_dir.resolve() / "mlruns").as_uri())
        run = mlflow.start_run(run_name=run_name)
    except Exception as e:
        # Soft-fail: continue without tracking
        logging.warning("Could not start an mlflow run (%s); continuing without tracking", e)
        yield False
        return
    with run:
        yield True


def _active(mlflow) -> bool:
    try:
        return mlflow.active_run() is not None
    except Exception as e:
        logging.warning("mlflow is misconfigured (%s); skipping tracking call", e)
        return False


def log_params(params: Dict[str, object]) -> None:
    mlflow = _mlflow()
    if mlflow is None or not _active(mlflow):
        return
    try:
        mlflow.log_params(params)
    except Exception as e:
        logging.warning("mlflow.log_params failed: %s", e)


def log_metrics(metrics: Dict[str, float]) -> None:
    mlflow = _mlflow()
    if mlflow is None or not _active(mlflow):
        return
    try:
        mlflow.log_metrics(metrics)
    except Exception as e:
        logging.warning("mlflow.log_metrics failed: %s", e)


def log_artifact(path: Path, artifact_path: Optional[str] = None) -> None:
    mlflow = _mlflow()
    if mlflow is None or not _active(mlflow):
        return
    try:
        mlflow.log_artifact(str(path), artifact_path=artifact_path)
    except Exception as e:
        logging.warning("mlflow.log_artifact failed: %s", e)
