"""Tests for application wiring."""

from __future__ import annotations

import json
from unittest.mock import patch

from ppm_survey.app import (
    LOG_FORMAT,
    bootstrap,
    build_interview_store,
    build_registry,
    configure_logging,
)
from ppm_survey.config import Settings
from ppm_survey.interview_store import HttpInterviewStore, InMemoryInterviewStore
from ppm_survey.scoring.registry import WEIGHTS_NAMESPACE
from ppm_survey.scoring.weights import DEFAULT_QUESTION_WEIGHTS


def _settings(tmp_path, api_url=""):
    return Settings(
        log_level="WARNING",
        weights_path=str(tmp_path / "weights.json"),
        api_url=api_url,
        http_timeout=3.0,
    )


def test_build_registry_uses_defaults_for_corrupt_file(tmp_path, caplog):
    settings = _settings(tmp_path)
    (tmp_path / "weights.json").write_text("not json", encoding="utf-8")

    registry = build_registry(settings)

    assert len(registry) == len(DEFAULT_QUESTION_WEIGHTS)
    assert "Using default weights" in caplog.text


def test_build_registry_persists_mutations(tmp_path):
    settings = _settings(tmp_path)
    registry = build_registry(settings)
    registry.remove("f1_q01")

    data = json.loads((tmp_path / "weights.json").read_text(encoding="utf-8"))
    ids = [w["questionId"] for w in data[WEIGHTS_NAMESPACE]["questionWeights"]]
    assert "f1_q01" not in ids
    assert len(build_registry(settings)) == len(DEFAULT_QUESTION_WEIGHTS) - 1


def test_build_interview_store(tmp_path):
    assert isinstance(build_interview_store(_settings(tmp_path)), InMemoryInterviewStore)

    store = build_interview_store(_settings(tmp_path, api_url="http://ppm.test/api"))
    assert isinstance(store, HttpInterviewStore)
    store.close()


@patch("ppm_survey.app.logging.basicConfig")
def test_configure_logging(mock_basic_config, tmp_path):
    configure_logging(_settings(tmp_path))
    mock_basic_config.assert_called_once_with(format=LOG_FORMAT, level="WARNING")


@patch("ppm_survey.app.load_dotenv")
def test_bootstrap(mock_load_dotenv, tmp_path):
    app = bootstrap(_settings(tmp_path))

    mock_load_dotenv.assert_called_once()
    assert isinstance(app.store, InMemoryInterviewStore)
    assert len(app.registry) == len(DEFAULT_QUESTION_WEIGHTS)
    app.close()
