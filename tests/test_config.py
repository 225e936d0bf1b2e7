"""Tests for polaris.config."""

from pathlib import Path

import pytest

from polaris.config import (
    DEFAULT_DUPLICATE_THRESHOLD,
    DEFAULT_FUZZY_THRESHOLD,
    DEFAULT_WEIGHTS,
    RelevanceWeights,
    get_data_dir,
    load_config,
)


class TestRelevanceWeights:
    """Configurable weight table."""

    def test_defaults(self):
        assert DEFAULT_WEIGHTS.to_dict() == {
            "title_exact": 100,
            "title_contains": 50,
            "content_occurrence": 5,
            "tag_match": 10,
            "type_match": 15,
            "recent_week": 10,
            "recent_month": 5,
        }

    def test_partial_override(self):
        weights = RelevanceWeights.from_dict({"tag_match": 20})
        assert weights.tag_match == 20
        assert weights.title_exact == 100

    @pytest.mark.parametrize("data", [{"bogus": 1}, {"tag_match": "20"}, {"tag_match": 1.5}, {"tag_match": True}])
    def test_rejects_bad_input(self, data):
        with pytest.raises(ValueError):
            RelevanceWeights.from_dict(data)


class TestLoadConfig:
    """Environment-driven configuration."""

    def test_defaults(self, tmp_path):
        config = load_config({"HOME": str(tmp_path)})
        assert config.fuzzy_threshold == DEFAULT_FUZZY_THRESHOLD
        assert config.duplicate_threshold == DEFAULT_DUPLICATE_THRESHOLD
        assert config.use_fuzzy is True
        assert config.log_level == "INFO"
        assert config.records_file is None
        assert config.weights == DEFAULT_WEIGHTS

    def test_reads_environment(self, tmp_path):
        config = load_config(
            {
                "POLARIS_FUZZY_THRESHOLD": "0.5",
                "POLARIS_DUPLICATE_THRESHOLD": "0.9",
                "POLARIS_USE_FUZZY": "false",
                "POLARIS_LOG_LEVEL": "debug",
                "POLARIS_DATA_DIR": str(tmp_path),
                "POLARIS_RECORDS_FILE": str(tmp_path / "records.json"),
                "POLARIS_WEIGHTS": '{"title_exact": 200}',
            }
        )
        assert config.fuzzy_threshold == 0.5
        assert config.duplicate_threshold == 0.9
        assert config.use_fuzzy is False
        assert config.log_level == "DEBUG"
        assert config.data_dir == tmp_path
        assert config.records_file == tmp_path / "records.json"
        assert config.weights.title_exact == 200

    def test_thresholds_clamped(self):
        config = load_config({"POLARIS_FUZZY_THRESHOLD": "3", "POLARIS_DUPLICATE_THRESHOLD": "-1"})
        assert config.fuzzy_threshold == 1.0
        assert config.duplicate_threshold == 0.0

    @pytest.mark.parametrize("raw", ["abc", "nan", "inf"])
    def test_invalid_threshold_falls_back(self, raw, caplog):
        config = load_config({"POLARIS_FUZZY_THRESHOLD": raw})
        assert config.fuzzy_threshold == DEFAULT_FUZZY_THRESHOLD
        assert "POLARIS_FUZZY_THRESHOLD" in caplog.text

    @pytest.mark.parametrize("raw", ["{broken", "[1, 2]", '{"nope": 1}'])
    def test_invalid_weights_fall_back(self, raw, caplog):
        config = load_config({"POLARIS_WEIGHTS": raw})
        assert config.weights == DEFAULT_WEIGHTS
        assert "Ignoring POLARIS_WEIGHTS" in caplog.text


class TestGetDataDir:
    def test_env_override(self, tmp_path):
        assert get_data_dir({"POLARIS_DATA_DIR": str(tmp_path)}) == tmp_path

    def test_default_under_home(self):
        assert get_data_dir({}) == Path.home() / ".polaris"
