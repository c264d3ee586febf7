import json

import pytest

from config.config import (
    DEFAULT_STRATEGY,
    RepricingSettings,
    build_strategy_config,
    load_settings,
    load_strategy_file,
    merge_strategy_overrides,
)
from models.enums import RoundingMode
from models.strategy import StrategyConfigError

SETTINGS_VARS = (
    "REPRICING_SAMPLE_SIZE",
    "REPRICING_MAX_WORKERS",
    "REPRICING_LOG_LEVEL",
    "REPRICING_STRATEGY_PATH",
)


@pytest.fixture
def clean_env(monkeypatch):
    monkeypatch.setattr("config.config.load_project_dotenv", lambda: False)
    for name in SETTINGS_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_settings_defaults(clean_env):
    """Test load_settings falls back to RepricingSettings defaults."""
    assert load_settings() == RepricingSettings()
    assert RepricingSettings().sample_size == 10
    assert RepricingSettings().max_workers is None


def test_settings_from_environment(clean_env):
    clean_env.setenv("REPRICING_SAMPLE_SIZE", "25")
    clean_env.setenv("REPRICING_MAX_WORKERS", "4")
    clean_env.setenv("REPRICING_LOG_LEVEL", "DEBUG")
    clean_env.setenv("REPRICING_STRATEGY_PATH", "/tmp/strategy.json")
    settings = load_settings()
    assert settings.sample_size == 25
    assert settings.max_workers == 4
    assert settings.log_level == "DEBUG"
    assert settings.default_strategy_path == "/tmp/strategy.json"


def test_default_strategy_is_valid():
    """Test the built-in strategy validates and has a complete matrix."""
    config = build_strategy_config()
    assert config.name == "Default Strategy"
    assert config.rounding_mode == RoundingMode.CHARM_49_99.value
    assert config.nudge_preference == "add"
    assert config.tolerance_value == 0.2
    assert config.matrix_gaps() == []
    assert [band.name for band in config.age_bands][-1] == "180+"


def test_merge_strategy_overrides_merges_matrix_cells():
    merged = merge_strategy_overrides(
        DEFAULT_STRATEGY, {"stale_days": 14, "target_matrix": {"0-15": {"78+": 99.5}}}
    )
    assert merged["stale_days"] == 14
    assert merged["target_matrix"]["0-15"]["78+"] == 99.5
    assert merged["target_matrix"]["0-15"]["Below 40"] == 95.5
    # Inputs are untouched
    assert DEFAULT_STRATEGY["target_matrix"]["0-15"]["78+"] == 98.78


def test_merge_strategy_overrides_replaces_lists():
    merged = merge_strategy_overrides(DEFAULT_STRATEGY, {"age_bands": ["0-30", "31+"]})
    assert merged["age_bands"] == ["0-30", "31+"]


def test_build_strategy_config_with_overrides():
    config = build_strategy_config({"tolerance_type": "fixed", "tolerance_value": 250})
    assert config.tolerance_value == 250
    assert config.target_matrix["180+"]["78+"] == 89.0


def test_build_strategy_config_invalid():
    with pytest.raises(StrategyConfigError, match="Invalid strategy 'Default Strategy'"):
        build_strategy_config({"age_bands": ["0-15", "20+"]})


def test_build_strategy_config_warns_on_matrix_gaps(caplog, strategy_data):
    del strategy_data["target_matrix"]["91+"]
    config = build_strategy_config(strategy_data, base={})
    assert len(config.matrix_gaps()) == 2
    assert "2 empty target matrix cells" in caplog.text


def test_load_strategy_file(tmp_path, strategy_data):
    path = tmp_path / "strategy.json"
    path.write_text(json.dumps([strategy_data]), encoding="utf-8")
    assert load_strategy_file(path)["name"] == "Test Strategy"

    path.write_text(json.dumps(strategy_data), encoding="utf-8")
    assert load_strategy_file(path)["stale_days"] == 7


@pytest.mark.parametrize("content", ["[]", "42", '"strategy"'])
def test_load_strategy_file_rejects_non_strategies(tmp_path, content):
    path = tmp_path / "strategy.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(StrategyConfigError):
        load_strategy_file(path)
