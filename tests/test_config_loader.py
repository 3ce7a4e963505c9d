"""Tests for configuration loading."""

import pytest

from folioscope.config.loader import (
    API_URL_ENV,
    CONFIG_PATH_ENV,
    DEFAULT_SENTINEL_VALUES,
    default_filter_config,
    get_filter_config,
    load_config,
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch, tmp_path):
    monkeypatch.delenv(CONFIG_PATH_ENV, raising=False)
    monkeypatch.delenv(API_URL_ENV, raising=False)
    monkeypatch.chdir(tmp_path)


def test_defaults_without_config_file():
    config = load_config()
    assert config["api"]["base_url"] == "http://localhost:8000/api"
    assert config["cache"]["default_ttl_seconds"] == 4 * 60 * 60
    assert config["filters"]["sentinel_values"]["price"] == 50000


def test_explicit_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yaml")


def test_env_config_path_missing_file_raises(monkeypatch, tmp_path):
    monkeypatch.setenv(CONFIG_PATH_ENV, str(tmp_path / "missing.yaml"))
    with pytest.raises(FileNotFoundError):
        load_config()


def test_file_values_merge_over_defaults(tmp_path):
    path = tmp_path / "folioscope.config.yaml"
    path.write_text(
        "api:\n"
        "  base_url: https://portfolio.example.com/api/\n"
        "filters:\n"
        "  sentinel_values:\n"
        "    price: 100000\n",
        encoding="utf-8",
    )
    config = load_config(path)
    assert config["api"]["base_url"] == "https://portfolio.example.com/api"
    assert config["api"]["timeout_seconds"] == 20
    assert config["filters"]["sentinel_values"]["price"] == 100000
    assert config["filters"]["sentinel_values"]["adults"] == 30


def test_default_file_in_working_directory_is_picked_up(tmp_path):
    (tmp_path / "folioscope.config.yaml").write_text("api:\n  timeout_seconds: 5\n", encoding="utf-8")
    assert load_config()["api"]["timeout_seconds"] == 5


def test_env_api_url_overrides_file(monkeypatch):
    monkeypatch.setenv(API_URL_ENV, "https://env.example.com/api")
    assert load_config()["api"]["base_url"] == "https://env.example.com/api"


def test_invalid_structure_raises(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ValueError, match="must be a dictionary"):
        load_config(path)


def test_invalid_section_raises(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("api: nope\n", encoding="utf-8")
    with pytest.raises(ValueError, match="'api'"):
        load_config(path)


def test_invalid_ttl_raises(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("cache:\n  default_ttl_seconds: 0\n", encoding="utf-8")
    with pytest.raises(ValueError, match="default_ttl_seconds"):
        load_config(path)


def test_get_filter_config_rejects_non_list_fields():
    config = load_config()
    config["filters"]["metric_fields"] = "visScore"
    with pytest.raises(ValueError, match="metric_fields"):
        get_filter_config(config)


def test_default_filter_config_tables():
    tables = default_filter_config()
    assert "visScore" in tables.metric_fields
    assert "adx" in tables.indicator_fields
    assert "arrival" in tables.date_fields
    assert tables.sentinel_values == DEFAULT_SENTINEL_VALUES
