"""
Unit tests for TOML config loading and validation.
"""

import pytest
import toml
from commutr.config import Config, ConfigError


@pytest.fixture
def config_file(tmp_path):
    """Write a config dict to commutr.toml and return its path."""
    def _write(data):
        path = tmp_path / "commutr.toml"
        with open(path, "w") as f:
            toml.dump(data, f)
        return str(path)

    return _write


class TestLoad:
    def test_missing_file_uses_defaults(self, tmp_path):
        config = Config.load(str(tmp_path / "absent.toml"))
        assert config.get("selection", "overbook_pct") == 0.03
        assert config["topup"]["threshold_seconds"] == 30
        assert config.get("playlist", "target_duration_minutes") == 30

    def test_defaults_not_shared(self, tmp_path):
        config = Config.load(str(tmp_path / "absent.toml"))
        config["selection"]["overbook_pct"] = 0.1
        assert Config.DEFAULT_CONFIG["selection"]["overbook_pct"] == 0.03

    def test_load_values(self, config_file):
        path = config_file({
            "config_version": "1.0",
            "selection": {"overbook_pct": 0.05},
            "topup": {"threshold_seconds": 45, "recommend_url": "http://api.local"},
            "playlist": {"target_duration_minutes": 25, "topic": "react", "difficulty": "advanced"},
            "catalog": {"path": "catalog.json"},
        })

        config = Config.load(path)

        assert config.get("selection", "overbook_pct") == 0.05
        assert config.get("topup", "threshold_seconds") == 45
        assert config.get("topup", "recommend_path") == "/api/recommend"
        assert config.get("playlist", "topic") == "react"
        assert repr(config) == "Config(version=1.0)"

    def test_env_var_path(self, config_file, monkeypatch):
        path = config_file({"selection": {"overbook_pct": 0.1}})
        monkeypatch.setenv("COMMUTR_CONFIG_PATH", path)

        config = Config.load()

        assert config.get("selection", "overbook_pct") == 0.1

    def test_malformed_toml(self, tmp_path):
        path = tmp_path / "commutr.toml"
        path.write_text("[selection\noverbook_pct = ")
        with pytest.raises(ConfigError):
            Config.load(str(path))


class TestValidate:
    def test_missing_section_filled(self):
        config = Config({"selection": {"overbook_pct": 0.02}})
        assert config["topup"]["threshold_seconds"] == 30
        assert config.get("catalog", "path") == "data/catalog.json"

    def test_missing_param_filled(self):
        config = Config({"topup": {"recommend_url": "http://x"}})
        assert config.get("topup", "request_timeout_seconds") == 10

    @pytest.mark.parametrize(
        "section,param,value",
        [
            ("selection", "overbook_pct", 0.5),
            ("selection", "overbook_pct", -0.01),
            ("topup", "threshold_seconds", 601),
            ("playlist", "target_duration_minutes", 0),
        ],
    )
    def test_out_of_bounds(self, section, param, value):
        with pytest.raises(ConfigError, match="out of bounds"):
            Config({section: {param: value}})

    def test_non_numeric(self):
        with pytest.raises(ConfigError, match="numeric"):
            Config({"topup": {"threshold_seconds": "thirty"}})

    def test_unknown_difficulty(self):
        with pytest.raises(ConfigError, match="difficulty"):
            Config({"playlist": {"difficulty": "expert"}})

    def test_empty_difficulty_means_any(self):
        config = Config({"playlist": {"difficulty": ""}})
        assert config.get("playlist", "difficulty") == ""
