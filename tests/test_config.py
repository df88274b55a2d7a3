"""Unit tests for trekprep.engine.config — trekprep.yaml loading and validation."""

import pytest

from trekprep.engine.config import (
    APIConfig,
    PersistenceConfig,
    SelectionConfig,
    TrekPrepConfig,
    get_config,
    load_config,
    reset_config,
)
from trekprep.engine.errors import TrekPrepConfigError


class TestModels:

    def test_defaults(self):
        cfg = TrekPrepConfig()
        assert cfg.name == "TrekPrep"
        assert cfg.environment == "dev"
        assert cfg.persistence.debounce_ms == 500
        assert cfg.selection.trek_type == "treks"
        assert cfg.selection.team == "support"
        assert cfg.api.api_key is None

    def test_base_url_trailing_slash_stripped(self):
        assert APIConfig(base_url="https://kv.example/v1/").base_url == "https://kv.example/v1"

    @pytest.mark.parametrize("debounce", [-1, 5001])
    def test_debounce_bounds(self, debounce):
        with pytest.raises(ValueError):
            PersistenceConfig(debounce_ms=debounce)

    def test_selection_validated(self):
        with pytest.raises(ValueError, match="trek_type"):
            SelectionConfig(trek_type="cruises")
        with pytest.raises(ValueError, match="team"):
            SelectionConfig(team="marketing")

    def test_environment_validated(self):
        with pytest.raises(ValueError, match="environment"):
            TrekPrepConfig(environment="qa")


class TestLoadConfig:

    def test_no_file_gives_defaults(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        cfg = load_config()
        assert cfg.api.base_url == APIConfig().base_url

    def test_discovered_from_parent_directory(self, tmp_path, monkeypatch):
        (tmp_path / "trekprep.yaml").write_text(
            "app:\n"
            "  name: Field Ops\n"
            "  environment: staging\n"
            "api:\n"
            "  base_url: https://kv.example/functions/v1/trekprep/\n"
            "  api_key: anon\n"
            "persistence:\n"
            "  debounce_ms: 300\n"
            "selection:\n"
            "  team: ground-ops\n",
            encoding="utf-8",
        )
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)

        cfg = load_config()
        assert cfg.name == "Field Ops"
        assert cfg.environment == "staging"
        assert cfg.api.base_url == "https://kv.example/functions/v1/trekprep"
        assert cfg.api.api_key == "anon"
        assert cfg.persistence.debounce_ms == 300
        assert cfg.selection.team == "ground-ops"

    def test_env_overrides(self, tmp_path, monkeypatch):
        path = tmp_path / "trekprep.yaml"
        path.write_text("api:\n  base_url: http://file\n", encoding="utf-8")
        monkeypatch.setenv("TREKPREP_API_URL", "http://env")
        monkeypatch.setenv("TREKPREP_API_KEY", "secret")
        cfg = load_config(str(path))
        assert cfg.api.base_url == "http://env"
        assert cfg.api.api_key == "secret"

    def test_invalid_values(self, tmp_path):
        path = tmp_path / "trekprep.yaml"
        path.write_text("persistence:\n  debounce_ms: 99999\n", encoding="utf-8")
        with pytest.raises(TrekPrepConfigError) as exc:
            load_config(str(path))
        assert exc.value.context["errors"][0]["loc"] == ("persistence", "debounce_ms")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "trekprep.yaml"
        path.write_text("api: [unclosed\n", encoding="utf-8")
        with pytest.raises(TrekPrepConfigError, match="Invalid YAML"):
            load_config(str(path))

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "trekprep.yaml"
        path.write_text("- just\n- a list\n", encoding="utf-8")
        with pytest.raises(TrekPrepConfigError, match="mapping"):
            load_config(str(path))

    def test_explicit_missing_path(self, tmp_path):
        with pytest.raises(TrekPrepConfigError, match="not found"):
            load_config(str(tmp_path / "nope.yaml"))


class TestSingleton:

    def test_get_config_caches(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        first = get_config()
        assert get_config() is first
        reset_config()
        assert get_config() is not first
