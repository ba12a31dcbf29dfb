"""Tests for configuration loading."""

import pytest

from core.config import (
    DEFAULT_CONFIG_TEXT, BinsConfig, candidate_config_paths, create_safety_gate, find_config_path, load_config,
    parse_config
)
from models.errors import ConfigurationError, InvalidSizeFormat
from validation.validators import SafetyGate


class TestParseConfig:
    def test_default_config_text(self, config_file):
        config = load_config(config_file(DEFAULT_CONFIG_TEXT))

        assert config.safety.file_size_limit == 1048576
        assert config.safety.disallowed_file_patterns == {"*.cfg", "*.conf", "*.key", "secrets.zsh"}
        assert config.safety.disallowed_file_types == {"PEM RSA private key"}
        assert config.safety.cancel_on_unsupported is True
        assert config.safety.warn_on_unsupported is True
        assert config.defaults.private is True
        assert config.defaults.authed is True
        assert config.defaults.copy is True
        assert config.defaults.bin is None
        assert config.service_section("hastebin")["server"] == "https://hastebin.com"

    def test_empty_document(self):
        config = parse_config({})
        assert config.safety.file_size_limit is None
        assert config.defaults.bin is None
        assert dict(config.service_section("gist")) == {}

    def test_default_bin(self):
        assert parse_config({"defaults": {"bin": "gist"}}).defaults.bin == "gist"

    def test_blank_default_bin_is_none(self):
        assert parse_config({"defaults": {"bin": "   "}}).defaults.bin is None

    def test_invalid_size(self):
        with pytest.raises(InvalidSizeFormat):
            parse_config({"general": {"file_size_limit": "huge"}})

    @pytest.mark.parametrize(
        "data",
        [
            {"general": {"file_size_limit": 1024}},
            {"safety": {"disallowed_file_patterns": "*.key"}},
            {"safety": {"disallowed_file_types": [1, 2]}},
            {"safety": {"cancel_on_unsupported": "yes"}},
            {"defaults": {"private": 1}},
            {"gist": "token"},
        ],
    )
    def test_wrong_types(self, data):
        with pytest.raises(ConfigurationError):
            parse_config(data)

    def test_config_is_immutable(self):
        config = parse_config({"gist": {"access_token": "t"}})
        with pytest.raises(AttributeError):
            config.defaults = None
        with pytest.raises(TypeError):
            config.service_section("gist")["access_token"] = "other"

    def test_env_overrides_service_settings(self, monkeypatch):
        monkeypatch.setenv("BINS_GIST_ACCESS_TOKEN", "from-env")
        config = parse_config({"gist": {"access_token": "", "username": "me"}})
        assert config.service_section("gist")["access_token"] == "from-env"
        assert config.service_section("gist")["username"] == "me"


class TestLoadConfig:
    def test_explicit_path(self, config_file):
        path = config_file('[defaults]\nbin = "sprunge"\n')
        config = load_config(path)
        assert config.defaults.bin == "sprunge"
        assert config.source == path

    def test_env_path(self, config_file, monkeypatch):
        monkeypatch.setenv("BINS_CONFIG", str(config_file('[defaults]\nbin = "pastegg"\n')))
        assert load_config().defaults.bin == "pastegg"

    def test_missing_explicit_path(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_config(tmp_path / "missing.cfg")

    def test_malformed_toml(self, config_file):
        with pytest.raises(ConfigurationError) as exc_info:
            load_config(config_file("[general\nfile_size_limit = "))
        assert "could not parse" in str(exc_info.value)

    def test_lookup_order(self, isolated_environment, tmp_path, monkeypatch):
        xdg = tmp_path / "xdg"
        xdg.mkdir()
        monkeypatch.setenv("XDG_CONFIG_DIR", str(xdg))

        assert candidate_config_paths() == [
            xdg / "bins.cfg",
            isolated_environment / ".config" / "bins.cfg",
            isolated_environment / ".bins.cfg",
        ]

        (isolated_environment / ".bins.cfg").write_text('[defaults]\nbin = "gist"\n')
        assert find_config_path() == isolated_environment / ".bins.cfg"

        (xdg / "bins.cfg").write_text('[defaults]\nbin = "hastebin"\n')
        assert load_config().defaults.bin == "hastebin"

    def test_creates_default_config(self, isolated_environment):
        config = load_config()

        created = isolated_environment / ".bins.cfg"
        assert created.read_text() == DEFAULT_CONFIG_TEXT
        assert config.source == created
        assert config.safety.file_size_limit == 1048576

    def test_prefers_dot_config_directory(self, isolated_environment):
        (isolated_environment / ".config").mkdir()
        load_config()
        assert (isolated_environment / ".config" / "bins.cfg").exists()

    def test_no_writable_location(self, monkeypatch):
        monkeypatch.delenv("HOME")
        with pytest.raises(ConfigurationError):
            load_config()


class TestFactories:
    def test_create_safety_gate(self):
        config = BinsConfig()
        gate = create_safety_gate(config)
        assert isinstance(gate, SafetyGate)
        assert gate.config is config.safety
