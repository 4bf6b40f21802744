"""Tests for varnishlog/config.py"""

from argparse import Namespace

import pytest
import yaml

from varnishlog.config import Config, load_config, load_yaml_config
from varnishlog.sources import DEFAULT_COMMAND


def _args(**overrides) -> Namespace:
    values = dict(file=None, follow=None, command=None, output=None, skip_malformed=None, log_level=None)
    values.update(overrides)
    return Namespace(**values)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("VARNISHLOG_CMD", "VARNISHLOG_QUEUE_SIZE", "VARNISHLOG_OUTPUT", "VARNISHLOG_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


class TestLoadYamlConfig:
    def test_no_path(self):
        assert load_yaml_config(None) == {}

    def test_missing_file(self, tmp_path):
        assert load_yaml_config(str(tmp_path / "nope.yml")) == {}

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yml"
        path.write_text("")
        assert load_yaml_config(str(path)) == {}

    def test_loads_mapping(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text(yaml.safe_dump({"command": "varnishlog -g request", "queue_size": 10}))
        assert load_yaml_config(str(path)) == {"command": "varnishlog -g request", "queue_size": 10}

    def test_rejects_non_mapping(self, tmp_path):
        path = tmp_path / "list.yml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ValueError):
            load_yaml_config(str(path))


class TestLoadConfig:
    def test_defaults(self):
        assert load_config(_args(), {}) == Config()
        assert Config().command == DEFAULT_COMMAND

    def test_yaml_values(self):
        config = load_config(_args(), {
            "log_file": "/var/log/varnish.log",
            "follow": True,
            "output": "json",
            "queue_size": 50,
            "log_level": "debug",
        })
        assert config.log_file == "/var/log/varnish.log"
        assert config.follow is True
        assert config.output == "json"
        assert config.queue_size == 50
        assert config.log_level == "DEBUG"

    def test_env_overrides_yaml(self, monkeypatch):
        monkeypatch.setenv("VARNISHLOG_CMD", "varnishlog -g session")
        monkeypatch.setenv("VARNISHLOG_QUEUE_SIZE", "5")
        config = load_config(_args(), {"command": "varnishlog", "queue_size": 100})
        assert config.command == "varnishlog -g session"
        assert config.queue_size == 5

    def test_cli_overrides_env(self, monkeypatch):
        monkeypatch.setenv("VARNISHLOG_OUTPUT", "text")
        config = load_config(_args(output="json", file="x.log", skip_malformed=True), {})
        assert config.output == "json"
        assert config.log_file == "x.log"
        assert config.skip_malformed is True

    def test_invalid_output(self):
        with pytest.raises(ValueError, match="output"):
            load_config(_args(), {"output": "xml"})

    def test_invalid_queue_size(self, monkeypatch):
        monkeypatch.setenv("VARNISHLOG_QUEUE_SIZE", "-1")
        with pytest.raises(ValueError, match="queue_size"):
            load_config(_args(), {})

    def test_invalid_log_level(self):
        with pytest.raises(ValueError, match="log_level"):
            load_config(_args(log_level="loud"), {})

    def test_frozen(self):
        with pytest.raises(AttributeError):
            Config().output = "json"
