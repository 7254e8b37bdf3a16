"""Tests for the launcher CLI."""
import json
from dataclasses import replace

import launcher


def test_show_config_prints_masked_config_and_exits(monkeypatch, capsys, tmp_config):
    config = replace(tmp_config, password="secret123", hash_secret="pepper")
    monkeypatch.setattr(launcher.settings, "analytics_config", lambda: config)
    started = []
    monkeypatch.setattr(launcher, "run_app", lambda **kwargs: started.append(kwargs))

    launcher.main(["--show-config"])

    printed = json.loads(capsys.readouterr().out)
    assert printed["password"] == "***"
    assert printed["hash_secret"] == "***"
    assert printed["name"] == "site-"
    assert "secret123" not in json.dumps(printed)
    assert started == []


def test_main_passes_host_and_port_to_run_app(monkeypatch):
    monkeypatch.delenv("APP_RELOAD", raising=False)
    started = []
    monkeypatch.setattr(launcher, "run_app", lambda **kwargs: started.append(kwargs))

    launcher.main(["--host", "127.0.0.1", "--port", "9001"])

    assert started == [{"host": "127.0.0.1", "port": 9001, "reload": False}]
