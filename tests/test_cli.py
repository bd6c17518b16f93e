"""Tests for the command line interface."""

import json

import pytest

from sonarqube_exporter import __version__, cli
from sonarqube_exporter.cli import main


@pytest.fixture(autouse=True)
def _no_sonar_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for key in (
        "SONAR_URL",
        "SONAR_USER",
        "SONAR_PASSWORD",
        "SONAR_EXPORTER_ADDRESS",
        "SONAR_EXPORTER_PORT",
        "SONAR_EXPORTER_NAMESPACE",
    ):
        monkeypatch.delenv(key, raising=False)


def test_version(capsys):
    main(["version"])
    assert __version__ in capsys.readouterr().out


def test_describe(capsys):
    main(["describe"])
    out = capsys.readouterr().out
    assert "sonarqube_up  " in out
    assert "sonarqube_activity_status{metric}" in out
    assert "sonarqube_code_demographics{lang}" in out


def test_scrape_without_url_reports_down(capsys):
    main(["scrape"])
    out = capsys.readouterr().out
    assert "sonarqube_up 0.0" in out
    assert "sonarqube_health_status" not in out


def test_no_command_exits():
    with pytest.raises(SystemExit):
        main([])


def test_scrape_json_without_url_reports_down(capsys):
    main(["scrape", "--json"])
    payload = json.loads(capsys.readouterr().out)
    assert payload["available"] is False
    assert payload["failed_sources"] == ["health"]
    assert payload["samples"] == [{"name": "up", "value": 0.0, "labels": {}, "kind": "gauge"}]


class FakeServer:
    def __init__(self) -> None:
        self.shut_down = False
        self.closed = False

    def shutdown(self) -> None:
        self.shut_down = True

    def server_close(self) -> None:
        self.closed = True


def test_serve_shuts_down_listener(monkeypatch):
    server = FakeServer()
    started = []

    def fake_serve(registry, port, address):
        started.append((port, address))
        return server

    def interrupt(_seconds):
        raise KeyboardInterrupt

    monkeypatch.setattr(cli, "serve", fake_serve)
    monkeypatch.setattr(cli.signal, "signal", lambda *_args: None)
    monkeypatch.setattr(cli.time, "sleep", interrupt)

    with pytest.raises(KeyboardInterrupt):
        main(["serve"])
    assert started == [(2112, "0.0.0.0")]
    assert server.shut_down is True
    assert server.closed is True
