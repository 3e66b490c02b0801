"""
Tests del CLI con click.testing
"""

import json

import pytest
from click.testing import CliRunner

from onsong_connect.client import cli as cli_module
from onsong_connect.client.connect_client import ConnectClient


@pytest.fixture
def runner(monkeypatch):
    # El handler de logging no debe quedar atado al stream temporal del runner
    monkeypatch.setattr(cli_module, "setup_logging", lambda: None)
    return CliRunner()


@pytest.fixture
def fake_client(fake_onsong, monkeypatch):
    """Sustituye la factoría por un cliente contra la API simulada"""
    async def factory(target, token_store, **kwargs):
        fake_onsong.targets.append(target)
        return ConnectClient(target.host, target.port, "d" * 32, transport=fake_onsong.transport)

    monkeypatch.setattr(cli_module, "create_authenticated_client", factory)
    return fake_onsong


def test_sets_prints_json(runner, fake_client):
    fake_client.add("GET", "/sets", json={"count": 1, "results": [{"ID": "s1", "name": "Domingo"}]})

    result = runner.invoke(cli_module.cli, ["--host", "10.0.0.5", "sets"])

    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == {"count": 1.0, "results": [{"ID": "s1", "name": "Domingo"}]}


def test_search_passes_query(runner, fake_client):
    fake_client.add("GET", "/songs", json={"count": 0, "results": []})

    result = runner.invoke(cli_module.cli, ["--host", "10.0.0.5", "search", "amazing grace", "--limit", "5"])

    assert result.exit_code == 0, result.output
    assert fake_client.requests[0].url.query == b"q=amazing%20grace&limit=5"


def test_api_error_exits_with_code(runner, fake_client):
    fake_client.add("GET", "/songs/x/content", status=404, text="nope")

    result = runner.invoke(cli_module.cli, ["--host", "10.0.0.5", "song-content", "x"])

    assert result.exit_code == 1
    assert "API_NOT_FOUND" in result.output


def test_empty_host(runner):
    result = runner.invoke(cli_module.cli, ["--host", "", "ping"])

    assert result.exit_code == 1
    assert "INVALID_TARGET" in result.output


def test_host_falls_back_to_config(runner, fake_client, monkeypatch):
    """Test: sin --host se usa el target configurado (ONSONG_HOST/PORT/TOKEN)"""
    monkeypatch.setattr(cli_module.config, "default_host", "10.0.0.7")
    monkeypatch.setattr(cli_module.config, "default_port", 8080)
    monkeypatch.setattr(cli_module.config, "default_token", "e" * 32)
    fake_client.add("GET", "/ping", json={"pong": "ok"})

    result = runner.invoke(cli_module.cli, ["ping"])

    assert result.exit_code == 0, result.output
    target = fake_client.targets[0]
    assert (target.host, target.port, target.token) == ("10.0.0.7", 8080, "e" * 32)


def test_missing_host(runner, monkeypatch):
    monkeypatch.setattr(cli_module.config, "default_host", None)

    result = runner.invoke(cli_module.cli, ["ping"])

    assert result.exit_code == 1
    assert "INVALID_TARGET" in result.output


def test_invalid_navigate_index(runner):
    result = runner.invoke(cli_module.cli, ["navigate", "middle"])

    assert result.exit_code == 1
    assert "INVALID_INPUT" in result.output
