"""Tests for the command line."""

import json

import httpx
import pytest
from click.testing import CliRunner

from spoonfeeder import cli
from spoonfeeder.client import SpoonFeederClient


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def invoke(runner, tmp_path):
    config_dir = tmp_path / "config"

    def _invoke(*args, **kwargs):
        return runner.invoke(cli.main, ["--config-dir", str(config_dir), *args], **kwargs)

    return _invoke


def test_render_file_as_html(invoke, tmp_path):
    source = tmp_path / "notes.txt"
    source.write_text("## Title\n\n- a\n- b", encoding="utf-8")

    result = invoke("render", str(source), "--format", "html")

    assert result.exit_code == 0
    assert '<div class="structured-heading structured-h2">Title</div>' in result.output
    assert '<ul class="structured-list">' in result.output


def test_render_stdin_as_json(invoke):
    result = invoke("render", "-", "--format", "json", "--mode", "code", input="**x**")

    assert result.exit_code == 0
    document = json.loads(result.output)
    assert document["mode"] == "code"
    assert document["blocks"] == [{"kind": "code", "raw": "**x**", "language": "text"}]


def test_render_standalone_page_to_file(invoke, tmp_path):
    source = tmp_path / "algebra.txt"
    source.write_text("[x^2 + 1]", encoding="utf-8")
    target = tmp_path / "out.html"

    result = invoke("render", str(source), "-f", "html", "-m", "math", "--standalone", "-o", str(target))

    assert result.exit_code == 0
    assert "Written to" in result.output
    page = target.read_text(encoding="utf-8")
    assert page.startswith("<!DOCTYPE html>")
    assert "<title>algebra.txt</title>" in page
    assert "$$x^2 + 1$$" in page


def test_render_terminal(invoke):
    result = invoke("render", "-", input="# Hello\n\n1. one")

    assert result.exit_code == 0
    assert "Hello" in result.output
    assert "1. one" in result.output


def test_render_detect_code(invoke):
    result = invoke("render", "-", "-f", "json", "--detect-code", input="def f(x):\n    return x")

    assert result.exit_code == 0
    assert json.loads(result.output)["blocks"][0]["kind"] == "code"


def test_render_reports_undecodable_source(invoke, tmp_path):
    source = tmp_path / "latin1.txt"
    source.write_bytes(b"caf\xe9 notes")

    result = invoke("render", str(source))

    assert result.exit_code == 1
    assert "✗" in result.output
    assert "not valid UTF-8" in result.output


def test_config_roundtrip(invoke):
    assert invoke("config", "set-server", "http://example.com/api").exit_code == 0
    assert invoke("config", "set-token", "abc").exit_code == 0

    result = invoke("config", "show")

    assert result.exit_code == 0
    assert "http://example.com/api" in result.output
    assert "✓ set" in result.output


def test_config_rejects_bad_url(invoke):
    result = invoke("config", "set-server", "ftp://example.com")

    assert result.exit_code == 1
    assert "must start with" in result.output


def test_default_mode_from_config(invoke):
    assert invoke("config", "set-mode", "math").exit_code == 0

    result = invoke("render", "-", "-f", "json", input="Area $x^2$")

    assert json.loads(result.output)["mode"] == "math"


def _patch_client(monkeypatch, tmp_path, handler, token="tok"):
    def _get_client(ctx):
        return SpoonFeederClient(
            api_url="http://test/api",
            token=token,
            config_dir=tmp_path / "client",
            transport=httpx.MockTransport(handler),
        )

    monkeypatch.setattr(cli, "get_client", _get_client)


def test_fetch_html(invoke, monkeypatch, tmp_path):
    records = [{
        "id": 1,
        "subtopicId": 7,
        "contentType": "notes",
        "contentOrder": 1,
        "title": "Intro",
        "content": "**Hi**",
        "metadata": {"format": "normal"},
    }]
    _patch_client(monkeypatch, tmp_path, lambda request: httpx.Response(200, json=records))

    result = invoke("fetch", "7", "--format", "html")

    assert result.exit_code == 0
    assert '<section class="content-notes"><h2>Intro</h2>' in result.output
    assert '<strong class="structured-bold">Hi</strong>' in result.output


def test_fetch_json(invoke, monkeypatch, tmp_path):
    records = [{"id": 1, "contentType": "qa", "contentOrder": 1, "content": "x = compute(a)"}]
    _patch_client(monkeypatch, tmp_path, lambda request: httpx.Response(200, json=records))

    result = invoke("fetch", "7", "-f", "json")

    assert result.exit_code == 0
    payload = json.loads(result.output)
    assert payload[0]["record"]["contentType"] == "qa"
    assert payload[0]["document"]["blocks"][0]["kind"] == "code"


def test_fetch_terminal_to_file(invoke, monkeypatch, tmp_path):
    records = [{"id": 1, "contentType": "notes", "contentOrder": 1, "title": "Intro", "content": "**Hi**"}]
    _patch_client(monkeypatch, tmp_path, lambda request: httpx.Response(200, json=records))
    target = tmp_path / "out.txt"

    result = invoke("fetch", "7", "-o", str(target))

    assert result.exit_code == 0
    assert "Written to" in result.output
    written = target.read_text(encoding="utf-8")
    assert "Intro" in written
    assert "Hi" in written


def test_fetch_not_found(invoke, monkeypatch, tmp_path):
    _patch_client(
        monkeypatch, tmp_path,
        lambda request: httpx.Response(404, json={"error": "Subtopic not found"}),
    )

    result = invoke("fetch", "99")

    assert result.exit_code == 1
    assert "Subtopic not found" in result.output


def test_fetch_without_token(invoke, monkeypatch, tmp_path):
    _patch_client(monkeypatch, tmp_path, lambda request: httpx.Response(200, json=[]), token=None)

    result = invoke("fetch", "7")

    assert result.exit_code == 1
    assert "Authentication failed" in result.output


def test_health(invoke, monkeypatch, tmp_path):
    _patch_client(
        monkeypatch, tmp_path,
        lambda request: httpx.Response(200, json={"status": "OK", "message": "running"}),
    )

    result = invoke("health")

    assert result.exit_code == 0
    assert "API is up: OK" in result.output
