import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from ephemeral_clip.cli import cli
from ephemeral_clip.client import ClipClient


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def wired_cli(client):
    """Route every ClipClient the CLI builds to the in-process app."""
    def factory(server, timeout=10.0, max_plaintext_chars=10_000):
        return ClipClient("http://testserver", http=client, max_plaintext_chars=max_plaintext_chars)

    with patch("ephemeral_clip.cli.ClipClient", side_effect=factory):
        yield


def test_share_then_view(runner, wired_cli):
    result = runner.invoke(cli, ["share", "hunter2", "--ttl", "30"])
    assert result.exit_code == 0, result.output
    url = result.output.strip().splitlines()[-1]
    assert "/view?id=" in url and "#" in url

    result = runner.invoke(cli, ["view", url])
    assert result.exit_code == 0, result.output
    assert "hunter2" in result.output


def test_share_reads_stdin(runner, wired_cli):
    result = runner.invoke(cli, ["share"], input="from stdin\n")
    assert result.exit_code == 0, result.output
    url = result.output.strip().splitlines()[-1]

    result = runner.invoke(cli, ["view", url])
    assert "from stdin" in result.output


def test_view_with_delete_then_view_again_fails(runner, wired_cli):
    url = runner.invoke(cli, ["share", "once"]).output.strip().splitlines()[-1]

    result = runner.invoke(cli, ["view", url, "--delete"])
    assert result.exit_code == 0, result.output
    assert "once" in result.output

    result = runner.invoke(cli, ["view", url])
    assert result.exit_code == 1
    assert "expired, been deleted" in result.output


def test_delete_by_id(runner, wired_cli):
    url = runner.invoke(cli, ["share", "gone soon"]).output.strip().splitlines()[-1]
    secret_id = url.split("id=")[1].split("#")[0]

    result = runner.invoke(cli, ["delete", secret_id])
    assert result.exit_code == 0
    assert secret_id in result.output


def test_view_tampered_link_reports_corruption(runner, wired_cli):
    url = runner.invoke(cli, ["share", "abc"]).output.strip().splitlines()[-1]
    bad = url.split("#")[0] + "#" + "A" * 43 + "="

    result = runner.invoke(cli, ["view", bad])
    assert result.exit_code == 1
    assert "tampered" in result.output


def test_view_incomplete_link(runner, wired_cli):
    result = runner.invoke(cli, ["view", "http://testserver/view?id=" + "a" * 32])

    assert result.exit_code == 1
    assert "No encryption key" in result.output


def test_health(runner, wired_cli):
    result = runner.invoke(cli, ["health"])

    assert result.exit_code == 0
    assert json.loads(result.output)["backend"] == "fallback"


def test_max_chars_option_limits_share(runner, wired_cli):
    result = runner.invoke(cli, ["--max-chars", "5", "share", "too long"])

    assert result.exit_code == 1
    assert "less than 5 characters" in result.output

    result = runner.invoke(cli, ["--max-chars", "5", "share", "short"])
    assert result.exit_code == 0, result.output


def test_share_undecodable_stdin_reports_error(runner, wired_cli):
    with patch("ephemeral_clip.cli.click.get_text_stream") as stream:
        stream.return_value.read.return_value = "abc\udc80"
        result = runner.invoke(cli, ["share"])

    assert result.exit_code == 1
    assert "not valid UTF-8" in result.output
