"""
Tests for the command line entry point.
"""

import io
import json

import pytest

from chatstamp_cli.cli import entrance


BASE = ["--base", "2024-06-15T09:00:00"]


class TestEntrance:
    """Tests for chatstamp's command line."""

    def test_default_output(self, capsys):
        assert entrance(BASE + ["see you at 13:30 on 21/03"]) == 0
        assert capsys.readouterr().out == "at 13:30 on 21/03\t21 March 2024 13:30\n"

    def test_format(self, capsys):
        entrance(BASE + ["--format", "t", "13:30", "and", "21/03"])
        assert capsys.readouterr().out == "13:30\t13:30\n21/03\t00:00\n"

    def test_json(self, capsys):
        entrance(BASE + ["--json", "at 13:30"])
        output = json.loads(capsys.readouterr().out)
        assert output["text"] == "at 13:30"
        assert output["segments"][0]["timestamp"] == "2024-06-15T13:30:00"

    def test_markup(self, capsys):
        entrance(BASE + ["--markup", "--format", "R", "see you at 13:30"])
        out = capsys.readouterr().out
        assert out.startswith("see you <t:")
        assert out.endswith(":R>\n")

    def test_no_timestamps(self, capsys):
        entrance(BASE + ["nothing here"])
        assert capsys.readouterr().out == ""

    def test_stdin(self, capsys, monkeypatch):
        monkeypatch.setattr("sys.stdin", io.StringIO("13:30\n"))
        entrance(BASE)
        assert capsys.readouterr().out == "13:30\t15 June 2024 13:30\n"

    def test_bad_base(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            entrance(["--base", "next tuesday", "13:30"])
        assert excinfo.value.code == 2
        assert "--base must be an ISO 8601 datetime" in capsys.readouterr().err

    def test_bad_format(self):
        with pytest.raises(SystemExit):
            entrance(["--format", "x", "13:30"])
