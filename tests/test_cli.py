"""Tests for the mergegen CLI.

Covers:
- Parser construction and argument parsing
- --help for every command
- generate against the project fixture, including env fallbacks and errors
- init scaffolding
"""

import argparse
import shutil
from pathlib import Path
from unittest.mock import patch

import pytest

from mergegen.cli import build_parser, main

FIXTURES = Path(__file__).parent / "fixtures"
PROJECT = FIXTURES / "project"
CONFIG = str(PROJECT / "config.yaml")
DATA = str(PROJECT / "data.json")


# ── Parser construction ──────────────────────────────────────────


class TestParserConstruction:
    def test_build_parser_returns_parser(self):
        assert isinstance(build_parser(), argparse.ArgumentParser)

    def test_no_args_shows_help(self, capsys, monkeypatch):
        monkeypatch.delenv("MERGEGEN_CONFIG", raising=False)
        with patch("sys.argv", ["mergegen"]):
            rc = main()
        assert rc == 0
        assert "mergegen" in capsys.readouterr().out

    def test_generate_options_before_subcommand(self):
        args = build_parser().parse_args(["-c", "a.yaml", "generate", "-d", "b.json"])
        assert args.config == "a.yaml"
        assert args.data == "b.json"
        assert args.dry_run is False

    def test_verbose_after_subcommand(self):
        assert build_parser().parse_args(["generate", "-v"]).verbose is True
        assert build_parser().parse_args(["generate"]).verbose is False

    def test_repeatable_filters(self):
        args = build_parser().parse_args(
            ["generate", "--include", "a", "--include", "regex:^b", "--exclude", "c*"],
        )
        assert args.include == ["a", "regex:^b"]
        assert args.exclude == ["c*"]

    def test_init_default_path(self):
        args = build_parser().parse_args(["init"])
        assert args.command == "init"
        assert args.path == "."


# ── Help output ──────────────────────────────────────────────────


class TestHelpOutput:
    @pytest.mark.parametrize("cmd", [
        ["--help"],
        ["generate", "--help"],
        ["init", "--help"],
    ])
    def test_help_exits_zero(self, cmd):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(cmd)
        assert exc_info.value.code == 0


# ── generate ─────────────────────────────────────────────────────


class TestGenerateCommand:
    def test_generate(self, tmp_path, capsys):
        with patch("sys.argv", ["mergegen", "generate", "-c", CONFIG, "-d", DATA, "-o", str(tmp_path)]):
            rc = main()
        assert rc == 0
        assert (tmp_path / "out" / "billing.yaml").is_file()
        out = capsys.readouterr().out
        assert "Template sets: 1" in out
        assert "Created" in out

    def test_generate_is_default_command(self, tmp_path):
        with patch("sys.argv", ["mergegen", "-c", CONFIG, "-d", DATA, "-o", str(tmp_path)]):
            rc = main()
        assert rc == 0
        assert (tmp_path / "out" / "search.yaml").is_file()

    def test_dry_run(self, tmp_path, capsys):
        argv = ["mergegen", "generate", "-c", CONFIG, "-d", DATA, "-o", str(tmp_path), "--dry-run"]
        with patch("sys.argv", argv):
            rc = main()
        assert rc == 0
        assert not (tmp_path / "out").exists()
        assert "[DRY RUN]" in capsys.readouterr().out

    def test_env_fallback(self, tmp_path, monkeypatch):
        monkeypatch.setenv("MERGEGEN_CONFIG", CONFIG)
        monkeypatch.setenv("MERGEGEN_DATA", DATA)
        with patch("sys.argv", ["mergegen", "generate", "-o", str(tmp_path)]):
            rc = main()
        assert rc == 0
        assert (tmp_path / "out" / "billing.yaml").is_file()

    def test_missing_data_flag(self, capsys, monkeypatch):
        monkeypatch.delenv("MERGEGEN_DATA", raising=False)
        with patch("sys.argv", ["mergegen", "generate", "-c", CONFIG]):
            rc = main()
        assert rc == 1
        assert "--data" in capsys.readouterr().err

    def test_generation_error_returns_one(self, tmp_path, capsys):
        project = tmp_path / "project"
        shutil.copytree(PROJECT, project)
        (project / "owners.yaml").unlink()
        argv = ["mergegen", "generate", "-c", str(project / "config.yaml"), "-d", DATA]
        with patch("sys.argv", argv):
            rc = main()
        assert rc == 1
        err = capsys.readouterr().err
        assert "error: [config]" in err
        assert "owners.yaml" in err


# ── init ─────────────────────────────────────────────────────────


class TestInitCommand:
    def test_init(self, tmp_path, capsys):
        with patch("sys.argv", ["mergegen", "init", str(tmp_path)]):
            rc = main()
        assert rc == 0
        assert (tmp_path / "config.yaml").is_file()
        out = capsys.readouterr().out
        assert "created" in out
        assert "mergegen generate" in out

    def test_init_then_generate(self, tmp_path):
        with patch("sys.argv", ["mergegen", "init", str(tmp_path)]):
            main()
        argv = ["mergegen", "generate", "-c", str(tmp_path / "config.yaml"), "-d", str(tmp_path / "data.json")]
        with patch("sys.argv", argv):
            rc = main()
        assert rc == 0
        assert (tmp_path / "output" / "item2.md").is_file()
