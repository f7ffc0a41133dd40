"""
Tests for CLI argument parsing and dispatch.
"""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from compactup.cli.parser import CLI, _find_compile_command


@pytest.fixture
def cli():
    return CLI()


@pytest.mark.unit
class TestParseArgs:
    def test_check(self, cli):
        args = cli.parse_args(["check"])
        assert args.command == "check"
        assert args.compile_args == []
        assert args.directory is None
        assert args.target is None

    def test_update_defaults(self, cli):
        args = cli.parse_args(["update"])
        assert args.command == "update"
        assert args.version is None
        assert args.no_set_default is False

    def test_update_with_version(self, cli):
        args = cli.parse_args(["update", "0.29", "--no-set-default"])
        assert args.version == "0.29"
        assert args.no_set_default is True

    def test_list(self, cli):
        assert cli.parse_args(["list"]).installed is False
        assert cli.parse_args(["list", "--installed"]).installed is True
        assert cli.parse_args(["list", "-i"]).installed is True

    def test_clean(self, cli):
        args = cli.parse_args(["clean", "-k", "--cache"])
        assert args.keep_current is True
        assert args.cache is True

    def test_global_options(self, cli):
        args = cli.parse_args(
            [
                "--directory",
                "/tmp/compact",
                "--target",
                "aarch64-darwin",
                "--config",
                "/tmp/c.yaml",
                "-v",
                "list",
            ]
        )
        assert args.directory == Path("/tmp/compact")
        assert args.target == "aarch64-darwin"
        assert args.config == Path("/tmp/c.yaml")
        assert args.verbose is True

    def test_unknown_target_rejected(self, cli):
        with pytest.raises(SystemExit):
            cli.parse_args(["--target", "x86_64-pc-windows-msvc", "check"])

    def test_compile_arguments_forwarded_verbatim(self, cli):
        args = cli.parse_args(
            ["--directory", "compile", "compile", "+0.29.1", "--help", "-v", "src", "out"]
        )
        assert args.command == "compile"
        assert args.directory == Path("compile")
        assert args.compile_args == ["+0.29.1", "--help", "-v", "src", "out"]
        assert args.verbose is False

    def test_compile_without_arguments(self, cli):
        args = cli.parse_args(["compile"])
        assert args.command == "compile"
        assert args.compile_args == []

    def test_version_flag(self, cli, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.parse_args(["--version"])
        assert exc_info.value.code == 0
        assert capsys.readouterr().out.startswith("compact ")


@pytest.mark.unit
class TestFindCompileCommand:
    @pytest.mark.parametrize(
        "argv,expected",
        [
            (["compile"], 0),
            (["-v", "compile", "x"], 1),
            (["--target", "aarch64-darwin", "compile"], 2),
            (["update", "compile"], None),
            (["--config", "compile"], None),
            ([], None),
        ],
    )
    def test_index(self, argv, expected):
        assert _find_compile_command(argv) == expected


@pytest.mark.unit
class TestRun:
    def test_no_command_prints_help(self, cli, capsys):
        assert cli.run([]) == 1
        assert "usage: compact" in capsys.readouterr().out

    @patch("compactup.cli.parser.importlib.import_module")
    def test_dispatch(self, mock_import, cli):
        module = MagicMock()
        module.run.return_value = 0
        mock_import.return_value = module

        assert cli.run(["list", "--installed"]) == 0

        mock_import.assert_called_once_with("compactup.cli.commands.listing")
        assert module.run.call_args[0][0].installed is True

    @patch("compactup.cli.parser.importlib.import_module")
    def test_error_reported_with_exit_code_1(self, mock_import, cli, capsys):
        mock_import.return_value.run.side_effect = RuntimeError("boom")

        assert cli.run(["check"]) == 1
        assert "Error: boom" in capsys.readouterr().err

    @patch("compactup.cli.parser.importlib.import_module")
    def test_keyboard_interrupt(self, mock_import, cli):
        mock_import.return_value.run.side_effect = KeyboardInterrupt

        assert cli.run(["update"]) == 130
