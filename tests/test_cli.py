"""Tests for the rel2doc command line interface."""

from pathlib import Path
from unittest.mock import patch

import pytest

from rel2doc.adapters.sql import SQLAdapter
from rel2doc.cli import build_parser, main


@pytest.fixture
def config_file(tmp_path: Path, sqlite_url: str) -> Path:
    path = tmp_path / "rel2doc.toml"
    path.write_text(
        f'[profiles.local]\nurl = "{sqlite_url}"\ndescription = "SQLite copy"\nprovider = "sqlite"\n'
    )
    return path


class TestParser:
    def test_generate_requires_add(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["generate"])

    def test_add_is_repeatable(self) -> None:
        args = build_parser().parse_args(
            ["--profile", "local", "generate", "-a", "STATE", "--add", "CITY:embedded", "--tree"]
        )

        assert args.add == ["STATE", "CITY:embedded"]
        assert args.tree is True
        assert args.indexes is False


class TestProfilesCommand:
    def test_lists_profiles(self, config_file: Path, capsys) -> None:
        assert main(["--config", str(config_file), "profiles"]) == 0

        err = capsys.readouterr().err
        assert "local" in err
        assert "SQLite copy" in err

    def test_missing_config(self, tmp_path: Path, capsys) -> None:
        assert main(["--config", str(tmp_path / "none.toml"), "profiles"]) == 1
        assert "Converter config not found" in capsys.readouterr().err


class TestTablesCommand:
    def test_lists_catalog(self, config_file: Path, state_city, capsys) -> None:
        with patch("rel2doc.cli.load_catalog", return_value=state_city):
            assert main(["--config", str(config_file), "--profile", "local", "tables"]) == 0

        err = capsys.readouterr().err
        assert "Schema Catalog" in err
        assert "CITY" in err
        assert "STATE" in err

    def test_connection_failure(self, config_file: Path, capsys) -> None:
        with patch("rel2doc.cli.load_catalog", side_effect=OSError("server [down]")):
            assert main(["--config", str(config_file), "--profile", "local", "tables"]) == 1

        assert "Connection failed: server [down]" in capsys.readouterr().err


class TestGenerateCommand:
    def test_writes_script_to_stdout(
        self, config_file: Path, sqlite_url: str, state_city, capsys
    ) -> None:
        with (
            patch("rel2doc.cli.load_catalog", return_value=state_city),
            patch("rel2doc.cli.get_adapter", return_value=SQLAdapter(sqlite_url)),
        ):
            code = main(
                [
                    "--config",
                    str(config_file),
                    "--profile",
                    "local",
                    "generate",
                    "--add",
                    "STATE",
                    "--add",
                    "CITY:referenced",
                    "--tree",
                ]
            )

        out, err = capsys.readouterr()
        assert code == 0
        assert out.startswith("/* CITY */\n")
        assert '\t{_id: {id: 1}, name: "Campinas", STATE: {code: "SP"}}' in out
        assert "/* STATE */" in out
        assert "Dependency tree" in err
        assert "-> STATE" in err
        assert "Generated 2 collection(s)" in err

    def test_unknown_profile(self, config_file: Path, capsys) -> None:
        code = main(["--config", str(config_file), "--profile", "nope", "generate", "-a", "STATE"])

        assert code == 1
        assert "Profile 'nope' not found" in capsys.readouterr().err

    def test_bad_selection(self, config_file: Path, capsys) -> None:
        code = main(["--config", str(config_file), "generate", "-a", "STATE:sideways"])

        assert code == 1
        assert "Unknown transform mode" in capsys.readouterr().err

    def test_duplicate_table(self, config_file: Path, sqlite_url: str, state_city, capsys) -> None:
        with (
            patch("rel2doc.cli.load_catalog", return_value=state_city),
            patch("rel2doc.cli.get_adapter", return_value=SQLAdapter(sqlite_url)),
        ):
            code = main(
                ["--config", str(config_file), "--profile", "local", "generate", "-a", "STATE", "-a", "STATE"]
            )

        assert code == 1
        assert "already added" in capsys.readouterr().err

    def test_failed_table_exit_code(self, config_file: Path, sqlite_url: str, school, capsys) -> None:
        """A table missing from the database fails alone; the exit code is 1."""
        with (
            patch("rel2doc.cli.load_catalog", return_value=school),
            patch("rel2doc.cli.get_adapter", return_value=SQLAdapter(sqlite_url)),
        ):
            code = main(
                [
                    "--config",
                    str(config_file),
                    "--profile",
                    "local",
                    "generate",
                    "-a",
                    "STUDENT",
                    "-a",
                    "PARKING",
                ]
            )

        out, err = capsys.readouterr()
        assert code == 1
        assert "/* STUDENT */" in out
        assert "PARKING" in err
