"""Integration tests for the command-line interface."""

import json

import pytest

from lolcatalog.cli import create_parser, main, parse_filter_args

pytestmark = pytest.mark.integration


class TestParser:
    """Test argument parsing."""

    def test_filter_args(self):
        assert parse_filter_args(["hvci", "architecture=AMD64", " killer "]) == {
            "hvci": True,
            "architecture": "AMD64",
            "killer": True,
        }

    def test_search_defaults(self):
        args = create_parser().parse_args(["search"])

        assert args.query == ""
        assert args.filters == []
        assert args.page == 1
        assert args.limit == 20

    def test_command_required(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args([])


class TestCommands:
    """Test running the search and stats commands against a dataset file."""

    def test_stats_json(self, dataset_file, capsys):
        assert main(["--data", str(dataset_file), "stats", "--json"]) == 0

        data = json.loads(capsys.readouterr().out)
        assert data["total"] == 3
        assert data["killerDrivers"] == 1

    def test_stats_table(self, dataset_file, capsys):
        assert main(["--data", str(dataset_file), "stats"]) == 0

        out = capsys.readouterr().out
        assert "hvciCompatible" in out

    def test_search_json(self, dataset_file, capsys):
        assert main(["--data", str(dataset_file), "search", "razer", "--json"]) == 0

        data = json.loads(capsys.readouterr().out)
        assert data["total"] == 1
        assert data["drivers"][0]["OriginalFilename"] == "Rzpnk.sys"

    def test_search_with_filters(self, dataset_file, capsys):
        assert main(["--data", str(dataset_file), "search", "-f", "unsigned", "--json"]) == 0

        data = json.loads(capsys.readouterr().out)
        assert [d["OriginalFilename"] for d in data["drivers"]] == ["BadDriver.sys"]
        assert data["filters"] == {"unsigned": True}

    def test_search_table(self, dataset_file, capsys):
        assert main(["--data", str(dataset_file), "search", "sys", "--limit", "2"]) == 0

        out = capsys.readouterr().out
        assert "Rzpnk.sys" in out
        assert "BadDriver.sys" not in out

    def test_missing_data_path(self, tmp_path):
        assert main(["--data", str(tmp_path / "missing.json"), "stats"]) == 1

    def test_invalid_dataset(self, dataset_file):
        dataset_file.write_text("not json", encoding="utf-8")

        assert main(["--data", str(dataset_file), "stats"]) == 1
