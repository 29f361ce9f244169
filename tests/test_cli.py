"""Tests for the CLI module."""

import json
import re
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from titlescope import __version__
from titlescope.cli import main
from titlescope.config import AppConfig
from titlescope.qui import QuiConnectionError
from titlescope.titles import TorrentAction

PAYLOAD = {
    "titles": [
        {
            "hash": "a",
            "name": "Dune.2021.2160p.BluRay",
            "title": "Dune",
            "type": "movie",
            "year": 2021,
            "resolution": "2160p",
            "source": "bluray",
            "size": 2048,
            "addedOn": 300,
        },
        {
            "hash": "b",
            "name": "Dune.2021.1080p.WEB.DV.x265",
            "title": "Dune",
            "type": "movie",
            "year": 2021,
            "resolution": "1080p",
            "source": "web",
            "hdr": ["DV"],
            "codec": ["x265"],
            "size": 1024,
            "addedOn": 200,
        },
        {
            "hash": "c",
            "name": "Show.S01E01",
            "title": "Show",
            "type": "episode",
            "series": 1,
            "episode": 1,
            "state": "error",
            "addedOn": 100,
        },
        {
            "hash": "d",
            "name": "Show.S01E03",
            "title": "Show",
            "type": "episode",
            "series": 1,
            "episode": 3,
            "addedOn": 50,
        },
    ],
    "total": 4,
}


@pytest.fixture(autouse=True)
def default_config():
    """Run every command against default settings."""
    with patch("titlescope.cli.get_config", return_value=AppConfig()):
        yield


@pytest.fixture
def titles_file(tmp_path: Path) -> Path:
    path = tmp_path / "titles.json"
    path.write_text(json.dumps(PAYLOAD), encoding="utf-8")
    return path


def test_main_help() -> None:
    """Test that --help works."""
    runner = CliRunner()
    result = runner.invoke(main, ["--help"])
    assert result.exit_code == 0
    assert "titlescope" in result.output


def test_version() -> None:
    """Test that --version works."""
    runner = CliRunner()
    result = runner.invoke(main, ["--version"])
    assert result.exit_code == 0
    # Version format: MAJOR.MINOR.PATCH (e.g., 0.3.12)
    assert re.search(r"\d+\.\d+\.\d+", result.output)
    assert __version__ in result.output


def test_titles_json(titles_file: Path) -> None:
    """Test the titles command groups releases."""
    runner = CliRunner()
    result = runner.invoke(main, ["titles", "--input", str(titles_file), "--format", "json"])
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert [g["title"] for g in data["groups"]] == ["Dune", "Show"]
    assert data["groups"][0]["best"] == "a"


def test_titles_filtered(titles_file: Path) -> None:
    """Test filter options narrow the releases."""
    runner = CliRunner()
    result = runner.invoke(
        main, ["titles", "-i", str(titles_file), "--type", "episode", "-f", "json"]
    )
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert [g["title"] for g in data["groups"]] == ["Show"]


def test_titles_text_expanded(titles_file: Path) -> None:
    """Test the text tree shows leaves of expanded sub-groups."""
    runner = CliRunner()
    result = runner.invoke(
        main, ["titles", "-i", str(titles_file), "--expand", "Dune", "--expand", "Dune::2021"]
    )
    assert result.exit_code == 0
    assert "Dune.2021.2160p.BluRay" in result.output
    assert "Show.S01E01" not in result.output


def test_titles_expand_all(titles_file: Path) -> None:
    """Test --expand-all opens every node."""
    runner = CliRunner()
    result = runner.invoke(main, ["titles", "-i", str(titles_file), "--expand-all"])
    assert result.exit_code == 0
    assert "Show.S01E03" in result.output


def test_titles_json_row_heights(titles_file: Path) -> None:
    """Test the titles JSON carries row heights from the display config."""
    config = AppConfig(display={"group_row_height": 72})
    runner = CliRunner()
    with patch("titlescope.cli.get_config", return_value=config):
        result = runner.invoke(
            main, ["titles", "-i", str(titles_file), "-f", "json", "--expand", "Dune"]
        )
    assert result.exit_code == 0
    rows = json.loads(result.output)["rows"]
    assert [(r["id"], r["height"]) for r in rows] == [
        ("Dune", 72),
        ("Dune::2021", 60),
        ("Show", 72),
    ]


def test_titles_save_csv(titles_file: Path) -> None:
    """Test --save-csv writes a dated CSV file to the current directory."""
    runner = CliRunner()
    with runner.isolated_filesystem():
        result = runner.invoke(main, ["titles", "-i", str(titles_file), "--save-csv"])
        assert result.exit_code == 0
        saved = list(Path.cwd().glob("titlescope_titles_*.csv"))
        assert len(saved) == 1
        assert saved[0].read_text(encoding="utf-8").startswith("Title,")


def test_titles_invalid_file(tmp_path: Path) -> None:
    """Test a malformed input file exits with an error."""
    path = tmp_path / "bad.json"
    path.write_text("{not json", encoding="utf-8")
    runner = CliRunner()
    result = runner.invoke(main, ["titles", "-i", str(path)])
    assert result.exit_code == 1
    assert "Invalid titles file" in result.output


def test_titles_without_source() -> None:
    """Test fetching without an instance exits with an error."""
    runner = CliRunner()
    result = runner.invoke(main, ["titles"])
    assert result.exit_code == 1
    assert "No instance" in result.output


def test_titles_from_server() -> None:
    """Test titles are fetched from the configured server."""
    from titlescope.models import TitlesResponse

    runner = CliRunner()
    with patch("titlescope.qui.QuiClient") as mock_client_class:
        client = mock_client_class.return_value.__enter__.return_value
        client.get_titles.return_value = TitlesResponse.model_validate(PAYLOAD)
        result = runner.invoke(main, ["titles", "--instance", "1", "-f", "json"])
    assert result.exit_code == 0
    assert json.loads(result.output)["total_groups"] == 2
    assert client.get_titles.call_args.args[0] == 1


def test_titles_connection_error() -> None:
    """Test server errors are reported and logged."""
    runner = CliRunner()
    with runner.isolated_filesystem():
        with patch("titlescope.qui.QuiClient") as mock_client_class:
            client = mock_client_class.return_value.__enter__.return_value
            client.get_titles.side_effect = QuiConnectionError("refused")
            result = runner.invoke(main, ["titles", "--instance", "1"])
        assert result.exit_code == 1
        assert "Could not reach" in result.output
        assert Path("titlescope_errors.log").exists()


def test_upgrades_json(titles_file: Path) -> None:
    """Test the upgrades command lists recommendations."""
    runner = CliRunner()
    result = runner.invoke(main, ["upgrades", "-i", str(titles_file), "-f", "json"])
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["total"] == 1
    assert data["recommendations"][0]["title"] == "Dune"


def test_upgrades_save_csv(titles_file: Path) -> None:
    """Test --save-csv also works next to JSON output."""
    runner = CliRunner()
    with runner.isolated_filesystem():
        result = runner.invoke(
            main, ["upgrades", "-i", str(titles_file), "-f", "json", "--save-csv"]
        )
        assert result.exit_code == 0
        saved = list(Path.cwd().glob("titlescope_upgrades_*.csv"))
        assert len(saved) == 1
        assert "Dune" in saved[0].read_text(encoding="utf-8")


def test_upgrades_text_none(tmp_path: Path) -> None:
    """Test the upgrades command with nothing to recommend."""
    path = tmp_path / "one.json"
    path.write_text(json.dumps([{"hash": "x", "title": "Solo"}]), encoding="utf-8")
    runner = CliRunner()
    result = runner.invoke(main, ["upgrades", "-i", str(path)])
    assert result.exit_code == 0
    assert "up to date" in result.output


def test_stats_json(titles_file: Path) -> None:
    """Test the stats command."""
    runner = CliRunner()
    result = runner.invoke(main, ["stats", "-i", str(titles_file), "--json"])
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["total_count"] == 4
    assert data["completion_rate"] == 75.0
    assert data["series_count"] == 1
    assert data["missing_episodes"] == 1


def test_action_unknown() -> None:
    """Test an unknown action exits before contacting the server."""
    runner = CliRunner()
    with runner.isolated_filesystem():
        with patch("titlescope.qui.QuiClient") as mock_client_class:
            result = runner.invoke(main, ["action", "explode", "abc", "--instance", "1"])
        assert result.exit_code == 1
        assert "Unknown torrent action" in result.output
        mock_client_class.assert_not_called()


def test_action_dispatch() -> None:
    """Test an action is sent for the given hashes."""
    runner = CliRunner()
    with patch("titlescope.qui.QuiClient") as mock_client_class:
        client = mock_client_class.return_value.__enter__.return_value
        handler = MagicMock()
        client.for_instance.return_value = handler
        result = runner.invoke(main, ["action", "pause", "def", "abc", "--instance", "1"])
    assert result.exit_code == 0
    client.for_instance.assert_called_once_with(1)
    handler.perform.assert_called_once_with(TorrentAction.PAUSE, ["abc", "def"])
    assert "2 torrent(s)" in result.output


def test_category() -> None:
    """Test a category change is sent for the given hashes."""
    runner = CliRunner()
    with patch("titlescope.qui.QuiClient") as mock_client_class:
        client = mock_client_class.return_value.__enter__.return_value
        handler = MagicMock()
        client.for_instance.return_value = handler
        result = runner.invoke(main, ["category", "movies", "abc", "--instance", "2"])
    assert result.exit_code == 0
    handler.change_category.assert_called_once_with(["abc"], "movies")


def test_config_path() -> None:
    """Test the config path command."""
    runner = CliRunner()
    result = runner.invoke(main, ["config", "path"])
    assert result.exit_code == 0
    assert ".titlescope" in result.output


def test_config_show() -> None:
    """Test the config show command."""
    runner = CliRunner()
    result = runner.invoke(main, ["config", "show"])
    assert result.exit_code == 0
    assert "Upgrade tolerance: 10" in result.output
