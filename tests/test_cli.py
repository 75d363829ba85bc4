"""Tests for the mention-markup command line."""

import json
from pathlib import Path

from click.testing import CliRunner

from mention_markup.cli import cli

VALUE = "Hi @[John](1)!"


class TestCli:
    """Tests for the CLI commands."""

    def test_plain(self) -> None:
        """plain prints the plain-text view."""
        result = CliRunner().invoke(cli, ["plain", VALUE])
        assert result.exit_code == 0
        assert result.output == "Hi John!\n"

    def test_custom_markup(self) -> None:
        """--markup replaces the default template."""
        result = CliRunner().invoke(
            cli,
            ["--markup", "@[__display__](user:__id__)", "--markup", "#[__id__]", "plain", "@[John](user:1) #[ops]"],
        )
        assert result.exit_code == 0
        assert result.output == "John ops\n"

    def test_invalid_markup(self) -> None:
        """Template errors are reported as usage errors."""
        result = CliRunner().invoke(cli, ["--markup", "nothing", "plain", "x"])
        assert result.exit_code != 0
        assert "does not contain" in result.output

    def test_mentions_json(self) -> None:
        """--json prints machine-readable mentions."""
        result = CliRunner().invoke(cli, ["mentions", VALUE, "--json"])
        assert result.exit_code == 0
        mentions = json.loads(result.output)
        assert mentions == [
            {
                "type_index": 0,
                "id": "1",
                "display": "John",
                "plain_text_start": 3,
                "plain_text_end": 7,
                "markup_start": 3,
                "markup_end": 13,
                "meta_data": {},
            }
        ]

    def test_mentions_table(self) -> None:
        """Without --json a table is printed."""
        result = CliRunner().invoke(cli, ["mentions", VALUE])
        assert result.exit_code == 0
        assert "John" in result.output
        assert "3-13" in result.output

    def test_mentions_none(self) -> None:
        """Values without mentions say so."""
        result = CliRunner().invoke(cli, ["mentions", "plain"])
        assert "No mentions" in result.output

    def test_map(self) -> None:
        """map applies the correction policy."""
        runner = CliRunner()
        assert runner.invoke(cli, ["map", VALUE, "5"]).output == "3\n"
        assert runner.invoke(cli, ["map", VALUE, "5", "--correction", "end"]).output == "13\n"
        assert runner.invoke(cli, ["map", VALUE, "5", "--correction", "null"]).output == "null\n"
        assert runner.invoke(cli, ["map", VALUE, "8"]).output == "14\n"

    def test_reconcile(self) -> None:
        """reconcile applies a plain-text edit to the markup."""
        result = CliRunner().invoke(cli, ["reconcile", VALUE, "Hi Jo!"])
        assert result.exit_code == 0
        assert result.output == "Hi !\n"

    def test_reconcile_with_selection(self) -> None:
        """Selection hints are passed through."""
        result = CliRunner().invoke(
            cli,
            ["reconcile", VALUE, "Hi  John!", "--start-before", "3", "--end-before", "3", "--end-after", "4"],
        )
        assert result.output == "Hi  @[John](1)!\n"

    def test_suggest_with_config(self, tmp_path: Path) -> None:
        """suggest lists candidates from a settings file."""
        config = tmp_path / "mentions.yaml"
        config.write_text("types:\n  - candidates: [John, Jane, Bob]\n", encoding="utf-8")

        result = CliRunner().invoke(cli, ["--config", str(config), "suggest", "hi @j"])
        assert result.exit_code == 0
        assert "John" in result.output
        assert "Jane" in result.output
        assert "Bob" not in result.output

    def test_suggest_nothing(self) -> None:
        """No trigger, no suggestions."""
        result = CliRunner().invoke(cli, ["suggest", "hello"])
        assert "No suggestions" in result.output

    def test_invalid_config(self, tmp_path: Path) -> None:
        """Broken settings files fail cleanly."""
        config = tmp_path / "mentions.yaml"
        config.write_text("types: [unclosed", encoding="utf-8")
        result = CliRunner().invoke(cli, ["--config", str(config), "plain", "x"])
        assert result.exit_code != 0
        assert "Invalid YAML" in result.output
