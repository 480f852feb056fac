"""Integration tests for the query command (read -> parse -> select -> render)"""

import json

from typer.testing import CliRunner

from mdq.cli.cli import app


runner = CliRunner()


def test_query_sections(test_doc_path):
    result = runner.invoke(app, ["query", "# section", str(test_doc_path)])
    assert result.exit_code == 0, result.output
    assert result.output.startswith("## Section One")
    assert "\n   -----\n" in result.output
    assert "## Section Two" in result.output


def test_query_list_items_after_double_dash(test_doc_path):
    result = runner.invoke(app, ["query", "--no-breaks", "--", "- [?]", str(test_doc_path)])
    assert result.exit_code == 0, result.output
    assert result.output == "- [ ] Open task\n\n- [x] Done task\n"


def test_query_json_output(test_doc_path):
    result = runner.invoke(app, ["query", "--output", "json", "[](*)", str(test_doc_path)])
    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert [item["url"] for item in data["items"]] == ["https://example.com", "https://docs.example.com"]


def test_query_plain_output_from_stdin():
    result = runner.invoke(app, ["query", "--output", "plain", "P:"], input="Hello *world*.\n")
    assert result.exit_code == 0, result.output
    assert result.output == "Hello world.\n"


def test_query_env_output_format(test_doc_path, monkeypatch):
    monkeypatch.setenv("MDQ_OUTPUT_FORMAT", "plain")
    result = runner.invoke(app, ["query", "```", str(test_doc_path)])
    assert result.exit_code == 0, result.output
    assert result.output.startswith("fn main() {")


def test_query_no_match_exits_1(test_doc_path):
    result = runner.invoke(app, ["query", "# nothing here", str(test_doc_path)])
    assert result.exit_code == 1
    assert result.output == ""


def test_query_invalid_selector_exits_2(test_doc_path):
    result = runner.invoke(app, ["query", "xyz|abc", str(test_doc_path)])
    assert result.exit_code == 2
    assert " --> 1:1" in result.output
    assert "Suggestions:" in result.output


def test_query_invalid_selector_plain_errors(test_doc_path):
    result = runner.invoke(app, ["query", "--plain-errors", "xyz", str(test_doc_path)])
    assert result.exit_code == 2
    assert "Suggestions:" not in result.output


def test_query_missing_file_exits_2():
    result = runner.invoke(app, ["query", "# x", "missing.md"])
    assert result.exit_code == 2
    assert "Failed to read missing.md" in result.output


def test_query_bad_front_matter_exits_2(tmp_path):
    (tmp_path / "bad.md").write_text("---\n[bad\n---\n# x\n")
    result = runner.invoke(app, ["query", "# x", "bad.md"])
    assert result.exit_code == 2
    assert "Invalid YAML front matter" in result.output


def test_query_invalid_config_exits_2(tmp_path, test_doc_path):
    (tmp_path / "mdq.yaml").write_text("- not\n- a mapping\n")
    result = runner.invoke(app, ["query", "#", str(test_doc_path)])
    assert result.exit_code == 2
    assert "Invalid mdq.yaml" in result.output


def test_query_dash_selector_without_separator(test_doc_path):
    """List selectors are taken as the selector, not as unknown options."""
    result = runner.invoke(app, ["query", "- [?] task", str(test_doc_path), "--no-breaks"])
    assert result.exit_code == 0, result.output
    assert result.output == "- [ ] Open task\n\n- [x] Done task\n"


def test_query_dash_selector_with_option_letters(test_doc_path):
    result = runner.invoke(app, ["query", "--output", "plain", "- second", str(test_doc_path)])
    assert result.exit_code == 0, result.output
    assert result.output == "Second item\nNested item\n"


def test_query_malformed_dash_selector_exits_2(test_doc_path):
    result = runner.invoke(app, ["query", "-x", str(test_doc_path)])
    assert result.exit_code == 2
    assert "expected space after list marker" in result.output
