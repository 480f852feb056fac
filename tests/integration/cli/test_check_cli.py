"""Integration tests for the check command"""

from typer.testing import CliRunner

from mdq.cli.cli import app


runner = CliRunner()


def test_check_all_resolved(test_doc_path):
    result = runner.invoke(app, ["check", str(test_doc_path)])
    assert result.exit_code == 0, result.output
    assert result.output == "All footnote references resolved.\n"


def test_check_reports_unresolved(tmp_path):
    (tmp_path / "notes.md").write_text("One[^a] two[^b].\n\n[^a]: defined\n")
    result = runner.invoke(app, ["check", "notes.md"])
    assert result.exit_code == 1
    assert "  unresolved: [^b]" in result.output
    assert "1 unresolved footnote reference(s)" in result.output


def test_check_directory(tmp_path):
    docs = tmp_path / "docs"
    docs.mkdir()
    (docs / "a.md").write_text("See[^x].\n")
    (docs / "b.md").write_text("[^x]: here\n")
    result = runner.invoke(app, ["check", "docs"])
    assert result.exit_code == 0, result.output


def test_check_stdin():
    result = runner.invoke(app, ["check"], input="Dangling[^z]\n")
    assert result.exit_code == 1
    assert "[^z]" in result.output
