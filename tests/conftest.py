"""Root test configuration: fixture paths and config isolation"""

import os
from pathlib import Path

import pytest

from mdq.config import Settings
from mdq.core.parse import parse_file


FIXTURES = Path(__file__).parent / "fixtures"
TEST_DOC = FIXTURES / "test_doc.md"


class Echo:
    """Stand-in for typer.echo that records each message."""

    def __init__(self):
        self.lines: list[str] = []

    def __call__(self, message="", nl=True, err=False):
        self.lines.append(str(message))

    @property
    def text(self) -> str:
        return "\n".join(self.lines)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Run each test away from any mdq.yaml and without MDQ_* env vars."""
    for name in list(os.environ):
        if name.startswith("MDQ_"):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)


@pytest.fixture(name="test_doc_path")
def test_doc_path_fixture():
    return TEST_DOC


@pytest.fixture(name="test_doc")
def test_doc_fixture():
    return parse_file(TEST_DOC)


@pytest.fixture(name="settings")
def settings_fixture():
    return Settings()


@pytest.fixture(name="echo")
def echo_fixture():
    return Echo()
