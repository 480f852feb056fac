"""Shared fixtures for core unit tests"""

import pytest
from markdown_it import MarkdownIt

from mdq.core.parse import parse_document


TABLE_MD = """\
| name | link |
|------|------|
| one  | [x](https://x.example) |
| two  | y |
"""

FM_MD = """\
---
title: Test Doc
tags: [a, b]
---

# Title

Body content.
"""


@pytest.fixture(name="parser")
def parser_fixture():
    return MarkdownIt("gfm-like", options_update={"linkify": False})


@pytest.fixture(name="table_doc")
def table_doc_fixture():
    return parse_document(TABLE_MD)


@pytest.fixture(name="fm_doc")
def fm_doc_fixture():
    return parse_document(FM_MD)
