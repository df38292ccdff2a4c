"""Pytest configuration and fixtures for the rustdoc scraper tests."""

import json
import shutil
from pathlib import Path

import pytest

from rustdoc_man.parser import Parser

DATA_DIR = Path(__file__).parent / "data"

# The same package in every search-index encoding
KUCHIKI_V1_69 = {
    "doc": "HTML tree manipulation library",
    "t": "DLLQDLF",
    "n": ["NodeRef", "new", "len", "Target", "Siblings", "new", "parse_html"],
    "q": [[0, "kuchiki"], [4, "kuchiki::iter"], [6, "kuchiki"]],
    "d": [
        "A strong reference to a node.",
        "Create a new node.",
        "",
        "",
        "An iterator over siblings.",
        "Create a sibling iterator.",
        "Parse an HTML document.",
    ],
    "i": [0, 1, 1, 1, 0, 2, 0],
    "f": [],
    "p": [[3, "NodeRef"], [3, "Siblings"]],
}

KUCHIKI_V1_52 = {
    "doc": "HTML tree manipulation library",
    "t": [3, 11, 11, 16, 3, 11, 5],
    "n": ["NodeRef", "new", "len", "Target", "Siblings", "new", "parse_html"],
    "q": ["kuchiki", "", "", "", "kuchiki::iter", "", "kuchiki"],
    "d": [
        "A strong reference to a node.",
        "Create a new node.",
        "",
        "",
        "An iterator over siblings.",
        "Create a sibling iterator.",
        "Parse an HTML document.",
    ],
    "i": [0, 1, 1, 1, 0, 2, 0],
    "f": [],
    "p": [[3, "NodeRef"], [3, "Siblings"]],
}

KUCHIKI_V1_44 = {
    "doc": "HTML tree manipulation library",
    "i": [
        [3, "NodeRef", "kuchiki", "A strong reference to a node.", None, None],
        [11, "new", "", "Create a new node.", 0, None],
        [11, "len", "", "", 0, None],
        [16, "Target", "", "", 0, None],
        [3, "Siblings", "kuchiki::iter", "An iterator over siblings.", None, None],
        [11, "new", "", "Create a sibling iterator.", 1, None],
        [5, "parse_html", "kuchiki", "Parse an HTML document.", None, None],
    ],
    "p": [[3, "NodeRef"], [3, "Siblings"]],
}


def multiline_search_index(crates: dict) -> str:
    """Render crates the way rustdoc writes search-index.js since Rust 1.52."""
    lines = ["var searchIndex = JSON.parse('{\\"]
    entries = [f"{json.dumps(name)}:{json.dumps(data)}" for name, data in crates.items()]
    lines.append(",\\\n".join(entries) + "\\")
    lines.append("}');")
    lines.append(
        "if (typeof window !== 'undefined' && window.initSearch) "
        "{window.initSearch(searchIndex)};"
    )
    return "\n".join(lines) + "\n"


def single_line_search_index(crates: dict) -> str:
    return f"var searchIndex = JSON.parse('{json.dumps(crates)}');\n"


@pytest.fixture
def load_page():
    """Return a parser for one of the HTML pages in tests/data."""

    def load(name: str) -> Parser:
        return Parser.from_file(DATA_DIR / name)

    return load


@pytest.fixture
def doc_dir(tmp_path):
    """A documentation source with one package laid out like rustdoc output."""
    root = tmp_path / "doc"
    krate = root / "kuchiki"
    (krate / "iter").mkdir(parents=True)

    pages = {
        "all_modern.html": krate / "all.html",
        "mod_item_list.html": krate / "index.html",
        "struct_modern.html": krate / "struct.NodeRef.html",
        "fn_modern.html": krate / "fn.parse_html.html",
        "iter_mod_modern.html": krate / "iter" / "index.html",
        "siblings_modern.html": krate / "iter" / "struct.Siblings.html",
    }
    for source, target in pages.items():
        shutil.copy(DATA_DIR / source, target)

    (root / "search-index.js").write_text(
        multiline_search_index({"kuchiki": KUCHIKI_V1_69}), encoding="utf-8"
    )
    return root


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep the user's config file out of the tests."""
    monkeypatch.setenv("RUSTDOC_MAN_CONFIG", str(tmp_path / "no-config.toml"))
