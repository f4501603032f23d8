from __future__ import annotations

from pathlib import Path
from typing import Dict

import pytest

from page_templates import TemplateEngine

ROOT = Path(__file__).resolve().parents[1]


def make_tree(root: Path, files: Dict[str, str]) -> Path:
    """Create files (relative path -> text) under root; a trailing "/" makes an empty dir."""
    root.mkdir(parents=True, exist_ok=True)
    for rel, text in files.items():
        target = root / rel
        if rel.endswith("/"):
            target.mkdir(parents=True, exist_ok=True)
            continue
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(text, encoding="utf-8")
    return root


@pytest.fixture
def engine() -> TemplateEngine:
    return TemplateEngine(ROOT / "templates")


@pytest.fixture
def example_articles(tmp_path: Path) -> Path:
    return make_tree(
        tmp_path / "articles",
        {
            "category-0/README.md": "# Category zero\n\nIntro text.\n",
            "category-0/some_file.md": "# Some file\n\nBody *text*.\n",
            "category-1/some_other_file.md": "Other body.\n",
        },
    )
