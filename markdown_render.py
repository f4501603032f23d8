"""
Markdown to HTML conversion for article pages.

Notes:
- Requires the "markdown" package: pip install markdown
"""

from __future__ import annotations


# -- markdown conversion (simple) --
try:
    import markdown  # type: ignore
except ImportError as exc:  # minimal helpful error
    raise SystemExit(
        "Missing dependency: markdown. Install with 'pip install markdown'"
    ) from exc


MARKDOWN_EXTENSIONS = ["fenced_code", "tables"]


def convert_markdown_to_html(md_text: str) -> str:
    """Convert markdown to an HTML fragment.

    A fresh converter is built per call so output never depends on earlier
    documents. Malformed markup is rendered literally rather than rejected.
    """
    return markdown.markdown(md_text, extensions=MARKDOWN_EXTENSIONS)
