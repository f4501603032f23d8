#!/usr/bin/env python3
"""
Static site generator for a directory tree of markdown articles.

Features:
- Mirrors the articles directory into the output directory
- A directory with README.md becomes <dir>/index.html rendered from the README
- A directory without README.md gets a generated listing of its children
- Every other markdown file becomes <name>.html next to it
- Breadcrumb navigation on every page; page layout comes from Jinja2 templates
- Files under public/ are copied verbatim into the output root

Usage:
  python build_static_site.py
  python build_static_site.py --input ./articles --output ./build --title "Notes"

Notes:
- Requires the "markdown" and "jinja2" packages: pip install markdown jinja2
- Exit status is 1 when any page failed to render or write
"""

from __future__ import annotations

import argparse
import logging
import os
import shutil
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple

from article_tree import (
    Article,
    ArticleNode,
    Category,
    Listing,
    NodeError,
    output_path,
    page_href,
    scan_articles,
)
from markdown_render import convert_markdown_to_html
from page_templates import (
    ARTICLE_TEMPLATE,
    LISTING_TEMPLATE,
    Link,
    TemplateEngine,
    TemplateError,
    listing_html,
)


logger = logging.getLogger(__name__)

HOME_LABEL = "Home"
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


# -- data structures --
@dataclass(frozen=True)
class RenderedPage:
    output_path: Path
    html: str


@dataclass(frozen=True)
class BuildConfig:
    input_root: Path
    output_root: Path
    templates_dir: Path
    public_dir: Path
    site_title: str = ""


# -- helpers: navigation --
def walk_nodes(
    node: ArticleNode, trail: Tuple[ArticleNode, ...] = ()
) -> Iterator[Tuple[ArticleNode, Tuple[ArticleNode, ...]]]:
    """Yield every node with the chain of directories above it (root first)."""
    yield node, trail
    if isinstance(node, (Category, Listing)):
        for child in node.children:
            yield from walk_nodes(child, trail + (node,))


def page_title(node: ArticleNode, trail: Tuple[ArticleNode, ...], site_title: str) -> str:
    if not trail:
        return site_title or HOME_LABEL
    return node.name


def breadcrumb_links(trail: Tuple[ArticleNode, ...], site_title: str) -> List[Link]:
    return [
        Link(label=page_title(ancestor, trail[:depth], site_title), href=page_href(ancestor), directory=True)
        for depth, ancestor in enumerate(trail)
    ]


def child_links(node: ArticleNode) -> List[Link]:
    if isinstance(node, Article):
        return []
    return [
        Link(label=child.name, href=page_href(child), directory=not isinstance(child, Article))
        for child in node.children
    ]


# -- rendering --
def render_node(
    node: ArticleNode,
    trail: Tuple[ArticleNode, ...],
    engine: TemplateEngine,
    site_title: str = "",
) -> RenderedPage:
    """Render one node to a full page. Raises TemplateError."""
    if isinstance(node, Listing):
        identifier = LISTING_TEMPLATE
        body = listing_html(child_links(node))
    elif isinstance(node, Category):
        identifier = ARTICLE_TEMPLATE
        body = convert_markdown_to_html(node.readme)
    else:
        identifier = ARTICLE_TEMPLATE
        body = convert_markdown_to_html(node.text)

    values = {
        "title": page_title(node, trail, site_title),
        "body": body,
        "links": breadcrumb_links(trail, site_title),
        "site_title": site_title,
    }
    return RenderedPage(output_path=output_path(node), html=engine.render(identifier, values))


def _render_all(
    root: ArticleNode, engine: TemplateEngine, site_title: str, failures: List[NodeError]
) -> Iterator[RenderedPage]:
    for node, trail in walk_nodes(root):
        try:
            page = render_node(node, trail, engine, site_title)
        except TemplateError as exc:
            logger.error("failed to render %s: %s", node.path.as_posix(), exc)
            failures.append(NodeError(node.path, exc))
            continue
        yield page


def render_site(
    root: ArticleNode, engine: TemplateEngine, site_title: str = ""
) -> Tuple[Dict[Path, str], List[NodeError]]:
    """Render every page in memory: ({output path: html}, failures)."""
    failures: List[NodeError] = []
    pages = {page.output_path: page.html for page in _render_all(root, engine, site_title, failures)}
    return pages, failures


# -- writing --
def write_page(output_root: Path, page: RenderedPage) -> Path:
    """Write one page; a failed write leaves no partial file behind."""
    target = output_root / page.output_path
    target.parent.mkdir(parents=True, exist_ok=True)
    tmp = target.with_name(f".{target.name}.tmp")
    try:
        with open(tmp, "w", encoding="utf-8", newline="") as fh:
            fh.write(page.html)
        os.replace(tmp, target)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise
    return target


def write_site(
    root: ArticleNode, output_root: Path, engine: TemplateEngine, site_title: str = ""
) -> List[NodeError]:
    """Render and write every page under output_root.

    Failing to create output_root raises OSError; any other failure is
    recorded against its path and the remaining pages are still written.
    """
    output_root.mkdir(parents=True, exist_ok=True)
    failures: List[NodeError] = []
    for page in _render_all(root, engine, site_title, failures):
        logger.info("writing %s", page.output_path.as_posix())
        try:
            write_page(output_root, page)
        except (OSError, UnicodeError) as exc:
            logger.error("failed to write %s: %s", page.output_path.as_posix(), exc)
            failures.append(NodeError(page.output_path, exc))
    return failures


def clean_output(output_root: Path) -> None:
    """Remove output_root and recreate it empty."""
    if output_root.exists():
        logger.info("cleaning %s", output_root)
        shutil.rmtree(output_root)
    output_root.mkdir(parents=True, exist_ok=True)


def copy_public(public_dir: Path, output_root: Path) -> List[NodeError]:
    """Copy every file under public_dir into output_root, preserving structure."""
    if not public_dir.is_dir():
        logger.info("no %s directory, nothing to copy", public_dir)
        return []

    failures: List[NodeError] = []
    for src in sorted(public_dir.rglob("*")):
        if src.is_dir():
            continue
        rel = src.relative_to(public_dir)
        dst = output_root / rel
        logger.info("copying %s to %s", src, dst)
        try:
            dst.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(src, dst)
        except OSError as exc:
            logger.error("failed to copy %s: %s", src, exc)
            failures.append(NodeError(rel, exc))
    return failures


def build(config: BuildConfig) -> List[NodeError]:
    """Run one full build. Returns every per-node failure, scan problems included."""
    engine = TemplateEngine(config.templates_dir)

    logger.info("scanning %s", config.input_root)
    root, problems = scan_articles(config.input_root)

    clean_output(config.output_root)
    failures = write_site(root, config.output_root, engine, site_title=config.site_title)
    failures += copy_public(config.public_dir, config.output_root)
    return problems + failures


# -- CLI --
def default_log_level() -> str:
    """SITE_LOG_LEVEL from the environment, or INFO when unset or unknown."""
    level = os.environ.get("SITE_LOG_LEVEL", "INFO").upper()
    return level if level in LOG_LEVELS else "INFO"


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate a static site from a folder of markdown articles.")
    parser.add_argument(
        "--input",
        type=Path,
        default=Path("./articles"),
        help="Folder of markdown articles (default: ./articles)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("./build"),
        help="Output folder for the generated site; wiped on every run (default: ./build)",
    )
    parser.add_argument(
        "--templates",
        type=Path,
        default=Path("./templates"),
        help="Folder of Jinja2 page templates (default: ./templates)",
    )
    parser.add_argument(
        "--public",
        type=Path,
        default=Path("./public"),
        help="Folder copied verbatim into the output root (default: ./public)",
    )
    parser.add_argument(
        "--title",
        type=str,
        default="",
        help="Optional site title: appended to page titles and used to label the home page and its breadcrumb (default: Home)",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=default_log_level(),
        help="Logging verbosity (default: $SITE_LOG_LEVEL or INFO)",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(levelname)s %(name)s: %(message)s")

    config = BuildConfig(
        input_root=args.input.expanduser().resolve(),
        output_root=args.output.resolve(),
        templates_dir=args.templates.resolve(),
        public_dir=args.public.resolve(),
        site_title=args.title,
    )

    if not config.input_root.exists() or not config.input_root.is_dir():
        raise SystemExit(f"Input directory not found: {config.input_root}")

    try:
        problems = build(config)
    except OSError as exc:
        raise SystemExit(f"Build aborted: {exc}") from exc

    if problems:
        logger.error("%d path(s) failed:", len(problems))
        for problem in problems:
            logger.error("  %s", problem)
        return 1

    logger.info("Site generated at: %s", config.output_root)
    return 0


if __name__ == "__main__":
    sys.exit(main())
