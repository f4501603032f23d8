"""
Scan an articles directory into an immutable tree of pages.

Directory rules:
- A directory holding a file named exactly README.md is a Category; the README
  is the directory's own page and every other entry becomes a child
- A directory without README.md is a Listing of its children
- Markdown files (.md, .markdown) are Articles; other files are ignored
- Hidden entries (leading ".") are skipped
- Children are ordered by entry name so repeated runs see the same tree
- Entries with non-UTF-8 names, and entries whose page path is already taken
  (index.md, or post.md next to post.markdown), are skipped and reported
"""

from __future__ import annotations

import errno
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple, Union


logger = logging.getLogger(__name__)

README_NAME = "README.md"


# -- data structures --
@dataclass(frozen=True)
class Article:
    """A single markdown file rendered as its own page."""

    path: Path
    name: str
    text: str


@dataclass(frozen=True)
class Category:
    """A directory whose page comes from its README.md."""

    path: Path
    name: str
    readme: str
    children: Tuple["ArticleNode", ...] = ()


@dataclass(frozen=True)
class Listing:
    """A directory without README.md, rendered as an index of its children."""

    path: Path
    name: str
    children: Tuple["ArticleNode", ...] = ()


ArticleNode = Union[Category, Listing, Article]


@dataclass(frozen=True)
class NodeError:
    """A failure tied to one input or output path."""

    path: Path
    error: BaseException

    def __str__(self) -> str:
        return f"{self.path.as_posix()}: {self.error}"


class OutputPathConflict(Exception):
    """Two input entries would be written to the same output page."""


# -- helpers: paths --
def is_markdown_file(path: Path) -> bool:
    return path.suffix.lower() in {".md", ".markdown"}


def output_path(node: ArticleNode) -> Path:
    """Map a node to its page path relative to the output root."""
    if isinstance(node, Article):
        return node.path.with_suffix(".html")
    return node.path / "index.html"


def page_href(node: ArticleNode) -> str:
    """Site-absolute URL of the node's page."""
    return "/" + output_path(node).as_posix()


# -- scanning --
def _list_entries(directory: Path) -> List[os.DirEntry]:
    with os.scandir(directory) as it:
        return sorted(it, key=lambda entry: entry.name)


def _read_text(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def _is_utf8_name(name: str) -> bool:
    # undecodable bytes come back from scandir as lone surrogates
    try:
        name.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def _printable_name(name: str) -> str:
    return name.encode("utf-8", "surrogateescape").decode("utf-8", "replace")


class _Scanner:
    def __init__(self, input_root: Path):
        self.input_root = input_root
        self.problems: List[NodeError] = []
        # real paths of the directories currently being scanned
        self._active: Set[str] = set()

    def scan(self) -> ArticleNode:
        entries = _list_entries(self.input_root)
        self._active.add(os.path.realpath(self.input_root))
        return self._build_dir(Path("."), self.input_root.resolve().name, entries)

    def _report(self, rel: Path, exc: BaseException) -> None:
        logger.warning("skipping %s: %s", rel.as_posix(), exc)
        self.problems.append(NodeError(rel, exc))

    def _build_dir(self, rel: Path, name: str, entries: List[os.DirEntry]) -> ArticleNode:
        logger.debug("parsing dir:  %s", rel.as_posix())
        readme: Optional[str] = None
        children: List[ArticleNode] = []

        for entry in entries:
            if entry.name.startswith("."):
                continue
            if not _is_utf8_name(entry.name):
                self._report(
                    rel / _printable_name(entry.name),
                    UnicodeError(f"invalid UTF-8 filename: {entry.name!r}"),
                )
                continue
            child_rel = rel / entry.name
            try:
                if entry.name == README_NAME and not entry.is_dir():
                    readme = _read_text(Path(entry.path))
                    continue
                child = self._build_entry(entry, child_rel)
            except (OSError, UnicodeDecodeError) as exc:
                self._report(child_rel, exc)
                continue
            if child is not None:
                children.append(child)

        children = self._drop_conflicts(rel, children)
        if readme is not None:
            return Category(path=rel, name=name, readme=readme, children=tuple(children))
        return Listing(path=rel, name=name, children=tuple(children))

    def _drop_conflicts(self, rel: Path, children: List[ArticleNode]) -> List[ArticleNode]:
        """Keep the first child (in name order) for each output path.

        The directory's own index.html is claimed before any child, so an
        index.md article never replaces the directory page.
        """
        owner = "the root directory page" if rel == Path(".") else f"the {rel.as_posix()} directory page"
        claimed: Dict[Path, str] = {rel / "index.html": owner}
        kept: List[ArticleNode] = []
        for child in children:
            target = output_path(child)
            if target in claimed:
                self._report(
                    child.path,
                    OutputPathConflict(f"{target.as_posix()} is already written by {claimed[target]}"),
                )
                continue
            claimed[target] = child.path.as_posix()
            kept.append(child)
        return kept

    def _build_entry(self, entry: os.DirEntry, rel: Path) -> Optional[ArticleNode]:
        if entry.is_dir():
            real = os.path.realpath(entry.path)
            if real in self._active:
                raise OSError(errno.ELOOP, f"directory cycle back to {real}")
            entries = _list_entries(Path(entry.path))
            self._active.add(real)
            try:
                return self._build_dir(rel, entry.name, entries)
            finally:
                self._active.discard(real)

        if not is_markdown_file(Path(entry.name)):
            return None

        logger.debug("parsing file: %s", rel.as_posix())
        # a dangling symlink fails here with FileNotFoundError
        text = _read_text(Path(entry.path))
        return Article(path=rel, name=Path(entry.name).stem, text=text)


def scan_articles(input_root: Path) -> Tuple[ArticleNode, List[NodeError]]:
    """Build the node tree for input_root.

    Returns (root_node, problems). Entries that cannot be read are left out of
    the tree and reported in problems; an unreadable root raises OSError.
    """
    scanner = _Scanner(Path(input_root))
    root = scanner.scan()
    return root, scanner.problems
