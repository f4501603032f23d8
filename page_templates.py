"""
Page templates: fill Jinja2 templates from a template directory.

A template identifier "x" is loaded from "<templates_dir>/x.html". Pages are
rendered with the values title, body, links and site_title; a template that
asks for any other value fails instead of rendering blank.
"""

from __future__ import annotations

import html
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Sequence

from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    TemplateError as JinjaTemplateError,
    TemplateNotFound,
    TemplateSyntaxError,
    UndefinedError,
    select_autoescape,
)
from markupsafe import Markup


logger = logging.getLogger(__name__)

ARTICLE_TEMPLATE = "article"
LISTING_TEMPLATE = "listing"


class TemplateError(Exception):
    """A page template is missing, broken, or asks for an unknown value."""


@dataclass(frozen=True)
class Link:
    label: str
    href: str
    directory: bool = False


def listing_html(links: Sequence[Link]) -> str:
    """Render the body of a listing page: one list item per child."""
    items = []
    for link in links:
        css_class = "directory-listing" if link.directory else "file-listing"
        items.append(
            f'<li class="{css_class}"><a href="{html.escape(link.href)}">{html.escape(link.label)}</a></li>'
        )
    return f'<ul class="listing">{"".join(items)}</ul>'


class TemplateEngine:
    """Loads page templates from a directory and renders them."""

    def __init__(self, templates_dir: Path):
        self.templates_dir = Path(templates_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=select_autoescape(["html"]),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
        )

    def render(self, identifier: str, values: Mapping[str, Any]) -> str:
        """Render template `identifier` with `values`.

        The "body" value is trusted HTML and is inserted unescaped; every other
        string is escaped by the template.
        """
        context = dict(values)
        if "body" in context:
            context["body"] = Markup(context["body"])

        logger.debug("rendering template %s", identifier)
        try:
            template = self.env.get_template(f"{identifier}.html")
            return template.render(context)
        except TemplateNotFound as exc:
            raise TemplateError(
                f"no template for '{identifier}' in {self.templates_dir} (missing {exc.name})"
            ) from exc
        except UndefinedError as exc:
            raise TemplateError(f"template '{identifier}' references a missing value: {exc.message}") from exc
        except TemplateSyntaxError as exc:
            raise TemplateError(
                f"template syntax error in {exc.filename or identifier} at line {exc.lineno}: {exc.message}"
            ) from exc
        except JinjaTemplateError as exc:
            raise TemplateError(f"template '{identifier}' failed: {exc}") from exc
        except (ArithmeticError, LookupError, TypeError, ValueError) as exc:
            # raised by expressions and filters inside the template
            raise TemplateError(f"template '{identifier}' failed while rendering: {exc!r}") from exc
