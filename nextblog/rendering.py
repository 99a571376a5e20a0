"""
Markdown rendering with a table of contents.
"""
import html
from dataclasses import dataclass, field
from typing import List

import markdown
from markdown.extensions.toc import slugify_unicode

MARKDOWN_EXTENSIONS = ["extra", "toc", "sane_lists"]


@dataclass
class TocEntry:
    level: int
    text: str
    anchor: str
    children: List["TocEntry"] = field(default_factory=list)


@dataclass
class RenderedMarkdown:
    html: str
    toc: List[TocEntry]

    def flat_toc(self):
        """Every TOC entry in document order."""
        entries = []

        def walk(items):
            for item in items:
                entries.append(item)
                walk(item.children)

        walk(self.toc)
        return entries


def _convert_tokens(tokens):
    return [
        TocEntry(
            level=token["level"],
            text=html.unescape(token["name"]),
            anchor=token["id"],
            children=_convert_tokens(token.get("children", [])),
        )
        for token in tokens
    ]


def render_markdown(text):
    """Render Markdown to HTML and collect its headings."""
    md = markdown.Markdown(
        extensions=MARKDOWN_EXTENSIONS,
        extension_configs={"toc": {"slugify": slugify_unicode}},
    )
    body = md.convert(text or "")
    return RenderedMarkdown(html=body, toc=_convert_tokens(md.toc_tokens))
