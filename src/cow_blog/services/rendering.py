"""Markdown rendering for post bodies and comments."""

from __future__ import annotations

import re
import xml.etree.ElementTree as etree

import markdown
from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor

POST_EXTENSIONS = ["extra", "sane_lists", "smarty"]
COMMENT_EXTENSIONS = ["fenced_code", "nl2br", "sane_lists"]

_SAFE_URL = re.compile(r"^(https?:|mailto:|/|#|[^:]*$)", re.IGNORECASE)


class _DropUnsafeUrls(Treeprocessor):
    """Strip href/src attributes whose scheme is not http(s) or mailto."""

    def run(self, root: etree.Element) -> None:
        for element in root.iter():
            for attr in ("href", "src"):
                value = element.get(attr)
                if value is not None and not _SAFE_URL.match(value.strip()):
                    del element.attrib[attr]


class CommentSafety(Extension):
    """Treat raw HTML in comments as text and drop script-capable links."""

    def extendMarkdown(self, md: markdown.Markdown) -> None:
        md.preprocessors.deregister("html_block", strict=False)
        md.inlinePatterns.deregister("html", strict=False)
        md.treeprocessors.register(_DropUnsafeUrls(md), "drop_unsafe_urls", 0)


def markdown_to_html(text: str | None, comment: bool = False) -> str:
    """Render markdown to HTML.

    Post bodies come from the admin and may embed raw HTML. Comments come
    from anyone, so their raw HTML is escaped and unsafe link schemes are
    removed.
    """
    if not text:
        return ""
    if comment:
        return markdown.markdown(text, extensions=[*COMMENT_EXTENSIONS, CommentSafety()])
    return markdown.markdown(text, extensions=POST_EXTENSIONS)
