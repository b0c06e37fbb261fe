from __future__ import annotations

import re
from typing import Optional

from bs4 import BeautifulSoup
from loguru import logger

BLOCK_TAGS = [
    "p", "div", "li", "ul", "ol", "tr", "table", "blockquote", "pre",
    "section", "article", "header", "footer",
    "h1", "h2", "h3", "h4", "h5", "h6",
]
_DROP_TAGS = ["script", "style", "head", "title"]

# marks a line boundary; source newlines are ordinary whitespace in HTML
_BREAK = "\x00"
_BLANK_RUN_RE = re.compile(r"\n{3,}")
# a "<" that does not open a tag closed by ">" is text, not markup
_STRAY_LT_RE = re.compile(r"<(?![A-Za-z/!?][^<>]*>)")


def _collapse(text: str) -> str:
    # one space inside a line, at most one blank line between paragraphs
    lines = [" ".join(segment.split()) for segment in text.split(_BREAK)]
    return _BLANK_RUN_RE.sub("\n\n", "\n".join(lines)).strip()


def extract_text_from_html(html: Optional[str]) -> str:
    """
    HTML -> plain text approximation.

    Block-level tags become line boundaries, all other markup is dropped and
    entities are decoded. Broken markup is tolerated: a stray ``<`` stays in
    the text.
    """
    if not isinstance(html, str) or not html.strip():
        return ""
    html = html.replace(_BREAK, "")

    try:
        soup = BeautifulSoup(_STRAY_LT_RE.sub("&lt;", html), "html.parser")
        for tag in soup.find_all(_DROP_TAGS):
            tag.extract()
        for br in soup.find_all("br"):
            br.replace_with(_BREAK)
        for tag in soup.find_all(BLOCK_TAGS):
            tag.insert_before(_BREAK)
            tag.insert_after(_BREAK)
        text = soup.get_text()
    except Exception as e:
        logger.debug(f"HTML parse failed, falling back to raw text: {e}")
        text = html

    return _collapse(text)
