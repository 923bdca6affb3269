"""Text processing utilities: HTML stripping and word counting."""

import re
from html.parser import HTMLParser

_BLOCK_TAGS = {
    "address",
    "blockquote",
    "br",
    "div",
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    "hr",
    "li",
    "ol",
    "p",
    "pre",
    "table",
    "td",
    "th",
    "tr",
    "ul",
}


class _TextExtractor(HTMLParser):
    """Minimal HTML to text extractor."""

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self._skip_depth = 0
        self.parts: list[str] = []

    def handle_starttag(self, tag, attrs):
        if tag in {"script", "style", "noscript"}:
            self._skip_depth += 1
        elif tag in _BLOCK_TAGS:
            self.parts.append(" ")

    def handle_endtag(self, tag):
        if tag in {"script", "style", "noscript"} and self._skip_depth > 0:
            self._skip_depth -= 1
        elif tag in _BLOCK_TAGS:
            self.parts.append(" ")

    def handle_data(self, data):
        if self._skip_depth == 0:
            self.parts.append(data)


def strip_html(html: str) -> str:
    """Return the visible text of an HTML fragment with whitespace collapsed."""
    if not html or not isinstance(html, str):
        return ""
    if "<" not in html and "&" not in html:
        return normalize_whitespace(html)
    parser = _TextExtractor()
    parser.feed(html)
    parser.close()
    return normalize_whitespace("".join(parser.parts))


def normalize_whitespace(text: str) -> str:
    """Collapse runs of whitespace into single spaces."""
    if not text:
        return ""
    return re.sub(r"\s+", " ", text).strip()


def count_words(text: str) -> int:
    """Count whitespace-separated words in plain text."""
    if not text:
        return 0
    return len(text.split())
