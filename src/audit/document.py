"""Parsed page handle backed by BeautifulSoup."""

from __future__ import annotations

from dataclasses import dataclass

from bs4 import BeautifulSoup
from bs4.element import NavigableString, Tag

from src.audit.urls import parse_url


# Elements a browser moves into <head> when the document omits its <body> tag.
_HEAD_ELEMENTS = {"head", "title", "meta", "link", "base"}


@dataclass
class PageDocument:
    """A parsed HTML page bound to the URL it was fetched from."""

    url: str
    soup: BeautifulSoup

    def select(self, selector: str) -> list[Tag]:
        return self.soup.select(selector)

    def select_one(self, selector: str) -> Tag | None:
        return self.soup.select_one(selector)

    def resolve(self, href: str) -> str | None:
        """Resolve *href* relative to the page URL, ``None`` if it is malformed."""
        parts = parse_url(href.strip(), self.url)
        return parts.geturl() if parts is not None else None

    @property
    def body_text(self) -> str:
        """Concatenated text content of ``<body>``.

        ``html.parser`` only creates a body element when the markup has one, so
        for body-less documents the text of every top-level node outside the
        head is used instead.
        """
        if self.soup.body is not None:
            return self.soup.body.get_text()
        root = self.soup.html or self.soup
        parts = []
        for child in root.children:
            if isinstance(child, Tag):
                if child.name not in _HEAD_ELEMENTS:
                    parts.append(child.get_text())
            elif type(child) is NavigableString:
                parts.append(str(child))
        return "".join(parts)


def parse_html(html: str, base_url: str) -> PageDocument:
    return PageDocument(url=base_url, soup=BeautifulSoup(html, "html.parser"))
