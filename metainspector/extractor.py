"""
Meta tag extraction for MetaInspector.
Pulls the fixed set of SEO-relevant tags out of a raw HTML document.
"""

import re
from dataclasses import dataclass
from typing import Optional

from bs4 import BeautifulSoup

from .logging_setup import get_logger

logger = get_logger("extractor")

CHARSET_PATTERN = re.compile(r"charset\s*=\s*[\"']?([\w:.-]+)", re.IGNORECASE)


@dataclass
class ExtractedMeta:
    """Raw tag values found in a page. None means absent or empty."""
    title: Optional[str] = None
    description: Optional[str] = None
    canonical: Optional[str] = None
    robots: Optional[str] = None
    og_title: Optional[str] = None
    og_description: Optional[str] = None
    og_image: Optional[str] = None
    twitter_card: Optional[str] = None
    viewport: Optional[str] = None
    charset: Optional[str] = None
    language: Optional[str] = None


def _clean(value) -> Optional[str]:
    """Collapse whitespace; empty strings become None."""
    if value is None:
        return None
    if isinstance(value, list):  # multi-valued attributes such as rel
        value = " ".join(value)
    value = re.sub(r"\s+", " ", str(value)).strip()
    return value or None


def _attr_matcher(expected: str):
    """Case-insensitive exact match for an attribute value."""
    expected = expected.lower()

    def match(value) -> bool:
        return value is not None and value.strip().lower() == expected

    return match


def _meta_content(soup: BeautifulSoup, attr: str, value: str) -> Optional[str]:
    tag = soup.find("meta", attrs={attr: _attr_matcher(value)})
    if tag is None:
        return None
    return _clean(tag.get("content"))


def _extract_title(soup: BeautifulSoup) -> Optional[str]:
    tag = soup.find("title")
    if tag is None:
        return None
    return _clean(tag.get_text())


def _extract_canonical(soup: BeautifulSoup) -> Optional[str]:
    for link in soup.find_all("link", href=True):
        rel = link.get("rel") or []
        if isinstance(rel, str):
            rel = rel.split()
        if any(r.lower() == "canonical" for r in rel):
            return _clean(link.get("href"))
    return None


def _extract_charset(soup: BeautifulSoup) -> Optional[str]:
    tag = soup.find("meta", charset=True)
    if tag is not None:
        return _clean(tag.get("charset"))

    tag = soup.find("meta", attrs={"http-equiv": _attr_matcher("content-type")})
    if tag is not None:
        match = CHARSET_PATTERN.search(tag.get("content") or "")
        if match:
            return match.group(1)
    return None


def _extract_language(soup: BeautifulSoup) -> Optional[str]:
    html_tag = soup.find("html")
    if html_tag is None:
        return None
    return _clean(html_tag.get("lang"))


def extract_meta(html: Optional[str]) -> ExtractedMeta:
    """
    Parse an HTML document and return the SEO tags it declares.

    Never raises on malformed markup: html.parser recovers what it can
    and anything it cannot find comes back as None.
    """
    if not html:
        return ExtractedMeta()

    soup = BeautifulSoup(html, "html.parser")

    meta = ExtractedMeta(
        title=_extract_title(soup),
        description=_meta_content(soup, "name", "description"),
        canonical=_extract_canonical(soup),
        robots=_meta_content(soup, "name", "robots"),
        og_title=_meta_content(soup, "property", "og:title"),
        og_description=_meta_content(soup, "property", "og:description"),
        og_image=_meta_content(soup, "property", "og:image"),
        twitter_card=_meta_content(soup, "name", "twitter:card"),
        viewport=_meta_content(soup, "name", "viewport"),
        charset=_extract_charset(soup),
        language=_extract_language(soup),
    )
    logger.debug(f"Extracted meta: {meta}")
    return meta
