# scouter/crawler/link_extractor.py
"""
Link extraction and URL canonicalization utilities for Scouter.
"""
from __future__ import annotations

import posixpath
from typing import Dict, Iterable, List, Optional
from urllib.parse import parse_qs, urljoin, urlsplit, urlunsplit

from bs4 import BeautifulSoup
from bs4.element import Tag

from scouter.crawler.models import FetchedPage, Link

__all__ = [
    "IMAGE_EXTENSIONS",
    "SKIP_EXTENSIONS",
    "normalize_url",
    "unwrap_redirect",
    "parse_page",
    "group_links",
    "is_image_filename",
    "has_skipped_extension",
]

IMAGE_EXTENSIONS: frozenset[str] = frozenset(
    ("jpg", "jpeg", "png", "gif", "webp", "svg", "mp4", "avi", "mov")
)

# Targets that never yield readable HTML
SKIP_EXTENSIONS: frozenset[str] = frozenset((
    ".jpg", ".jpeg", ".png", ".gif", ".webp", ".svg", ".ico",
    ".pdf", ".zip", ".rar", ".7z", ".gz", ".tar",
    ".mp4", ".mp3", ".wav", ".webm", ".avi", ".mov",
    ".css", ".js", ".woff", ".woff2", ".ttf",
))

_IGNORED_PREFIXES = ("mailto:", "javascript:", "tel:", "data:")


def normalize_url(url: str) -> Optional[str]:
    """
    Canonical form of *url*: lower-case scheme and host, no fragment.

    Returns None for URLs without a scheme or host, or that urllib rejects.
    Path and query are kept as-is since they matter for identity.
    """
    try:
        parts = urlsplit(url.strip())
        host = parts.hostname
        port = parts.port
    except (ValueError, AttributeError):
        return None
    if not parts.scheme or not host:
        return None
    netloc = host if ":" not in host else f"[{host}]"
    if port is not None:
        netloc = f"{netloc}:{port}"
    if parts.username or parts.password:
        userinfo = parts.username or ""
        if parts.password:
            userinfo = f"{userinfo}:{parts.password}"
        netloc = f"{userinfo}@{netloc}"
    return urlunsplit((parts.scheme.lower(), netloc, parts.path, parts.query, ""))


def unwrap_redirect(url: str) -> str:
    """Resolve search-engine redirect links (``https://www.google.com/url?q=...``)."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return url
    host = (parts.hostname or "").lower()
    if "google" not in host or parts.path != "/url":
        return url
    params = parse_qs(parts.query)
    for key in ("q", "url"):
        target = params.get(key, [""])[0]
        if target.startswith(("http://", "https://")):
            return target
    return url


def is_image_filename(text: str) -> bool:
    """True for anchor texts like ``photo.JPG`` that are just image names."""
    head, sep, ext = text.strip().rpartition(".")
    return bool(sep and head) and ext.lower() in IMAGE_EXTENSIONS


def has_skipped_extension(url: str) -> bool:
    try:
        path = urlsplit(url).path
    except ValueError:
        return False
    return posixpath.splitext(path)[1].lower() in SKIP_EXTENSIONS


def parse_page(url: str, html: str) -> FetchedPage:
    """
    Parse *html* fetched from *url* into title, visible text and outbound links.

    Links are absolute; mailto:, javascript: and similar are dropped.
    """
    soup = BeautifulSoup(html, "html.parser")

    title_tag = soup.find("title")
    title = title_tag.get_text(strip=True) if title_tag else ""

    links: List[Link] = []
    for tag in soup.find_all("a", href=True):
        if not isinstance(tag, Tag):
            continue
        href_val = tag.get("href")
        if not isinstance(href_val, str):
            continue
        raw = href_val.strip()
        if not raw or raw.lower().startswith(_IGNORED_PREFIXES):
            continue
        absolute = unwrap_redirect(urljoin(url, raw))
        text = tag.get_text(" ", strip=True)
        if not text:
            img = tag.find("img", alt=True)
            if isinstance(img, Tag) and isinstance(img.get("alt"), str):
                text = img["alt"].strip()  # type: ignore[union-attr]
        links.append(Link(url=absolute, text=text))

    # Visible text (skip <script>, <style>, etc.)
    for element in soup(["script", "style", "noscript", "template"]):
        element.decompose()
    text = " ".join(soup.stripped_strings)

    return FetchedPage(url=url, text=text, links=links, title=title)


def group_links(links: Iterable[Link]) -> Dict[str, List[str]]:
    """
    Group anchor texts by canonical URL.

    Links that cannot be canonicalized or are not http(s) are dropped; empty
    and repeated texts are not collected.
    """
    grouped: Dict[str, List[str]] = {}
    for link in links:
        canonical = normalize_url(unwrap_redirect(link.url))
        if canonical is None or not canonical.startswith(("http://", "https://")):
            continue
        texts = grouped.setdefault(canonical, [])
        text = link.text.strip()
        if text and text not in texts:
            texts.append(text)
    return grouped
