import pytest

from scouter.crawler.link_extractor import (
    group_links,
    has_skipped_extension,
    is_image_filename,
    normalize_url,
    parse_page,
    unwrap_redirect,
)
from scouter.crawler.models import Link


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("HTTPS://Example.COM/Path?q=A#frag", "https://example.com/Path?q=A"),
        ("http://example.com", "http://example.com"),
        ("http://Example.com:8080/a#x", "http://example.com:8080/a"),
        ("  https://example.com/a  ", "https://example.com/a"),
    ],
)
def test_normalize_url(raw, expected):
    assert normalize_url(raw) == expected


@pytest.mark.parametrize("raw", ["", "not a url", "/relative/path", "http://[::1", "http://host:99999/"])
def test_normalize_url_malformed(raw):
    assert normalize_url(raw) is None


def test_unwrap_google_redirect():
    wrapped = "https://www.google.com/url?q=https://docs.python.org/3/&sa=U&ved=x"
    assert unwrap_redirect(wrapped) == "https://docs.python.org/3/"
    assert unwrap_redirect("https://www.google.com/search?q=python") == "https://www.google.com/search?q=python"
    assert unwrap_redirect("https://example.com/url?q=https://a.test/") == "https://example.com/url?q=https://a.test/"


@pytest.mark.parametrize(
    "text,expected",
    [("photo.jpg", True), ("IMG_001.PNG", True), ("clip.mov", True), ("Read more", False), ("v1.2", False), (".png", False)],
)
def test_is_image_filename(text, expected):
    assert is_image_filename(text) is expected


def test_has_skipped_extension():
    assert has_skipped_extension("https://a.test/report.PDF")
    assert has_skipped_extension("https://a.test/pic.jpg?size=2")
    assert not has_skipped_extension("https://a.test/article.html")
    assert not has_skipped_extension("https://a.test/docs/")


def test_parse_page_extracts_title_text_and_links():
    html = """
    <html><head><title> Actors </title><style>.x{}</style></head>
    <body>
      <script>var hidden = 1;</script>
      <p>Swift actors serialize access.</p>
      <a href="/guide#intro">Guide</a>
      <a href="https://other.test/">Other <b>site</b></a>
      <a href="mailto:me@a.test">Mail</a>
      <a href="javascript:void(0)">JS</a>
      <a href="/img"><img src="x.png" alt="diagram.png"></a>
      <a href="https://www.google.com/url?q=https://target.test/page">Wrapped</a>
    </body></html>
    """
    page = parse_page("https://a.test/docs/", html)
    assert page.title == "Actors"
    assert "Swift actors serialize access." in page.text
    assert "hidden" not in page.text
    assert [link.url for link in page.links] == [
        "https://a.test/guide#intro",
        "https://other.test/",
        "https://a.test/img",
        "https://target.test/page",
    ]
    assert page.links[1].text == "Other site"
    assert page.links[2].text == "diagram.png"


def test_group_links_collects_texts_per_canonical_url():
    links = [
        Link("https://A.test/x#one", "First"),
        Link("https://a.test/x#two", "Second"),
        Link("https://a.test/x", "First"),
        Link("https://a.test/y", "   "),
        Link("ftp://a.test/file", "FTP"),
        Link("not a url", "broken"),
    ]
    grouped = group_links(links)
    assert grouped == {"https://a.test/x": ["First", "Second"], "https://a.test/y": []}
