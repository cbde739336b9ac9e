import pytest

from bizscout.crawler.links import canonical_url, extract_links, hostname, is_blacklisted, is_same_domain


def test_extract_links_resolves_filters_and_dedups():
    html = """
    <html><body>
      <a href="/about">About</a>
      <a href="https://other.example/x">Other</a>
      <a href="/about">About again</a>
      <a href="mailto:hi@acme.example">Mail</a>
      <a href="javascript:void(0)">JS</a>
      <a href="">empty</a>
      <a href="http://[broken">bad</a>
      <a>no href</a>
      <a href="page2.html">Relative</a>
    </body></html>
    """
    links = extract_links(html, "https://acme.example/dir/index.html")
    assert links == [
        "https://acme.example/about",
        "https://other.example/x",
        "https://acme.example/dir/page2.html",
    ]


def test_extract_links_empty_html():
    assert extract_links("", "https://acme.example") == []


def test_hostname_and_same_domain():
    assert hostname("https://Acme.Example:8443/x") == "acme.example"
    assert hostname("not a url") is None
    assert is_same_domain("https://acme.example/a", "https://acme.example/b")
    assert not is_same_domain("https://www.acme.example/a", "https://acme.example/b")


def test_is_blacklisted_is_case_insensitive_substring():
    assert is_blacklisted("https://dir.example/WCPages/foo", ["wcpages"])
    assert not is_blacklisted("https://dir.example/pages/foo", ["wcpages"])
    assert not is_blacklisted("https://dir.example/pages/foo", [])


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("https://DIR.Example/a", "https://dir.example/a"),
        ("HTTPS://dir.example", "https://dir.example/"),
        ("http://dir.example:80/x?q=1", "http://dir.example/x?q=1"),
        ("https://dir.example:443/", "https://dir.example/"),
        ("https://dir.example:8443/", "https://dir.example:8443/"),
        ("https://dir.example/Case/Path", "https://dir.example/Case/Path"),
    ],
)
def test_canonical_url(raw, expected):
    assert canonical_url(raw) == expected


def test_canonical_url_rejects_malformed_netloc():
    with pytest.raises(ValueError):
        canonical_url("http://[broken")


def test_extract_links_dedups_equivalent_urls():
    html = """
      <a href="https://DIR.example/a">1</a>
      <a href="https://dir.example/a">2</a>
      <a href="https://dir.example">3</a>
      <a href="https://dir.example/">4</a>
      <a href="https://dir.example:443/a">5</a>
    """
    assert extract_links(html, "https://dir.example/search") == [
        "https://dir.example/a",
        "https://dir.example/",
    ]
