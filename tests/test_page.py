from bizscout.enrich.page import parse_homepage

HOMEPAGE = """
<html>
<head>
  <title>Acme Coffee</title>
  <meta name="description" content="Roasters in Grand Rapids">
  <link rel="stylesheet" href="/site.css">
  <link rel="shortcut icon" href="/legacy.ico">
  <link rel="icon" href="/favicon.png">
  <meta property="og:image" content="https://cdn.acme.example/og.jpg">
</head>
<body>
  <h1>Fresh coffee</h1>
  <footer><p>1 Main St, Grand Rapids, MI</p><a href="https://facebook.com/acme">fb</a></footer>
</body>
</html>
"""


def test_parse_homepage_extracts_fields():
    page = parse_homepage(HOMEPAGE, "https://acme.example")

    assert page.title == "Acme Coffee"
    assert page.description == "Roasters in Grand Rapids"
    assert page.favicon_url == "https://acme.example/favicon.png"
    assert page.og_image_url == "https://cdn.acme.example/og.jpg"
    assert page.body_text.startswith("Fresh coffee")
    assert "1 Main St" in page.footer_html
    assert "facebook.com/acme" in page.footer_html
    assert "<footer>" not in page.footer_html


def test_shortcut_icon_is_the_fallback():
    html = '<html><head><link rel="shortcut icon" href="/legacy.ico"></head><body></body></html>'
    assert parse_homepage(html, "https://acme.example/").favicon_url == "https://acme.example/legacy.ico"


def test_missing_elements_default_to_empty():
    page = parse_homepage("<html><body>hi</body></html>", "https://acme.example")
    assert page.title == ""
    assert page.description == ""
    assert page.favicon_url is None
    assert page.og_image_url is None
    assert page.footer_html == ""
    assert page.body_text == "hi"
