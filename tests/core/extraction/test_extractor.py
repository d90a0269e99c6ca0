"""Tests for ContentExtractor strategies.

All HTTP traffic goes through an httpx.MockTransport; nothing touches the
network.
"""

import httpx
import pytest
from bs4 import BeautifulSoup

from summarizer.core.errors import FetchError, NetworkError
from summarizer.core.extraction.extractor import ContentExtractor, extract_main_html, extract_title
from summarizer.core.extraction.html_text import clean_markdown, count_words

LONG_TEXT = " ".join(["word"] * 150)

ARTICLE_HTML = f"""
<html>
<head>
  <title>Page Title</title>
  <meta property="og:title" content="OG Title">
</head>
<body>
  <nav>Site menu</nav>
  <article><p>{LONG_TEXT}</p></article>
  <footer>Copyright</footer>
</body>
</html>
"""

TWEET_MARKDOWN = """Title: Someone on X

# Someone on X

Great read https://example.com/article today



Posted 2h ago
"""


class Recorder:
    """MockTransport handler that dispatches on host and records requests."""

    def __init__(self, routes):
        self.routes = routes
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get(request.url.host)
        if handler is None:
            return httpx.Response(404, text="not found")
        return handler(request)

    @property
    def hosts(self):
        return [request.url.host for request in self.requests]


def make_extractor(recorder):
    client = httpx.AsyncClient(transport=httpx.MockTransport(recorder))
    return ContentExtractor(client=client)


class TestGenericHtml:
    """Tests for the generic HTML strategy."""

    @pytest.mark.asyncio
    async def test_extracts_article_container(self):
        recorder = Recorder({"example.com": lambda r: httpx.Response(200, text=ARTICLE_HTML)})
        extractor = make_extractor(recorder)

        result = await extractor.extract_from_url("https://example.com/post")

        assert result.title == "OG Title"
        assert result.url == "https://example.com/post"
        assert result.word_count == 150
        assert result.word_count == count_words(result.content)
        assert "Site menu" not in result.content
        assert "Copyright" not in result.content

    @pytest.mark.asyncio
    async def test_sends_browser_headers(self):
        recorder = Recorder({"example.com": lambda r: httpx.Response(200, text=ARTICLE_HTML)})
        extractor = make_extractor(recorder)

        await extractor.extract_from_url("https://example.com/post")

        headers = recorder.requests[0].headers
        assert headers["User-Agent"] == extractor.user_agent
        assert headers["Accept"].startswith("text/html")
        assert "Accept-Language" in headers

    @pytest.mark.asyncio
    async def test_falls_back_to_body_without_chrome(self):
        html = """
        <html><head><title>Small Page</title></head>
        <body>
          <nav>Menu</nav>
          <article><p>Too short to count</p></article>
          <div class="sidebar">Sidebar links</div>
          <div><p>Body paragraph text</p></div>
        </body></html>
        """
        recorder = Recorder({"example.com": lambda r: httpx.Response(200, text=html)})
        extractor = make_extractor(recorder)

        result = await extractor.extract_from_url("https://example.com/small")

        assert result.title == "Small Page"
        assert "Body paragraph text" in result.content
        assert "Too short to count" in result.content
        assert "Menu" not in result.content
        assert "Sidebar links" not in result.content

    @pytest.mark.asyncio
    async def test_non_2xx_raises_fetch_error(self):
        recorder = Recorder({"example.com": lambda r: httpx.Response(404, text="missing")})
        extractor = make_extractor(recorder)

        with pytest.raises(FetchError) as exc_info:
            await extractor.extract_from_url("https://example.com/missing")

        assert exc_info.value.status_code == 404
        assert "404" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_transport_failure_raises_network_error(self):
        def fail(request):
            raise httpx.ConnectError("connection refused", request=request)

        extractor = make_extractor(Recorder({"example.com": fail}))

        with pytest.raises(NetworkError) as exc_info:
            await extractor.extract_from_url("https://example.com/post")

        assert exc_info.value.url == "https://example.com/post"
        assert isinstance(exc_info.value.original_error, httpx.ConnectError)


class TestTitleAndContainer:
    """Tests for extract_title() and extract_main_html()."""

    def test_empty_og_title_falls_through(self):
        soup = BeautifulSoup(
            '<html><head><meta property="og:title" content=" "><title>Real</title></head></html>',
            "lxml",
        )
        assert extract_title(soup) == "Real"

    def test_h1_then_untitled(self):
        assert extract_title(BeautifulSoup("<body><h1>Heading</h1></body>", "lxml")) == "Heading"
        assert extract_title(BeautifulSoup("<body><p>x</p></body>", "lxml")) == "Untitled"

    def test_first_substantial_selector_wins(self):
        soup = BeautifulSoup(
            f'<body><main><p>{LONG_TEXT}</p></main><div class="content"><p>{LONG_TEXT} other</p></div></body>',
            "lxml",
        )
        assert "other" not in extract_main_html(soup)


class TestShortener:
    """Tests for short-link resolution."""

    @pytest.mark.asyncio
    async def test_follows_redirect_to_target(self):
        recorder = Recorder(
            {
                "t.co": lambda r: httpx.Response(301, headers={"Location": "https://example.com/post"}),
                "example.com": lambda r: httpx.Response(200, text=ARTICLE_HTML),
            }
        )
        extractor = make_extractor(recorder)

        result = await extractor.extract_from_url("https://t.co/abc")

        assert result.title == "OG Title"
        assert recorder.requests[0].method == "HEAD"
        assert recorder.requests[-1].method == "GET"
        assert str(recorder.requests[-1].url) == "https://example.com/post"

    @pytest.mark.asyncio
    async def test_unresolvable_shortener_is_fetched_as_is(self):
        attempts = {"count": 0}

        def flaky(request):
            attempts["count"] += 1
            if attempts["count"] <= 2:
                raise httpx.ConnectError("reset", request=request)
            return httpx.Response(200, text=ARTICLE_HTML)

        recorder = Recorder({"bit.ly": flaky})
        extractor = make_extractor(recorder)

        result = await extractor.extract_from_url("https://bit.ly/xyz")

        assert [r.method for r in recorder.requests] == ["HEAD", "GET", "GET"]
        assert result.title == "OG Title"
        assert result.url == "https://bit.ly/xyz"

    @pytest.mark.asyncio
    async def test_get_retry_resolves_after_head_failure(self):
        def head_fails(request):
            if request.method == "HEAD":
                raise httpx.ConnectError("reset", request=request)
            return httpx.Response(301, headers={"Location": "https://example.com/post"})

        recorder = Recorder(
            {
                "t.co": head_fails,
                "example.com": lambda r: httpx.Response(200, text=ARTICLE_HTML),
            }
        )
        extractor = make_extractor(recorder)

        result = await extractor.extract_from_url("https://t.co/abc")

        assert [(r.method, r.url.host) for r in recorder.requests] == [
            ("HEAD", "t.co"),
            ("GET", "t.co"),
            ("GET", "example.com"),
            ("GET", "example.com"),
        ]
        assert str(recorder.requests[-1].url) == "https://example.com/post"
        assert result.title == "OG Title"


class TestGithub:
    """Tests for GitHub blob and raw text extraction."""

    @pytest.mark.asyncio
    async def test_blob_is_fetched_from_raw_host(self):
        readme = "Intro line\n\n# Project Name\n\nSome readme text here.\n"
        recorder = Recorder({"raw.githubusercontent.com": lambda r: httpx.Response(200, text=readme)})
        extractor = make_extractor(recorder)

        result = await extractor.extract_from_url("https://github.com/owner/repo/blob/main/README.md")

        assert recorder.hosts == ["raw.githubusercontent.com"]
        assert result.url == "https://raw.githubusercontent.com/owner/repo/main/README.md"
        assert result.title == "Project Name"
        assert result.content == readme.strip()
        assert result.word_count == count_words(readme)

    @pytest.mark.asyncio
    async def test_title_falls_back_to_filename(self):
        recorder = Recorder({"raw.githubusercontent.com": lambda r: httpx.Response(200, text="plain notes")})
        extractor = make_extractor(recorder)

        result = await extractor.extract_from_url("https://raw.githubusercontent.com/o/r/main/docs/notes.txt")

        assert result.title == "notes.txt"


class TestTwitter:
    """Tests for Jina-rendered tweets and linked-article following."""

    @staticmethod
    def routes(article_status=200):
        return {
            "r.jina.ai": lambda r: httpx.Response(200, text=TWEET_MARKDOWN),
            "example.com": lambda r: httpx.Response(article_status, text=ARTICLE_HTML),
        }

    @pytest.mark.asyncio
    async def test_renders_through_jina(self):
        recorder = Recorder(self.routes())
        extractor = make_extractor(recorder)

        result = await extractor.extract_from_url("https://x.com/someone/status/1", follow_links=False)

        jina_request = recorder.requests[0]
        assert jina_request.url.host == "r.jina.ai"
        assert "x.com/someone/status/1" in str(jina_request.url)
        assert jina_request.headers["Accept"] == "text/markdown"
        assert recorder.hosts == ["r.jina.ai"]
        assert result.title == "Someone on X"
        assert result.url == "https://x.com/someone/status/1"
        assert "\n\n\n" not in result.content

    @pytest.mark.asyncio
    async def test_appends_linked_article(self):
        recorder = Recorder(self.routes())
        extractor = make_extractor(recorder)

        result = await extractor.extract_from_url("https://twitter.com/someone/status/1")

        tweet_words = count_words(clean_markdown(TWEET_MARKDOWN))
        assert "\n\n---\n\n## Linked Article: OG Title\n\n" in result.content
        assert result.word_count == tweet_words + 150
        assert result.title == "Someone on X"

    @pytest.mark.asyncio
    async def test_linked_failure_returns_tweet_only(self):
        recorder = Recorder(self.routes(article_status=500))
        extractor = make_extractor(recorder)

        result = await extractor.extract_from_url("https://x.com/someone/status/1")

        assert "Linked Article" not in result.content
        assert result.content == clean_markdown(TWEET_MARKDOWN)
        assert "example.com" in recorder.hosts

    @pytest.mark.asyncio
    async def test_title_defaults_to_tweet(self):
        recorder = Recorder({"r.jina.ai": lambda r: httpx.Response(200, text="")})
        extractor = make_extractor(recorder)

        result = await extractor.extract_from_url("https://x.com/someone/status/2")

        assert result.title == "Tweet"
        assert result.word_count == 0

    @pytest.mark.asyncio
    async def test_title_skips_blank_leading_lines(self):
        body = "   \n\t\nActual tweet text here"
        recorder = Recorder({"r.jina.ai": lambda r: httpx.Response(200, text=body)})
        extractor = make_extractor(recorder)

        result = await extractor.extract_from_url("https://x.com/someone/status/3", follow_links=False)

        assert result.title == "Actual tweet text here"
