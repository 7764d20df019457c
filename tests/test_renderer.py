import asyncio

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from pagewatch.core.errors import NavigationError, PageWatchError
from pagewatch.workflows.renderer import PlaywrightRenderer, RenderSettings


class _Response:
    def __init__(self, status):
        self.status = status


class _Locator:
    def __init__(self, count):
        self._count = count

    async def count(self):
        return self._count


class _Page:
    def __init__(
        self, *, status=200, body="", html="<html></html>", error=None, matches=0, content_error=None, evaluate_error=None
    ):
        self.status = status
        self.body = body
        self.html = html
        self.error = error
        self.matches = matches
        self.content_error = content_error
        self.evaluate_error = evaluate_error
        self.goto_calls = []

    async def goto(self, url, timeout=None, wait_until=None):
        self.goto_calls.append((url, timeout, wait_until))
        if self.error is not None:
            raise self.error
        return _Response(self.status)

    async def evaluate(self, script):
        if self.evaluate_error is not None:
            raise self.evaluate_error
        return self.body

    async def content(self):
        if self.content_error is not None:
            raise self.content_error
        return self.html

    def locator(self, selector):
        return _Locator(self.matches)


class _Context:
    def __init__(self, page):
        self.page = page
        self.closed = False

    async def new_page(self):
        return self.page

    async def close(self):
        self.closed = True


class _Stealth:
    def __init__(self):
        self.pages = []

    async def apply_stealth_async(self, page):
        self.pages.append((page, len(page.goto_calls)))


class _Browser:
    def __init__(self, page, error=None):
        self.page = page
        self.error = error
        self.contexts = []
        self.context_kwargs = []

    async def new_context(self, **kwargs):
        if self.error is not None:
            raise self.error
        self.context_kwargs.append(kwargs)
        context = _Context(self.page)
        self.contexts.append(context)
        return context


def _renderer(page, context_error=None, **settings):
    renderer = PlaywrightRenderer(RenderSettings(**settings))
    renderer._browser = _Browser(page, error=context_error)
    renderer._stealth = _Stealth()
    return renderer


async def _load(renderer, url, selector=None):
    async with renderer.open_page(url) as rendered:
        if selector is not None:
            return await rendered.count(selector)
        return await rendered.content()


def test_open_page_waits_for_network_idle_and_closes_context():
    page = _Page(html="<html>In stock</html>")
    renderer = _renderer(page, timeout=12.5)

    html = asyncio.run(_load(renderer, "https://shop/a"))

    assert html == "<html>In stock</html>"
    assert page.goto_calls == [("https://shop/a", 12500, "networkidle")]
    browser = renderer._browser
    assert browser.contexts[0].closed is True
    assert browser.context_kwargs[0]["locale"] == "en-US"


def test_each_url_gets_its_own_context():
    renderer = _renderer(_Page())

    asyncio.run(_load(renderer, "https://shop/a"))
    asyncio.run(_load(renderer, "https://shop/b"))

    contexts = renderer._browser.contexts
    assert len(contexts) == 2
    assert all(context.closed for context in contexts)


def test_navigation_timeout_becomes_navigation_error():
    renderer = _renderer(_Page(error=PlaywrightTimeoutError("Timeout 30000ms exceeded.")))

    with pytest.raises(NavigationError) as excinfo:
        asyncio.run(_load(renderer, "https://slow"))

    assert "Timeout" in excinfo.value.detail
    assert renderer._browser.contexts[0].closed is True


def test_error_status_with_empty_body_is_navigation_error():
    renderer = _renderer(_Page(status=503, body="   "))

    with pytest.raises(NavigationError):
        asyncio.run(_load(renderer, "https://down"))

    assert renderer._browser.contexts[0].closed is True


def test_error_status_with_content_is_still_evaluated():
    renderer = _renderer(_Page(status=404, body="Not found", html="<p>Not found</p>"))
    assert asyncio.run(_load(renderer, "https://gone")) == "<p>Not found</p>"


def test_count_uses_locator():
    renderer = _renderer(_Page(matches=3))
    assert asyncio.run(_load(renderer, "https://shop/a", selector="button.buy")) == 3


def test_open_page_requires_started_renderer():
    renderer = PlaywrightRenderer()
    with pytest.raises(PageWatchError):
        asyncio.run(_load(renderer, "https://shop/a"))


def test_stealth_is_applied_to_every_page_before_navigation():
    page = _Page()
    renderer = _renderer(page)

    asyncio.run(_load(renderer, "https://shop/a"))
    asyncio.run(_load(renderer, "https://shop/b"))

    # applied once per page, each time before that page navigates
    assert renderer._stealth.pages == [(page, 0), (page, 1)]
    assert len(renderer._browser.contexts) == 2


def test_content_error_becomes_navigation_error():
    error = PlaywrightError("Page.content: Unable to retrieve content because the page is navigating")
    renderer = _renderer(_Page(content_error=error))

    with pytest.raises(NavigationError) as excinfo:
        asyncio.run(_load(renderer, "https://challenge"))

    assert excinfo.value.url == "https://challenge"
    assert "page is navigating" in excinfo.value.detail
    assert renderer._browser.contexts[0].closed is True


def test_body_text_error_on_error_status_becomes_navigation_error():
    renderer = _renderer(_Page(status=503, evaluate_error=PlaywrightError("Target crashed")))

    with pytest.raises(NavigationError):
        asyncio.run(_load(renderer, "https://down"))

    assert renderer._browser.contexts[0].closed is True


def test_context_creation_error_becomes_navigation_error():
    renderer = _renderer(_Page(), context_error=PlaywrightError("Browser has been closed"))

    with pytest.raises(NavigationError):
        asyncio.run(_load(renderer, "https://shop/a"))
