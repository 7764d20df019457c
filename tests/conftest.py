from contextlib import asynccontextmanager
from typing import Dict, List, Union

import pytest


class FakePage:
    def __init__(self, content: str = "", count: int = 0) -> None:
        self._content = content
        self._count = count
        self.selectors: List[str] = []

    async def content(self) -> str:
        return self._content

    async def count(self, selector: str) -> int:
        self.selectors.append(selector)
        return self._count


class FakeRenderer:
    """Stands in for PlaywrightRenderer; records every page it opens and releases."""

    def __init__(self, pages: Dict[str, Union[FakePage, Exception]]) -> None:
        self.pages = pages
        self.opened: List[str] = []
        self.released: List[str] = []
        self.enter_count = 0
        self.exit_count = 0

    async def __aenter__(self) -> "FakeRenderer":
        self.enter_count += 1
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.exit_count += 1

    @asynccontextmanager
    async def open_page(self, url: str):
        self.opened.append(url)
        page = self.pages[url]
        if isinstance(page, Exception):
            raise page
        try:
            yield page
        finally:
            self.released.append(url)


class FakeTransport:
    def __init__(self, error: Exception = None) -> None:
        self.error = error
        self.calls: List[Dict[str, str]] = []

    def publish(self, target: str, subject: str, message: str) -> Dict[str, str]:
        self.calls.append({"target": target, "subject": subject, "message": message})
        if self.error is not None:
            raise self.error
        return {"MessageId": "msg-123"}


@pytest.fixture
def fake_page():
    return FakePage


@pytest.fixture
def fake_renderer():
    return FakeRenderer


@pytest.fixture
def fake_transport():
    return FakeTransport
