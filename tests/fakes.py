"""In-memory stand-ins for the pyppeteer browser and page.

Urls steer the fake behaviour:

- ``timeout`` in the url makes navigation time out
- ``fail`` in the url makes navigation fail outright
- ``noshot`` in the url makes the screenshot fail
- ``broken`` in the url produces a failed response and a failed request
- ``hang`` in the url never finishes loading within a test
- ``crash`` in the url kills the worker process
"""
import asyncio
import os
import signal
from dataclasses import dataclass, field

from pyppeteer.errors import TimeoutError as PyppeteerTimeoutError


@dataclass
class FakeConsoleMessage:
    text: str


@dataclass
class FakeResponse:
    url: str
    status: int = 200

    @property
    def ok(self):
        return 200 <= self.status < 300


@dataclass
class FakeRequest:
    url: str
    error_text: str = "net::ERR_FAILED"

    def failure(self):
        return {"errorText": self.error_text}


class FakePage:
    def __init__(self, browser):
        self.browser = browser
        self.handlers = {}
        self.viewport = {"width": 800, "height": 600}
        self.url = None
        self.closed = False
        self.typed = {}
        self.clicked = []

    def on(self, event, handler):
        self.handlers.setdefault(event, []).append(handler)

    def emit(self, event, payload):
        for handler in self.handlers.get(event, []):
            handler(payload)

    async def setViewport(self, viewport):
        if self.browser.viewport_error:
            raise RuntimeError("viewport rejected")
        self.viewport = dict(viewport)

    async def goto(self, url, options=None):
        self.url = url
        self.browser.events.append(("goto", url))
        await asyncio.sleep(self.browser.delays.get(url, 0))
        if "hang" in url:
            await asyncio.sleep(60)
        if "crash" in url:
            os._exit(3)
        if "timeout" in url:
            raise PyppeteerTimeoutError("Navigation Timeout Exceeded: 30000 ms exceeded")
        if "fail" in url:
            raise RuntimeError(f"net::ERR_NAME_NOT_RESOLVED at {url}")
        self.emit("console", FakeConsoleMessage(f"hello from {url}"))
        if "broken" in url:
            self.emit("pageerror", RuntimeError("Uncaught TypeError: x is undefined"))
            self.emit("response", FakeResponse(f"{url}/missing.js", status=404))
            self.emit("requestfailed", FakeRequest(f"{url}/font.woff"))
        self.emit("response", FakeResponse(url))

    async def screenshot(self, options):
        if self.url and "noshot" in self.url:
            raise RuntimeError("screenshot failed")
        with open(options["path"], "wb") as handle:
            handle.write(b"\x89PNG fake")
        self.browser.screenshots.append(options)

    async def waitForSelector(self, selector, options=None):
        if selector == self.browser.success_selector and self.browser.auth_failures > 0:
            self.browser.auth_failures -= 1
            raise PyppeteerTimeoutError(f"Waiting for selector {selector} failed")

    async def type(self, selector, text):
        self.typed[selector] = text

    async def click(self, selector):
        self.clicked.append(selector)

    async def setCookie(self, *cookies):
        if self.browser.cookie_error:
            raise RuntimeError("invalid cookie")
        self.browser.cookies.extend(cookies)

    async def close(self):
        self.closed = True
        self.browser.open_pages -= 1
        self.browser.events.append(("close", self.url))


@dataclass
class FakeBrowser:
    headless: bool = True
    auth_failures: int = 0
    success_selector: str = "#dashboard"
    cookie_error: bool = False
    viewport_error: bool = False
    delays: dict = field(default_factory=dict)
    events: list = field(default_factory=list)
    pages: list = field(default_factory=list)
    cookies: list = field(default_factory=list)
    screenshots: list = field(default_factory=list)
    open_pages: int = 0
    max_open_pages: int = 0
    closed: bool = False

    async def newPage(self):
        page = FakePage(self)
        self.pages.append(page)
        self.open_pages += 1
        self.max_open_pages = max(self.max_open_pages, self.open_pages)
        self.events.append(("open", None))
        return page

    async def close(self):
        self.closed = True


async def launch_fake_browser(headless=True):
    return FakeBrowser(headless=headless)


async def launch_broken_browser(headless=True):
    raise RuntimeError("browser did not start")


async def launch_crashing_browser(headless=True):
    os._exit(3)


async def launch_sigterm_ignoring_browser(headless=True):
    # a browser library that swaps in its own SIGTERM handler
    signal.signal(signal.SIGTERM, lambda signum, frame: None)
    return FakeBrowser(headless=headless)
