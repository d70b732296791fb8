import asyncio

from pyppeteer.errors import TimeoutError as PyppeteerTimeoutError

from shot_grabber import browser as browser_module
from shot_grabber.browser import is_navigation_timeout, launch_browser


def test_launch_leaves_signal_handling_to_the_worker(monkeypatch):
    calls = {}

    async def fake_launch(**kwargs):
        calls.update(kwargs)
        return "browser"

    monkeypatch.setattr(browser_module, "launch", fake_launch)

    assert asyncio.run(launch_browser(headless=False)) == "browser"
    assert calls["headless"] is False
    assert calls["handleSIGINT"] is False
    assert calls["handleSIGTERM"] is False
    assert calls["handleSIGHUP"] is False


def test_navigation_timeout_detection():
    assert is_navigation_timeout(PyppeteerTimeoutError("Navigation Timeout Exceeded"))
    assert is_navigation_timeout(asyncio.TimeoutError())
    assert not is_navigation_timeout(RuntimeError("net::ERR_NAME_NOT_RESOLVED"))
