"""Thin boundary over pyppeteer.

The rest of the package only talks to the browser through the handful of
calls used here and in the worker: ``newPage``, ``goto``, ``screenshot``,
``setCookie``, ``type``, ``click``, ``waitForSelector``, ``viewport``,
``setViewport``, ``on`` and ``close``.
"""
import asyncio

from pyppeteer import launch
from pyppeteer.errors import TimeoutError as PyppeteerTimeoutError

NAVIGATION_TIMEOUT_ERRORS = (PyppeteerTimeoutError, asyncio.TimeoutError)

BROWSER_ARGS = [
    "--no-sandbox",
    "--disable-extensions",
]


async def launch_browser(headless: bool = True):
    """Launch the browser used by one worker process."""
    return await launch(
        args=BROWSER_ARGS,
        headless=headless,
        # the coordinator owns the worker process lifetime
        handleSIGINT=False,
        handleSIGTERM=False,
        handleSIGHUP=False,
    )


def is_navigation_timeout(error: BaseException) -> bool:
    return isinstance(error, NAVIGATION_TIMEOUT_ERRORS)
