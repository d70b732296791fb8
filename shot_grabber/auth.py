"""Authentication that runs once per browser before any capture starts."""
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

import typer
from pydantic import TypeAdapter, ValidationError

from shot_grabber.console import RunLogger
from shot_grabber.errors import AuthenticationError, ShotGrabberError
from shot_grabber.models import (
    AuthenticationSpec,
    CookieAuthentication,
    LoginAuthentication,
)

AUTHENTICATION_RETRIES = 2


class AuthState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class AuthenticationGate:
    """Authenticates a browser with either a login form or a set of cookies.

    A failed attempt re-runs the whole flow on a fresh page until the retries
    are used up, at which point ``AuthenticationError`` is raised and no
    capture may start.
    """

    def __init__(
        self,
        spec: AuthenticationSpec,
        logger: RunLogger,
        retries: int = AUTHENTICATION_RETRIES,
    ):
        self.spec = spec
        self.logger = logger
        self.attempts_remaining = retries
        self.state = AuthState.IDLE
        self.error: Optional[Exception] = None

    async def authenticate(self, browser) -> None:
        if isinstance(self.spec, LoginAuthentication) and self.spec.password is None:
            self.state = AuthState.FAILED
            raise AuthenticationError("No password was provided for login.")

        while True:
            self.state = AuthState.RUNNING
            try:
                message = await self._attempt(browser)
            except Exception as e:
                self.state = AuthState.FAILED
                self.error = e
                if self.attempts_remaining > 0:
                    self.attempts_remaining -= 1
                    self.logger.log(
                        "Authentication failed. Attempting to authenticate again. "
                        f"({self.attempts_remaining} attempts remaining)"
                    )
                    self.logger.log(e, verbose=True)
                    continue
                self.logger.log("Unable to authenticate.")
                self.logger.log(e, verbose=True)
                raise AuthenticationError(f"Unable to authenticate: {e}", cause=e) from e

            self.state = AuthState.SUCCEEDED
            self.logger.log(message)
            return

    async def _attempt(self, browser) -> str:
        page = await browser.newPage()
        try:
            if isinstance(self.spec, CookieAuthentication):
                message = await self._set_cookies(page)
            else:
                message = await self._login(page)
        except Exception:
            await self._close_after_failure(page)
            raise
        await page.close()
        return message

    async def _login(self, page) -> str:
        spec = self.spec
        self.logger.log("Starting authentication by login", verbose=True)
        await page.goto(spec.url, {"waitUntil": "networkidle2"})
        await page.waitForSelector(spec.user_selector)
        await page.type(spec.user_selector, spec.user)
        await page.type(spec.pass_selector, spec.password)
        await page.click(spec.submit_selector)
        self.logger.log(
            "Authentication form submitted, waiting for authentication", verbose=True
        )
        await page.waitForSelector(spec.success_selector)
        return "Authentication by login was successful."

    async def _set_cookies(self, page) -> str:
        self.logger.log("Setting authentication cookies", verbose=True)
        await page.setCookie(*self.spec.cookies)
        return "Authentication cookies were set successfully."

    async def _close_after_failure(self, page) -> None:
        try:
            await page.close()
        except Exception as e:
            self.logger.log(f"Could not close the authentication page: {e}", verbose=True)


_auth_adapter = TypeAdapter(AuthenticationSpec)


def load_authentication(
    path: Path, prompt: Optional[Callable[..., str]] = None
) -> AuthenticationSpec:
    """Read an authentication file, asking for the login password if it is missing."""
    path = Path(path)
    if not path.exists():
        raise ShotGrabberError(f"The file {path} does not exist.")
    try:
        spec = _auth_adapter.validate_json(path.read_text(encoding="utf-8"))
    except ValidationError as e:
        raise ShotGrabberError(
            f"There was an issue reading the authentication file {path}: {e}"
        ) from e

    if isinstance(spec, LoginAuthentication) and spec.password is None:
        prompt = prompt or typer.prompt
        password = prompt(f"Password for {spec.user}", hide_input=True)
        spec = spec.model_copy(update={"password": password})
    return spec
