"""
Browser Session - Headless Capability Surface
=============================================
The browser pass only depends on BrowserSession:

    navigate(url), wait_visible(selector), sleep(seconds),
    evaluate_js(script, arg), get_inner_html(selector), get_text(selector),
    click(selector), current_url()

PlaywrightSession implements it on headless Chromium. Tests substitute a
scripted fake.

Lifecycle:
- One session per request, opened with open_browser_session()
- Closed unconditionally on exit
- Every operation is bounded by one overall deadline
"""

import time
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from playwright.sync_api import Error as PWError
from playwright.sync_api import Page, sync_playwright

from config import BrowserConf, DEFAULT_USER_AGENT
from core.errors import BrowserDeadlineExceeded, BrowserRenderFailed, InvalidURL
from scrapers.url_guard import validate_url
from utils_logging import log_debug, log_warning


LAUNCH_ARGS = [
    "--disable-gpu",
    "--no-sandbox",
    "--disable-dev-shm-usage",
    "--disable-setuid-sandbox",
    "--disable-background-networking",
    "--disable-default-apps",
    "--disable-extensions",
    "--disable-sync",
    "--disable-translate",
    "--mute-audio",
    "--hide-scrollbars",
    "--disable-blink-features=AutomationControlled",
    "--no-first-run",
    "--no-default-browser-check",
]


class BrowserSession:
    """Capability surface consumed by the browser pass."""

    def navigate(self, url: str) -> None:
        raise NotImplementedError

    def wait_visible(self, selector: str) -> None:
        raise NotImplementedError

    def sleep(self, seconds: float) -> None:
        raise NotImplementedError

    def evaluate_js(self, script: str, arg: Any = None) -> Any:
        """Evaluates a function expression; `arg` is passed as a typed argument."""
        raise NotImplementedError

    def get_inner_html(self, selector: str) -> str:
        raise NotImplementedError

    def get_text(self, selector: str) -> str:
        raise NotImplementedError

    def click(self, selector: str) -> None:
        raise NotImplementedError

    def current_url(self) -> str:
        raise NotImplementedError


class BrowserDeadline:
    """Overall time budget shared by every operation of one session."""

    def __init__(self, seconds: float):
        self.seconds = seconds
        self.expires_at = time.monotonic() + seconds

    def remaining(self) -> float:
        return self.expires_at - time.monotonic()

    def remaining_ms(self) -> float:
        return max(self.remaining(), 0.0) * 1000

    def check(self, step: str = ""):
        if self.remaining() <= 0:
            raise BrowserDeadlineExceeded(
                f"browser deadline of {self.seconds}s exceeded" + (f" before {step}" if step else "")
            )


class PlaywrightSession(BrowserSession):
    """BrowserSession on a Playwright page, bounded by a BrowserDeadline."""

    def __init__(self, page: Page, deadline: BrowserDeadline):
        self.page = page
        self.deadline = deadline

    def _run(self, step: str, fn, *args, **kwargs):
        self.deadline.check(step)
        try:
            return fn(*args, **kwargs)
        except PWError as e:
            if self.deadline.remaining() <= 0:
                raise BrowserDeadlineExceeded(f"{step} aborted by deadline: {e}")
            raise BrowserRenderFailed(f"{step} failed: {e}")

    def navigate(self, url: str) -> None:
        self._run("navigate", self.page.goto, url,
                  timeout=self.deadline.remaining_ms(), wait_until="domcontentloaded")

    def wait_visible(self, selector: str) -> None:
        self._run("wait_visible", self.page.wait_for_selector, selector,
                  state="visible", timeout=self.deadline.remaining_ms())

    def sleep(self, seconds: float) -> None:
        self.deadline.check("sleep")
        ms = min(seconds * 1000, self.deadline.remaining_ms())
        self._run("sleep", self.page.wait_for_timeout, ms)

    def evaluate_js(self, script: str, arg: Any = None) -> Any:
        """
        page.evaluate takes no timeout, so a blocked page can run past the
        deadline; the deadline is checked again once the call returns.
        """
        result = self._run("evaluate", self.page.evaluate, script, arg)
        self.deadline.check("evaluate result")
        return result

    def get_inner_html(self, selector: str) -> str:
        return self._run("inner_html", self.page.inner_html, selector,
                         timeout=self.deadline.remaining_ms())

    def get_text(self, selector: str) -> str:
        return self._run("inner_text", self.page.inner_text, selector,
                         timeout=self.deadline.remaining_ms())

    def click(self, selector: str) -> None:
        self._run("click", self.page.click, selector,
                  timeout=self.deadline.remaining_ms())

    def current_url(self) -> str:
        return self.page.url


def _guard_navigation(route, request):
    """Aborts top-level navigations (incl. redirects) to blocked hosts."""
    if request.is_navigation_request():
        try:
            validate_url(request.url)
        except InvalidURL as e:
            log_warning(f"Blocked browser navigation to {request.url}: {e}")
            route.abort("blockedbyclient")
            return
    route.continue_()


@contextmanager
def open_browser_session(conf: Optional[BrowserConf] = None) -> Iterator[BrowserSession]:
    """
    Launches headless Chromium and yields a bounded session.

    The browser is always closed on exit, including on errors and
    deadline expiry.

    Raises:
        BrowserRenderFailed: Launch failure or any browser error
    """
    conf = conf or BrowserConf()
    deadline = BrowserDeadline(conf.timeout_sec)

    try:
        playwright = sync_playwright().start()
    except PWError as e:
        raise BrowserRenderFailed(f"playwright start failed: {e}")

    browser = None
    try:
        browser = playwright.chromium.launch(headless=conf.headless, args=LAUNCH_ARGS)
        context = browser.new_context(
            user_agent=DEFAULT_USER_AGENT,
            viewport={"width": 1920, "height": 1080},
            locale="en-US",
        )
        context.route("**/*", _guard_navigation)
        page = context.new_page()
        log_debug(f"browser session opened (deadline {conf.timeout_sec}s)")
        yield PlaywrightSession(page, deadline)
    except PWError as e:
        raise BrowserRenderFailed(f"browser error: {e}")
    finally:
        if browser is not None:
            try:
                browser.close()
            except PWError as e:
                log_warning(f"Could not close browser: {e}")
        playwright.stop()
        log_debug("browser session closed")
