"""
Unit tests for the Playwright brat renderer.

Playwright is replaced by in-process fakes so no browser is launched.

Usage:
    pytest tests/test_renderer.py -v
"""

import pytest
from playwright.async_api import Error as PlaywrightError

from mediarelay.errors import UpstreamError
from mediarelay.util import renderer


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------

class FakeConsentButton:
    def __init__(self, page):
        self.page = page

    async def click(self):
        self.page.calls.append(("click", renderer.CONSENT_BUTTON))


class FakeLocator:
    def __init__(self, page, selector):
        self.page = page
        self.selector = selector

    async def fill(self, text):
        self.page.raise_if_missing(self.selector)
        self.page.calls.append(("fill", self.selector, text))

    async def screenshot(self, **kwargs):
        self.page.raise_if_missing(self.selector)
        self.page.calls.append(("screenshot", self.selector, kwargs))
        return self.page.image


class FakePage:
    def __init__(self, consent=False, consent_stuck=False, missing=(), image=b"\xff\xd8\xff\xe0jpeg"):
        self.consent = consent
        self.consent_stuck = consent_stuck
        self.missing = set(missing)
        self.image = image
        self.calls = []

    def raise_if_missing(self, selector):
        if selector in self.missing:
            raise PlaywrightError(f"Timeout 30000ms exceeded waiting for {selector}")

    async def goto(self, url):
        self.calls.append(("goto", url))

    async def query_selector(self, selector):
        if self.consent and selector == renderer.CONSENT_BUTTON:
            return FakeConsentButton(self)
        return None

    async def wait_for_selector(self, selector, state=None):
        if self.consent_stuck:
            raise PlaywrightError(f"Timeout waiting for {selector} to be {state}")
        self.calls.append(("wait", selector, state))

    async def click(self, selector):
        self.raise_if_missing(selector)
        self.calls.append(("click", selector))

    def locator(self, selector):
        return FakeLocator(self, selector)


class FakeBrowser:
    def __init__(self, page):
        self.page = page
        self.closed = False

    async def new_page(self):
        return self.page

    async def close(self):
        self.closed = True


class FakeChromium:
    def __init__(self, browser):
        self.browser = browser
        self.launch_kwargs = None

    async def launch(self, **kwargs):
        self.launch_kwargs = kwargs
        return self.browser


class FakePlaywright:
    def __init__(self, chromium):
        self.chromium = chromium

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


@pytest.fixture
def install_browser(monkeypatch):
    """Install a fake Playwright around ``page``; returns (browser, chromium)."""
    def _install(page: FakePage):
        browser = FakeBrowser(page)
        chromium = FakeChromium(browser)
        monkeypatch.setattr(renderer, "async_playwright", lambda: FakePlaywright(chromium))
        return browser, chromium
    return _install


# ---------------------------------------------------------------------------
# render_brat
# ---------------------------------------------------------------------------

async def test_render_returns_overlay_screenshot(install_browser):
    page = FakePage()
    browser, _ = install_browser(page)

    image = await renderer.render_brat("hello")

    assert image == page.image
    assert page.calls == [
        ("goto", "https://www.bratgenerator.com/"),
        ("click", renderer.WHITE_TOGGLE),
        ("fill", renderer.TEXT_INPUT, "hello"),
        ("screenshot", renderer.TEXT_OVERLAY, {"type": "jpeg"}),
    ]
    assert browser.closed


async def test_consent_dialog_is_dismissed_when_present(install_browser):
    page = FakePage(consent=True)
    install_browser(page)

    await renderer.render_brat("hi")

    assert page.calls[1] == ("click", renderer.CONSENT_BUTTON)
    assert page.calls[2] == ("wait", renderer.CONSENT_OVERLAY, "hidden")


async def test_stuck_consent_overlay_does_not_abort(install_browser):
    page = FakePage(consent=True, consent_stuck=True)
    browser, _ = install_browser(page)

    image = await renderer.render_brat("hi")

    assert image == page.image
    assert browser.closed


async def test_missing_element_raises_and_closes_browser(install_browser):
    page = FakePage(missing={renderer.WHITE_TOGGLE})
    browser, _ = install_browser(page)

    with pytest.raises(UpstreamError) as exc_info:
        await renderer.render_brat("hi")

    assert renderer.WHITE_TOGGLE in exc_info.value.message
    assert browser.closed


async def test_screenshot_failure_closes_browser(install_browser):
    page = FakePage(missing={renderer.TEXT_OVERLAY})
    browser, _ = install_browser(page)

    with pytest.raises(UpstreamError):
        await renderer.render_brat("hi")
    assert browser.closed


async def test_empty_screenshot_is_an_error(install_browser):
    page = FakePage(image=b"")
    browser, _ = install_browser(page)

    with pytest.raises(UpstreamError):
        await renderer.render_brat("hi")
    assert browser.closed


async def test_unexpected_error_still_closes_browser(install_browser):
    page = FakePage()
    browser, _ = install_browser(page)

    async def boom(url):
        raise RuntimeError("renderer crashed")

    page.goto = boom

    with pytest.raises(RuntimeError):
        await renderer.render_brat("hi")
    assert browser.closed


async def test_launch_options(install_browser, monkeypatch):
    monkeypatch.setenv("CHROME_BIN", "/usr/bin/chromium")
    _, chromium = install_browser(FakePage())

    await renderer.render_brat("hi")

    kwargs = chromium.launch_kwargs
    assert kwargs["headless"] is True
    assert kwargs["executable_path"] == "/usr/bin/chromium"
    assert "--no-sandbox" in kwargs["args"]
    assert "--incognito" in kwargs["args"]


async def test_launch_uses_bundled_chromium_by_default(install_browser, monkeypatch):
    monkeypatch.delenv("CHROME_BIN", raising=False)
    _, chromium = install_browser(FakePage())

    await renderer.render_brat("hi")
    assert chromium.launch_kwargs["executable_path"] is None


async def test_each_render_gets_its_own_browser(monkeypatch):
    launched = []

    def factory():
        browser = FakeBrowser(FakePage())
        launched.append(browser)
        return FakePlaywright(FakeChromium(browser))

    monkeypatch.setattr(renderer, "async_playwright", factory)

    await renderer.render_brat("a")
    await renderer.render_brat("b")

    assert len(launched) == 2
    assert launched[0] is not launched[1]
    assert all(b.closed for b in launched)
