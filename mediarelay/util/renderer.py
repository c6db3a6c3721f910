"""
Playwright rendering engine.

Drives bratgenerator.com in headless Chromium and captures the rendered
text overlay as JPEG bytes. Every call gets its own browser process, which
is closed on every exit path. Docker-compatible (sandbox disabled).
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from playwright.async_api import Browser, async_playwright
from playwright.async_api import Error as PlaywrightError

from ..config import get_settings
from ..errors import UpstreamError

logger = logging.getLogger(__name__)

_LAUNCH_ARGS = [
    "--incognito",
    "--single-process",
    "--no-sandbox",
    "--no-zygote",
    "--no-cache",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
]

# bratgenerator.com selectors
CONSENT_BUTTON = "button#onetrust-accept-btn-handler"
CONSENT_OVERLAY = ".onetrust-pc-dark-filter"
WHITE_TOGGLE = "#toggleButtonWhite"
TEXT_INPUT = "#textInput"
TEXT_OVERLAY = "#textOverlay"


@asynccontextmanager
async def browser_session() -> AsyncIterator[Browser]:
    """
    Launch a private headless Chromium for one request.

    The browser is closed when the block exits, whether it returns or raises.
    """
    settings = get_settings()
    async with async_playwright() as p:
        browser = await p.chromium.launch(
            headless=True,
            args=_LAUNCH_ARGS,
            executable_path=settings.chrome_bin or None,
        )
        logger.debug("[renderer] Browser launched (executable=%s)", settings.chrome_bin or "bundled")
        try:
            yield browser
        finally:
            await browser.close()
            logger.debug("[renderer] Browser closed")


async def _dismiss_consent(page) -> None:
    """Accept the cookie banner if one is shown. Failures are logged, not raised."""
    try:
        button = await page.query_selector(CONSENT_BUTTON)
        if button is None:
            return
        await button.click()
        await page.wait_for_selector(CONSENT_OVERLAY, state="hidden")
        logger.debug("[renderer] Consent dialog dismissed")
    except PlaywrightError as e:
        logger.warning("[renderer] Could not dismiss consent dialog: %s", e)


async def render_brat(text: str) -> bytes:
    """
    Render ``text`` on bratgenerator.com and return a JPEG of the overlay.

    Args:
        text: Text typed into the generator, used as-is.

    Returns:
        Non-empty JPEG bytes of the ``#textOverlay`` element.

    Raises:
        UpstreamError: navigation, a missing element or the screenshot failed.
    """
    settings = get_settings()
    try:
        async with browser_session() as browser:
            page = await browser.new_page()
            await page.goto(settings.brat_url)
            await _dismiss_consent(page)

            await page.click(WHITE_TOGGLE)
            await page.locator(TEXT_INPUT).fill(text)

            image = await page.locator(TEXT_OVERLAY).screenshot(type="jpeg")
    except PlaywrightError as e:
        logger.error("[renderer] Brat render failed: %s", e, exc_info=True)
        raise UpstreamError(str(e)) from e

    if not image:
        raise UpstreamError("Screenshot produced no data")

    logger.info("[renderer] Brat rendered (%d chars -> %d bytes)", len(text), len(image))
    return image
