# pdf_mailer/services/pdf_service.py
import logging

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from pdf_mailer.exceptions import RenderError

logger = logging.getLogger(__name__)

CHROMIUM_ARGS = ["--no-sandbox", "--disable-setuid-sandbox"]
PAGE_FORMAT = "A4"


async def _close_quietly(resource, action: str) -> None:
    if resource is None:
        return
    try:
        if action == "stop":
            await resource.stop()
        else:
            await resource.close()
    except PlaywrightError as e:
        logger.warning(f"Renderer teardown ({action}) failed: {e}")


class DocumentRenderer:
    """Turns populated HTML into PDF bytes with a throwaway headless Chromium.

    Every call launches its own browser and tears it down before returning,
    whether or not the PDF was produced.
    """

    def __init__(self, timeout_ms: int = 30000, page_format: str = PAGE_FORMAT):
        self.timeout_ms = timeout_ms
        self.page_format = page_format

    async def render(self, html_content: str) -> bytes:
        playwright = None
        browser = None
        page = None
        try:
            playwright = await async_playwright().start()
            browser = await playwright.chromium.launch(headless=True, args=CHROMIUM_ARGS)
            page = await browser.new_page()

            # networkidle: embedded images and fonts are loaded before pagination
            await page.set_content(html_content, wait_until="networkidle", timeout=self.timeout_ms)
            pdf_bytes = await page.pdf(format=self.page_format, print_background=True)

            logger.info(f"✅ PDF generated in memory ({len(pdf_bytes)} bytes)")
            return pdf_bytes
        except PlaywrightTimeoutError as e:
            logger.error(f"❌ PDF content did not load within {self.timeout_ms} ms")
            raise RenderError(f"Timed out loading PDF content after {self.timeout_ms} ms") from e
        except PlaywrightError as e:
            logger.error(f"❌ PDF rendering failed: {e}")
            raise RenderError(f"PDF rendering failed: {e}") from e
        finally:
            await _close_quietly(page, "close")
            await _close_quietly(browser, "close")
            await _close_quietly(playwright, "stop")
