"""Fetch a privacy policy page and extract its visible text."""

import httpx
from bs4 import BeautifulSoup

from policyscope.config import Settings
from policyscope.errors import FetchError
from policyscope.logger import get_logger

logger = get_logger(__name__)

FETCH_ERROR_MESSAGE = "Could not retrieve content from the link, please check that it is correct"


def is_url(value: str) -> bool:
    """True when the input should be fetched rather than analyzed as text."""
    value = value.strip().lower()
    return value.startswith("http://") or value.startswith("https://")


def html_to_text(html: str) -> str:
    """Visible body text, one non-empty line per block."""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "noscript", "template"]):
        tag.decompose()

    root = soup.body or soup
    lines = (line.strip() for line in root.get_text(separator="\n").splitlines())
    return "\n".join(line for line in lines if line)


class ContentFetcher:
    """Retrieves policy pages over HTTP."""

    def __init__(self, settings: Settings, transport: httpx.BaseTransport | None = None):
        self.client = httpx.Client(
            headers={"User-Agent": settings.fetch_user_agent},
            timeout=settings.fetch_timeout_seconds,
            follow_redirects=True,
            transport=transport,
        )
        logger.info("ContentFetcher initialized")

    def fetch_text(self, url: str) -> str:
        """Return the extracted text of the page at url.

        Raises:
            FetchError: On network errors, non-2xx responses, or pages with no text.
        """
        url = url.strip()
        logger.info(f"Fetching policy from {url}")
        try:
            response = self.client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"Fetch failed for {url}: HTTP {e.response.status_code}")
            raise FetchError(FETCH_ERROR_MESSAGE) from e
        except httpx.HTTPError as e:
            logger.error(f"Fetch failed for {url}: {e}")
            raise FetchError(FETCH_ERROR_MESSAGE) from e

        try:
            text = html_to_text(response.text)
        except Exception as e:
            logger.error(f"Could not parse HTML from {url}: {e}")
            raise FetchError(FETCH_ERROR_MESSAGE) from e

        if not text:
            logger.warning(f"No text content found at {url}")
            raise FetchError(FETCH_ERROR_MESSAGE)

        logger.info(f"Extracted {len(text)} chars from {url}")
        return text

    def close(self):
        """Close the HTTP client."""
        logger.debug("Closing ContentFetcher client")
        self.client.close()
