"""
Departures Page Fetcher

Downloads the live departures page and parses it with BeautifulSoup.
"""

import logging

import requests
from bs4 import BeautifulSoup

from scraper.errors import DocumentParseError, FetchError

logger = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/123.0.0.0 Safari/537.36"
)


def create_http_session():
    """Get a requests session with browser-like headers."""
    session = requests.Session()
    session.headers.update({"User-Agent": USER_AGENT})
    return session


def fetch_page(session, url, timeout=30):
    """
    Download the page HTML.

    Args:
        session: requests.Session (or anything with a compatible ``get``)
        url (str): Page URL
        timeout (float): Seconds before giving up on the request

    Returns:
        str: Page HTML

    Raises:
        FetchError: On transport errors or non-2xx responses
    """
    try:
        response = session.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        raise FetchError(f"Unable to load page {url}: {e}") from e

    logger.info(f"Fetched {url} ({len(response.text)} chars)")
    return response.text


def parse_document(html_content):
    """
    Parse HTML into a navigable tree.

    Raises:
        DocumentParseError: If the parser rejects the content
    """
    if html_content is None:
        raise DocumentParseError("No content to parse")

    try:
        return BeautifulSoup(html_content, "html.parser")
    except Exception as e:
        raise DocumentParseError(f"Could not parse departures page: {e}") from e
