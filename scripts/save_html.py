"""
Save a copy of the departures page and show what the scraper sees in it.

Usage: python scripts/save_html.py [filename]
"""

import sys
from pathlib import Path

import requests

sys.path.append(str(Path(__file__).parent.parent))

from config.settings import AIRPORT_PAGE
from scraper.errors import StructureError
from scraper.fetcher import USER_AGENT, parse_document
from services.security_daemon import extract_wait_time_fragments


def fetch_html(url=AIRPORT_PAGE):
    try:
        response = requests.get(url, headers={"User-Agent": USER_AGENT}, timeout=30)
        response.raise_for_status()  # Raise an error for bad HTTP responses
        return response.text
    except requests.RequestException as e:
        print(f"Error fetching the page: {e}")
        return None


def save_html(html_content, filename="departures.html"):
    if html_content:
        with open(filename, "w", encoding="utf-8") as file:
            file.write(html_content)
        print(f"HTML content saved to {filename}")


if __name__ == "__main__":
    html = fetch_html()
    if html:
        save_html(html, sys.argv[1] if len(sys.argv) > 1 else "departures.html")
        try:
            print(f"Security times found: {extract_wait_time_fragments(parse_document(html))}")
        except StructureError as e:
            print(f"Page structure not recognised: {e}")
