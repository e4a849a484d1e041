"""
Security Times Extraction

Walks a parsed departures page to pull out the per-terminal security
queue annotations ("= 12 mins") and turns them into minute counts.

The page is loosely structured, so the lookups here avoid CSS selectors:
the marker region is found by attribute value and the wait times by the
emphasis tag nested somewhere inside each sibling of that region.
"""

import logging
import re

from bs4 import NavigableString, Tag

from scraper.errors import ParseError

logger = logging.getLogger(__name__)

SECURITY_TIMES_MARKER = "sec-times"
EMPHASIS_TAG = "strong"

_DIGITS = re.compile(r"[0-9]+")


def parse_minute_value(text):
    """
    Convert a wait-time annotation into an integer number of minutes.

    Args:
        text (str): Fragment such as "= 12 mins", "=5min" or " 7 "

    Returns:
        int: Minute count

    Raises:
        ParseError: If nothing but ASCII digits is left after stripping
            the "min"/"mins" unit, "=" and all whitespace
    """
    residual = text.replace("mins", "").replace("min", "").replace("=", "")
    residual = "".join(residual.split())

    if not _DIGITS.fullmatch(residual):
        raise ParseError(text)

    return int(residual, 10)


def _attribute_text(value):
    # bs4 splits multi-valued attributes (class, rel, ...) into lists
    if isinstance(value, (list, tuple)):
        return " ".join(value)
    return value


def _is_marker(node, marker, attribute=None, tag_name=None):
    if tag_name is not None and node.name != tag_name:
        return False

    for name, value in node.attrs.items():
        if attribute is not None and name != attribute:
            continue
        if _attribute_text(value) == marker:
            return True
    return False


def find_marker_node(root, marker=SECURITY_TIMES_MARKER, attribute=None, tag_name=None):
    """
    Find the first element in document order carrying the marker value.

    Matching is on attribute value only unless ``attribute`` is given, in
    which case only that attribute name is considered. ``tag_name``
    optionally restricts the element type as well.

    Uses an explicit stack so very deep pages cannot exhaust the
    recursion limit.

    Args:
        root: BeautifulSoup document or any Tag inside it
        marker (str): Attribute value identifying the region
        attribute (str): Optional attribute name to tighten the match
        tag_name (str): Optional element name to tighten the match

    Returns:
        bs4.Tag or None: The marker node, or None if absent
    """
    if not isinstance(root, Tag):
        return None

    stack = [root]
    while stack:
        node = stack.pop()
        if _is_marker(node, marker, attribute, tag_name):
            return node
        # Reversed so the leftmost child is visited first
        stack.extend(child for child in reversed(node.contents) if isinstance(child, Tag))

    return None


def find_emphasis_node(node, tag=EMPHASIS_TAG):
    """
    Depth-first search for ``tag`` in ``node`` and its descendants.
    """
    if not isinstance(node, Tag):
        return None

    stack = [node]
    while stack:
        current = stack.pop()
        if current.name == tag:
            return current
        stack.extend(child for child in reversed(current.contents) if isinstance(child, Tag))

    return None


def render_text(node):
    """Render a tree node as plain text."""
    if isinstance(node, NavigableString):
        return str(node)
    return node.get_text()


def harvest_sibling_text(start, tag=EMPHASIS_TAG):
    """
    Collect the emphasis text found in ``start`` and each following sibling.

    Siblings without an emphasis tag, or whose tag is empty, are skipped,
    so the result can be shorter than the number of siblings.

    Args:
        start: First node of the chain, usually the marker's first child
        tag (str): Emphasis tag name to look for

    Returns:
        list[str]: Stripped text fragments in sibling order
    """
    fragments = []

    node = start
    while node is not None:
        emphasis = find_emphasis_node(node, tag)
        if emphasis is not None and emphasis.contents:
            fragments.append(render_text(emphasis.contents[0]).strip())
        node = node.next_sibling

    logger.debug(f"Harvested {len(fragments)} fragments: {fragments}")
    return fragments
