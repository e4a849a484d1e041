"""
Terminal Security Records

The record type produced by each polling cycle and the builder that
pairs harvested fragments with the configured terminal list.
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from scraper.errors import ParseError, StructureError
from scraper.extraction import parse_minute_value

logger = logging.getLogger(__name__)

DEFAULT_TERMINALS = ("T1", "T2")


@dataclass(frozen=True)
class TerminalSecurityRecord:
    """Security queue length for one terminal at one capture instant."""

    terminal: str
    timestamp: datetime
    wait_minutes: int

    def to_dict(self):
        return {
            "terminal": self.terminal,
            "timestamp": self.timestamp.isoformat(),
            "waitlen": self.wait_minutes,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            terminal=data["terminal"],
            timestamp=datetime.fromisoformat(data["timestamp"]),
            wait_minutes=int(data["waitlen"]),
        )


def validate_harvest(fragments, terminals=DEFAULT_TERMINALS):
    """
    Check that one fragment was harvested per terminal.

    A different count means the page layout changed and positional
    terminal assignment can no longer be trusted.

    Raises:
        StructureError: If the counts differ
    """
    if len(fragments) != len(terminals):
        raise StructureError(
            f"Got {len(fragments)} wait time values, expected {len(terminals)} "
            f"(one per terminal {', '.join(terminals)})"
        )


def build_terminal_records(fragments, terminals, timestamp):
    """
    Pair harvested fragments with terminals by position.

    All-or-nothing: a count mismatch or any unparseable fragment yields an
    empty list rather than a partial set.

    Args:
        fragments (list[str]): Harvested text such as "= 5 mins"
        terminals (Sequence[str]): Ordered terminal identifiers
        timestamp (datetime): Capture time shared by every record

    Returns:
        list[TerminalSecurityRecord]: One record per terminal, or []
    """
    if len(fragments) != len(terminals):
        logger.error(
            f"Cannot build records: {len(fragments)} values for {len(terminals)} terminals"
        )
        return []

    records = []
    for index, (terminal, fragment) in enumerate(zip(terminals, fragments)):
        try:
            minutes = parse_minute_value(fragment)
        except ParseError:
            logger.error(
                f"Error converting minute value {fragment!r} for terminal {terminal} "
                f"(index {index}); discarding cycle"
            )
            return []
        records.append(TerminalSecurityRecord(terminal=terminal, timestamp=timestamp, wait_minutes=minutes))

    return records
