"""
Error Types

Exceptions raised by the scraping pipeline, the persistence sinks and
the polling daemon. Everything except ParseError is fatal to the daemon.
"""


class SecurityMonitorError(Exception):
    """Base class for all monitor errors."""


class ConfigError(SecurityMonitorError):
    """Invalid or inconsistent process configuration."""


class FetchError(SecurityMonitorError):
    """The departures page could not be downloaded."""


class DocumentParseError(SecurityMonitorError):
    """The downloaded page could not be parsed into a tree."""


class StructureError(SecurityMonitorError):
    """The page no longer has the structure the scraper expects."""


class ParseError(SecurityMonitorError):
    """
    A wait-time fragment could not be turned into a minute count.

    Only discards the current cycle.
    """

    def __init__(self, fragment):
        self.fragment = fragment
        super().__init__(f"Could not parse minute value from {fragment!r}")


class StoreConnectionError(SecurityMonitorError):
    """The relational store could not be (re)connected."""


class PersistenceError(SecurityMonitorError):
    """A write transaction failed and was rolled back."""
