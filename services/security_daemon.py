"""
Security Times Daemon

Polls the airport departures page every ten minutes, extracts the
per-terminal security queue times and appends them to the configured
sinks.

Fails fast: apart from reconnecting a dropped database connection, any
error ends the process with a non-zero status and restarting it is left
to the supervisor (systemd, Docker restart policy, ...).
"""

import logging
import os
import sys
import time
from pathlib import Path

from dotenv import load_dotenv
from sqlalchemy.exc import SQLAlchemyError

# Load env vars
load_dotenv()

# Add project root to path
sys.path.append(str(Path(__file__).parent.parent))

from config.database import get_engine
from config.settings import Settings
from scraper.errors import ConfigError, SecurityMonitorError, StructureError
from scraper.extraction import (
    EMPHASIS_TAG,
    SECURITY_TIMES_MARKER,
    find_marker_node,
    harvest_sibling_text,
)
from scraper.fetcher import create_http_session, fetch_page, parse_document
from scraper.records import build_terminal_records, validate_harvest
from services.sinks import JsonFileSink, RelationalSink
from utils.time_utils import get_timezone, now_in_timezone

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def log_handlers(log_file="security_daemon.log"):
    """An empty or None log_file means console logging only."""
    handlers = [logging.StreamHandler()]
    if log_file:
        handlers.insert(0, logging.FileHandler(log_file))
    return handlers


def configure_logging(log_file="security_daemon.log"):
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT, handlers=log_handlers(log_file))


def extract_wait_time_fragments(soup, marker=SECURITY_TIMES_MARKER):
    """
    Locate the security times region and harvest its emphasis text.

    Raises:
        StructureError: If no element carries the marker value
    """
    marker_node = find_marker_node(soup, marker)
    if marker_node is None:
        raise StructureError(f"Unable to find tag with attribute '{marker}'")

    start = marker_node.contents[0] if marker_node.contents else None
    if start is None:
        logger.warning(f"No children of tag with attribute '{marker}'")

    return harvest_sibling_text(start, EMPHASIS_TAG)


class SecurityTimesPoller:
    """
    Runs fetch -> parse -> locate -> harvest -> build -> persist cycles.

    Args:
        settings (Settings): Process configuration
        http_session: requests.Session used for the page fetch
        relational_sink (RelationalSink): Database sink, None without DB_URL
        file_sink (JsonFileSink): Daily JSON sink, None unless WRITE_JSON
        sleep (callable): Blocking sleep between cycles
        clock (callable): Returns the capture timestamp
    """

    def __init__(self, settings, http_session=None, relational_sink=None,
                 file_sink=None, sleep=time.sleep, clock=None):
        self.settings = settings
        self.http_session = http_session or create_http_session()
        self.relational_sink = relational_sink
        self.file_sink = file_sink
        self.sleep = sleep
        self.clock = clock or (lambda: now_in_timezone(settings.timezone))
        self.cycle_count = 0

    @classmethod
    def from_settings(cls, settings):
        # Fail on a bad TIMEZONE before connecting to anything
        get_timezone(settings.timezone)

        relational_sink = None
        if settings.uses_database:
            try:
                engine = get_engine(settings.db_url)
            except SQLAlchemyError as e:
                raise ConfigError(f"Invalid DB_URL: {e}") from e
            relational_sink = RelationalSink(engine)
            relational_sink.connect()

        file_sink = JsonFileSink(settings.data_dir) if settings.write_json else None
        return cls(settings, relational_sink=relational_sink, file_sink=file_sink)

    def run_cycle(self):
        """
        Run one polling cycle.

        Returns:
            list[TerminalSecurityRecord]: The cycle's records, [] if discarded

        Raises:
            SecurityMonitorError: On any fatal failure
        """
        self.cycle_count += 1
        logger.info(f"=== Cycle #{self.cycle_count} ===")

        # Restablish connection if lost
        if self.relational_sink is not None and self.relational_sink.ensure_connection():
            logger.info("Database connection established")

        logger.info("Getting and submitting airport departure data.")
        html_content = fetch_page(self.http_session, self.settings.page_url, self.settings.request_timeout)
        timestamp = self.clock()

        soup = parse_document(html_content)
        fragments = extract_wait_time_fragments(soup)
        validate_harvest(fragments, self.settings.terminals)

        records = build_terminal_records(fragments, self.settings.terminals, timestamp)

        # Only display current data in db if specified
        if self.settings.show_rows and self.relational_sink is not None:
            self.relational_sink.dump_rows()

        if not records:
            logger.warning("Cycle discarded, no records to persist")
            return records

        for record in records:
            logger.info(f"{record.terminal}: {record.wait_minutes} min at {record.timestamp.isoformat()}")

        self.persist(records)
        return records

    def persist(self, records):
        if self.relational_sink is not None and self.settings.add_rows:
            self.relational_sink.persist(records)
        else:
            logger.info("ADD_ROWS not set to true so not adding rows")

        if self.file_sink is not None:
            self.file_sink.persist(records)

    def run_forever(self, max_cycles=None):
        """
        Poll until a fatal error, or until ``max_cycles`` cycles have run.
        """
        while max_cycles is None or self.cycle_count < max_cycles:
            self.run_cycle()

            if max_cycles is not None and self.cycle_count >= max_cycles:
                break

            interval = self.settings.poll_interval
            logger.info(f"Finished submitting data, loop will begin again in {interval} seconds.")
            self.sleep(interval)

    def close(self):
        for sink in (self.relational_sink, self.file_sink):
            if sink is not None:
                sink.close()


def run_daemon(once=False, dotenv_path=None, poller=None):
    """
    Daemon entry point.

    Returns:
        int: Process exit status, 1 after a fatal error
    """
    if poller is None:
        if dotenv_path:
            load_dotenv(dotenv_path=dotenv_path, override=True)
        # LOG_FILE= (empty) disables the file log
        configure_logging(os.getenv("LOG_FILE", "security_daemon.log"))

    logger.info("Starting Security Times Daemon")

    try:
        if poller is None:
            poller = SecurityTimesPoller.from_settings(Settings.from_env())
    except SecurityMonitorError as e:
        logger.critical(f"Could not start daemon: {e}")
        return 1

    try:
        poller.run_forever(max_cycles=1 if once else None)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    except SecurityMonitorError as e:
        logger.critical(f"Fatal error in cycle #{poller.cycle_count}: {e}", exc_info=True)
        return 1
    finally:
        poller.close()
        logger.info("Security Times Daemon stopped")

    return 0


def main():
    sys.exit(run_daemon())


if __name__ == "__main__":
    main()
