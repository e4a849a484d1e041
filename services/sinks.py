"""
Persistence Sinks

Two interchangeable destinations for a cycle's records: the relational
terminalrecords table and a JSON file per calendar day. The daemon can
run either or both.
"""

import json
import logging
from pathlib import Path

from sqlalchemy import insert, text
from sqlalchemy.exc import SQLAlchemyError

from config.database import print_terminal_data
from config.models import TerminalRecord
from scraper.errors import PersistenceError, StoreConnectionError
from scraper.records import TerminalSecurityRecord
from utils.time_utils import daily_file_name

logger = logging.getLogger(__name__)


class RecordSink:
    """Something a cycle's records can be appended to."""

    name = "sink"

    def persist(self, records):
        """
        Append records.

        Returns:
            int: Number of records written
        """
        raise NotImplementedError

    def close(self):
        pass


class RelationalSink(RecordSink):
    """
    Appends records to terminalrecords over one long-lived connection.

    The connection is owned by the polling loop's thread; it is replaced
    in place by ensure_connection() when it drops.
    """

    name = "database"

    def __init__(self, engine):
        self.engine = engine
        self.connection = None

    def connect(self):
        try:
            self.connection = self.engine.connect()
        except SQLAlchemyError as e:
            self.connection = None
            raise StoreConnectionError(f"Could not connect to database: {e}") from e
        logger.info("Connected to database")

    def is_alive(self):
        """Check the connection is open and answers a trivial query."""
        conn = self.connection
        if conn is None or conn.closed or conn.invalidated:
            return False

        try:
            with conn.begin():
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.warning(f"Database liveness check failed: {e}")
            return False

    def ensure_connection(self):
        """
        Re-establish the connection if it was lost.

        Returns:
            bool: True if a new connection was opened

        Raises:
            StoreConnectionError: If reconnecting fails
        """
        if self.is_alive():
            return False

        if self.connection is not None:
            logger.warning("Database connection lost, reconnecting...")
            self.close()

        self.connect()
        return True

    def dump_rows(self):
        """Log every row currently stored."""
        if self.connection is None:
            raise StoreConnectionError("Not connected to database")
        try:
            return print_terminal_data(self.connection)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not read terminalrecords: {e}") from e

    def persist(self, records):
        if not records:
            return 0
        if self.connection is None:
            raise PersistenceError("Not connected to database")

        rows = [
            {"terminal": r.terminal, "wait_len": r.wait_minutes, "timestamp": r.timestamp}
            for r in records
        ]

        logger.info(f"[{self.name}] Creating new rows...")
        try:
            # Single multi-row INSERT; begin() rolls back if it raises
            with self.connection.begin():
                self.connection.execute(insert(TerminalRecord).values(rows))
        except SQLAlchemyError as e:
            logger.error(f"[{self.name}] Insert of {len(rows)} rows rolled back: {e}")
            raise PersistenceError(f"Could not insert terminal records: {e}") from e

        logger.info(f"[{self.name}] Successfully added {len(rows)} rows")
        return len(rows)

    def close(self):
        if self.connection is None:
            return
        try:
            self.connection.close()
        except SQLAlchemyError as e:
            logger.warning(f"Error closing database connection: {e}")
        finally:
            self.connection = None


class JsonFileSink(RecordSink):
    """
    Appends records to ``<data_dir>/<year>-<Month>-<day>.json``.

    Read, append, rewrite: only one process may write to data_dir. The
    rewrite goes to a sibling ``.tmp`` file that then replaces the day
    file, so a crash mid-write leaves the previous contents intact.
    """

    name = "json"

    def __init__(self, data_dir="./data"):
        self.data_dir = Path(data_dir)

    def path_for(self, moment):
        return self.data_dir / daily_file_name(moment)

    def _load(self, path):
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, list):
            raise ValueError(f"{path} does not contain a JSON array")
        return data

    def persist(self, records):
        if not records:
            return 0

        path = self.path_for(records[0].timestamp)
        tmp_path = path.with_name(path.name + ".tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            data = self._load(path) if path.exists() else []
            data.extend(record.to_dict() for record in records)

            tmp_path.write_text(json.dumps(data), encoding="utf-8")
            tmp_path.replace(path)
        except (OSError, ValueError) as e:
            logger.error(f"[{self.name}] Could not write {path}: {e}")
            raise PersistenceError(f"Could not write {path}: {e}") from e

        logger.info(f"[{self.name}] Appended {len(records)} records to {path}")
        return len(records)

    def read_day(self, day):
        """
        Load the records stored for a calendar day.

        Returns:
            list[TerminalSecurityRecord]: Records in write order, [] if no file
        """
        path = self.path_for(day)
        if not path.exists():
            return []
        return [TerminalSecurityRecord.from_dict(item) for item in self._load(path)]
