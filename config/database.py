"""
Database Configuration and Management (SQLAlchemy)

Handles engine creation, table initialization and the read-only
diagnostic query for the terminal records store.
"""

import logging

from sqlalchemy import create_engine, select

from config.models import Base, TerminalRecord

logger = logging.getLogger(__name__)


def get_engine(database_url):
    """
    Create an engine for the records store.

    Args:
        database_url (str): SQLAlchemy URL, e.g. postgresql+psycopg2://...

    Returns:
        sqlalchemy.engine.Engine: Database engine
    """
    return create_engine(database_url, echo=False, pool_pre_ping=True)


def init_database(engine):
    """
    Create the terminalrecords table if it does not exist.
    """
    logger.info("Initializing database...")

    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database initialized successfully!")
    except Exception as e:
        logger.error(f"Error initializing database: {e}")
        raise


def fetch_terminal_records(connection):
    """
    Run SELECT * FROM terminalrecords on an open connection.

    The read runs in its own transaction so the connection is left idle
    for the next write.

    Returns:
        list: Rows of (terminal, wait_len, timestamp)
    """
    stmt = select(TerminalRecord.terminal, TerminalRecord.wait_len, TerminalRecord.timestamp)
    with connection.begin():
        return connection.execute(stmt).all()


def print_terminal_data(connection):
    """
    Log every stored terminal record.

    Returns:
        int: Number of rows logged
    """
    rows = fetch_terminal_records(connection)
    for terminal, wait_len, timestamp in rows:
        logger.info(f"{terminal} {wait_len} {timestamp}")
    logger.info(f"{len(rows)} rows in terminalrecords")
    return len(rows)
