"""
Shared fixtures: a capture timestamp and a throwaway SQLite store.
"""

import sys
from datetime import datetime
from pathlib import Path

import pytest
import pytz

# Add project root and this directory to path
sys.path.append(str(Path(__file__).parent.parent))
sys.path.append(str(Path(__file__).parent))

from config.database import get_engine, init_database
from services.sinks import RelationalSink


@pytest.fixture
def capture_time():
    return pytz.timezone("Europe/Dublin").localize(datetime(2025, 3, 16, 10, 30))


@pytest.fixture
def sqlite_url(tmp_path):
    return f"sqlite:///{tmp_path / 'records.db'}"


@pytest.fixture
def engine(sqlite_url):
    engine = get_engine(sqlite_url)
    init_database(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def relational_sink(engine):
    sink = RelationalSink(engine)
    sink.connect()
    yield sink
    sink.close()
