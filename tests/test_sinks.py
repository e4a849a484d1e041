"""
Tests for the relational and daily JSON file sinks.
"""

import json
from datetime import timedelta
from pathlib import Path

import pytest

from config.database import fetch_terminal_records, get_engine, print_terminal_data
from scraper.errors import PersistenceError, StoreConnectionError
from scraper.records import TerminalSecurityRecord, build_terminal_records
from services.sinks import JsonFileSink, RelationalSink


def cycle_records(timestamp, t1, t2):
    return [
        TerminalSecurityRecord("T1", timestamp, t1),
        TerminalSecurityRecord("T2", timestamp, t2),
    ]


# ----------------- JSON file sink -----------------

def test_json_sink_creates_daily_file(tmp_path, capture_time):
    sink = JsonFileSink(tmp_path / "data")

    assert sink.persist(cycle_records(capture_time, 7, 3)) == 2

    path = tmp_path / "data" / "2025-March-16.json"
    assert path.exists()
    assert json.loads(path.read_text(encoding="utf-8")) == [
        {"terminal": "T1", "timestamp": "2025-03-16T10:30:00+00:00", "waitlen": 7},
        {"terminal": "T2", "timestamp": "2025-03-16T10:30:00+00:00", "waitlen": 3},
    ]


def test_json_sink_round_trip_across_cycles(tmp_path, capture_time):
    sink = JsonFileSink(tmp_path)
    written = []
    for cycle, (t1, t2) in enumerate([(7, 3), (12, 0), (25, 18)]):
        records = cycle_records(capture_time + timedelta(minutes=10 * cycle), t1, t2)
        sink.persist(records)
        written.extend(records)

    read_back = sink.read_day(capture_time.date())

    assert read_back == written
    path = sink.path_for(capture_time)
    assert path.read_text(encoding="utf-8") == json.dumps([r.to_dict() for r in read_back])


def test_json_sink_splits_by_date(tmp_path, capture_time):
    sink = JsonFileSink(tmp_path)
    sink.persist(cycle_records(capture_time, 1, 2))
    sink.persist(cycle_records(capture_time + timedelta(days=1), 3, 4))

    assert len(sink.read_day(capture_time.date())) == 2
    assert [r.wait_minutes for r in sink.read_day(capture_time + timedelta(days=1))] == [3, 4]


def test_json_sink_ignores_empty_cycle(tmp_path):
    sink = JsonFileSink(tmp_path / "data")
    assert sink.persist([]) == 0
    assert not (tmp_path / "data").exists()


def test_json_sink_read_missing_day(tmp_path, capture_time):
    assert JsonFileSink(tmp_path).read_day(capture_time) == []


def test_json_sink_corrupt_file(tmp_path, capture_time):
    sink = JsonFileSink(tmp_path)
    sink.path_for(capture_time).write_text('{"not": "a list"}', encoding="utf-8")

    with pytest.raises(PersistenceError):
        sink.persist(cycle_records(capture_time, 7, 3))


def test_json_sink_leaves_no_temp_file(tmp_path, capture_time):
    sink = JsonFileSink(tmp_path)
    sink.persist(cycle_records(capture_time, 7, 3))
    sink.persist(cycle_records(capture_time + timedelta(minutes=10), 12, 0))

    assert [p.name for p in tmp_path.iterdir()] == ["2025-March-16.json"]


def test_json_sink_failed_rewrite_keeps_previous_day(tmp_path, capture_time, monkeypatch):
    sink = JsonFileSink(tmp_path)
    sink.persist(cycle_records(capture_time, 7, 3))
    path = sink.path_for(capture_time)
    before = path.read_text(encoding="utf-8")

    def fail_replace(self, target):
        raise OSError("disk full")

    monkeypatch.setattr(Path, "replace", fail_replace)

    with pytest.raises(PersistenceError):
        sink.persist(cycle_records(capture_time + timedelta(minutes=10), 12, 0))

    assert path.read_text(encoding="utf-8") == before


# ----------------- Relational sink -----------------

def test_relational_sink_inserts_cycle(relational_sink, capture_time):
    assert relational_sink.persist(cycle_records(capture_time, 7, 3)) == 2

    rows = fetch_terminal_records(relational_sink.connection)
    naive = capture_time.replace(tzinfo=None)
    assert sorted(tuple(row) for row in rows) == [("T1", 7, naive), ("T2", 3, naive)]


def test_relational_sink_appends_every_cycle(relational_sink, capture_time):
    relational_sink.persist(cycle_records(capture_time, 7, 3))
    relational_sink.persist(cycle_records(capture_time + timedelta(minutes=10), 7, 3))

    assert len(fetch_terminal_records(relational_sink.connection)) == 4


def test_relational_sink_appends_repeated_timestamps(relational_sink, capture_time):
    # Two cycles captured at the same instant are both kept
    assert relational_sink.persist(cycle_records(capture_time, 7, 3)) == 2
    assert relational_sink.persist(cycle_records(capture_time, 7, 3)) == 2

    # Repeated terminal ids within one cycle are kept too
    duplicates = build_terminal_records(["= 1 mins", "= 2 mins"], ("T1", "T1"), capture_time)
    assert relational_sink.persist(duplicates) == 2

    rows = fetch_terminal_records(relational_sink.connection)
    naive = capture_time.replace(tzinfo=None)
    assert len(rows) == 6
    assert sorted(row.wait_len for row in rows if row.terminal == "T1") == [1, 2, 7, 7]
    assert all(row.timestamp == naive for row in rows)


def test_relational_sink_is_all_or_nothing(relational_sink, capture_time):
    relational_sink.persist(cycle_records(capture_time, 7, 3))
    later = capture_time + timedelta(minutes=10)

    # Second row violates the wait_len >= 0 check
    with pytest.raises(PersistenceError):
        relational_sink.persist([
            TerminalSecurityRecord("T1", later, 9),
            TerminalSecurityRecord("T2", later, -1),
        ])

    # Second row violates NOT NULL on wait_len
    with pytest.raises(PersistenceError):
        relational_sink.persist([
            TerminalSecurityRecord("T1", later, 9),
            TerminalSecurityRecord("T2", later, None),
        ])

    assert len(fetch_terminal_records(relational_sink.connection)) == 2

    # Connection is still usable after the rollbacks
    assert relational_sink.persist(cycle_records(later, 9, 4)) == 2


def test_relational_sink_dump_rows(relational_sink, capture_time):
    relational_sink.persist(cycle_records(capture_time, 7, 3))

    assert relational_sink.dump_rows() == 2
    assert print_terminal_data(relational_sink.connection) == 2


def test_relational_sink_without_connection(engine, capture_time):
    sink = RelationalSink(engine)

    assert sink.is_alive() is False
    with pytest.raises(PersistenceError):
        sink.persist(cycle_records(capture_time, 7, 3))
    with pytest.raises(StoreConnectionError):
        sink.dump_rows()


def test_reconnects_closed_connection(relational_sink, capture_time):
    assert relational_sink.ensure_connection() is False

    relational_sink.connection.close()
    assert relational_sink.is_alive() is False
    assert relational_sink.ensure_connection() is True
    assert relational_sink.is_alive() is True

    assert relational_sink.persist(cycle_records(capture_time, 7, 3)) == 2


def test_reconnects_invalidated_connection(relational_sink):
    relational_sink.connection.invalidate()

    assert relational_sink.is_alive() is False
    assert relational_sink.ensure_connection() is True
    assert relational_sink.is_alive() is True


def test_reconnect_failure(tmp_path):
    engine = get_engine(f"sqlite:///{tmp_path / 'missing' / 'dir' / 'records.db'}")
    sink = RelationalSink(engine)

    with pytest.raises(StoreConnectionError):
        sink.ensure_connection()
    assert sink.connection is None
    engine.dispose()
