import io

import pytest

from mac_artifacts.common import epochToDateTime
from mac_utmpx import recordprocessor
from mac_utmpx.recordprocessor import RecordProcessor, SessionValidationError
from mac_utmpx.utmpxrecord import WIDE_LAYOUT, RecordType
from utmpxstreams import buildStream, makeRecord


def test_defaults():
    processor = RecordProcessor()
    assert processor.layout.name == "macos"
    assert processor.default_host == "localhost"
    assert processor.output_format == "csv"


def test_config(tmp_path):
    config = tmp_path / "artifacts.ini"
    config.write_text("[utmpx]\nlayout = wide\nbyte_order = big\ndefault_host = -\n")
    processor = RecordProcessor(config_file=str(config))
    assert processor.layout.size == WIDE_LAYOUT.size
    assert processor.layout.byte_order == "big"
    assert processor.default_host == "-"


def test_process_stream(login_logout_stream):
    result = RecordProcessor().processStream(io.BytesIO(login_logout_stream))
    assert [(s.user, s.reason) for s in result.sessions] == [("alice", "logout"), ("bob", "open")]
    assert [e.kind for e in result.events] == ["record", "marker"]
    assert result.truncated is None


def test_process_truncated_stream(login_logout_stream):
    result = RecordProcessor().processStream(login_logout_stream + b"\0" * 10)
    assert len(result.sessions) == 2
    assert result.truncated.remaining == 10


def test_record_entries(login_logout_stream):
    processor = RecordProcessor()
    rows = processor.recordEntries(processor.iterRecords(login_logout_stream))
    assert len(rows) == 5
    alice = dict(zip(recordprocessor.RECORD_HEADER, rows[2]))
    assert alice == {
        "login_name": "alice",
        "id": "s001",
        "tty_name": "ttys001",
        "pid": "100",
        "logon_type": "USER_PROCESS",
        "timestamp": "1970-01-01T00:00:10+00:00",
        "hostname": "localhost",
    }
    bob = dict(zip(recordprocessor.RECORD_HEADER, rows[3]))
    assert bob["hostname"] == "10.0.0.7"


def test_session_and_event_entries(login_logout_stream):
    processor = RecordProcessor()
    result = processor.processStream(login_logout_stream)
    sessions = [dict(zip(recordprocessor.SESSION_HEADER, row)) for row in processor.sessionEntries(result.sessions)]
    assert sessions[0]["end"] == "1970-01-01T00:00:50+00:00"
    assert sessions[0]["duration"] == "0:00:40"
    assert sessions[1]["end"] == ""
    assert sessions[1]["reason"] == "open"
    events = [dict(zip(recordprocessor.EVENT_HEADER, row)) for row in processor.eventEntries(result.events)]
    assert events[1]["event"] == "marker"
    assert events[1]["logon_type"] == "BOOT_TIME"
    assert events[1]["record_index"] == "1"


def test_filter_sessions(login_logout_stream):
    sessions = RecordProcessor().processStream(login_logout_stream).sessions
    assert len(recordprocessor.filterSessions(sessions)) == 2
    assert [s.user for s in recordprocessor.filterSessions(sessions, date_start=epochToDateTime(60))] == ["bob"]
    assert [s.user for s in recordprocessor.filterSessions(sessions, date_end=epochToDateTime(15))] == ["alice"]


def test_filter_records(login_logout_stream):
    records = RecordProcessor().iterRecords(login_logout_stream)
    kept = list(recordprocessor.filterRecords(records, epochToDateTime(5), epochToDateTime(20)))
    assert [r.tv_sec for r in kept] == [5, 10, 20]


def test_strict_check_passes_clean_log():
    data = buildStream([
        makeRecord(RecordType.USER_PROCESS, t=1),
        makeRecord(RecordType.DEAD_PROCESS, t=2),
    ])
    result = RecordProcessor().processStream(data)
    assert recordprocessor.strictCheck(result) is result


def test_strict_check_lists_problems():
    data = buildStream([
        makeRecord(RecordType.USER_PROCESS, ident=b"s001", t=1),
        makeRecord(RecordType.DEAD_PROCESS, ident=b"s009", t=2),
        makeRecord(77, t=3),
    ]) + b"\0"
    result = RecordProcessor().processStream(data)
    with pytest.raises(SessionValidationError) as excinfo:
        recordprocessor.strictCheck(result)
    problems = excinfo.value.problems
    assert len(problems) == 4
    assert "session s001/100 still open" in problems


@pytest.fixture
def wide_config(tmp_path):
    config = tmp_path / "wide.ini"
    config.write_text("[utmpx]\nlayout = wide\n")
    return str(config)


def wideStreamWithBadTime():
    return buildStream([
        makeRecord(RecordType.LOGIN_PROCESS, t=2 ** 40),
        makeRecord(RecordType.USER_PROCESS, t=10),
        makeRecord(RecordType.DEAD_PROCESS, t=20),
        makeRecord(RecordType.USER_PROCESS, ident=b"s002", t=30, pid=200, user="bob"),
    ], layout=WIDE_LAYOUT)


def test_process_stream_with_out_of_range_time(wide_config):
    processor = RecordProcessor(config_file=wide_config)
    result = processor.processStream(wideStreamWithBadTime())
    assert [(s.user, s.reason) for s in result.sessions] == [("alice", "logout"), ("bob", "open")]
    rows = [dict(zip(recordprocessor.SESSION_HEADER, row)) for row in processor.sessionEntries(result.sessions)]
    assert rows[0]["start"] == ""
    assert rows[0]["end"] == "1970-01-01T00:00:20+00:00"
    assert rows[0]["duration"] == ""
    records = processor.recordEntries(processor.iterRecords(wideStreamWithBadTime()))
    assert dict(zip(recordprocessor.RECORD_HEADER, records[0]))["timestamp"] == ""


def test_filters_without_timestamp(wide_config):
    processor = RecordProcessor(config_file=wide_config)
    sessions = processor.processStream(wideStreamWithBadTime()).sessions
    assert len(recordprocessor.filterSessions(sessions)) == 2
    assert [s.user for s in recordprocessor.filterSessions(sessions, date_start=epochToDateTime(0))] == ["bob"]
    records = processor.iterRecords(wideStreamWithBadTime())
    kept = list(recordprocessor.filterRecords(records, date_end=epochToDateTime(100)))
    assert [r.tv_sec for r in kept] == [10, 20, 30]
    assert recordprocessor.inWindow(None) is True
    assert recordprocessor.inWindow(None, date_end=epochToDateTime(1)) is False
