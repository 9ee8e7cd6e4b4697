import pytest

from mac_utmpx import utmpxrecord
from mac_utmpx.utmpxrecord import MACOS_LAYOUT, WIDE_LAYOUT, RecordType, UtmpxRecord
from utmpxstreams import makeRecord


def test_layout_sizes():
    assert MACOS_LAYOUT.size == 628
    assert WIDE_LAYOUT.size == 636


def test_decode_fields():
    record = makeRecord(RecordType.USER_PROCESS, ident=b"s003", t=1600000000, usec=123456,
                        pid=4242, user="alice", line="ttys003", host="192.168.1.20")
    decoded = MACOS_LAYOUT.decode(MACOS_LAYOUT.encode(record), index=3, offset=1884)
    assert decoded == record._replace(index=3, offset=1884)
    assert decoded.recordType == RecordType.USER_PROCESS
    assert decoded.typeName == "USER_PROCESS"
    assert decoded.sessionKey == "s003"
    assert decoded.timestamp.isoformat() == "2020-09-13T12:26:40.123456+00:00"


def test_field_offsets():
    data = MACOS_LAYOUT.encode(makeRecord(RecordType.DEAD_PROCESS, ident=b"ab\0\0", t=7, pid=9,
                                          user="u", line="l", host="h"))
    assert data[0:1] == b"u"
    assert data[256:260] == b"ab\0\0"
    assert data[260:261] == b"l"
    assert data[292:296] == (9).to_bytes(4, "little")
    assert data[296:298] == (8).to_bytes(2, "little")
    assert data[300:304] == (7).to_bytes(4, "little")
    assert data[308:309] == b"h"
    assert data[564:] == b"\0" * 64


def test_wide_layout_big_endian():
    layout = utmpxrecord.getLayout("wide", byte_order="big")
    record = makeRecord(RecordType.LOGIN_PROCESS, t=2 ** 40)
    data = layout.encode(record)
    assert len(data) == 636
    assert data[300:308] == (2 ** 40).to_bytes(8, "big")
    assert layout.decode(data) == record


def test_unknown_type_is_preserved():
    record = MACOS_LAYOUT.decode(MACOS_LAYOUT.encode(makeRecord(42)))
    assert record.type == 42
    assert record.recordType is None
    assert record.typeName == "UNKNOWN(42)"


def test_bounded_string_stops_at_nul_and_drops_non_printables():
    assert utmpxrecord.boundedString(b"ttys001\0garbage") == "ttys001"
    assert utmpxrecord.boundedString(b"a\x01b") == "ab"
    assert utmpxrecord.boundedString(b"\xff") == "\ufffd"


@pytest.mark.parametrize("ident,key", [
    (b"s001", "s001"),
    (b"7\0\0\0", "7"),
    (b"\0\0\0\0", "00000000"),
    (b"\x01\x02\x03\x04", "01020304"),
    (b"\0abc", "00616263"),
    (b"abc\0", "abc"),
])
def test_session_key(ident, key):
    assert utmpxrecord.sessionKey(ident) == key


def test_unknown_layout_and_byte_order():
    with pytest.raises(ValueError):
        utmpxrecord.getLayout("solaris")
    with pytest.raises(ValueError):
        utmpxrecord.getLayout("macos", byte_order="middle")


def test_record_accepts_text_id():
    assert UtmpxRecord(id="s001").id == b"s001"


def test_long_field_is_cut_at_a_character_boundary():
    line = "a" + "é" * 20
    record = makeRecord(RecordType.USER_PROCESS, line=line)
    decoded = MACOS_LAYOUT.decode(MACOS_LAYOUT.encode(record))
    assert decoded.line == "a" + "é" * 15
    assert "\ufffd" not in decoded.line


def test_whitespace_and_control_characters_are_dropped_on_decode():
    record = makeRecord(RecordType.USER_PROCESS, user=" alice\x07", host="h")
    decoded = MACOS_LAYOUT.decode(MACOS_LAYOUT.encode(record))
    assert decoded.user == "alice"
    assert decoded.host == "h"


def test_out_of_range_time_has_no_timestamp():
    layout = utmpxrecord.getLayout("wide")
    record = layout.decode(layout.encode(makeRecord(RecordType.LOGIN_PROCESS, t=2 ** 40)))
    assert record.tv_sec == 2 ** 40
    assert record.timestamp is None
