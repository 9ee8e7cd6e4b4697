import pytest

from mac_artifacts.marshaler import ForeignMarshaler
from mac_utmpx.utmpxrecord import RecordType
from utmpxstreams import buildStream, makeRecord


@pytest.fixture
def marshaler():
    return ForeignMarshaler()


@pytest.fixture
def login_logout_stream():
    return buildStream([
        makeRecord(RecordType.SIGNATURE, ident=b"\0\0\0\0", t=1, user="utmpx-1.00", line="", pid=0),
        makeRecord(RecordType.BOOT_TIME, ident=b"\0\0\0\0", t=5, user="", line="", pid=1),
        makeRecord(RecordType.USER_PROCESS, t=10),
        makeRecord(RecordType.USER_PROCESS, ident=b"s002", t=20, pid=200, user="bob", line="ttys002", host="10.0.0.7"),
        makeRecord(RecordType.DEAD_PROCESS, t=50),
    ])
