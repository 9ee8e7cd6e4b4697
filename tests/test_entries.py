import datetime
import io
import json

import pytest

from mac_artifacts import entries
from mac_artifacts.common import epochToDateTime

HEADER = ["name", "count", "when"]


def test_initialize_map():
    assert entries.initializeMapToEmptyString(HEADER) == {"name": "", "count": "", "when": ""}


def test_entry_from_map_orders_by_header():
    assert entries.entryFromMap({"when": 3, "name": 1, "count": 2}, HEADER) == [1, 2, 3]


@pytest.mark.parametrize("valmap,header", [
    ({"name": 1}, HEADER),
    ({}, []),
])
def test_entry_from_map_rejects_mismatch(valmap, header):
    with pytest.raises(ValueError):
        entries.entryFromMap(valmap, header)


def test_unsafe_entry_from_map():
    valmap = {"name": "alice", "when": epochToDateTime(10), "extra": "ignored"}
    assert entries.unsafeEntryFromMap(valmap, HEADER) == ["alice", "", "1970-01-01T00:00:10+00:00"]


@pytest.mark.parametrize("value,expected", [
    (None, ""),
    (True, "true"),
    (5, "5"),
    (("a", "b"), "a,b"),
    (datetime.timedelta(seconds=90), "0:01:30"),
])
def test_value_to_string(value, expected):
    assert entries.valueToString(value) == expected


def test_csv_writer():
    stream = io.StringIO()
    writer = entries.EntryWriter(stream, output_format="csv")
    writer.writeHeader(HEADER)
    writer.writeAll([["alice", 1, None], ["bob, jr", 2, "x"]])
    lines = stream.getvalue().splitlines()
    assert lines == ["name,count,when", "alice,1,", '"bob, jr",2,x']
    assert writer.count == 2


def test_json_writer():
    stream = io.StringIO()
    writer = entries.EntryWriter(stream, output_format="json")
    writer.writeHeader(HEADER)
    writer.write(["alice", 1, None])
    assert json.loads(stream.getvalue()) == {"name": "alice", "count": "1", "when": ""}


def test_writer_rejects_unknown_format():
    with pytest.raises(ValueError):
        entries.EntryWriter(io.StringIO(), output_format="xlsx")


def test_write_requires_header():
    with pytest.raises(ValueError):
        entries.EntryWriter(io.StringIO()).write(["x"])
