'''
Row helpers and writers for report output.

A report is a header (list of column names) followed by entries, each a list
of values in header order.
'''

import csv
import datetime
import json
import logging

OUTPUT_FORMATS = ["csv", "json"]


def initializeMapToEmptyString(header):
    return {h: "" for h in header}


def entryFromMap(valmap, header):
    '''
    Entry for valmap in header order.

    Args:
      valmap: dictionary with exactly the keys of header
      header: list of column names

    Returns:
      list of values
    '''
    if len(header) == 0:
        raise ValueError("entryFromMap - size of input header is 0")
    if len(valmap) != len(header):
        raise ValueError("entryFromMap - size of map [{}] does not match size of header [{}]".format(
            len(valmap), len(header)))
    return [valmap[h] for h in header]


def valueToString(value):
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime.datetime):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return ",".join(valueToString(v) for v in value)
    if isinstance(value, dict):
        return json.dumps(value)
    return str(value)


def unsafeEntryFromMap(valmap, header):
    '''
    Entry for valmap in header order, missing keys as "" and values as strings.
    '''
    if len(header) == 0:
        raise ValueError("unsafeEntryFromMap - size of input header is 0")
    return [valueToString(valmap.get(h)) for h in header]


class EntryWriter(object):
    '''
    Writes a header and entries to a text stream as CSV or JSON lines.
    '''

    def __init__(self, stream, output_format="csv"):
        self._L = logging.getLogger(self.__class__.__name__)
        if output_format not in OUTPUT_FORMATS:
            raise ValueError("Unknown output format: {}".format(output_format))
        self.output_format = output_format
        self._stream = stream
        self._header = None
        self._csv = None
        if output_format == "csv":
            self._csv = csv.writer(stream)
        self.count = 0


    def writeHeader(self, header):
        self._header = list(header)
        if self._csv is not None:
            self._csv.writerow(self._header)


    def write(self, entry):
        if self._header is None:
            raise ValueError("writeHeader must be called before write")
        values = [valueToString(v) for v in entry]
        if self._csv is not None:
            self._csv.writerow(values)
        else:
            self._stream.write(json.dumps(dict(zip(self._header, values))))
            self._stream.write("\n")
        self.count += 1


    def writeAll(self, entries):
        for entry in entries:
            self.write(entry)
        self._L.debug("Wrote %d entries as %s", self.count, self.output_format)
