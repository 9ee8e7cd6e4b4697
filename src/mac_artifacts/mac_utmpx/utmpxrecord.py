'''
Fixed layout of the utmpx login accounting record.

Records are stored back to back with no delimiter, so record boundaries are
multiples of the layout size. Fields are decoded by explicit offsets and
widths through struct formats rather than by reinterpreting memory:

  user[256] | id[4] | line[32] | pid | type | timestamp | host[256] | reserved[64]

The on-disk macOS layout uses 32 bit seconds and microseconds (628 bytes per
record). The wide layout carries a 64 bit seconds field (636 bytes).
'''

import collections
import enum
import struct
from mac_artifacts import common

USER_SIZE = 256
ID_SIZE = 4
LINE_SIZE = 32
HOST_SIZE = 256
RESERVED_SIZE = 64

BYTE_ORDERS = {
  "little": "<",
  "big": ">",
}


class RecordType(enum.IntEnum):
  EMPTY = 0
  RUN_LEVEL = 1
  BOOT_TIME = 2
  OLD_TIME = 3
  NEW_TIME = 4
  INIT_PROCESS = 5
  LOGIN_PROCESS = 6
  USER_PROCESS = 7
  DEAD_PROCESS = 8
  ACCOUNTING = 9
  SIGNATURE = 10
  SHUTDOWN_TIME = 11


RECORD_TYPE_CODES = frozenset(t.value for t in RecordType)

TruncatedRecord = collections.namedtuple("TruncatedRecord", ["offset", "remaining"])


def boundedString(raw):
  '''
  Text of a fixed width string field: up to the first NUL, non-printables removed.
  '''
  raw = raw.split(b"\0", 1)[0]
  return common.getPrintableString(raw.decode("utf-8", errors="replace"))


def fieldBytes(txt, size):
  '''
  UTF-8 bytes of txt, at most size long, without a partial character at the end.
  '''
  raw = txt.encode("utf-8")
  if len(raw) <= size:
    return raw
  return raw[:size].decode("utf-8", errors="ignore").encode("utf-8")


def sessionKey(ident):
  '''
  Session key for a 4 byte record id.

  Printable ASCII ids are used as text without trailing NUL padding, any
  other id as hex.
  '''
  stripped = ident.rstrip(b"\0")
  if len(stripped) > 0 and all(0x20 <= b < 0x7f for b in stripped):
    return stripped.decode("ascii")
  return ident.hex()


class UtmpxRecord(collections.namedtuple("UtmpxRecord",
    ["user", "id", "line", "pid", "type", "tv_sec", "tv_usec", "host", "index", "offset"])):
  '''
  One decoded accounting record.

  type is the raw code; recordType is None for codes outside RecordType.
  index and offset locate the record in its log.
  '''
  __slots__ = ()

  def __new__(cls, user="", id=b"\0\0\0\0", line="", pid=0, type=0,
              tv_sec=0, tv_usec=0, host="", index=0, offset=0):
    if isinstance(id, str):
      id = id.encode("ascii")
    return super(UtmpxRecord, cls).__new__(cls, user, bytes(id), line, pid, type,
                                           tv_sec, tv_usec, host, index, offset)

  @property
  def recordType(self):
    if self.type in RECORD_TYPE_CODES:
      return RecordType(self.type)
    return None

  @property
  def typeName(self):
    rtype = self.recordType
    if rtype is None:
      return "UNKNOWN({})".format(self.type)
    return rtype.name

  @property
  def timestamp(self):
    return common.epochToDateTime(self.tv_sec, self.tv_usec)

  @property
  def sessionKey(self):
    return sessionKey(self.id)


class RecordLayout(object):
  '''
  A fixed size record layout for a given time field format and byte order.
  '''

  def __init__(self, name, time_format, byte_order="little"):
    if byte_order not in BYTE_ORDERS:
      raise ValueError("Unknown byte order: {}".format(byte_order))
    self.name = name
    self.byte_order = byte_order
    self._time_format = time_format
    fmt = "{order}{user}s{ident}s{line}sih2x{time}{host}s{reserved}x".format(
      order=BYTE_ORDERS[byte_order],
      user=USER_SIZE,
      ident=ID_SIZE,
      line=LINE_SIZE,
      time=time_format,
      host=HOST_SIZE,
      reserved=RESERVED_SIZE)
    self._struct = struct.Struct(fmt)
    self.size = self._struct.size


  def withByteOrder(self, byte_order):
    return RecordLayout(self.name, self._time_format, byte_order=byte_order)


  def decode(self, data, index=0, offset=0):
    '''
    Decode exactly one record.

    Args:
      data: bytes of length size
      index: position of the record in its log
      offset: byte offset of the record in its log

    Returns:
      UtmpxRecord
    '''
    user, ident, line, pid, rtype, sec, usec, host = self._struct.unpack(data)
    return UtmpxRecord(user=boundedString(user),
                       id=ident,
                       line=boundedString(line),
                       pid=pid,
                       type=rtype,
                       tv_sec=sec,
                       tv_usec=usec,
                       host=boundedString(host),
                       index=index,
                       offset=offset)


  def encode(self, record):
    '''
    Bytes of one record in this layout.

    Strings longer than their field are cut at a character boundary. Decoding
    gives back the text up to the first NUL with surrounding whitespace and
    non-printable characters removed, so only fields already in that form
    survive encode then decode unchanged.
    '''
    return self._struct.pack(fieldBytes(record.user, USER_SIZE),
                             record.id,
                             fieldBytes(record.line, LINE_SIZE),
                             record.pid,
                             record.type,
                             record.tv_sec,
                             record.tv_usec,
                             fieldBytes(record.host, HOST_SIZE))


MACOS_LAYOUT = RecordLayout("macos", "ii")
WIDE_LAYOUT = RecordLayout("wide", "qi4x")

LAYOUTS = {
  MACOS_LAYOUT.name: MACOS_LAYOUT,
  WIDE_LAYOUT.name: WIDE_LAYOUT,
}


def getLayout(name, byte_order="little"):
  try:
    layout = LAYOUTS[name]
  except KeyError:
    raise ValueError("Unknown record layout: {}".format(name))
  if byte_order != layout.byte_order:
    layout = layout.withByteOrder(byte_order)
  return layout
