'''
Implements a python iterator over the records of a utmpx accounting log.
'''

import io
import logging
from mac_utmpx import utmpxrecord

APP_LOG_NAME = "utmpx"


class UtmpxRecordIterator(object):
  '''
  Reads a utmpx log one record at a time and acts as an iterator over the
  decoded records.

  Trailing bytes shorter than one record end the iteration; they are
  reported through truncated rather than raised.
  '''

  def __init__(self, source, layout=utmpxrecord.MACOS_LAYOUT):
    '''
    Args:
      source: bytes-like log contents, or a binary stream supporting read()
      layout: RecordLayout of the log
    '''
    self.logger = logging.getLogger(APP_LOG_NAME)
    if isinstance(source, (bytes, bytearray, memoryview)):
      source = io.BytesIO(bytes(source))
    self.source = source
    self.layout = layout
    self.c_record = 0
    self.offset = 0
    self.truncated = None
    self.done = False


  def _read(self, size):
    '''
    Read up to size bytes, retrying short reads until the stream is exhausted.
    '''
    chunks = []
    remaining = size
    while remaining > 0:
      chunk = self.source.read(remaining)
      if not chunk:
        break
      chunks.append(chunk)
      remaining -= len(chunk)
    return b"".join(chunks)


  def __iter__(self):
    return self


  def __next__(self):
    if self.done:
      raise StopIteration()
    data = self._read(self.layout.size)
    if len(data) < self.layout.size:
      self.done = True
      if len(data) > 0:
        self.truncated = utmpxrecord.TruncatedRecord(offset=self.offset, remaining=len(data))
        self.logger.warning("Truncated record at offset %d, %d of %d bytes present",
                            self.offset, len(data), self.layout.size)
      self.logger.debug("Read %d records", self.c_record)
      raise StopIteration()
    record = self.layout.decode(data, index=self.c_record, offset=self.offset)
    self.c_record = self.c_record + 1
    self.offset = self.offset + self.layout.size
    return record
