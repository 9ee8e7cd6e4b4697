'''
Implements a utmpx record processor which decodes an accounting log, computes
session information, and renders records, sessions and events as report rows.
'''

import logging
from mac_artifacts import common
from mac_artifacts import entries
from mac_utmpx import recorditerator
from mac_utmpx import sessionstates
from mac_utmpx import utmpxrecord

CONFIG_UTMPX_SECTION = "utmpx"
DEFAULT_UTMPX_CONFIG = {
  "layout": "macos",
  "byte_order": "little",
  "default_host": "localhost",
  "output_format": "csv",
}

RECORD_HEADER = [
  "login_name",
  "id",
  "tty_name",
  "pid",
  "logon_type",
  "timestamp",
  "hostname",
]

SESSION_HEADER = [
  "login_name",
  "session_key",
  "tty_name",
  "pid",
  "hostname",
  "start",
  "end",
  "duration",
  "reason",
]

EVENT_HEADER = ["event", "record_index", "offset"] + RECORD_HEADER


class SessionValidationError(ValueError):
  '''
  Raised by strictCheck, problems lists what was found.
  '''

  def __init__(self, problems):
    self.problems = problems
    super(SessionValidationError, self).__init__("; ".join(problems))


class RecordProcessor(object):

  def __init__(self, config_file=None):
    self._L = logging.getLogger(self.__class__.__name__)
    self._config = common.loadConfig(config_file,
                                     CONFIG_UTMPX_SECTION,
                                     DEFAULT_UTMPX_CONFIG)
    self.layout = utmpxrecord.getLayout(self._config["layout"],
                                        byte_order=self._config["byte_order"])
    self.default_host = self._config["default_host"]
    self.output_format = self._config["output_format"]


  def iterRecords(self, source):
    '''
    Lazy iterator of records from a bytes-like object or binary stream.
    '''
    return recorditerator.UtmpxRecordIterator(source, layout=self.layout)


  def processStream(self, source):
    '''
    Decode a log and reconstruct its sessions in a single pass.

    Args:
      source: bytes-like log contents or a binary stream

    Returns:
      SessionResult
    '''
    records = self.iterRecords(source)
    result = sessionstates.reconstructSessions(records)
    self._L.info("Processed %d records into %d sessions and %d events",
                 records.c_record, len(result.sessions), len(result.events))
    return result


  def recordMap(self, record):
    host = record.host
    if host == "":
      host = self.default_host
    return {
      "login_name": record.user,
      "id": record.sessionKey,
      "tty_name": record.line,
      "pid": record.pid,
      "logon_type": record.typeName,
      "timestamp": record.timestamp,
      "hostname": host,
    }


  def recordEntries(self, records):
    return [entries.unsafeEntryFromMap(self.recordMap(record), RECORD_HEADER) for record in records]


  def sessionEntries(self, sessions):
    rows = []
    for session in sessions:
      valmap = {
        "login_name": session.user,
        "session_key": session.key,
        "tty_name": session.line,
        "pid": session.pid,
        "hostname": session.host or self.default_host,
        "start": session.start,
        "end": session.end,
        "duration": session.duration,
        "reason": session.reason,
      }
      rows.append(entries.unsafeEntryFromMap(valmap, SESSION_HEADER))
    return rows


  def eventEntries(self, events):
    rows = []
    for event in events:
      valmap = self.recordMap(event.record)
      valmap["event"] = event.kind
      valmap["record_index"] = event.record.index
      valmap["offset"] = event.record.offset
      rows.append(entries.unsafeEntryFromMap(valmap, EVENT_HEADER))
    return rows


def inWindow(timestamp, date_start=None, date_end=None):
  '''
  True if timestamp is within [date_start, date_end]. Either bound may be None.

  A None timestamp is only in the unbounded window.
  '''
  if timestamp is None:
    return date_start is None and date_end is None
  if date_start is not None and timestamp < date_start:
    return False
  if date_end is not None and timestamp > date_end:
    return False
  return True


def filterSessions(sessions, date_start=None, date_end=None):
  '''
  Sessions overlapping the window [date_start, date_end].

  Open sessions extend to the end of time. Either bound may be None. A session
  without a start time is kept only when the window is unbounded.
  '''
  result = []
  for session in sessions:
    if session.start is None:
      if inWindow(None, date_start, date_end):
        result.append(session)
      continue
    if date_end is not None and session.start > date_end:
      continue
    if date_start is not None and session.end is not None and session.end < date_start:
      continue
    result.append(session)
  return result


def filterRecords(records, date_start=None, date_end=None):
  for record in records:
    if inWindow(record.timestamp, date_start, date_end):
      yield record


def filterEvents(events, date_start=None, date_end=None):
  return [event for event in events if inWindow(event.record.timestamp, date_start, date_end)]


def strictCheck(result):
  '''
  Reject a SessionResult with open sessions, unknown record types, orphan
  logouts or a truncated log.

  Raises:
    SessionValidationError
  '''
  problems = []
  for session in result.sessions:
    if session.isOpen:
      problems.append("session {}/{} still open".format(session.key, session.pid))
  for event in result.events:
    if isinstance(event, sessionstates.UnknownRecordType):
      problems.append("unknown record type {} at record {}".format(event.record.type, event.record.index))
    elif isinstance(event, sessionstates.OrphanLogout):
      problems.append("orphan logout for {}/{} at record {}".format(
        event.record.sessionKey, event.record.pid, event.record.index))
  if result.truncated is not None:
    problems.append("truncated record at offset {}".format(result.truncated.offset))
  if len(problems) > 0:
    raise SessionValidationError(problems)
  return result
