'''
Reconstructs login sessions from the ordered stream of utmpx records.

Open sessions are keyed by (session key, pid). Each record drives one
transition, in log order:

  LOGIN_PROCESS, USER_PROCESS   open a session unless one is open for the key
  DEAD_PROCESS                  close the session for the key, or orphan logout
  BOOT_TIME                     close every open session as reboot
  SHUTDOWN_TIME                 close every open session as shutdown
  anything else                 no effect, kept as an event

Sessions still open when the stream ends are returned as open.
'''

import collections
import logging
from mac_utmpx.utmpxrecord import RecordType


class SessionEvent(collections.namedtuple("SessionEvent", ["record"])):
  '''
  A record that did not open or close a session.
  '''
  __slots__ = ()
  kind = "record"


class MarkerEvent(SessionEvent):
  __slots__ = ()
  kind = "marker"


class ConfirmationEvent(SessionEvent):
  __slots__ = ()
  kind = "confirmation"


class OrphanLogout(SessionEvent):
  __slots__ = ()
  kind = "orphan_logout"


class UnknownRecordType(SessionEvent):
  __slots__ = ()
  kind = "unknown_record_type"


SessionResult = collections.namedtuple("SessionResult", ["sessions", "events", "truncated"])


class Session(object):
  '''
  One login occupancy of a terminal line by a process.

  The record that closes a session is the only thing that changes it.
  '''

  LOGOUT = "logout"
  REBOOT = "reboot"
  SHUTDOWN = "shutdown"
  OPEN = "open"

  def __init__(self, record):
    self._user = record.user
    self._line = record.line
    self._host = record.host
    self._pid = record.pid
    self._key = record.sessionKey
    self._start = record.timestamp
    self._end = None
    self._reason = Session.OPEN

  user = property(lambda self: self._user)
  line = property(lambda self: self._line)
  host = property(lambda self: self._host)
  pid = property(lambda self: self._pid)
  key = property(lambda self: self._key)
  start = property(lambda self: self._start)
  end = property(lambda self: self._end)
  reason = property(lambda self: self._reason)

  @property
  def isOpen(self):
    return self._reason == Session.OPEN

  @property
  def duration(self):
    # start or end is None when its record carried an unrepresentable time
    if self._end is None or self._start is None:
      return None
    return self._end - self._start


  def close(self, end, reason):
    if not self.isOpen:
      raise ValueError("Session {}/{} is already closed".format(self._key, self._pid))
    if reason == Session.OPEN:
      raise ValueError("A session can not be closed as open")
    self._end = end
    self._reason = reason


  def asDict(self):
    return {
      "user": self._user,
      "line": self._line,
      "host": self._host,
      "pid": self._pid,
      "key": self._key,
      "start": self._start,
      "end": self._end,
      "reason": self._reason,
    }


  def __repr__(self):
    return "Session(key={!r}, pid={}, user={!r}, start={}, end={}, reason={})".format(
      self._key, self._pid, self._user, self._start, self._end, self._reason)


class SessionStates(object):

  OPENING_TYPES = (RecordType.LOGIN_PROCESS, RecordType.USER_PROCESS)

  def __init__(self):
    self._L = logging.getLogger(self.__class__.__name__)
    self._open = collections.OrderedDict()  # keyed by (session key, pid)
    self._sessions = []
    self._events = []


  def _event(self, event):
    self._events.append(event)
    return event


  def _closeAll(self, record, reason):
    end = record.timestamp
    for session in self._open.values():
      session.close(end, reason)
    self._L.debug("%s at record %d closed %d sessions", record.typeName, record.index, len(self._open))
    self._open.clear()


  def addRecord(self, record):
    '''
    Apply one record to the session state.

    Args:
      record: UtmpxRecord, in log order

    Returns:
      (Session or event affected by the record, is_new) where is_new is True
      only when a new session was opened
    '''
    rtype = record.recordType
    key = (record.sessionKey, record.pid)
    if rtype is None:
      self._L.warning("Unknown record type %d at record %d", record.type, record.index)
      return (self._event(UnknownRecordType(record)), False, )
    if rtype in SessionStates.OPENING_TYPES:
      existing = self._open.get(key)
      if existing is None:
        session = Session(record)
        self._open[key] = session
        self._sessions.append(session)
        return (session, True, )
      # first record wins, later USER_PROCESS records do not update the session
      self._L.debug("%s for open session %s/%d", record.typeName, key[0], key[1])
      return (self._event(ConfirmationEvent(record)), False, )
    if rtype == RecordType.DEAD_PROCESS:
      session = self._open.pop(key, None)
      if session is None:
        self._L.debug("Orphan logout for %s/%d at record %d", key[0], key[1], record.index)
        return (self._event(OrphanLogout(record)), False, )
      session.close(record.timestamp, Session.LOGOUT)
      return (session, False, )
    if rtype == RecordType.BOOT_TIME:
      self._closeAll(record, Session.REBOOT)
      return (self._event(MarkerEvent(record)), False, )
    if rtype == RecordType.SHUTDOWN_TIME:
      self._closeAll(record, Session.SHUTDOWN)
      return (self._event(MarkerEvent(record)), False, )
    return (self._event(SessionEvent(record)), False, )


  def openSessions(self):
    return list(self._open.values())


  def finish(self, truncated=None):
    '''
    End the pass. Sessions still open are returned with reason Session.OPEN.

    Args:
      truncated: TruncatedRecord reported by the decoder, if any

    Returns:
      SessionResult of all sessions in start order and all events in log order
    '''
    if len(self._open) > 0:
      self._L.debug("%d sessions still open at end of log", len(self._open))
    result = SessionResult(sessions=list(self._sessions),
                           events=list(self._events),
                           truncated=truncated)
    self._open = collections.OrderedDict()
    self._sessions = []
    self._events = []
    return result


def reconstructSessions(records, truncated=None):
  '''
  Run one reconstruction pass over an iterable of records.
  '''
  states = SessionStates()
  for record in records:
    states.addRecord(record)
  if truncated is None:
    truncated = getattr(records, "truncated", None)
  return states.finish(truncated=truncated)
