'''
Extracts event tap (input monitoring) information from the foreign array of
per-tap dictionaries returned by the event tap enumeration.
'''

import collections
import datetime
import logging
from mac_artifacts import entries

HEADER = [
    "eventTapID",
    "tapPoint",
    "options",
    "eventsOfInterest",
    "tappingProcess",
    "processBeingTapped",
    "enabled",
    "minUsecLatency",
    "avgUsecLatency",
    "maxUsecLatency",
]

LATENCY_FIELDS = ["minUsecLatency", "avgUsecLatency", "maxUsecLatency"]
TEXT_FIELDS = ["tapPoint", "options", "eventsOfInterest", "tappingProcess", "processBeingTapped"]
TRUE_VALUES = ("1", "t", "true", "yes")

EventTap = collections.namedtuple("EventTap", HEADER)


class EventTapReader(object):

    def __init__(self, marshaler):
        self._L = logging.getLogger(self.__class__.__name__)
        self._marshaler = marshaler


    def _float(self, tapdict, key):
        txt = self._marshaler.decodeString(self._marshaler.valueForKey(tapdict, key))
        if txt is None:
            return 0.0
        try:
            return float(txt)
        except ValueError:
            self._L.debug("Unable to read %s='%s' as a number", key, txt)
            return 0.0


    def _bool(self, tapdict, key):
        txt = self._marshaler.decodeString(self._marshaler.valueForKey(tapdict, key))
        if txt is None:
            return False
        return txt.strip().lower() in TRUE_VALUES


    def eventTap(self, tapdict):
        '''
        Build an EventTap from one foreign tap dictionary.

        Missing entries take empty defaults.
        '''
        m = self._marshaler
        values = {
            "eventTapID": m.decodeInteger(m.valueForKey(tapdict, "eventTapID")),
            "enabled": self._bool(tapdict, "enabled"),
        }
        for key in TEXT_FIELDS:
            txt = m.decodeString(m.valueForKey(tapdict, key))
            values[key] = "" if txt is None else txt
        for key in LATENCY_FIELDS:
            values[key] = self._float(tapdict, key)
        return EventTap(**values)


    def eventTaps(self, array_handle):
        '''
        Args:
          array_handle: foreign array of tap dictionaries, possibly None

        Returns:
          list of EventTap in enumeration order
        '''
        result = []
        n = self._marshaler.length(array_handle)
        for i in range(n):
            result.append(self.eventTap(self._marshaler.itemAt(array_handle, i)))
        self._L.debug("Parsed [%d] event tap entries", len(result))
        return result


def latency(usec):
    return datetime.timedelta(microseconds=usec)


def eventTapEntries(taps):
    '''
    Report rows, in HEADER order, for a list of EventTap.
    '''
    rows = []
    for tap in taps:
        valmap = tap._asdict()
        valmap["enabled"] = "true" if tap.enabled else "false"
        for key in LATENCY_FIELDS:
            valmap[key] = str(latency(valmap[key]))
        rows.append(entries.entryFromMap(valmap, HEADER))
    return rows
