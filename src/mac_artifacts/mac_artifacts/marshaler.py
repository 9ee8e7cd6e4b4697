'''
Implements conversion of foreign (Foundation) object handles into portable values.

A foreign handle is whatever the acquisition layer hands over for an NSArray,
NSDictionary, NSString, NSNumber or NSURL, typically a pyobjc proxy. Handles
are recognized by the selectors they answer to, so no bridge is imported
here. A handle of None is the foreign "nil" and always means empty, never
an error.

Every accessor is total: a null or unreadable handle produces the
documented default and the pass continues.
'''

import logging
from mac_artifacts import common
from mac_artifacts import urlcomponents

CONFIG_MARSHAL_SECTION = "marshal"
DEFAULT_MARSHAL_CONFIG = {
    "max_depth": "64",
}

ARRAY = "array"
DICTIONARY = "dictionary"
STRING = "string"
NUMBER = "number"
URL = "url"


def _selector(handle, name):
    method = getattr(handle, name, None)
    if callable(method):
        return method
    return None


def handleKind(handle):
    '''
    Classify a foreign handle.

    Python values a bridge may already have converted are accepted alongside
    the Foundation selector surface.

    Args:
      handle: foreign handle, possibly None

    Returns:
      ARRAY, DICTIONARY, STRING, NUMBER, URL or None when null or unrecognized
    '''
    if handle is None:
        return None
    if isinstance(handle, (str, bytes, bytearray)):
        return STRING
    if isinstance(handle, (int, float)):
        return NUMBER
    if isinstance(handle, dict):
        return DICTIONARY
    if isinstance(handle, (list, tuple)):
        return ARRAY
    if _selector(handle, "objectForKey_") is not None:
        return DICTIONARY
    if _selector(handle, "objectAtIndex_") is not None:
        return ARRAY
    if _selector(handle, "UTF8String") is not None:
        return STRING
    if _selector(handle, "scheme") is not None and _selector(handle, "host") is not None:
        return URL
    if _selector(handle, "intValue") is not None:
        return NUMBER
    return None


class ForeignMarshaler(object):
    '''
    Total accessors over foreign collections, producing freshly owned portable values.
    '''

    def __init__(self, config_file=None, max_depth=None):
        self._L = logging.getLogger(self.__class__.__name__)
        self._config = common.loadConfig(config_file,
                                         CONFIG_MARSHAL_SECTION,
                                         DEFAULT_MARSHAL_CONFIG)
        if max_depth is None:
            max_depth = int(self._config["max_depth"])
        self.max_depth = max_depth


    def length(self, handle):
        '''
        Number of elements in an array or dictionary handle.

        Args:
          handle: foreign handle, possibly None

        Returns:
          non-negative count, 0 for a null handle or a handle that is not a collection
        '''
        if handle is None:
            return 0
        kind = handleKind(handle)
        if kind not in (ARRAY, DICTIONARY):
            return 0
        if isinstance(handle, (list, tuple, dict)):
            return len(handle)
        n = handle.count()
        if n is None or n < 0:
            return 0
        return int(n)


    def itemAt(self, handle, index):
        '''
        Foreign handle of the element at index of an array handle.

        The caller must have obtained length(handle) first; index must be in
        0 <= index < length(handle).

        Args:
          handle: foreign array handle, possibly None
          index: element index

        Returns:
          foreign handle of the element, None for a null array
        '''
        if handle is None:
            return None
        if handleKind(handle) != ARRAY:
            raise TypeError("itemAt requires an array handle, not {}".format(type(handle).__name__))
        n = self.length(handle)
        if index < 0 or index >= n:
            raise IndexError("index {} out of range for array of length {}".format(index, n))
        if isinstance(handle, (list, tuple)):
            return handle[index]
        return handle.objectAtIndex_(index)


    def _utf8(self, raw):
        if raw is None:
            return None
        if isinstance(raw, str):
            return str(raw)
        if isinstance(raw, (bytes, bytearray)):
            try:
                return bytes(raw).decode("utf-8")
            except UnicodeDecodeError as e:
                self._L.debug("String is not valid UTF-8: %s", e)
                return None
        return None


    def decodeString(self, handle):
        '''
        String value of a string handle, or the textual form of a boxed number.

        Returns:
          str, or None if the handle is null or not decodable as UTF-8
        '''
        if handle is None:
            return None
        if isinstance(handle, (str, bytes, bytearray)):
            return self._utf8(handle)
        if isinstance(handle, bool):
            return str(int(handle))
        if isinstance(handle, (int, float)):
            return str(handle)
        kind = handleKind(handle)
        if kind == STRING:
            return self._utf8(handle.UTF8String())
        if kind == NUMBER:
            method = _selector(handle, "stringValue")
            if method is None:
                return str(self.decodeInteger(handle))
            return self._utf8(method())
        if kind == URL:
            method = _selector(handle, "absoluteString")
            if method is not None:
                return self.decodeString(method())
            return urlcomponents.extractComponents(self, handle).toUrl()
        self._L.debug("Handle of type %s is not a string", type(handle).__name__)
        return None


    def decodeInteger(self, handle):
        '''
        Integer value of a boxed number.

        A null handle yields 0, as does a handle that cannot be read as an integer.
        '''
        if handle is None:
            return 0
        if isinstance(handle, (int, float)):
            return self._toInteger(handle)
        if isinstance(handle, (str, bytes, bytearray)):
            txt = self._utf8(handle)
            if txt is None:
                return 0
            return self._parseInteger(txt)
        method = _selector(handle, "intValue")
        if method is None:
            self._L.debug("Handle of type %s has no integer value", type(handle).__name__)
            return 0
        value = method()
        if value is None:
            return 0
        return self._toInteger(value)


    def _toInteger(self, value):
        # NaN and infinities have no integer value
        try:
            return int(value)
        except (ValueError, OverflowError, TypeError):
            self._L.debug("Unable to read %r as an integer", value)
        return 0


    def _parseInteger(self, txt):
        txt = txt.strip()
        try:
            return int(txt)
        except ValueError:
            pass
        try:
            return int(float(txt))
        except (ValueError, OverflowError):
            self._L.debug("Unable to read '%s' as an integer", txt)
        return 0


    def valueForKey(self, dict_handle, key):
        '''
        Foreign handle stored under key in a dictionary handle, None when unset.
        '''
        if dict_handle is None:
            return None
        if isinstance(dict_handle, dict):
            return dict_handle.get(key)
        if handleKind(dict_handle) != DICTIONARY:
            return None
        return dict_handle.objectForKey_(key)


    def lookup(self, dict_handle, key):
        '''
        Portable value of the entry for key.

        Args:
          dict_handle: foreign dictionary handle, possibly None
          key: str key

        Returns:
          portable value, None if the dictionary is null or the key is unset
        '''
        return self.toPortable(self.valueForKey(dict_handle, key))


    def keys(self, dict_handle):
        '''
        List of the key handles of a dictionary handle.
        '''
        if dict_handle is None:
            return []
        if isinstance(dict_handle, dict):
            return list(dict_handle.keys())
        if handleKind(dict_handle) != DICTIONARY:
            return []
        all_keys = dict_handle.allKeys()
        return [self.itemAt(all_keys, i) for i in range(self.length(all_keys))]


    def toPortable(self, handle, depth=0):
        '''
        Convert a foreign handle and everything reachable from it.

        Elements that cannot be converted, or that lie deeper than max_depth,
        become None and the conversion continues.

        Args:
          handle: foreign handle, possibly None
          depth: nesting level of handle, 0 for the root

        Returns:
          portable value
        '''
        if handle is None:
            return None
        if depth > self.max_depth:
            self._L.warning("Nesting deeper than %d, element dropped", self.max_depth)
            return None
        kind = handleKind(handle)
        if kind == STRING:
            return self.decodeString(handle)
        if kind == NUMBER:
            return self.decodeInteger(handle)
        if kind == URL:
            return self.decodeString(handle)
        if kind == ARRAY:
            return tuple(self.toPortable(self.itemAt(handle, i), depth + 1)
                         for i in range(self.length(handle)))
        if kind == DICTIONARY:
            result = {}
            for key in self.keys(handle):
                name = self.decodeString(key)
                if name is None:
                    self._L.warning("Skipping dictionary entry with undecodable key")
                    continue
                result[name] = self.toPortable(self.valueForKey(handle, key), depth + 1)
            return result
        self._L.warning("Unrecognized handle of type %s, element dropped", type(handle).__name__)
        return None
