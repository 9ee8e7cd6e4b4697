'''
The owned, null-safe representation that marshaled foreign data is converted into.

A portable value is one of:

  Absent        None
  Integer       int
  String        str
  Ordered list  tuple of portable values
  Map           dict of str -> portable value

Portable values never hold a reference to a foreign object.
'''

import json

ABSENT = None

KIND_ABSENT = "absent"
KIND_INTEGER = "integer"
KIND_STRING = "string"
KIND_LIST = "list"
KIND_MAP = "map"


def kindOf(value):
    '''
    Name the variant of a portable value.

    Args:
      value: a portable value

    Returns:
      one of the KIND_* names, or None if value is not portable at the top level
    '''
    if value is None:
        return KIND_ABSENT
    # bool is an int subclass but not a portable integer
    if isinstance(value, int) and not isinstance(value, bool):
        return KIND_INTEGER
    if isinstance(value, str):
        return KIND_STRING
    if isinstance(value, tuple):
        return KIND_LIST
    if isinstance(value, dict):
        return KIND_MAP
    return None


def isPortable(value):
    '''
    True if value and everything it contains is a portable value.
    '''
    kind = kindOf(value)
    if kind is None:
        return False
    if kind == KIND_LIST:
        return all(isPortable(item) for item in value)
    if kind == KIND_MAP:
        for k, v in value.items():
            if not isinstance(k, str):
                return False
            if not isPortable(v):
                return False
    return True


def toJson(value, indent=None):
    return json.dumps(value, indent=indent)
