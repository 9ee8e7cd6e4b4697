'''
Decomposes a foreign NSURL handle into its components.
'''

import collections
import urllib.parse

URL_FIELDS = [
    "scheme",
    "user",
    "password",
    "host",
    "port",
    "path",
    "query",
    "fragment",
]


class URLComponents(collections.namedtuple("URLComponents", URL_FIELDS)):
    '''
    Components of a URL, any of which may be None.
    '''
    __slots__ = ()

    def netloc(self):
        netloc = ""
        if self.user is not None or self.password is not None:
            netloc = urllib.parse.quote(self.user or "", safe="")
            if self.password is not None:
                netloc += ":" + urllib.parse.quote(self.password, safe="")
            netloc += "@"
        if self.host is not None:
            netloc += self.host
        if self.port is not None:
            netloc += ":{}".format(self.port)
        return netloc


    def toUrl(self):
        '''
        Reassemble the components into a URL string, omitting absent parts.
        '''
        return urllib.parse.urlunsplit((
            self.scheme or "",
            self.netloc(),
            self.path or "",
            self.query or "",
            self.fragment or "",
        ))


EMPTY_URL = URLComponents(*([None] * len(URL_FIELDS)))


def _component(url_handle, selector):
    method = getattr(url_handle, selector, None)
    if not callable(method):
        return None
    return method()


def extractComponents(marshaler, url_handle):
    '''
    Extract each component of a URL handle independently.

    Args:
      marshaler: ForeignMarshaler used to decode the component handles
      url_handle: foreign NSURL handle, possibly None

    Returns:
      URLComponents, all None for a null handle
    '''
    if url_handle is None:
        return EMPTY_URL
    values = {}
    for field in URL_FIELDS:
        handle = _component(url_handle, field)
        if field == "port":
            values[field] = None if handle is None else marshaler.decodeInteger(handle)
        else:
            values[field] = marshaler.decodeString(handle)
    return URLComponents(**values)
