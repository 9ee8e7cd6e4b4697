'''
Extracts the Finder recent folders list, an array of NSURL handles.
'''

import logging
import posixpath
from mac_artifacts import urlcomponents

SOURCE_NAME = "FinderPlist"
HEADER = [
    "source_name",
    "item_index",
    "name",
    "url",
    "scheme",
    "host",
    "path",
]


def folderName(components):
    '''
    Last path component of a URL, "" when it has no path.
    '''
    if components.path is None:
        return ""
    return posixpath.basename(components.path.rstrip("/"))


def recentFolders(marshaler, array_handle):
    '''
    Args:
      marshaler: ForeignMarshaler
      array_handle: foreign array of URL handles, possibly None

    Returns:
      list of URLComponents, in list order
    '''
    n = marshaler.length(array_handle)
    return [urlcomponents.extractComponents(marshaler, marshaler.itemAt(array_handle, i))
            for i in range(n)]


def recentFolderEntries(marshaler, array_handle):
    '''
    Report rows, in HEADER order, for the recent folders list.
    '''
    L = logging.getLogger("recentfolders")
    rows = []
    for index, components in enumerate(recentFolders(marshaler, array_handle)):
        rows.append([
            SOURCE_NAME,
            str(index),
            folderName(components),
            components.toUrl(),
            components.scheme or "",
            components.host or "",
            components.path or "",
        ])
    L.debug("Parsed [%d] recent folder entries", len(rows))
    return rows
