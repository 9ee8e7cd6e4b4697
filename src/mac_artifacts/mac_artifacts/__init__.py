'''
Extraction of portable values from foreign (Foundation) object graphs.

ForeignMarshaler converts the array, dictionary, string, number and URL
handles handed over by OS introspection calls into plain owned python values
(see portablevalue). The eventtaps and recentfolders modules build report
rows on top of it, written out through entries.EntryWriter.
'''
