'''
This package implements a tool to decode the utmpx login accounting log and
reconstruct user login sessions from it.

The basic workflow is:

records = UtmpxRecordIterator( log_bytes_or_stream )
session_states = SessionStates()
for record in records:
  session_states.addRecord( record )
result = session_states.finish( truncated=records.truncated )

result.sessions are the reconstructed sessions, each closed by a logout, a
reboot or a shutdown, or still open at the end of the log. result.events
holds every record that did not open or close a session:

  record               types with no session effect (RUN_LEVEL, NEW_TIME, ...)
  marker               BOOT_TIME and SHUTDOWN_TIME
  confirmation         USER_PROCESS for a session that is already open
  orphan_logout        DEAD_PROCESS with no open session
  unknown_record_type  type codes outside the known set

A partial record at the end of the log ends decoding; it is reported in
result.truncated.

'''
