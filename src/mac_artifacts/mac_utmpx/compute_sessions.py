'''
Decode a utmpx accounting log and report its records, sessions or events.

Example, sessions of the live log as CSV:

  macsessions sessions /private/var/run/utmpx

Example, events of the last seven days as JSON lines:

  macsessions -f json -S "7 days ago" events utmpx.copy

'''
import os
import sys
import logging
import argparse

from mac_artifacts import common
from mac_artifacts import entries
from mac_utmpx import recordprocessor


def getDateStartEnd(args):
  '''
  Start and end dates from the command line, None where not given.

  Raises:
    ValueError if a date can not be parsed
  '''
  d_start = None
  d_end = None
  if args.datestart is not None:
    d_start = common.textToDateTime(args.datestart)
    if d_start is None:
      raise ValueError("Unable to parse start date: {}".format(args.datestart))
    logging.info("Start date parsed as: %s", d_start.isoformat())
  if args.dateend is not None:
    d_end = common.textToDateTime(args.dateend)
    if d_end is None:
      raise ValueError("Unable to parse end date: {}".format(args.dateend))
    logging.info("End date parsed as: %s", d_end.isoformat())
  return d_start, d_end


def reportRecords(processor, source, args, writer):
  _L = logging.getLogger(sys._getframe().f_code.co_name + "()")
  d_start, d_end = args.date_start, args.date_end
  records = processor.iterRecords(source)
  writer.writeHeader(recordprocessor.RECORD_HEADER)
  for record in recordprocessor.filterRecords(records, d_start, d_end):
    writer.write(entries.unsafeEntryFromMap(processor.recordMap(record), recordprocessor.RECORD_HEADER))
  if records.truncated is not None:
    _L.warning("Log ends with a partial record at offset %d", records.truncated.offset)
    if args.strict:
      return 1
  return 0


def reportSessions(processor, source, args, writer):
  d_start, d_end = args.date_start, args.date_end
  result = processor.processStream(source)
  if args.strict:
    recordprocessor.strictCheck(result)
  sessions = recordprocessor.filterSessions(result.sessions, d_start, d_end)
  writer.writeHeader(recordprocessor.SESSION_HEADER)
  writer.writeAll(processor.sessionEntries(sessions))
  return 0


def reportEvents(processor, source, args, writer):
  d_start, d_end = args.date_start, args.date_end
  result = processor.processStream(source)
  if args.strict:
    recordprocessor.strictCheck(result)
  events = recordprocessor.filterEvents(result.events, d_start, d_end)
  writer.writeHeader(recordprocessor.EVENT_HEADER)
  writer.writeAll(processor.eventEntries(events))
  return 0


def main(argv=None, stream=None):
  commands = {
    "records": reportRecords,
    "sessions": reportSessions,
    "events": reportEvents,
  }
  parser = argparse.ArgumentParser(description=__doc__,
    formatter_class=argparse.RawDescriptionHelpFormatter)
  parser.add_argument('-l', '--log_level',
                      action='count',
                      default=0,
                      help='Set logging level, multiples for more detailed.')
  parser.add_argument("-c", "--config",
                      default=common.DEFAULT_CONFIG_FILE,
                      help="Configuration file.")
  parser.add_argument("-f", "--format",
                      default=None,
                      help="Output format ({}), overrides the configuration".format(
                        ", ".join(entries.OUTPUT_FORMATS)))
  parser.add_argument("-S","--datestart",
                      default=None,
                      help="Specify date for start of entries to report")
  parser.add_argument("-E","--dateend",
                      default=None,
                      help="Specify date for end of entries to report")
  parser.add_argument("--strict",
                      action="store_true",
                      help="Fail on open sessions, orphan logouts, unknown types or truncation.")
  parser.add_argument('command',
                      help="Operation to perform ({})".format(", ".join(commands.keys())))
  parser.add_argument('source',
                      help="Path to a utmpx log")
  args = parser.parse_args(argv)
  # Setup logging verbosity
  levels = [logging.WARNING, logging.INFO, logging.DEBUG]
  level = levels[min(len(levels) - 1, args.log_level)]
  logging.basicConfig(level=level,
                      format="%(asctime)s %(name)s %(levelname)s: %(message)s")

  if (args.command) not in commands.keys():
    logging.error("Unknown command: %s", args.command)
    return 1
  if not os.path.exists(args.source):
    logging.error("Log file not found: %s", args.source)
    return 1
  try:
    args.date_start, args.date_end = getDateStartEnd(args)
  except ValueError as e:
    logging.error(str(e))
    return 1
  if stream is None:
    stream = sys.stdout
  processor = recordprocessor.RecordProcessor(config_file=args.config)
  output_format = args.format
  if output_format is None:
    output_format = processor.output_format
  try:
    writer = entries.EntryWriter(stream, output_format=output_format)
  except ValueError as e:
    logging.error(str(e))
    return 1
  with open(args.source, "rb") as source:
    try:
      return commands[args.command](processor, source, args, writer)
    except recordprocessor.SessionValidationError as e:
      logging.error("Strict check failed: %s", e)
      return 1


if __name__ == "__main__":
  sys.exit(main())
