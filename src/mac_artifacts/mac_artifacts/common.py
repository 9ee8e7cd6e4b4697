'''
Constants methods, etc common across the artifact extraction tools
'''
import logging
import datetime
import configparser
import dateparser
from pytz import timezone

#Default location of configuration file
DEFAULT_CONFIG_FILE="/etc/macartifacts/artifacts.ini"

UTC = timezone('UTC')
EPOCH = datetime.datetime(1970, 1, 1, tzinfo=UTC)


def loadConfig(config_file, section, defaults):
  '''
  Load configuration parameters for a section of an INI file.

  Values missing from the file, or a missing file, fall back to defaults.

  Args:
    config_file: Path to an INI format configuration file, may be None
    section: Name of the section to read
    defaults: dictionary of default values for the section

  Returns:
    new dictionary of configuration values
  '''
  logger = logging.getLogger('common')
  result = dict(defaults)
  if config_file is None:
    return result
  config = configparser.ConfigParser()
  logger.debug("Loading configuration from %s", config_file)
  found = config.read(config_file)
  if len(found) == 0:
    logger.debug("Configuration file %s not read, using defaults", config_file)
    return result
  for key, value in iter(defaults.items()):
    result[key] = config.get(section, key, fallback=value)
  return result


def textToDateTime(txt, default_tz='UTC'):
  '''
  Convert plain text to a timezone aware datetime instance.

  e.g.: "now", "yesterday", "1 year ago", "10 days from now", "2:30pm"
  Args:
    txt: Textual representation of a dateTime
    default_tz: Timezone to use when it can't be figured out.

  Returns:
    Timezone aware instance of DateTime
  '''
  logger = logging.getLogger('common')
  d = dateparser.parse(txt, settings={'RETURN_AS_TIMEZONE_AWARE': True})
  if d is None:
    logger.error("Unable to convert '%s' to a date time.", txt)
    return d
  if d.tzinfo is None or d.tzinfo.utcoffset(d) is None:
    logger.warning('No timezone information specified, assuming %s', default_tz)
    return timezone(default_tz).localize(d)
  return d


def epochToDateTime(seconds, microseconds=0):
  '''
  UTC datetime for a unix timestamp given as seconds and microseconds.

  Returns None for a timestamp outside the range datetime can represent.
  '''
  try:
    return EPOCH + datetime.timedelta(seconds=seconds, microseconds=microseconds)
  except (OverflowError, ValueError):
    logging.getLogger('common').warning("Timestamp %d.%06d seconds is out of range",
                                        seconds, microseconds)
  return None


def getPrintableString(txt):
  '''
  Returns txt with surrounding whitespace and non-printable characters removed.
  '''
  txt = txt.strip()
  return "".join(c for c in txt if c.isprintable())
