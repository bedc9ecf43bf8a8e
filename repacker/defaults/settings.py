"""Utilities/Helpers for defaults and schemas"""

from datetime import timedelta
from os import path
from repacker.exceptions import RepackException

REPACKER_DOCS = 'https://github.com/repacker/repacker'
CLICK_DRYRUN = {
    'dry-run': {
        'help': 'Perform every read, but log the writes instead of sending them.',
        'is_flag': True,
    },
}

#: The shortest retention a new policy will ever be given
MIN_RETENTION = timedelta(minutes=1)
#: How far in the future ``index.creation_date`` may be before it is distrusted
CLOCK_SKEW_ALLOWANCE = timedelta(days=1)
#: Used when the source index has no explicit ``refresh_interval``
DEFAULT_REFRESH_INTERVAL = '1s'
#: ``requests_per_second`` value Elasticsearch reads as "no throttle"
UNTHROTTLED = -1

#: ILM phases in the order Elasticsearch executes them
ILM_PHASE_ORDER = ['hot', 'warm', 'cold', 'frozen', 'delete']
#: The phase ILM puts every index in before its first declared phase
START_STATE = 'new'
#: The phase in which an index is deleted
DELETE_STATE = 'delete'
#: Name of the condition gating a transition on index age
AGE_CONDITION = 'min_index_age'

VERSION_MIN = (7, 14, 0)
VERSION_MAX = (8, 99, 99)


def footer(version, tail='README.md'):
    """
    Generate a footer linking to the Repacker docs

    :param version: The Repacker version

    :type version: str

    :returns: An epilog/footer suitable for Click
    """
    if not isinstance(version, str):
        raise RepackException(f'Parameter version is not a string: {type(version)}')
    return f'Repacker {version}. Learn more at {REPACKER_DOCS}/blob/main/{tail}'


# Default Config file location
def default_config_file():
    """
    :returns: The default configuration file location:
        path.join(path.expanduser('~'), '.repacker', 'repacker.yml')
    """
    default = path.join(path.expanduser('~'), '.repacker', 'repacker.yml')
    if path.isfile(default):
        return default
    return None
