"""Relative duration strings

Lifecycle ages are written as one or more ``<integer><unit>`` tokens, e.g.
``30d`` or ``1d12h``. Only the units in :py:data:`UNITS` are understood.
"""

import logging
import math
import re
from datetime import timedelta
from repacker.exceptions import MalformedDuration

logger = logging.getLogger(__name__)

#: Recognized unit letters and the span each one represents. Case matters:
#: ``M`` is a 30 day month, ``m`` is a minute.
UNITS = {
    'y': timedelta(days=365),
    'M': timedelta(days=30),
    'd': timedelta(days=1),
    'h': timedelta(hours=1),
    'm': timedelta(minutes=1),
}

#: Units :py:func:`format_duration` may emit, largest first
RENDER_ORDER = ['d', 'h', 'm']

TOKEN = re.compile(r'(\d+)([A-Za-z]+)')


def parse_duration(text):
    """
    Add up every recognized ``<integer><unit>`` token in ``text``. Tokens with an
    unknown unit (``s``, ``ms``, ``w``, etc.) are skipped.

    :param text: A relative duration, e.g. ``30d`` or ``1d12h``

    :type text: str

    :returns: The total span of all recognized tokens
    :rtype: :py:class:`~.datetime.timedelta`
    """
    if text is None or not str(text).strip():
        raise MalformedDuration('Duration is empty')
    total = timedelta(0)
    found = False
    for number, unit in TOKEN.findall(str(text)):
        if unit not in UNITS:
            logger.debug('Ignoring unrecognized duration token "%s%s"', number, unit)
            continue
        total += int(number) * UNITS[unit]
        found = True
    if not found:
        raise MalformedDuration(f'No recognized duration unit in "{text}"')
    return total


def format_duration(span):
    """
    Render ``span`` as a single token in the largest unit (days, hours, then
    minutes) it reaches, rounding up. A span of 90 minutes becomes ``2h``. The
    smallest possible result is ``1m``.

    :param span: The span to render

    :type span: :py:class:`~.datetime.timedelta`

    :rtype: str
    """
    seconds = span.total_seconds()
    for unit in RENDER_ORDER[:-1]:
        size = UNITS[unit].total_seconds()
        if seconds >= size:
            return f'{math.ceil(seconds / size)}{unit}'
    return f'{max(1, math.ceil(seconds / 60))}m'
