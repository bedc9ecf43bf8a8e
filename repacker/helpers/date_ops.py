"""Repacker date and time functions"""

import logging
from datetime import datetime, timedelta, timezone
from repacker.defaults.settings import CLOCK_SKEW_ALLOWANCE, MIN_RETENTION

logger = logging.getLogger(__name__)


def creation_to_datetime(epoch_millis):
    """
    Convert an ``index.creation_date`` value to an aware UTC datetime

    :param epoch_millis: Milliseconds since the epoch, as Elasticsearch stores it.
        May be a :py:class:`str`.
    :type epoch_millis: int

    :rtype: :py:class:`~.datetime.datetime`
    """
    try:
        millis = int(epoch_millis)
    except (TypeError, ValueError) as err:
        raise ValueError(
            f'Bad creation_date value. Unable to convert {epoch_millis} to int. {err}'
        ) from err
    return datetime.fromtimestamp(millis / 1000, timezone.utc)


def utc_now():
    """
    :returns: The current time as an aware UTC datetime
    :rtype: :py:class:`~.datetime.datetime`
    """
    return datetime.now(timezone.utc)


def remaining_retention(creation_time, original_age, now=None):
    """
    Work out how much of ``original_age`` is left for an index created at
    ``creation_time``.

    A ``creation_time`` more than :py:data:`~.repacker.defaults.settings.CLOCK_SKEW_ALLOWANCE`
    in the future is treated as ``now``. The result is clamped to no less than
    :py:data:`~.repacker.defaults.settings.MIN_RETENTION` and no more than
    ``original_age``. If ``original_age`` is itself below the minimum, the minimum
    wins.

    :param creation_time: When the source index was created
    :param original_age: The ``min_age`` of the source policy's delete phase
    :param now: The reference time. Defaults to :py:func:`utc_now`

    :type creation_time: :py:class:`~.datetime.datetime`
    :type original_age: :py:class:`~.datetime.timedelta`
    :type now: :py:class:`~.datetime.datetime`

    :rtype: :py:class:`~.datetime.timedelta`
    """
    if now is None:
        now = utc_now()
    if creation_time - now > CLOCK_SKEW_ALLOWANCE:
        logger.warning(
            'Creation time %s is more than %s ahead of now (%s). Using now instead.',
            creation_time.isoformat(),
            CLOCK_SKEW_ALLOWANCE,
            now.isoformat(),
        )
        creation_time = now
    deadline = creation_time + original_age
    remaining = deadline - now
    logger.debug('Deadline: %s, raw remaining: %s', deadline.isoformat(), remaining)
    if remaining > original_age:
        remaining = original_age
    if remaining < MIN_RETENTION:
        remaining = MIN_RETENTION
    return remaining


def policy_timestamp(now=None):
    """
    :returns: A compact UTC timestamp for naming a new policy, e.g. ``20240131235959``
    :rtype: str
    """
    if now is None:
        now = utc_now()
    return now.strftime('%Y%m%d%H%M%S')


def age_of(creation_time, now=None):
    """
    :returns: How long ago ``creation_time`` was, never negative
    :rtype: :py:class:`~.datetime.timedelta`
    """
    if now is None:
        now = utc_now()
    return max(now - creation_time, timedelta(0))
