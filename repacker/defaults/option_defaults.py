"""Repack Option Schema definitions"""

from voluptuous import All, Any, Boolean, Coerce, Length, Optional, Range, Required

# pylint: disable=E1120


def alias():
    """
    :returns: {Required('alias'): All(str, Length(min=1))}
    """
    return {Required('alias'): All(str, Length(min=1))}


def asynchronous():
    """
    :returns:
        {Optional('asynchronous', default=True):
            Any(bool, All(Any(str), Boolean()))}
    """
    return {
        Optional('asynchronous', default=True): Any(  # type: ignore
            bool, All(Any(str), Boolean())  # type: ignore
        )
    }


def blank_fields():
    """
    :returns: {Optional('blank_fields', default=list): Any(None, [str])}
    """
    return {Optional('blank_fields', default=list): Any(None, [str])}  # type: ignore


def compression():
    """
    :returns:
        {Optional('compression', default='best_compression'):
            Any('default', 'best_compression')}
    """
    return {
        Optional('compression', default='best_compression'): Any(  # type: ignore
            'default', 'best_compression'
        )
    }


def mapping_file():
    """
    :returns: {Optional('mapping_file', default=None): Any(None, str)}
    """
    return {Optional('mapping_file', default=None): Any(None, str)}  # type: ignore


def number_of_replicas():
    """
    :returns:
        {Optional('number_of_replicas', default=1):
            All(Coerce(int), Range(min=0, max=10))}
    """
    return {
        Optional('number_of_replicas', default=1): All(  # type: ignore
            Coerce(int), Range(min=0, max=10)
        )
    }


def number_of_shards():
    """
    :returns:
        {Required('number_of_shards'): All(Coerce(int), Range(min=1, max=1024))}
    """
    return {Required('number_of_shards'): All(Coerce(int), Range(min=1, max=1024))}


def poll_interval():
    """
    :returns:
        {Optional('poll_interval', default=10):
            All(Coerce(float), Range(min=0.0, max=3600.0))}
    """
    return {
        Optional('poll_interval', default=10): All(  # type: ignore
            Coerce(float), Range(min=0.0, max=3600.0)
        )
    }


def prefix():
    """
    :returns: {Optional('prefix', default='repacked-'): All(str, Length(min=1))}
    """
    return {Optional('prefix', default='repacked-'): All(str, Length(min=1))}  # type: ignore


def requests_per_second():
    """
    :returns:
        {Optional('requests_per_second', default=0):
            All(Coerce(float), Range(min=0.0))}

    ``0`` means no throttle.
    """
    return {
        Optional('requests_per_second', default=0): All(  # type: ignore
            Coerce(float), Range(min=0.0)
        )
    }


def slices():
    """
    :returns:
        {Optional('slices', default='auto'): Any(Coerce(int), str, None)}

    Anything that is not a positive integer is left for Elasticsearch to decide.
    """
    return {Optional('slices', default='auto'): Any(Coerce(int), str, None)}  # type: ignore


def timeout():
    """
    :returns:
        {Optional('timeout', default=86400): All(Coerce(float), Range(min=1.0))}

    Seconds. For an asynchronous copy, the longest the task is watched. For a
    synchronous copy, the request timeout.
    """
    return {
        Optional('timeout', default=86400): All(  # type: ignore
            Coerce(float), Range(min=1.0)
        )
    }
