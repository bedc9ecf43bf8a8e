"""Set up voluptuous Schema defaults for the repack options"""

from voluptuous import Schema
from repacker.defaults import option_defaults


def repack_options():
    """
    :returns: The list of option schema fragments that make up the repack options
    :rtype: list
    """
    return [
        option_defaults.alias(),
        option_defaults.asynchronous(),
        option_defaults.blank_fields(),
        option_defaults.compression(),
        option_defaults.mapping_file(),
        option_defaults.number_of_replicas(),
        option_defaults.number_of_shards(),
        option_defaults.poll_interval(),
        option_defaults.prefix(),
        option_defaults.requests_per_second(),
        option_defaults.slices(),
        option_defaults.timeout(),
    ]


def get_schema():
    """
    Return a :py:class:`~.voluptuous.schema_builder.Schema` of acceptable repack
    options and their default values as returned by :py:func:`repack_options`

    :returns: A valid :py:class:`~.voluptuous.schema_builder.Schema`
    """
    options = {}
    for each in repack_options():
        options.update(each)
    return Schema(options)
