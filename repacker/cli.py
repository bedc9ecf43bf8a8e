"""Main CLI for Repacker"""

import logging
import sys
import threading

import click
from es_client.builder import Builder
from es_client.defaults import OPTION_DEFAULTS
from es_client.exceptions import FailedValidation
from es_client.helpers.config import (
    cli_opts,
    context_settings,
    generate_configdict,
    get_config,
    options_from_dict,
)
from es_client.helpers.logging import configure_logging
from es_client.helpers.schemacheck import SchemaCheck
from es_client.helpers.utils import option_wrapper, prune_nones

from repacker._version import __version__
from repacker.actions import Repack
from repacker.debug import set_debug_level
from repacker.defaults.settings import (
    CLICK_DRYRUN,
    VERSION_MAX,
    VERSION_MIN,
    default_config_file,
    footer,
)
from repacker.exceptions import RepackException
from repacker.validators import options

click_opt_wrap = option_wrapper()

# pylint: disable=R0913, R0914, W0613, W0622, W0718


def validate_options(option_dict):
    """
    :param option_dict: Repack options gathered from the command-line

    :returns: ``option_dict`` checked against
        :py:func:`~.repacker.validators.options.get_schema`, with defaults filled in
    :rtype: dict
    """
    return SchemaCheck(
        prune_nones(option_dict),
        options.get_schema(),
        'options',
        'repack command-line options',
    ).result()


@click.group(
    context_settings=context_settings(),
    epilog=footer(__version__),
)
@options_from_dict(OPTION_DEFAULTS)
@click_opt_wrap(*cli_opts('dry-run', settings=CLICK_DRYRUN))
@click.version_option(__version__, '-v', '--version', prog_name='repacker')
@click.pass_context
def repacker(ctx, dry_run, **kwargs):
    """
    Repacker for Elasticsearch indices

    The default $HOME/.repacker/repacker.yml configuration file (--config)
    can be used but is not needed.

    Command-line settings will always override YAML configuration settings.
    """
    ctx.obj = {}
    ctx.obj['dry_run'] = dry_run
    ctx.obj['default_config'] = default_config_file()
    get_config(ctx)
    configure_logging(ctx)
    generate_configdict(ctx)


@repacker.command(context_settings=context_settings())
@click.argument('index', type=str, nargs=1)
@click.option('--alias', required=True, type=str, help='Alias the index is served from')
@click.option('--number_of_shards', required=True, type=int, help='Primary shards of the new index')
@click.option('--number_of_replicas', default=1, type=int, help='Replicas of the new index', show_default=True)
@click.option('--prefix', default='repacked-', type=str, help='Prefix for the new index name', show_default=True)
@click.option('--blank_field', 'blank_fields', multiple=True, help='Remove this field from every copied document. Repeatable.')
@click.option('--compression', type=click.Choice(['default', 'best_compression']), default='best_compression', show_default=True)
@click.option('--mapping_file', type=click.Path(exists=True, dir_okay=False), help='JSON or YAML mappings to use instead of the source mappings')
@click.option('--async/--sync', 'asynchronous', default=True, help='Copy as a background task and poll it', show_default=True)
@click.option('--slices', default='auto', type=str, help='Number of slices, or "auto"', show_default=True)
@click.option('--requests_per_second', default=0, type=float, help='Copy throttle. 0 is unthrottled', show_default=True)
@click.option('--poll_interval', default=10, type=float, help='Seconds between copy task checks', show_default=True)
@click.option('--timeout', default=86400, type=float, help='Seconds to watch the copy', show_default=True)
@click.option('--debug_level', type=click.IntRange(1, 5), help='Tier of extra debug output (with loglevel DEBUG)')
@click.pass_context
def repack(ctx, index, debug_level, **kwargs):
    """
    Copy INDEX into a new index with fewer shards, give the copy a lifecycle policy
    that deletes it when INDEX would have been deleted, and swap it into the alias.
    """
    logger = logging.getLogger(__name__)
    set_debug_level(debug_level)
    kwargs['blank_fields'] = list(kwargs['blank_fields'])
    try:
        opts = validate_options(kwargs)
    except FailedValidation as exc:
        logger.critical('Unable to parse options: %s', exc)
        sys.exit(1)
    stop_event = threading.Event()
    try:
        builder = Builder(
            configdict=ctx.obj['configdict'],
            version_max=VERSION_MAX,
            version_min=VERSION_MIN,
        )
        builder.connect()
    except Exception as exc:
        click.echo('Unable to establish client connection to Elasticsearch!')
        click.echo(f'Exception: {exc}')
        sys.exit(1)
    try:
        action = Repack(builder.client, index, stop_event=stop_event, **opts)
        if ctx.obj['dry_run']:
            action.do_dry_run()
        else:
            action.do_action()
    except RepackException as err:
        logger.error('Failed to repack %s. %s: %s', index, type(err).__name__, err)
        sys.exit(1)
    logger.info('Repack of %s completed.', index)
