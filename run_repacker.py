#!/usr/bin/env python
# pylint: disable=no-value-for-parameter, broad-except
"""
Wrapper for running Repacker from source.

Repacker requires the locale to be unicode. Any unicode definitions are
acceptable.

To set the locale to be unicode, try:

$ export LC_ALL=en_US.utf8
$ repacker [ARGS]

Alternately, you should be able to specify the locale on the command-line:

$ LC_ALL=en_US.utf8 repacker [ARGS]

Be sure to substitute your unicode variant for en_US.utf8
"""
import sys
import click
from repacker.cli import repacker

if __name__ == '__main__':
    try:
        repacker(obj={})
    except RuntimeError as err:
        click.echo(f'{err}')
        sys.exit(1)
    except Exception as err:
        if 'ASCII' in str(err):
            click.echo(f'{err}')
            click.echo(__doc__)
        raise
