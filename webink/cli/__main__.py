"""WebInk CLI - Main Entry Point.

The `webink` command manages model schemas.

Commands:
    db schema  - Print CREATE statements for a models module
    db sync    - Create the tables of a models module
    db tables  - List tables in a database
"""

import logging
import sys

import click

from . import __version__, __cli_name__
from .utils.colors import error, _CROSS


@click.group()
@click.version_option(version=__version__, prog_name=__cli_name__)
@click.option('--verbose', '-v', is_flag=True, help='Verbose output')
@click.pass_context
def cli(ctx, verbose: bool):
    """WebInk model and database tooling."""
    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")


# ============================================================================
# Database Commands
# ============================================================================

@cli.group()
def db():
    """Database and model schema commands."""
    pass


@db.command('schema')
@click.argument('module')
@click.option('--dialect', type=click.Choice(['sqlite', 'mysql']), default='sqlite', help='SQL dialect')
@click.pass_context
def db_schema(ctx, module: str, dialect: str):
    """
    Print CREATE TABLE statements for the models in MODULE.

    Examples:
      webink db schema myapp.models
      webink db schema myapp.models --dialect=mysql
    """
    from .commands.db_cmds import cmd_schema

    try:
        cmd_schema(module, dialect=dialect, verbose=ctx.obj['verbose'])
    except Exception as e:
        error(f"  {_CROSS} schema failed: {e}")
        sys.exit(1)


@db.command('sync')
@click.argument('module')
@click.option('--database-url', type=str, default='sqlite:///db.sqlite3', help='Database URL')
@click.option('--drop', is_flag=True, help='Drop existing model tables first')
@click.pass_context
def db_sync(ctx, module: str, database_url: str, drop: bool):
    """
    Create the tables for the models in MODULE.

    Examples:
      webink db sync myapp.models
      webink db sync myapp.models --database-url=sqlite:///blog.sqlite3 --drop
    """
    from .commands.db_cmds import cmd_sync

    try:
        cmd_sync(module, database_url=database_url, drop=drop, verbose=ctx.obj['verbose'])
    except Exception as e:
        error(f"  {_CROSS} sync failed: {e}")
        sys.exit(1)


@db.command('tables')
@click.option('--database-url', type=str, default='sqlite:///db.sqlite3', help='Database URL')
@click.pass_context
def db_tables(ctx, database_url: str):
    """
    List the tables in a database.

    Examples:
      webink db tables --database-url=sqlite:///blog.sqlite3
    """
    from .commands.db_cmds import cmd_tables

    try:
        cmd_tables(database_url, verbose=ctx.obj['verbose'])
    except Exception as e:
        error(f"  {_CROSS} tables failed: {e}")
        sys.exit(1)


def main():
    """Entry point for `webink` command."""
    cli(obj={})


if __name__ == '__main__':
    main()
