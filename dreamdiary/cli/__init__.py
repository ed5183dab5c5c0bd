#!/usr/bin/env python3
"""
Dream Diary CLI
-----------------------------------

Command-line interface over the dream diary core.

This module provides the main CLI group, the shared context setup and
small helpers used by every command module.

Command Structure:
    - Accounts (user add, user find)
    - Dreams (dream add/list/show/search/update/delete/overflow/frequent-tags)
    - Tags (tag list/suggest/delete)

Every dream and tag command acts on behalf of ``--user LOGIN`` (email or
username).

Usage:
    # Get general help
    dreamdiary --help

    # Record a dream with two tags
    dreamdiary dream add --user yume --title 古びた洋館 \\
        --content "長い廊下を歩いた。" --emotion fear --dreamed-at 2024-01-15 \\
        --tag 母:はは:person --tag 学校:がっこう:place
"""
from typing import Optional

import click

from dreamdiary.core.config import DiaryConfig, load_config
from dreamdiary.core.exceptions import ConfigError
from dreamdiary.core.logging_manager import DreamDiaryLogger, handle_cli_error
from dreamdiary.database.manager import DreamDiaryDB


@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to a YAML config file",
)
@click.option(
    "--db-path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to database file",
)
@click.option(
    "--log-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Path to log directory",
)
@click.option(
    "--verbose",
    is_flag=True,
    help="Show detailed errors and tracebacks",
)
@click.pass_context
def cli(ctx, config_path, db_path, log_dir, verbose):
    """Dream Diary: record, tag and search your dreams."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose

    try:
        config: DiaryConfig = load_config(config_path).with_overrides(
            db_path=db_path, log_dir=log_dir
        )
    except ConfigError as e:
        handle_cli_error(ctx, e, "load_config", {"config_path": config_path})

    ctx.obj["config"] = config
    ctx.obj["logger"] = DreamDiaryLogger(config.log_dir, component_name="cli")


def get_db(ctx) -> DreamDiaryDB:
    """Get or create database instance from context."""
    if "db" not in ctx.obj:
        ctx.obj["db"] = DreamDiaryDB.from_config(ctx.obj["config"])
    return ctx.obj["db"]


def resolve_user_id(ctx, login: Optional[str]) -> int:
    """
    Id of the user named by ``--user``.

    Raises:
        NotFoundError: If no account has that email or username
    """
    return get_db(ctx).find_user(login).unwrap().id


user_option = click.option(
    "--user",
    "login",
    required=True,
    help="Email or username of the acting user",
)


# Import and register command modules
# These imports must come after CLI group definition
from .users import user  # noqa: E402
from .dreams import dream  # noqa: E402
from .tags import tag  # noqa: E402

cli.add_command(user)
cli.add_command(dream)
cli.add_command(tag)


if __name__ == "__main__":
    cli(obj={})
