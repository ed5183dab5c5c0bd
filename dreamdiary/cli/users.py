"""
Account Commands
------------------------

Commands:
    - add: Register a new account
    - find: Look an account up by email or username
"""
import click

from dreamdiary.core.exceptions import DreamDiaryError
from dreamdiary.core.logging_manager import handle_cli_error
from . import get_db


@click.group()
@click.pass_context
def user(ctx: click.Context) -> None:
    """Manage accounts."""
    pass


@user.command("add")
@click.argument("email")
@click.argument("username")
@click.pass_context
def add(ctx, email, username):
    """Register an account with EMAIL and USERNAME."""
    try:
        account = get_db(ctx).create_user(email, username).unwrap()
        click.echo(f"✅ Created user {account.username} (id {account.id})")

    except DreamDiaryError as e:
        handle_cli_error(ctx, e, "user_add", {"username": username})


@user.command("find")
@click.argument("login")
@click.pass_context
def find(ctx, login):
    """Show the account whose email or username is LOGIN."""
    try:
        account = get_db(ctx).find_user(login).unwrap()
        click.echo(f"{account.id}\t{account.username}\t{account.email}")

    except DreamDiaryError as e:
        handle_cli_error(ctx, e, "user_find", {"login": login})
