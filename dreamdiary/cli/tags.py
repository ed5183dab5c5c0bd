"""
Tag Commands
------------------------

Commands:
    - list: The user's tags, by category and/or syllabary index
    - suggest: Tags whose name or reading contains a query
    - delete: Remove a tag (its dreams are kept)
"""
import click

from dreamdiary.core.enums import TagCategory, YomiIndex
from dreamdiary.core.exceptions import DreamDiaryError
from dreamdiary.core.logging_manager import handle_cli_error
from . import get_db, resolve_user_id, user_option


def format_tag(tag) -> str:
    return f"{tag.id:>4}  [{tag.yomi_index.value}] {tag.name} ({tag.yomi}) {tag.category.value}"


@click.group()
@click.pass_context
def tag(ctx: click.Context) -> None:
    """Browse and manage tags."""
    pass


@tag.command("list")
@user_option
@click.option("--category", type=click.Choice(TagCategory.choices()), default=None)
@click.option(
    "--index",
    "yomi_index",
    type=click.Choice(YomiIndex.choices()),
    default=None,
    help="Syllabary index label (あ か さ ... 英数字 他)",
)
@click.pass_context
def list_tags(ctx, login, category, yomi_index):
    """List tags, ordered by reading."""
    try:
        db = get_db(ctx)
        tags = db.list_tags(
            resolve_user_id(ctx, login), category=category, yomi_index=yomi_index
        ).unwrap()

        if not tags:
            click.echo("No tags found")
            return
        for item in tags:
            click.echo(format_tag(item))

    except DreamDiaryError as e:
        handle_cli_error(ctx, e, "tag_list", {"login": login})


@tag.command("suggest")
@user_option
@click.argument("query")
@click.option("--category", type=click.Choice(TagCategory.choices()), default=None)
@click.pass_context
def suggest(ctx, login, query, category):
    """Suggest up to 10 tags matching QUERY."""
    try:
        db = get_db(ctx)
        tags = db.suggest_tags(
            resolve_user_id(ctx, login), query, category=category
        ).unwrap()

        for item in tags:
            click.echo(format_tag(item))

    except DreamDiaryError as e:
        handle_cli_error(ctx, e, "tag_suggest", {"login": login, "query": query})


@tag.command("delete")
@user_option
@click.argument("tag_id", type=int)
@click.pass_context
def delete(ctx, login, tag_id):
    """Delete tag TAG_ID."""
    try:
        db = get_db(ctx)
        db.delete_tag(resolve_user_id(ctx, login), tag_id).unwrap()
        click.echo(f"🗑️  Deleted tag {tag_id}")

    except DreamDiaryError as e:
        handle_cli_error(ctx, e, "tag_delete", {"login": login, "tag_id": tag_id})
