"""
Dream Commands
------------------------

Record, browse and search dreams.

Commands:
    - add: Record a dream, optionally with tags
    - list: Newest dreams, one page at a time
    - show: One dream in full
    - search: Keyword and/or tag search
    - update: Change fields and/or replace tags
    - delete: Remove a dream (its tags are kept)
    - overflow: Random sentence fragments from your dreams
    - frequent-tags: Tags recurring in your 10 newest dreams

Tags are given as ``--tag NAME:YOMI:CATEGORY`` and may be repeated.
"""
from typing import Any, Dict, List

import click

from dreamdiary.core.enums import EmotionColor
from dreamdiary.core.exceptions import DreamDiaryError
from dreamdiary.core.logging_manager import handle_cli_error
from dreamdiary.database.tag_reconciler import TagDescriptor
from . import get_db, resolve_user_id, user_option

tag_option = click.option(
    "--tag",
    "tag_specs",
    multiple=True,
    metavar="NAME:YOMI:CATEGORY",
    help="Tag to attach (repeatable)",
)


def parse_tags(tag_specs) -> List[TagDescriptor]:
    return [TagDescriptor.parse(spec) for spec in tag_specs]


def format_dream(dream) -> str:
    lucid = " ✨" if dream.lucid_dream_flag else ""
    line = (
        f"{dream.id:>4}  {dream.dreamed_at:%Y-%m-%d}  "
        f"{dream.emotion_color.value:<7}  {dream.title}{lucid}"
    )
    if dream.tags:
        line += "  🏷️  " + ", ".join(tag.name for tag in dream.tags)
    return line


def echo_page(page) -> None:
    if not page.items:
        click.echo("No dreams found")
        return
    for dream in page:
        click.echo(format_dream(dream))
    click.echo(
        f"\nPage {page.page}/{max(page.total_pages, 1)} ({page.total_count} dreams)"
    )
    if page.has_next:
        click.echo(f"More with --page {page.page + 1}")


@click.group()
@click.pass_context
def dream(ctx: click.Context) -> None:
    """Record, browse and search dreams."""
    pass


@dream.command("add")
@user_option
@click.option("--title", required=True, help="Title (at most 15 characters)")
@click.option("--content", required=True, help="What happened")
@click.option(
    "--emotion",
    type=click.Choice(EmotionColor.choices()),
    required=True,
    help="Emotional color",
)
@click.option("--dreamed-at", required=True, help="Date or ISO timestamp")
@click.option("--lucid/--not-lucid", default=False, help="Lucid dream")
@tag_option
@click.pass_context
def add(ctx, login, title, content, emotion, dreamed_at, lucid, tag_specs):
    """Record a new dream."""
    try:
        db = get_db(ctx)
        fields = {
            "title": title,
            "content": content,
            "emotion_color": emotion,
            "dreamed_at": dreamed_at,
            "lucid_dream_flag": lucid,
        }
        created = db.create_dream(
            resolve_user_id(ctx, login), fields, parse_tags(tag_specs)
        ).unwrap()

        click.echo(f"✅ Recorded dream {created.id}")
        click.echo(format_dream(created))

    except DreamDiaryError as e:
        handle_cli_error(ctx, e, "dream_add", {"login": login, "title": title})


@dream.command("list")
@user_option
@click.option("--page", type=int, default=1, show_default=True)
@click.option("--per-page", type=int, default=None, help="Page size")
@click.pass_context
def list_dreams(ctx, login, page, per_page):
    """List dreams, newest first."""
    try:
        db = get_db(ctx)
        result = db.list_dreams(resolve_user_id(ctx, login), page=page, per_page=per_page)
        echo_page(result.unwrap())

    except DreamDiaryError as e:
        handle_cli_error(ctx, e, "dream_list", {"login": login})


@dream.command("show")
@user_option
@click.argument("dream_id", type=int)
@click.pass_context
def show(ctx, login, dream_id):
    """Display dream DREAM_ID."""
    try:
        db = get_db(ctx)
        entry = db.get_dream(resolve_user_id(ctx, login), dream_id).unwrap()

        click.echo(f"\n🌙 {entry.title}")
        click.echo(f"📅 {entry.dreamed_at:%Y-%m-%d %H:%M}")
        click.echo(f"🎨 {entry.emotion_color.value}")
        if entry.lucid_dream_flag:
            click.echo("✨ Lucid")
        if entry.people:
            click.echo("👥 " + ", ".join(tag.name for tag in entry.people))
        if entry.places:
            click.echo("📍 " + ", ".join(tag.name for tag in entry.places))
        click.echo(f"\n{entry.content}")

    except DreamDiaryError as e:
        handle_cli_error(ctx, e, "dream_show", {"login": login, "dream_id": dream_id})


@dream.command("search")
@user_option
@click.option("--keyword", default=None, help="Words that must all appear")
@click.option("--tag-ids", default=None, help="Comma-separated tag ids, all required")
@click.option("--page", type=int, default=1, show_default=True)
@click.option("--per-page", type=int, default=None, help="Page size")
@click.pass_context
def search(ctx, login, keyword, tag_ids, page, per_page):
    """Search dreams by keywords and tags."""
    try:
        db = get_db(ctx)
        result = db.search_dreams(
            resolve_user_id(ctx, login),
            keyword=keyword,
            tag_ids=tag_ids,
            page=page,
            per_page=per_page,
        )
        echo_page(result.unwrap())

    except DreamDiaryError as e:
        handle_cli_error(
            ctx, e, "dream_search", {"login": login, "keyword": keyword, "tag_ids": tag_ids}
        )


@dream.command("update")
@user_option
@click.argument("dream_id", type=int)
@click.option("--title", default=None)
@click.option("--content", default=None)
@click.option("--emotion", type=click.Choice(EmotionColor.choices()), default=None)
@click.option("--dreamed-at", default=None)
@click.option("--lucid/--not-lucid", default=None)
@tag_option
@click.option("--clear-tags", is_flag=True, help="Remove every tag")
@click.pass_context
def update(ctx, login, dream_id, title, content, emotion, dreamed_at, lucid, tag_specs, clear_tags):
    """
    Update dream DREAM_ID.

    Only the given options change. Passing --tag replaces the whole tag
    set; --clear-tags removes it.
    """
    if clear_tags and tag_specs:
        raise click.UsageError("--tag and --clear-tags cannot be used together")

    try:
        db = get_db(ctx)
        options = {
            "title": title,
            "content": content,
            "emotion_color": emotion,
            "dreamed_at": dreamed_at,
            "lucid_dream_flag": lucid,
        }
        fields: Dict[str, Any] = {k: v for k, v in options.items() if v is not None}

        descriptors = None
        if clear_tags:
            descriptors = []
        elif tag_specs:
            descriptors = parse_tags(tag_specs)

        updated = db.update_dream(
            resolve_user_id(ctx, login), dream_id, fields, descriptors
        ).unwrap()

        click.echo(f"✅ Updated dream {updated.id}")
        click.echo(format_dream(updated))

    except DreamDiaryError as e:
        handle_cli_error(ctx, e, "dream_update", {"login": login, "dream_id": dream_id})


@dream.command("delete")
@user_option
@click.argument("dream_id", type=int)
@click.pass_context
def delete(ctx, login, dream_id):
    """Delete dream DREAM_ID."""
    try:
        db = get_db(ctx)
        db.delete_dream(resolve_user_id(ctx, login), dream_id).unwrap()
        click.echo(f"🗑️  Deleted dream {dream_id}")

    except DreamDiaryError as e:
        handle_cli_error(ctx, e, "dream_delete", {"login": login, "dream_id": dream_id})


@dream.command("overflow")
@user_option
@click.pass_context
def overflow(ctx, login):
    """Print random fragments from your dreams."""
    try:
        db = get_db(ctx)
        fragments = db.overflow(resolve_user_id(ctx, login)).unwrap()
        for fragment in fragments:
            click.echo(f"  … {fragment}")

    except DreamDiaryError as e:
        handle_cli_error(ctx, e, "dream_overflow", {"login": login})


@dream.command("frequent-tags")
@user_option
@click.pass_context
def frequent_tags(ctx, login):
    """Show tags used at least twice in your 10 newest dreams."""
    try:
        db = get_db(ctx)
        user_id = resolve_user_id(ctx, login)
        tags = db.recurring_tags(user_id).unwrap()

        if not tags:
            click.echo("No recurring tags")
            return

        for item in tags:
            click.echo(f"{item.id:>4}  {item.name}")

    except DreamDiaryError as e:
        handle_cli_error(ctx, e, "dream_frequent_tags", {"login": login})
