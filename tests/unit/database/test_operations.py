"""
test_operations.py
------------------
Tests for the user-scoped operations on DreamDiaryDB.

Each operation runs in its own transaction. Tests that hold a scope open
alongside a facade call only read inside it, since SQLite allows one
writer at a time.
"""
import threading
from datetime import datetime, timedelta, timezone

import pytest

from dreamdiary.core.exceptions import NotFoundError, ValidationError
from dreamdiary.database.models import Dream, Tag


def _dreamed(day):
    return datetime(2024, 5, 1, 23, 0, tzinfo=timezone.utc) + timedelta(days=day)


@pytest.fixture
def record(test_db, registered_user_id, fields_for):
    """Create a dream through the facade and return it."""
    counter = []

    def _record(tags=None, user_id=None, **overrides):
        overrides.setdefault("dreamed_at", _dreamed(len(counter)))
        counter.append(1)
        return test_db.create_dream(
            user_id or registered_user_id, fields_for(**overrides), tags
        ).unwrap()

    return _record


def _count(test_db, model):
    with test_db.session_scope() as scope:
        return scope.session.query(model).count()


class TestSessionScope:
    """Test the managers each session_scope() carries."""

    def test_scope_managers_share_its_session(self, test_db):
        with test_db.session_scope() as scope:
            assert scope.tags.session is scope.session
            assert scope.reconciler.tags is scope.tags

    def test_nested_scopes_do_not_share_managers(self, test_db):
        with test_db.session_scope() as outer:
            with test_db.session_scope() as inner:
                assert inner.dreams is not outer.dreams
                assert inner.session is not outer.session

    def test_rollback_on_error(self, test_db, fields_for):
        """Test an exception inside the scope discards its writes."""
        with pytest.raises(RuntimeError):
            with test_db.session_scope() as scope:
                user = scope.users.create({"email": "a@example.com", "username": "a"})
                scope.dreams.create(user, fields_for())
                raise RuntimeError("abort")

        assert _count(test_db, Dream) == 0

    def test_operation_inside_open_scope(self, test_db, registered_user_id, record, tag_for):
        """Test a facade call inside a scope leaves that scope usable."""
        record(tags=[tag_for()])

        with test_db.session_scope() as scope:
            user = scope.users.get_by_id(registered_user_id)
            assert test_db.list_tags(registered_user_id).success
            assert [t.name for t in scope.tags.list_for_user(user)] == ["母"]

    def test_concurrent_scope_keeps_its_managers(self, test_db, registered_user_id, record, tag_for):
        """Test an operation on another thread does not unbind a held scope."""
        record(tags=[tag_for()])
        opened, listed = threading.Event(), threading.Event()
        seen = {}

        def hold_scope():
            with test_db.session_scope() as scope:
                opened.set()
                listed.wait(timeout=5)
                user = scope.users.get_by_id(registered_user_id)
                seen["names"] = [t.name for t in scope.tags.list_for_user(user)]

        worker = threading.Thread(target=hold_scope)
        worker.start()
        assert opened.wait(timeout=5)
        listed_here = [t.name for t in test_db.list_tags(registered_user_id).unwrap()]
        listed.set()
        worker.join(timeout=5)

        assert listed_here == ["母"]
        assert seen == {"names": ["母"]}


class TestCreateDream:
    """Test DreamDiaryDB.create_dream()."""

    def test_create_with_tags(self, test_db, registered_user_id, fields_for, tag_for):
        result = test_db.create_dream(
            registered_user_id,
            fields_for(title="古びた洋館"),
            [tag_for(), tag_for("学校", "がっこう", "place")],
        )

        assert result.success
        dream = result.value
        assert dream.title == "古びた洋館"
        assert sorted(t.name for t in dream.tags) == ["学校", "母"]
        assert [t.name for t in dream.people] == ["母"]
        assert [t.name for t in dream.places] == ["学校"]
        assert sorted(dream.tag_ids) == sorted(t.id for t in dream.tags)

    def test_invalid_fields_are_failure(self, test_db, registered_user_id, fields_for):
        result = test_db.create_dream(registered_user_id, fields_for(title="", emotion_color="x"))

        assert result.failed
        assert result.errors == ["Title can't be blank", "Emotion color is not included in the list"]
        assert _count(test_db, Dream) == 0

    def test_bad_tag_rolls_everything_back(self, test_db, registered_user_id, fields_for, tag_for):
        """Test neither the dream nor tags created before the bad one survive."""
        result = test_db.create_dream(
            registered_user_id,
            fields_for(),
            [tag_for(), tag_for("学校", "", "place")],
        )

        assert result.failed
        assert result.errors == ["Yomi can't be blank"]
        assert _count(test_db, Dream) == 0
        assert _count(test_db, Tag) == 0

    def test_unknown_user(self, test_db, fields_for):
        result = test_db.create_dream(999, fields_for())
        assert result.errors == ["Not found"]
        assert isinstance(result.error, NotFoundError)


class TestUpdateDream:
    """Test DreamDiaryDB.update_dream()."""

    def test_fields_only_keeps_tags(self, test_db, registered_user_id, record, tag_for):
        dream = record(tags=[tag_for()])

        updated = test_db.update_dream(registered_user_id, dream.id, {"title": "改題"}).unwrap()

        assert updated.title == "改題"
        assert [t.name for t in updated.tags] == ["母"]

    def test_descriptors_replace_tags(self, test_db, registered_user_id, record, tag_for):
        dream = record(tags=[tag_for()])

        updated = test_db.update_dream(
            registered_user_id, dream.id, None, [tag_for("花屋", "はなや", "place")]
        ).unwrap()

        assert [t.name for t in updated.tags] == ["花屋"]

    def test_empty_list_clears_tags(self, test_db, registered_user_id, record, tag_for):
        """Test [] untags the dream, unlike None."""
        dream = record(tags=[tag_for()])

        updated = test_db.update_dream(registered_user_id, dream.id, {}, []).unwrap()

        assert updated.tags == []
        assert _count(test_db, Tag) == 1

    def test_failed_replace_keeps_old_tags(self, test_db, registered_user_id, record, tag_for):
        dream = record(tags=[tag_for()])

        result = test_db.update_dream(
            registered_user_id, dream.id, {"title": "改題"}, [tag_for("森", "もり", "animal")]
        )

        assert result.failed
        kept = test_db.get_dream(registered_user_id, dream.id).unwrap()
        assert kept.title == "夢"
        assert [t.name for t in kept.tags] == ["母"]

    def test_foreign_dream_not_found(self, test_db, record):
        dream = record()
        other_id = test_db.create_user("other@example.com", "other").unwrap().id

        result = test_db.update_dream(other_id, dream.id, {"title": "乗っ取り"})

        assert result.errors == ["Not found"]


class TestDeleteAndGet:
    """Test delete_dream(), get_dream() and delete_tag()."""

    def test_delete_dream_keeps_tags(self, test_db, registered_user_id, record, tag_for):
        dream = record(tags=[tag_for()])

        assert test_db.delete_dream(registered_user_id, dream.id).value == dream.id
        assert test_db.get_dream(registered_user_id, dream.id).errors == ["Not found"]
        assert _count(test_db, Tag) == 1

    def test_delete_foreign_dream(self, test_db, record):
        dream = record()
        other_id = test_db.create_user("other@example.com", "other").unwrap().id

        assert test_db.delete_dream(other_id, dream.id).errors == ["Not found"]
        assert _count(test_db, Dream) == 1

    def test_delete_tag_keeps_dreams(self, test_db, registered_user_id, record, tag_for):
        dream = record(tags=[tag_for()])
        tag_id = dream.tags[0].id

        assert test_db.delete_tag(registered_user_id, tag_id).success

        kept = test_db.get_dream(registered_user_id, dream.id).unwrap()
        assert kept.tags == []

    def test_delete_missing_tag(self, test_db, registered_user_id):
        assert test_db.delete_tag(registered_user_id, 42).errors == ["Not found"]


class TestListAndSearch:
    """Test list_dreams() and search_dreams()."""

    def test_list_newest_first(self, test_db, registered_user_id, record):
        for title in ("一", "二", "三"):
            record(title=title)

        page = test_db.list_dreams(registered_user_id).unwrap()

        assert [d.title for d in page] == ["三", "二", "一"]
        assert page.per_page == 12

    def test_list_uses_configured_page_size(self, test_db_path, fields_for):
        from dreamdiary.database.manager import DreamDiaryDB

        with DreamDiaryDB(test_db_path, per_page=2) as db:
            user_id = db.create_user("p@example.com", "p").unwrap().id
            for day in range(3):
                db.create_dream(user_id, fields_for(dreamed_at=_dreamed(day))).unwrap()

            page = db.list_dreams(user_id).unwrap()

        assert page.total_pages == 2
        assert len(page) == 2

    def test_search_by_keyword_and_tag(self, test_db, registered_user_id, record, tag_for):
        forest = record(title="森の記憶", tags=[tag_for("森", "もり", "place")])
        record(title="森の散歩")
        record(title="海")

        tag_id = forest.tags[0].id
        page = test_db.search_dreams(registered_user_id, keyword="森", tag_ids=str(tag_id)).unwrap()

        assert [d.id for d in page] == [forest.id]

    def test_search_bad_tag_ids(self, test_db, registered_user_id):
        result = test_db.search_dreams(registered_user_id, tag_ids="1,x")
        assert isinstance(result.error, ValidationError)
        assert result.errors == ["Tag ids must be integers, got 'x'"]


class TestTagOperations:
    """Test list_tags(), suggest_tags(), frequent_tags() and recurring_tags()."""

    def test_list_and_suggest(self, test_db, registered_user_id, record, tag_for):
        record(tags=[tag_for(), tag_for("花屋", "はなや", "place")])

        listed = test_db.list_tags(registered_user_id, category="place").unwrap()
        suggested = test_db.suggest_tags(registered_user_id, "はな").unwrap()

        assert [t.name for t in listed] == ["花屋"]
        assert [t.name for t in suggested] == ["花屋"]

    def test_invalid_filter_is_failure(self, test_db, registered_user_id):
        result = test_db.list_tags(registered_user_id, yomi_index="ん")
        assert result.errors == ["Yomi index is not included in the list"]

    def test_frequent_tags(self, test_db, registered_user_id, record, tag_for):
        record(tags=[tag_for()])
        record(tags=[tag_for(), tag_for("学校", "がっこう", "place")])
        record(tags=[tag_for("学校", "がっこう", "place")])
        record(tags=[tag_for("花屋", "はなや", "place")])

        listed = {t.name: t.id for t in test_db.list_tags(registered_user_id).unwrap()}
        frequent = test_db.frequent_tags(registered_user_id).unwrap()

        assert frequent == sorted([listed["母"], listed["学校"]])

    def test_recurring_tags_are_records(self, test_db, registered_user_id, record, tag_for):
        record(tags=[tag_for(), tag_for("学校", "がっこう", "place")])
        record(tags=[tag_for()])

        recurring = test_db.recurring_tags(registered_user_id).unwrap()

        assert [t.name for t in recurring] == ["母"]
        assert [t.id for t in recurring] == test_db.frequent_tags(registered_user_id).unwrap()


class TestOverflow:
    """Test overflow() and sample_overflow()."""

    def test_no_dreams_gives_fallback(self, test_db, registered_user_id):
        from dreamdiary.analysis.overflow import FALLBACK_FRAGMENTS

        fragments = test_db.overflow(registered_user_id).unwrap()

        assert 5 <= len(fragments) <= 7
        assert set(fragments) <= set(FALLBACK_FRAGMENTS)

    def test_fragments_come_from_dreams(self, test_db, registered_user_id, record):
        record(content="一つ目。二つ目！三つ目？四つ目。五つ目。六つ目。")

        fragments = test_db.overflow(registered_user_id).unwrap()

        assert 5 <= len(fragments) <= 6
        assert set(fragments) <= {"一つ目", "二つ目", "三つ目", "四つ目", "五つ目", "六つ目"}

    def test_unknown_user(self, test_db):
        assert test_db.overflow(999).errors == ["Not found"]


class TestUsers:
    """Test create_user() and find_user()."""

    def test_create_and_find(self, test_db):
        created = test_db.create_user("yume@example.com", "yume").unwrap()

        assert test_db.find_user("yume").value.id == created.id
        assert test_db.find_user("yume@example.com").value.id == created.id

    def test_find_missing(self, test_db):
        result = test_db.find_user("nobody")
        assert result.errors == ["Not found"]

    def test_duplicate_is_failure(self, test_db, registered_user_id):
        result = test_db.create_user("yume@example.com", "another")
        assert result.errors == ["Email has already been taken"]
