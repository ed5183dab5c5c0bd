"""
test_tag_reconciler.py
----------------------
Unit tests for TagReconciler and TagDescriptor.
"""
import pytest

from dreamdiary.core.exceptions import ReconciliationError, ValidationError
from dreamdiary.database.models import Tag
from dreamdiary.database.tag_reconciler import TagDescriptor


class TestTagDescriptor:
    """Test TagDescriptor construction."""

    def test_from_mapping(self):
        descriptor = TagDescriptor.from_value({"name": "母", "yomi": "はは", "category": "person"})
        assert descriptor == TagDescriptor("母", "はは", "person")

    def test_from_descriptor(self):
        descriptor = TagDescriptor("母", "はは", "person")
        assert TagDescriptor.from_value(descriptor) is descriptor

    @pytest.mark.parametrize("value", [None, {}, "母", 42, ["母", "はは", "person"]])
    def test_malformed_values(self, value):
        assert TagDescriptor.from_value(value) is None

    def test_parse(self):
        assert TagDescriptor.parse(" 学校 : がっこう : place ") == TagDescriptor(
            "学校", "がっこう", "place"
        )

    def test_parse_wrong_shape(self):
        with pytest.raises(ValidationError, match="NAME:YOMI:CATEGORY"):
            TagDescriptor.parse("学校:がっこう")


class TestTagReconcilerAttach:
    """Test TagReconciler.attach() method."""

    def test_nothing_to_attach(self, reconciler, make_dream):
        """Test None and an empty list leave tags as they are."""
        dream = make_dream()

        assert reconciler.attach(dream, None).value == []
        assert reconciler.attach(dream, []).value == []

    def test_attach_creates_and_links(self, reconciler, make_dream, tag_for):
        dream = make_dream()

        result = reconciler.attach(dream, [tag_for(), tag_for("学校", "がっこう", "place")])

        assert result.success
        assert sorted(t.name for t in dream.tags) == ["学校", "母"]

    def test_attach_reuses_existing_tags(self, reconciler, tag_manager, make_dream, user, tag_for, db_session):
        """Test a name the user already has links the existing tag."""
        existing = tag_manager.find_or_create(user, "母", "はは", "person")
        dream = make_dream()

        reconciler.attach(dream, [tag_for()]).unwrap()

        assert dream.tags == [existing]
        assert db_session.query(Tag).count() == 1

    def test_repeated_descriptor_links_once(self, reconciler, make_dream, tag_for):
        """Test no duplicate associations are made."""
        dream = make_dream()

        reconciler.attach(dream, [tag_for(), tag_for()]).unwrap()
        reconciler.attach(dream, [tag_for()]).unwrap()

        assert len(dream.tags) == 1

    def test_malformed_items_skipped(self, reconciler, make_dream, tag_for):
        dream = make_dream()

        result = reconciler.attach(dream, [None, {}, "母", tag_for()])

        assert result.success
        assert [t.name for t in dream.tags] == ["母"]

    def test_invalid_descriptor_is_failure(self, reconciler, make_dream, tag_for):
        """Test field messages come back in the result instead of raising."""
        dream = make_dream()

        result = reconciler.attach(dream, [tag_for(yomi="", category="animal")])

        assert result.failed
        assert result.errors == ["Yomi can't be blank", "Category is not included in the list"]
        assert isinstance(result.error, ValidationError)

    def test_unexpected_error_is_reconciliation_failure(self, reconciler, tag_manager, make_dream, tag_for, monkeypatch):
        dream = make_dream()

        def broken(*args, **kwargs):
            raise RuntimeError("disk on fire")

        monkeypatch.setattr(tag_manager, "find_or_create", broken)

        result = reconciler.attach(dream, [tag_for()])

        assert result.failed
        assert isinstance(result.error, ReconciliationError)
        assert result.errors == ["Failed to attach tags: disk on fire"]


class TestTagReconcilerReplace:
    """Test TagReconciler.replace() method."""

    def test_replace_is_exact(self, reconciler, make_dream, tag_for):
        """Test only the described tags remain afterwards."""
        dream = make_dream()
        reconciler.attach(dream, [tag_for(), tag_for("学校", "がっこう", "place")]).unwrap()

        reconciler.replace(dream, [tag_for("花屋", "はなや", "place"), tag_for()]).unwrap()

        assert sorted(t.name for t in dream.tags) == ["母", "花屋"]

    def test_replace_with_empty_list_clears(self, reconciler, tag_manager, make_dream, user, tag_for):
        """Test an empty list untags the dream but keeps the tags."""
        dream = make_dream()
        reconciler.attach(dream, [tag_for()]).unwrap()

        result = reconciler.replace(dream, [])

        assert result.value == []
        assert dream.tags == []
        assert tag_manager.exists(user, "母")
